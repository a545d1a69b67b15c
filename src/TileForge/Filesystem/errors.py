# === NAVMAP v1 ===
# {
#   "module": "TileForge.Filesystem.errors",
#   "purpose": "Define the exception hierarchy used by filesystem helpers and archive extraction",
#   "sections": [
#     {"id": "io", "name": "I/O Failures", "anchor": "IO", "kind": "api"},
#     {"id": "extraction", "name": "Archive Extraction Failures", "anchor": "EXT", "kind": "api"},
#     {"id": "state", "name": "State Failures", "anchor": "STA", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy shared by the filesystem helpers and the zip extractor.

Two families exist.  I/O-kind failures derive from :class:`OSError` so callers
that already guard filesystem work with ``except OSError`` keep working; they
cover moves, file-store lookups and every archive extraction failure.  State
failures derive from :class:`RuntimeError` and signal that a precondition for
later work (an output directory) could not be established.
"""

from __future__ import annotations

from typing import Optional

from .limits import ExtractionErrorCode, error_message

__all__ = [
    "FilesystemIOError",
    "FileMoveError",
    "FileStoreError",
    "ArchiveExtractionError",
    "UnsafeEntryError",
    "CompressionRatioError",
    "ArchiveSizeError",
    "EntryCountError",
    "FilesystemStateError",
    "DirectoryCreationError",
    "ResourceNotFoundError",
]


class FilesystemIOError(OSError):
    """Base class for I/O failures surfaced by structural filesystem operations."""


class FileMoveError(FilesystemIOError):
    """Raised when a file or directory cannot be moved."""


class FileStoreError(FilesystemIOError):
    """Raised when no ancestor of a path resolves to a file store."""


class ArchiveExtractionError(FilesystemIOError):
    """Raised when a zip archive cannot be extracted safely.

    Attributes:
        code: :class:`ExtractionErrorCode` classifying the failure.
        entry: Name of the archive entry being processed, when known.
    """

    def __init__(
        self,
        code: ExtractionErrorCode,
        detail: str = "",
        *,
        entry: Optional[str] = None,
    ) -> None:
        super().__init__(error_message(code, detail))
        self.code = code
        self.entry = entry

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnsafeEntryError(ArchiveExtractionError):
    """Raised when an entry would be written outside the destination directory."""

    def __init__(self, entry: str) -> None:
        super().__init__(ExtractionErrorCode.TRAVERSAL, f"Bad zip entry: {entry}", entry=entry)


class CompressionRatioError(ArchiveExtractionError):
    """Raised when an entry inflates beyond the permitted compression ratio."""

    def __init__(self, ratio: float, *, entry: Optional[str] = None, detail: str = "") -> None:
        super().__init__(ExtractionErrorCode.ENTRY_RATIO, detail, entry=entry)
        self.ratio = ratio


class ArchiveSizeError(ArchiveExtractionError):
    """Raised when the cumulative uncompressed output exceeds the size budget."""

    def __init__(self, total_bytes: int, *, entry: Optional[str] = None, detail: str = "") -> None:
        super().__init__(ExtractionErrorCode.ARCHIVE_SIZE, detail, entry=entry)
        self.total_bytes = total_bytes


class EntryCountError(ArchiveExtractionError):
    """Raised when an archive holds more file entries than the entry budget."""

    def __init__(self, entries: int, *, entry: Optional[str] = None, detail: str = "") -> None:
        super().__init__(ExtractionErrorCode.ENTRY_BUDGET, detail, entry=entry)
        self.entries = entries


class FilesystemStateError(RuntimeError):
    """Base class for failures that leave the filesystem in an unusable state."""


class DirectoryCreationError(FilesystemStateError):
    """Raised when a directory (or its parents) cannot be created."""


class ResourceNotFoundError(LookupError):
    """Raised when a bundled application resource cannot be located."""
