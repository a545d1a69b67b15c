# === NAVMAP v1 ===
# {
#   "module": "TileForge.Filesystem.limits",
#   "purpose": "Zip extraction thresholds, the limits model, and extraction error codes",
#   "sections": [
#     {"id": "constants", "name": "Threshold Constants", "anchor": "CON", "kind": "constants"},
#     {"id": "codes", "name": "Error Codes", "anchor": "ERR", "kind": "constants"},
#     {"id": "limits", "name": "Extraction Limits", "anchor": "LIM", "kind": "pydantic"}
#   ]
# }
# === /NAVMAP ===

"""Thresholds guarding zip extraction against decompression bombs.

The defaults follow the usual zip-bomb guidance: no more than 10,000 file
entries, no more than 1 GB of uncompressed output, and no single entry
inflating beyond 1000x its stored size.  :class:`ExtractionLimits` bundles the
thresholds with the streaming chunk size so tests and callers with tighter
budgets can pass overrides explicitly; nothing here reads the environment.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "ZIP_THRESHOLD_ENTRIES",
    "ZIP_THRESHOLD_SIZE",
    "ZIP_THRESHOLD_RATIO",
    "ZIP_CHUNK_SIZE",
    "ExtractionErrorCode",
    "ExtractionLimits",
    "default_limits",
    "error_message",
]

# ============================================================================
# THRESHOLD CONSTANTS
# ============================================================================

ZIP_THRESHOLD_ENTRIES = 10_000
ZIP_THRESHOLD_SIZE = 1_000_000_000
ZIP_THRESHOLD_RATIO = 1_000.0
ZIP_CHUNK_SIZE = 2048


# ============================================================================
# ERROR CODES
# ============================================================================


class ExtractionErrorCode(str, Enum):
    """Error codes attached to every archive extraction failure."""

    TRAVERSAL = "E_TRAVERSAL"  # Entry escapes the destination root
    OVERWRITE_FILE = "E_OVERWRITE_FILE"  # Target file already exists
    ENTRY_BUDGET = "E_ENTRY_BUDGET"  # Too many file entries
    ENTRY_RATIO = "E_ENTRY_RATIO"  # Per-entry compression ratio exceeded
    ARCHIVE_SIZE = "E_ARCHIVE_SIZE"  # Cumulative uncompressed size exceeded
    UNSUPPORTED = "E_UNSUPPORTED"  # Encrypted entry or unknown compression method
    EXTRACT_CORRUPT = "E_EXTRACT_CORRUPT"  # Archive is corrupted or truncated
    EXTRACT_IO = "E_EXTRACT_IO"  # I/O error during extraction


_MESSAGES = {
    ExtractionErrorCode.TRAVERSAL: "Path traversal detected",
    ExtractionErrorCode.OVERWRITE_FILE: "File already exists",
    ExtractionErrorCode.ENTRY_BUDGET: "Entry count exceeds maximum",
    ExtractionErrorCode.ENTRY_RATIO: "Entry compression ratio exceeds limit",
    ExtractionErrorCode.ARCHIVE_SIZE: "Uncompressed size exceeds limit",
    ExtractionErrorCode.UNSUPPORTED: "Unsupported zip entry",
    ExtractionErrorCode.EXTRACT_CORRUPT: "Archive is corrupted or truncated",
    ExtractionErrorCode.EXTRACT_IO: "I/O error during extraction",
}


def error_message(code: ExtractionErrorCode, detail: str = "") -> str:
    """Return the human-readable message for ``code`` with ``detail`` appended."""

    msg = _MESSAGES.get(code, str(code))
    if detail:
        msg += f": {detail}"
    return msg


# ============================================================================
# EXTRACTION LIMITS
# ============================================================================


class ExtractionLimits(BaseModel):
    """Resource budgets enforced while a single archive is extracted.

    Attributes:
        max_entries: Maximum number of file entries written per archive.
        max_total_bytes: Maximum cumulative uncompressed bytes per archive.
        max_entry_ratio: Maximum ratio of bytes written to declared compressed
            size for any single entry.
        chunk_size: Bytes read from the decompressor per iteration.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_entries: int = Field(
        default=ZIP_THRESHOLD_ENTRIES,
        ge=1,
        description="Maximum file entry count (prevents inode exhaustion)",
    )
    max_total_bytes: int = Field(
        default=ZIP_THRESHOLD_SIZE,
        ge=1,
        description="Maximum cumulative uncompressed bytes per archive",
    )
    max_entry_ratio: float = Field(
        default=ZIP_THRESHOLD_RATIO,
        gt=0.0,
        description="Maximum per-entry compression ratio (zip-bomb guard)",
    )
    chunk_size: int = Field(
        default=ZIP_CHUNK_SIZE,
        ge=1,
        le=16 * 1024 * 1024,
        description="Streaming read size in bytes",
    )


_DEFAULT_LIMITS = ExtractionLimits()


def default_limits() -> ExtractionLimits:
    """Return the fixed default thresholds."""

    return _DEFAULT_LIMITS
