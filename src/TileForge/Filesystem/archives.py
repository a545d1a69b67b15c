# === NAVMAP v1 ===
# {
#   "module": "TileForge.Filesystem.archives",
#   "purpose": "Stream zip archives to disk while enforcing traversal and zip-bomb guards",
#   "sections": [
#     {"id": "summary", "name": "Extraction Summary", "anchor": "SUM", "kind": "api"},
#     {"id": "guards", "name": "Entry Guards", "anchor": "GRD", "kind": "helpers"},
#     {"id": "extract", "name": "Extraction Entry Points", "anchor": "EXT", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Safe zip extraction for archives bundled with the tile pipeline.

Entries are processed in archive order and streamed to disk in fixed-size
chunks, so a hostile archive is rejected as soon as it crosses a threshold
rather than after it has been fully inflated:

* every entry must resolve inside the destination directory (zip slip);
* after each chunk, the bytes written for the entry divided by its declared
  compressed size must not exceed ``max_entry_ratio``;
* after each file entry, cumulative output must not exceed
  ``max_total_bytes`` and the file entry count must not exceed
  ``max_entries``.

Output files are created exclusively, so an existing file is never
overwritten.  Failures leave already-written files in place.
"""

from __future__ import annotations

import logging
import math
import os
import shutil
import tempfile
import zipfile
import zlib
from contextlib import ExitStack
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import IO, List, Optional, Union

from .errors import (
    ArchiveExtractionError,
    ArchiveSizeError,
    CompressionRatioError,
    DirectoryCreationError,
    EntryCountError,
    ResourceNotFoundError,
    UnsafeEntryError,
)
from .files import create_directory, create_parent_directories, format_bytes
from .limits import ExtractionErrorCode, ExtractionLimits, default_limits

__all__ = ["ExtractionSummary", "unzip", "unzip_file", "unzip_resource"]

PathLike = Union[str, "os.PathLike[str]"]

LOGGER = logging.getLogger(__name__)

_SPOOL_MEMORY_BYTES = 8 * 1024 * 1024


# ============================================================================
# EXTRACTION SUMMARY
# ============================================================================


@dataclass
class ExtractionSummary:
    """Outcome of a successful extraction."""

    destination: Path
    files: List[Path] = field(default_factory=list)
    entries: int = 0
    bytes_written: int = 0


# ============================================================================
# ENTRY GUARDS
# ============================================================================


def _resolve_entry(root: Path, name: str) -> Path:
    """Return the normalised destination for ``name``, rejecting anything outside ``root``."""

    destination = Path(os.path.normpath(os.path.join(root, name)))
    if destination != root and root not in destination.parents:
        raise UnsafeEntryError(name)
    return destination


def _check_entry_ratio(info: zipfile.ZipInfo, entry_bytes: int, limits: ExtractionLimits) -> None:
    # A zero declared compressed size that still produced bytes counts as unbounded.
    compressed = info.compress_size
    ratio = entry_bytes / compressed if compressed > 0 else math.inf
    if ratio > limits.max_entry_ratio:
        raise CompressionRatioError(
            ratio,
            entry=info.filename,
            detail=(
                "Ratio between compressed and uncompressed data is highly suspicious "
                f"{ratio:,.1f}x, looks like a Zip Bomb Attack"
            ),
        )


def _check_archive_totals(
    total_bytes: int, total_entries: int, entry: str, limits: ExtractionLimits
) -> None:
    if total_bytes > limits.max_total_bytes:
        raise ArchiveSizeError(
            total_bytes,
            entry=entry,
            detail=(
                f"The uncompressed data size {format_bytes(total_bytes)} is too much "
                "for the application resource capacity"
            ),
        )
    if total_entries > limits.max_entries:
        raise EntryCountError(
            total_entries,
            entry=entry,
            detail=(
                f"Too many entries in this archive {total_entries:,}, "
                "can lead to inode exhaustion of the system"
            ),
        )


def _seekable(stream: IO[bytes], stack: ExitStack, chunk_size: int) -> IO[bytes]:
    """Return ``stream`` itself when seekable, otherwise a spooled copy of it."""

    seekable = getattr(stream, "seekable", None)
    if seekable is not None and seekable():
        return stream
    spool = stack.enter_context(tempfile.SpooledTemporaryFile(max_size=_SPOOL_MEMORY_BYTES))
    shutil.copyfileobj(stream, spool, chunk_size)
    spool.seek(0)
    return spool


# ============================================================================
# EXTRACTION ENTRY POINTS
# ============================================================================


def unzip(
    stream: IO[bytes],
    dest_dir: PathLike,
    *,
    limits: Optional[ExtractionLimits] = None,
    logger: Optional[logging.Logger] = None,
) -> ExtractionSummary:
    """Extract the zip archive read from ``stream`` into ``dest_dir``.

    Args:
        stream: Binary stream positioned at the start of zip data.  Streams
            that cannot seek are spooled to a temporary file first.
        dest_dir: Destination directory; created on demand.
        limits: Threshold overrides; the fixed defaults apply when omitted.
        logger: Logger receiving structured ``stage="extract"`` records.

    Returns:
        :class:`ExtractionSummary` listing written files in archive order.

    Raises:
        ArchiveExtractionError: On traversal attempts, threshold violations,
            corrupt archives, existing targets or any other I/O failure.
    """

    active = limits or default_limits()
    log = logger or LOGGER
    root = Path(os.path.normpath(os.path.abspath(dest_dir)))
    summary = ExtractionSummary(destination=root)
    current: Optional[str] = None

    try:
        with ExitStack() as stack:
            archive = stack.enter_context(
                zipfile.ZipFile(_seekable(stream, stack, active.chunk_size))
            )
            for info in archive.infolist():
                current = info.filename
                destination = _resolve_entry(root, info.filename)
                if info.is_dir():
                    create_directory(destination)
                    continue

                create_parent_directories(destination)
                entry_bytes = 0
                with archive.open(info) as source, open(destination, "xb") as target:
                    summary.entries += 1
                    summary.files.append(destination)
                    while True:
                        chunk = source.read(active.chunk_size)
                        if not chunk:
                            break
                        target.write(chunk)
                        entry_bytes += len(chunk)
                        summary.bytes_written += len(chunk)
                        _check_entry_ratio(info, entry_bytes, active)
                _check_archive_totals(summary.bytes_written, summary.entries, info.filename, active)
    except ArchiveExtractionError as exc:
        _log_failure(log, exc, root)
        raise
    except FileExistsError as exc:
        raise _wrap(log, root, ExtractionErrorCode.OVERWRITE_FILE, exc, current) from exc
    except (zipfile.BadZipFile, EOFError, zlib.error) as exc:
        raise _wrap(log, root, ExtractionErrorCode.EXTRACT_CORRUPT, exc, current) from exc
    except DirectoryCreationError as exc:
        raise _wrap(log, root, ExtractionErrorCode.EXTRACT_IO, exc, current) from exc
    except (NotImplementedError, RuntimeError) as exc:
        # zipfile signals encrypted entries and unknown methods this way.
        raise _wrap(log, root, ExtractionErrorCode.UNSUPPORTED, exc, current) from exc
    except OSError as exc:
        raise _wrap(log, root, ExtractionErrorCode.EXTRACT_IO, exc, current) from exc

    log.info(
        "extracted archive",
        extra={
            "stage": "extract",
            "destination": str(root),
            "entries": summary.entries,
            "bytes_written": summary.bytes_written,
        },
    )
    return summary


def _wrap(
    log: logging.Logger,
    root: Path,
    code: ExtractionErrorCode,
    exc: BaseException,
    entry: Optional[str],
) -> ArchiveExtractionError:
    error = ArchiveExtractionError(code, str(exc), entry=entry)
    _log_failure(log, error, root)
    return error


def _log_failure(log: logging.Logger, error: ArchiveExtractionError, root: Path) -> None:
    log.error(
        "archive extraction failed",
        extra={
            "stage": "extract",
            "destination": str(root),
            "entry": error.entry,
            "error_code": error.code.value,
            "error": str(error),
        },
    )


def unzip_file(
    archive_path: PathLike,
    dest_dir: PathLike,
    *,
    limits: Optional[ExtractionLimits] = None,
    logger: Optional[logging.Logger] = None,
) -> ExtractionSummary:
    """Extract the zip archive stored at ``archive_path`` into ``dest_dir``."""

    try:
        stream = open(archive_path, "rb")
    except OSError as exc:
        raise ArchiveExtractionError(
            ExtractionErrorCode.EXTRACT_IO, f"Unable to open {archive_path}: {exc}"
        ) from exc
    with stream:
        return unzip(stream, dest_dir, limits=limits, logger=logger)


def unzip_resource(
    resource: str,
    dest_dir: PathLike,
    *,
    package: str = "TileForge",
    limits: Optional[ExtractionLimits] = None,
    logger: Optional[logging.Logger] = None,
) -> ExtractionSummary:
    """Extract a zip archive bundled as a resource of ``package`` into ``dest_dir``.

    ``resource`` is a ``/``-separated path relative to the package; a leading
    ``/`` is ignored.

    Raises:
        ResourceNotFoundError: If the package or the resource does not exist.
        ArchiveExtractionError: If extraction fails.
    """

    try:
        ref = resources.files(package)
    except ModuleNotFoundError as exc:
        raise ResourceNotFoundError(f"Resource package not found: {package}") from exc
    for part in resource.strip("/").split("/"):
        ref = ref.joinpath(part)
    if not ref.is_file():
        raise ResourceNotFoundError(f"Resource not found in {package}: {resource}")

    try:
        stream = ref.open("rb")
    except OSError as exc:
        raise ArchiveExtractionError(
            ExtractionErrorCode.EXTRACT_IO, f"Unable to open resource {resource}: {exc}"
        ) from exc
    with stream:
        return unzip(stream, dest_dir, limits=limits, logger=logger)
