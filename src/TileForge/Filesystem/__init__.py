"""Filesystem helpers and safe zip extraction for the TileForge tile pipeline.

The helpers measure, delete, move and create paths with explicit failure
semantics, while :func:`unzip` and :func:`unzip_resource` stream zip archives
to disk under traversal and zip-bomb guards.  Re-exporting the common symbols
keeps imports short for the rest of the pipeline.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .archives import ExtractionSummary, unzip, unzip_file, unzip_resource
from .errors import (
    ArchiveExtractionError,
    ArchiveSizeError,
    CompressionRatioError,
    DirectoryCreationError,
    EntryCountError,
    FileMoveError,
    FileStoreError,
    FilesystemIOError,
    FilesystemStateError,
    ResourceNotFoundError,
    UnsafeEntryError,
)
from .files import (
    FileStore,
    LocalFileSystem,
    ZipFileSystem,
    create_directory,
    create_parent_directories,
    delete,
    delete_directory,
    delete_file,
    delete_on_exit,
    directory_size,
    file_size,
    format_bytes,
    get_file_store,
    has_extension,
    move,
    size,
    walk_file_system,
)
from .limits import (
    ZIP_CHUNK_SIZE,
    ZIP_THRESHOLD_ENTRIES,
    ZIP_THRESHOLD_RATIO,
    ZIP_THRESHOLD_SIZE,
    ExtractionErrorCode,
    ExtractionLimits,
    default_limits,
)
from .logging_utils import setup_logging
from .settings import FilesystemSettings, get_settings

__all__ = [
    "__version__",
    # Archive extraction
    "ExtractionSummary",
    "unzip",
    "unzip_file",
    "unzip_resource",
    "ExtractionLimits",
    "ExtractionErrorCode",
    "default_limits",
    "ZIP_CHUNK_SIZE",
    "ZIP_THRESHOLD_ENTRIES",
    "ZIP_THRESHOLD_RATIO",
    "ZIP_THRESHOLD_SIZE",
    # Filesystem helpers
    "FileStore",
    "LocalFileSystem",
    "ZipFileSystem",
    "create_directory",
    "create_parent_directories",
    "delete",
    "delete_directory",
    "delete_file",
    "delete_on_exit",
    "directory_size",
    "file_size",
    "format_bytes",
    "get_file_store",
    "has_extension",
    "move",
    "size",
    "walk_file_system",
    # Errors
    "ArchiveExtractionError",
    "ArchiveSizeError",
    "CompressionRatioError",
    "DirectoryCreationError",
    "EntryCountError",
    "FileMoveError",
    "FileStoreError",
    "FilesystemIOError",
    "FilesystemStateError",
    "ResourceNotFoundError",
    "UnsafeEntryError",
    # Ambient
    "FilesystemSettings",
    "get_settings",
    "setup_logging",
]
