# === NAVMAP v1 ===
# {
#   "module": "TileForge.Filesystem.files",
#   "purpose": "Best-effort size/delete helpers and strict move/mkdir/file-store helpers",
#   "sections": [
#     {"id": "walk", "name": "Tree Walking", "anchor": "WLK", "kind": "helpers"},
#     {"id": "sizes", "name": "Size Queries", "anchor": "SIZ", "kind": "api"},
#     {"id": "delete", "name": "Deletion", "anchor": "DEL", "kind": "api"},
#     {"id": "stores", "name": "File Stores", "anchor": "STO", "kind": "api"},
#     {"id": "structure", "name": "Move & Directory Creation", "anchor": "STR", "kind": "api"},
#     {"id": "filesystems", "name": "Filesystem Abstractions", "anchor": "FSA", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Filesystem convenience helpers for the tile pipeline.

Helpers fall into two groups.  Best-effort helpers (size queries, deletion,
filesystem walks) never raise for missing or unreadable paths: they return a
default and log through the ``TileForge.Filesystem.files`` logger.  Structural
helpers (:func:`move`, :func:`create_directory`,
:func:`create_parent_directories`, :func:`get_file_store`) raise, because later
work depends on them having succeeded.

None of the helpers lock; concurrent callers touching the same paths must
coordinate externally.
"""

from __future__ import annotations

import atexit
import errno
import logging
import os
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import IO, Any, Iterable, Iterator, List, Optional, Protocol, Sequence, Union

from .errors import DirectoryCreationError, FileMoveError, FileStoreError

__all__ = [
    "FileStore",
    "FileSystemLike",
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
]

PathLike = Union[str, "os.PathLike[str]"]

LOGGER = logging.getLogger(__name__)


# ============================================================================
# TREE WALKING
# ============================================================================


def _raise(exc: OSError) -> None:
    raise exc


def _walk(root: Path) -> Iterator[Path]:
    """Yield ``root`` and every path beneath it without following symlinked directories.

    Raises:
        OSError: On the first path that cannot be listed, including a missing ``root``.
    """

    if not os.path.lexists(root):
        raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(root))
    yield root
    if root.is_symlink() or not root.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        base = Path(dirpath)
        for name in dirnames:
            yield base / name
        for name in filenames:
            yield base / name


def _walk_traversable(root: Any) -> Iterator[Any]:
    """Depth-first walk over ``Traversable``-style nodes such as :class:`zipfile.Path`."""

    yield root
    if not root.is_dir():
        return
    pending = [iter(root.iterdir())]
    while pending:
        child = next(pending[-1], None)
        if child is None:
            pending.pop()
            continue
        yield child
        if child.is_dir():
            pending.append(iter(child.iterdir()))


# ============================================================================
# SIZE QUERIES
# ============================================================================


def file_size(path: PathLike) -> int:
    """Return the size of ``path`` in bytes, or 0 if it is missing or inaccessible."""

    try:
        return Path(path).stat().st_size
    except OSError:
        return 0


def directory_size(path: PathLike) -> int:
    """Return the total size of regular files under ``path``, or 0 if the walk fails."""

    try:
        return sum(file_size(entry) for entry in _walk(Path(path)) if entry.is_file())
    except OSError:
        return 0


def size(path: PathLike) -> int:
    """Return the size of the directory or file at ``path``, 0 if missing/inaccessible."""

    return directory_size(path) if Path(path).is_dir() else file_size(path)


def format_bytes(num: float) -> str:
    """Return a human-readable representation for ``num`` bytes."""

    value = float(num)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if abs(value) < 1000.0 or unit == "TB":
            return f"{value:.2f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1000.0
    return f"{value:.2f} TB"


# ============================================================================
# DELETION
# ============================================================================


def delete_file(path: PathLike) -> None:
    """Delete a file (or empty directory) if it exists; log any other failure."""

    target = Path(path)
    try:
        if target.is_dir() and not target.is_symlink():
            target.rmdir()
        else:
            target.unlink(missing_ok=True)
    except FileNotFoundError:
        pass
    except OSError as exc:
        LOGGER.error(
            "Unable to delete %s",
            target,
            exc_info=exc,
            extra={"stage": "delete", "path": str(target)},
        )


def delete_directory(path: PathLike) -> None:
    """Delete everything under ``path``, children first; a missing directory is a no-op."""

    root = Path(path)
    try:
        entries = sorted(_walk(root), reverse=True)
    except FileNotFoundError:
        return
    except OSError as exc:
        LOGGER.error(
            "Unable to delete %s",
            root,
            exc_info=exc,
            extra={"stage": "delete", "path": str(root)},
        )
        return
    for entry in entries:
        delete_file(entry)


def delete(*paths: PathLike) -> None:
    """Delete files or directories recursively, silently skipping missing paths."""

    for path in paths:
        if Path(path).is_dir():
            delete_directory(path)
        else:
            delete_file(path)


def delete_on_exit(path: PathLike) -> None:
    """Schedule ``path`` for best-effort deletion when the interpreter exits."""

    atexit.register(delete, Path(path))


# ============================================================================
# FILE STORES
# ============================================================================


@dataclass(frozen=True)
class FileStore:
    """Volume backing a path.

    Attributes:
        path: Existing path (the requested one or an ancestor) used for the lookup.
        mount_point: Mount point of the volume holding ``path``.
        device: Device identifier (``st_dev``) of the volume.
        total: Total capacity in bytes.
        used: Used bytes.
        free: Bytes available to the current user.
    """

    path: Path
    mount_point: Path
    device: int
    total: int
    used: int
    free: int


def _mount_point(path: Path) -> Path:
    candidate = path
    while not os.path.ismount(candidate):
        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent
    return candidate


def _lookup_file_store(path: Path) -> FileStore:
    stat_result = os.stat(path)
    usage = shutil.disk_usage(path)
    return FileStore(
        path=path,
        mount_point=_mount_point(path),
        device=stat_result.st_dev,
        total=usage.total,
        used=usage.used,
        free=usage.free,
    )


def get_file_store(path: PathLike) -> FileStore:
    """Return the :class:`FileStore` for ``path``, or for its nearest existing ancestor.

    Raises:
        FileStoreError: If neither ``path`` nor any ancestor up to the root resolves.
    """

    candidate: Optional[Path] = Path(os.path.abspath(path))
    last_error: Optional[OSError] = None
    while candidate is not None:
        try:
            return _lookup_file_store(candidate)
        except OSError as exc:
            last_error = exc
            parent = candidate.parent
            candidate = parent if parent != candidate else None
    raise FileStoreError(f"Cannot get file store for {path}") from last_error


# ============================================================================
# MOVE & DIRECTORY CREATION
# ============================================================================


def move(source: PathLike, target: PathLike) -> None:
    """Move ``source`` to ``target``.

    The target must not exist and its parent directory must already exist.
    Renames across devices fall back to a copy followed by a delete.

    Raises:
        FileMoveError: If the move fails for any reason.
    """

    src = Path(source)
    dst = Path(target)
    try:
        if os.path.lexists(dst):
            raise FileExistsError(errno.EEXIST, "Target already exists", str(dst))
        try:
            os.rename(src, dst)
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise
            shutil.move(str(src), str(dst))
    except OSError as exc:
        raise FileMoveError(f"Unable to move {src} to {dst}: {exc}") from exc


def create_directory(path: PathLike) -> None:
    """Ensure a directory and all parent directories exist.

    Raises:
        DirectoryCreationError: If the directory cannot be created.
    """

    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(f"Unable to create directories {path}") from exc


def _denotes_directory(raw: str) -> bool:
    separators = {"/", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    return len(raw) > 1 and raw[-1] in separators


def create_parent_directories(*paths: PathLike) -> None:
    """Ensure the parent directories of every path exist.

    A path spelled with a trailing separator (``"tiles/"``) names a directory,
    which is created itself when missing.

    Raises:
        DirectoryCreationError: If a directory cannot be created.
    """

    for path in paths:
        raw = os.fspath(path)
        target = Path(raw)
        try:
            if _denotes_directory(raw) and not target.exists():
                target.mkdir(parents=True, exist_ok=True)
            else:
                parent = target.parent
                if parent != target and not parent.exists():
                    parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreationError(f"Unable to create parent directories {raw}") from exc


def has_extension(path: PathLike, extension: str) -> bool:
    """Return True if ``path`` ends with ``"." + extension`` (case-insensitive)."""

    return os.fspath(path).lower().endswith("." + extension.lower())


# ============================================================================
# FILESYSTEM ABSTRACTIONS
# ============================================================================


class FileSystemLike(Protocol):
    """Anything exposing the root directories of a filesystem."""

    def root_directories(self) -> Iterable[Any]: ...


class LocalFileSystem:
    """The local filesystem, optionally restricted to explicit roots."""

    def __init__(self, roots: Optional[Sequence[PathLike]] = None) -> None:
        self._roots = [Path(root) for root in roots] if roots is not None else None

    def root_directories(self) -> List[Path]:
        if self._roots is not None:
            return list(self._roots)
        list_drives = getattr(os, "listdrives", None)
        if list_drives is not None:
            return [Path(drive) for drive in list_drives()]
        return [Path(Path.cwd().anchor)]

    def __repr__(self) -> str:
        return f"LocalFileSystem(roots={self.root_directories()!r})"


class ZipFileSystem:
    """Read-only view of a zip archive whose single root is the archive top level."""

    def __init__(self, archive: Union[PathLike, IO[bytes]]) -> None:
        self._name = os.fspath(archive) if isinstance(archive, (str, os.PathLike)) else repr(archive)
        self._zip = zipfile.ZipFile(archive)

    def root_directories(self) -> List[zipfile.Path]:
        return [zipfile.Path(self._zip)]

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ZipFileSystem":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ZipFileSystem({self._name!r})"


def walk_file_system(fs: FileSystemLike) -> Iterator[Any]:
    """Lazily yield every path reachable from each root directory of ``fs``.

    A root that cannot be walked is logged and contributes nothing further;
    the remaining roots are still walked.  Each call starts a fresh pass.
    """

    for root in fs.root_directories():
        walker = _walk(Path(root)) if isinstance(root, PurePath) else _walk_traversable(root)
        try:
            yield from walker
        except OSError as exc:
            LOGGER.error(
                "Unable to walk %s in %s",
                root,
                fs,
                exc_info=exc,
                extra={"stage": "walk", "path": str(root)},
            )
