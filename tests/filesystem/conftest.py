"""Shared fixtures for the filesystem test suite."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Callable, Dict, Union

import pytest

from TileForge.Filesystem import settings as settings_mod

Payload = Union[bytes, str]


def build_zip(
    entries: Dict[str, Payload],
    *,
    compression: int = zipfile.ZIP_STORED,
) -> bytes:
    """Return zip bytes with ``entries`` written in insertion order.

    Names ending in ``/`` become directory entries.
    """

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for name, payload in entries.items():
            info = zipfile.ZipInfo(name)
            info.compress_type = compression
            if name.endswith("/"):
                info.external_attr = 0o40755 << 16 | 0x10
                archive.writestr(info, b"")
            else:
                archive.writestr(info, payload)
    return buffer.getvalue()


@pytest.fixture
def zip_bytes() -> Callable[..., bytes]:
    return build_zip


@pytest.fixture
def zip_file(tmp_path: Path) -> Callable[..., Path]:
    """Write a zip built by :func:`build_zip` below ``tmp_path`` and return its path."""

    def _write(entries: Dict[str, Payload], name: str = "archive.zip", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_zip(entries, **kwargs))
        return path

    return _write


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    for key in ("TILEFORGE_LOG_LEVEL", "TILEFORGE_LOG_DIR", "TILEFORGE_LOG_JSON"):
        monkeypatch.delenv(key, raising=False)
    settings_mod.reset_settings()
    yield
    settings_mod.reset_settings()
