"""Structured logging helpers shared by the filesystem helpers and the CLI."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .settings import FilesystemSettings, get_settings

__all__ = ["LOGGER_NAME", "JSONFormatter", "get_logger", "setup_logging"]

LOGGER_NAME = "TileForge.Filesystem"

_RESERVED_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record, including ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "stage": getattr(record, "stage", None),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload:
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger nested under the package logger."""

    if not name:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def setup_logging(
    *,
    level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    json_console: Optional[bool] = None,
    settings: Optional[FilesystemSettings] = None,
    propagate: bool = False,
) -> logging.Logger:
    """Configure the package logger with a console handler and optional JSON file sidecar.

    Explicit arguments win over ``settings``, which default to the
    environment-derived :func:`get_settings`.  Handlers installed by previous
    calls are replaced so repeated configuration stays idempotent.
    """

    resolved = settings or get_settings()
    level_name = (level or resolved.log_level).upper()
    target_dir = log_dir if log_dir is not None else resolved.log_dir
    as_json = resolved.log_json if json_console is None else json_console

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_tileforge_managed", False):
            logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    if as_json:
        stream_handler.setFormatter(JSONFormatter())
    else:
        stream_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    stream_handler._tileforge_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if target_dir is not None:
        target_dir.mkdir(parents=True, exist_ok=True)
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        file_handler = RotatingFileHandler(
            target_dir / f"tileforge-fs-{today}.jsonl",
            maxBytes=int(resolved.log_max_size_mb * 1024 * 1024),
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._tileforge_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = propagate
    return logger
