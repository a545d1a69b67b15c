"""Settings and structured logging tests."""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from TileForge.Filesystem import logging_utils
from TileForge.Filesystem.settings import FilesystemSettings, get_settings, reset_settings


def test_settings_defaults() -> None:
    settings = FilesystemSettings()

    assert settings.log_level == "INFO"
    assert settings.log_dir is None
    assert settings.log_json is False
    assert settings.level_number == logging.INFO


def test_settings_read_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("TILEFORGE_LOG_LEVEL", "debug")
    monkeypatch.setenv("TILEFORGE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("TILEFORGE_LOG_JSON", "true")
    reset_settings()

    settings = get_settings()

    assert settings.log_level == "DEBUG"
    assert settings.log_dir == tmp_path / "logs"
    assert settings.log_json is True
    assert get_settings() is settings


def test_settings_reject_unknown_level(monkeypatch) -> None:
    monkeypatch.setenv("TILEFORGE_LOG_LEVEL", "chatty")

    with pytest.raises(ValidationError):
        FilesystemSettings()


def test_get_logger_nests_under_package() -> None:
    assert logging_utils.get_logger().name == "TileForge.Filesystem"
    assert logging_utils.get_logger("archives").name == "TileForge.Filesystem.archives"
    assert (
        logging_utils.get_logger("TileForge.Filesystem.files").name
        == "TileForge.Filesystem.files"
    )


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.makeLogRecord(
        {
            "name": "TileForge.Filesystem.archives",
            "levelname": "ERROR",
            "msg": "archive extraction failed",
            "stage": "extract",
            "error_code": "E_TRAVERSAL",
        }
    )

    payload = json.loads(logging_utils.JSONFormatter().format(record))

    assert payload["message"] == "archive extraction failed"
    assert payload["stage"] == "extract"
    assert payload["error_code"] == "E_TRAVERSAL"
    assert payload["logger"] == "TileForge.Filesystem.archives"
    assert "msg" not in payload


def test_setup_logging_writes_json_sidecar(tmp_path) -> None:
    logger = logging_utils.setup_logging(level="DEBUG", log_dir=tmp_path / "logs")
    child = logging.getLogger("TileForge.Filesystem.files")

    child.info("sized path", extra={"stage": "size", "path": "tiles"})
    for handler in logger.handlers:
        handler.flush()

    files = list((tmp_path / "logs").glob("tileforge-fs-*.jsonl"))
    assert len(files) == 1
    line = json.loads(files[0].read_text().strip().splitlines()[-1])
    assert line["message"] == "sized path"
    assert line["path"] == "tiles"
    assert logger.level == logging.DEBUG


def test_setup_logging_is_idempotent(tmp_path) -> None:
    logging_utils.setup_logging(level="INFO")
    logger = logging_utils.setup_logging(level="WARNING")

    managed = [h for h in logger.handlers if getattr(h, "_tileforge_managed", False)]
    assert len(managed) == 1
    assert logger.level == logging.WARNING
