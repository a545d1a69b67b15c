"""Runtime settings for the TileForge filesystem helpers.

Only ambient concerns are configurable (logging level, JSON log sidecar).
Extraction thresholds are fixed constants in :mod:`TileForge.Filesystem.limits`
and are intentionally absent here.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["FilesystemSettings", "get_settings", "reset_settings"]

_VALID_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class FilesystemSettings(BaseSettings):
    """Environment-derived settings (``TILEFORGE_*``)."""

    log_level: str = Field(default="INFO", description="Root level for TileForge loggers")
    log_dir: Optional[Path] = Field(
        default=None, description="Directory for rotating JSON log files; disabled when unset"
    )
    log_json: bool = Field(default=False, description="Emit console logs as JSON lines")
    log_max_size_mb: int = Field(default=100, ge=1, description="Rotate log files at this size")

    model_config = SettingsConfigDict(env_prefix="TILEFORGE_", case_sensitive=False, extra="ignore")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_level(cls, value: object) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in _VALID_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(sorted(_VALID_LEVELS))}, got {value!r}"
            )
        return level

    @property
    def level_number(self) -> int:
        return getattr(logging, self.log_level)


_SETTINGS_CACHE: Optional[FilesystemSettings] = None


def get_settings() -> FilesystemSettings:
    """Return process-wide settings, reading the environment on first use."""

    global _SETTINGS_CACHE
    if _SETTINGS_CACHE is None:
        _SETTINGS_CACHE = FilesystemSettings()
    return _SETTINGS_CACHE


def reset_settings() -> None:
    """Drop cached settings so the next :func:`get_settings` re-reads the environment."""

    global _SETTINGS_CACHE
    _SETTINGS_CACHE = None
