"""
Pytest Configuration

Makes the ``src`` layout importable without an editable install and keeps the
package logger pristine between tests so ``caplog`` sees every record.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Drop handlers installed by ``setup_logging`` and restore propagation."""

    logger = logging.getLogger("TileForge.Filesystem")
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if getattr(handler, "_tileforge_managed", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = True
