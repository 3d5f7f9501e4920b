"""Logging bootstrap: the screen is owned by the TUI, so logs go to a file."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LEVEL_ENV = "JLVIEW_LOG_LEVEL"
FILE_ENV = "JLVIEW_LOG_FILE"
DEFAULT_LOG_FILE = Path("~/.local/share/jlview/logs/jlview.log")

_configured: Path | None = None


def _parse_level(raw: str | None) -> int:
    level = getattr(logging, str(raw or "WARNING").strip().upper(), None)
    return level if isinstance(level, int) else logging.WARNING


def configure(level: str | None = None) -> Path:
    """Attach a rotating file handler to the ``jlview`` logger.

    Idempotent: repeated calls return the originally configured log path.
    """
    global _configured
    if _configured is not None:
        return _configured

    log_level = _parse_level(level or os.environ.get(LEVEL_ENV))
    file_path = Path(os.environ.get(FILE_ENV) or DEFAULT_LOG_FILE).expanduser()
    file_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        file_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    logger = logging.getLogger("jlview")
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()
    logger.addHandler(handler)

    _configured = file_path
    return file_path
