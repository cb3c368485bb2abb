"""Logging setup.

The terminal is in fullscreen raw mode while the editor runs, so log
records go to a file under the user's log directory instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import platformdirs

from .constants import EditorConstants


def default_log_path() -> Path:
    """Return the log file location, honoring the HECTO_LOG_FILE override."""
    override = os.environ.get(EditorConstants.LOG_FILE_ENV)
    if override:
        return Path(override)
    log_dir = platformdirs.user_log_dir(EditorConstants.APP_NAME, EditorConstants.APP_AUTHOR)
    return Path(log_dir) / EditorConstants.LOG_FILENAME


def _level_from_env() -> int:
    name = os.environ.get(EditorConstants.LOG_LEVEL_ENV, EditorConstants.DEFAULT_LOG_LEVEL)
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(path: Optional[Path] = None, level: Optional[int] = None) -> logging.Handler:
    """Attach a file handler to the package logger and return it.

    If the log file cannot be created, records are discarded through a
    NullHandler rather than written to the screen.
    """
    logger = logging.getLogger(EditorConstants.APP_NAME)
    logger.setLevel(level if level is not None else _level_from_env())
    logger.propagate = False

    log_path = path or default_log_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(EditorConstants.LOG_FORMAT))

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    return handler
