"""Logging setup for Sprout.

Modules log through ``logging.getLogger(__name__)``; everything hangs off
the ``sprout`` logger, which :func:`configure_logging` wires to a rotating
file (and optionally the console).  Calling it twice adds no duplicate
handlers.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER = "sprout"


def configure_logging(
    level: int | str = logging.INFO,
    log_dir: Path | None = None,
    *,
    console: bool = False,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    fmt = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    file_handler_name = f"{ROOT_LOGGER}:file"
    if log_dir is not None and not _has_handler(logger, file_handler_name):
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=log_dir / f"{ROOT_LOGGER}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(fmt)
        file_handler.set_name(file_handler_name)
        logger.addHandler(file_handler)

    console_handler_name = f"{ROOT_LOGGER}:console"
    if console and not _has_handler(logger, console_handler_name):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(fmt)
        console_handler.set_name(console_handler_name)
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


def _has_handler(logger: logging.Logger, name: str) -> bool:
    return any(h.get_name() == name for h in logger.handlers)
