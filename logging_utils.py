"""Logging helpers. The terminal belongs to curses, so records go to a file."""

from __future__ import annotations

import logging

BASE_LOGGER = logging.getLogger("hsearch")
BASE_LOGGER.propagate = False

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(suffix: str | None = None) -> logging.Logger:
    """Return the shared logger or one of its children."""

    if suffix is None:
        return BASE_LOGGER
    logger = BASE_LOGGER.getChild(suffix)
    logger.setLevel(logging.NOTSET)
    return logger


def configure_file_logging(path: str, debug: bool = False) -> None:
    """Attach a single file handler to the base logger."""

    for handler in list(BASE_LOGGER.handlers):
        BASE_LOGGER.removeHandler(handler)
        handler.close()
    try:
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    BASE_LOGGER.addHandler(handler)
    BASE_LOGGER.setLevel(logging.DEBUG if debug else logging.WARNING)
