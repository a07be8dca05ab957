"""Logging setup shared by the delivery engine.

loguru exposes no public way to ask whether a level is enabled, so the level
installed by `configure_logging` is remembered here and used as the debug
gate for the mail session debug flag.
"""

import sys
from threading import Lock
from typing import Any, TextIO

from loguru import logger

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - {extra[prefix]}<level>{message}</level>"
)

_lock = Lock()
_level: str | None = None

# Records not logged through get_logger() render with an empty prefix
DEFAULT_EXTRA = {"logger_name": "", "prefix": ""}


def configure_logging(level: str = "INFO", sink: TextIO | Any = None) -> int:
    """Replace loguru handlers with a single sink at the given level.

    Args:
        level: Minimum level name, e.g. "DEBUG" or "INFO"
        sink: Destination accepted by `logger.add`, stderr by default

    Returns:
        The loguru handler id
    """
    global _level
    level = level.upper()
    # Raises ValueError for unknown level names
    logger.level(level)
    with _lock:
        logger.remove()
        logger.configure(extra=DEFAULT_EXTRA)
        handler_id = logger.add(sink or sys.stderr, level=level, format=DEFAULT_FORMAT)
        _level = level
    logger.debug(f"Logging configured at level {level}")
    return handler_id


def is_debug_enabled() -> bool:
    """Check whether the configured level lets DEBUG records through.

    Before `configure_logging` is called loguru's default stderr handler is
    active, which accepts DEBUG.
    """
    with _lock:
        level = _level
    if level is None:
        return True
    return logger.level(level).no <= logger.level("DEBUG").no


def get_logger(name: str, prefix: str = ""):
    """Return a loguru logger bound with a logger name and message prefix."""
    return logger.bind(logger_name=name, prefix=prefix)
