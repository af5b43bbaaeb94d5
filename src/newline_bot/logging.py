"""Logging setup for newline-bot runs.

Everything is written to stderr, which the Actions runner captures into the
job log. The ``newline_bot`` logger is isolated (no propagation) and avoids
duplicate handlers across repeated initializations.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from newline_bot.config import LogLevel

LOGGER_NAME = "newline_bot"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    log_level: LogLevel | str = LogLevel.INFO,
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return the package logger.

    Subsequent calls update the level but never add a second handler.
    """

    logger = logging.getLogger(LOGGER_NAME)
    level_value = _to_logging_level(log_level)
    logger.setLevel(level_value)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(level_value)

    # Request logs from the HTTP stack would leak URLs at INFO.
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger


def _to_logging_level(value: LogLevel | str) -> int:
    mapping = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
    }
    if isinstance(value, LogLevel):
        return mapping[value]
    if isinstance(value, str):
        try:
            return mapping[LogLevel(value)]
        except ValueError:
            return logging.WARNING
    return logging.WARNING


__all__ = [
    "LOGGER_NAME",
    "configure_logging",
    "_to_logging_level",
]
