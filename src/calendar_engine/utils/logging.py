"""Logging configuration for the calendar engine."""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO, Union

ROOT_LOGGER = "calendar_engine"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the ``calendar_engine`` logger hierarchy.

    Console output goes to stderr by default so that listings printed by the
    CLI on stdout stay machine-readable.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number
        log_file: Optional log file; always records DEBUG and above
        stream: Console stream (defaults to ``sys.stderr``)

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(min(level, logging.DEBUG) if log_file else level)
    logger.handlers.clear()
    logger.addHandler(_handler(logging.StreamHandler(stream or sys.stderr), level, CONSOLE_FORMAT))

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        logger.addHandler(_handler(file_handler, logging.DEBUG, FILE_FORMAT))

    return logger
