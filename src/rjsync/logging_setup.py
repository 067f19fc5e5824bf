"""Logging configuration for rjsync.

The console shows the ``rjsync`` logger at the configured level. A log
file, when given, records the same events at DEBUG plus the ``httpx``
request line for every metadata and cover request, which stay off the
console.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "rjsync"
HTTP_LOGGER_NAME = "httpx"

FILE_FORMAT = "%(asctime)s | %(levelname)-5s | [%(name)s] %(message)s"


def _reset(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    return logger


def setup_logging(log_level: str = "INFO", log_file: Path | str | None = None) -> logging.Logger:
    """
    Configure logging for rjsync.

    Args:
        log_level: Console logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file receiving DEBUG output and HTTP request lines

    Returns:
        Package logger instance
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = _reset(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    http_logger = _reset(HTTP_LOGGER_NAME)
    http_logger.propagate = False

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

        http_logger.setLevel(logging.INFO)
        http_logger.addHandler(file_handler)

    return logger
