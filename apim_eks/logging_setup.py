"""
Logging configuration utilities.

Console output goes to stdout; when `LOG_FILE` is configured the same
records are appended to that file so cron-driven token syncs leave a trail.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "apim_eks"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True,
    format_string: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Set up the package logger with console and optional file handlers.

    Args:
        level: Logging level (default: INFO)
        log_file: Path to log file (optional)
        console: Whether to add console handler (default: True)
        format_string: Log message format

    Returns:
        Configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    formatter = logging.Formatter(format_string)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        try:
            add_file_handler(logger, log_file, level=level, format_string=format_string)
        except OSError as exc:
            logger.warning("Cannot write log file %s (%s); logging to console only", log_file, exc)

    return logger


def add_file_handler(
    logger: logging.Logger,
    log_file: Path,
    level: int = logging.INFO,
    format_string: str = DEFAULT_FORMAT,
) -> None:
    """
    Add a file handler to an existing logger.

    Args:
        logger: Logger instance to modify
        log_file: Path to log file
        level: Logging level for file handler
        format_string: Log message format
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(file_handler)
