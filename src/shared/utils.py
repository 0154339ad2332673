"""Shared utility functions for aurafx."""

import logging
import os
from datetime import datetime
from pathlib import Path

import pytz


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Calling this again for the same name resets the level but does not stack
    duplicate handlers.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler
    has_console = any(
        type(h) is logging.StreamHandler for h in logger.handlers  # noqa: E721
    )
    if not has_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        existing = {h.baseFilename for h in logger.handlers if isinstance(h, logging.FileHandler)}
        if os.path.abspath(log_file) not in existing:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def to_utc(dt: datetime, from_tz: str = "UTC") -> datetime:
    """Convert datetime to UTC.

    Naive datetimes are localized to ``from_tz`` first.
    """
    if dt.tzinfo is None:
        dt = pytz.timezone(from_tz).localize(dt)
    return dt.astimezone(pytz.UTC)


def epoch_seconds(dt: datetime, from_tz: str = "UTC") -> int:
    """Unix epoch seconds for ``dt``, truncated toward zero."""
    return int(to_utc(dt, from_tz).timestamp())
