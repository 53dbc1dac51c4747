"""
PAINLENS Logging Configuration

Centralized logging setup for applications embedding PAINLENS.
The library itself only creates module loggers; handlers are attached here,
by the CLI or by the host application.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> None:
    """
    Configure logging for PAINLENS.

    Args:
        level: Logging level or level name (default: INFO)
        log_file: Optional file path for log output
        format_string: Optional custom format string
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if format_string is None:
        format_string = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    # Root logger for painlens
    logger = logging.getLogger("painlens")
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers = []

    # Console handler (stderr keeps stdout free for JSON output)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (if requested)
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialized at {logging.getLevelName(level)} level")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a PAINLENS module.

    Args:
        name: Module name (will be prefixed with 'painlens.')

    Returns:
        Logger instance
    """
    if not name.startswith("painlens"):
        name = f"painlens.{name}"
    return logging.getLogger(name)
