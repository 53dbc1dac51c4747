"""
PAINLENS Utilities

Common utilities used across PAINLENS modules.
"""

from .logging import setup_logging, get_logger

__all__ = [
    "setup_logging",
    "get_logger",
]
