"""
PAINLENS Cleaning

Record validation and ordering ahead of analysis.
"""

from .cleaner import CleanResult, clean_records, normalize_record

__all__ = ["CleanResult", "clean_records", "normalize_record"]
