"""
PAINLENS Baseline Engine

Robust reference pain level for a user.

Measures:
- Median pain over the trailing window (not the mean, so isolated
  high-pain outliers do not shift it)
- Confidence from the number of records in the window

The window is anchored at the latest record, never the wall clock, so the
same series always yields the same baseline.
"""

import logging
from datetime import timedelta
from typing import Any, Sequence

from painlens.control.engine_config import EngineConfig
from painlens.core.models import Baseline, PainRecord
from painlens.core.statistics import as_float, confidence_from_count, median

from .base import BaseEngine


logger = logging.getLogger(__name__)


class BaselineEngine(BaseEngine):
    """Median pain over the most recent baseline_window_days."""

    name = "baseline"
    stage = 2

    def run(
        self,
        records: Sequence[PainRecord],
        config: EngineConfig,
        **context: Any
    ) -> Baseline:
        window = window_records(records, config.baseline_window_days)

        if not window:
            return Baseline(
                value=0.0,
                confidence="low",
                window_days=config.baseline_window_days,
                entry_count=0,
            )

        value = median([r.pain_level for r in window])
        baseline = Baseline(
            value=as_float(value, 2),
            confidence=confidence_from_count(len(window)),
            window_days=config.baseline_window_days,
            entry_count=len(window),
        )

        logger.debug(
            f"Baseline {baseline.value} ({baseline.confidence}) "
            f"from {len(window)} records over {config.baseline_window_days} days"
        )
        return baseline


def window_records(records: Sequence[PainRecord], window_days: int) -> Sequence[PainRecord]:
    """Records no older than window_days before the latest record."""
    if not records:
        return ()
    try:
        cutoff = records[-1].timestamp - timedelta(days=window_days)
    except OverflowError:
        # Window reaches past datetime.min
        return tuple(records)
    return tuple(r for r in records if r.timestamp >= cutoff)
