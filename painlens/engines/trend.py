"""
PAINLENS Trend Engine

Daily and weekly summary series of pain level.

Measures:
- Daily points: mean, population std dev, min, max and count of the
  records logged on each calendar day
- Weekly points: the same aggregation applied to daily means, grouped by
  week starting Monday (count = days with data, not raw records)
- Series slope (positive = worsening)

Weekly aggregation is suppressed when fewer than min_entries_for_trend
raw records exist; the orchestrator turns that into a caution.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Sequence

import pandas as pd

from painlens.control.engine_config import EngineConfig
from painlens.core.models import PainRecord, TrendPoint, TrendSeries
from painlens.core.statistics import as_float, confidence_from_count, linear_slope

from .base import BaseEngine


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendAggregation:
    """Output of the trend stage."""
    daily: TrendSeries
    weekly: TrendSeries
    weekly_suppressed: bool = False


class TrendEngine(BaseEngine):
    """
    Calendar-day and calendar-week aggregation.

    Outputs:
        - daily: one TrendPoint per day with at least one record
        - weekly: one TrendPoint per week with at least one daily point
    """

    name = "trend"
    stage = 3

    def run(
        self,
        records: Sequence[PainRecord],
        config: EngineConfig,
        **context: Any
    ) -> TrendAggregation:
        daily_points = compute_daily_points(records)
        days_covered = len(daily_points)

        daily = TrendSeries(
            resolution="daily",
            points=tuple(daily_points),
            slope=series_slope(daily_points),
            confidence=confidence_from_count(days_covered),
        )

        if len(records) < config.min_entries_for_trend:
            logger.debug(
                f"Weekly trend suppressed: {len(records)} records < "
                f"{config.min_entries_for_trend}"
            )
            return TrendAggregation(
                daily=daily,
                weekly=TrendSeries(resolution="weekly"),
                weekly_suppressed=True,
            )

        weekly_points = compute_weekly_points(daily_points)
        weekly = TrendSeries(
            resolution="weekly",
            points=tuple(weekly_points),
            slope=series_slope(weekly_points),
            confidence=confidence_from_count(days_covered),
        )

        logger.debug(f"Trend: {len(daily_points)} daily, {len(weekly_points)} weekly points")
        return TrendAggregation(daily=daily, weekly=weekly)


# =============================================================================
# Aggregation
# =============================================================================

def compute_daily_points(records: Sequence[PainRecord]) -> List[TrendPoint]:
    """One point per calendar day, in date order."""
    if not records:
        return []

    df = pd.DataFrame({
        "date": [r.day for r in records],
        "value": [float(r.pain_level) for r in records],
    })
    return _aggregate(df)


def compute_weekly_points(daily_points: Sequence[TrendPoint]) -> List[TrendPoint]:
    """Group daily means into Monday-start weeks."""
    if not daily_points:
        return []

    days = pd.to_datetime([p.date for p in daily_points])
    week_starts = days - pd.to_timedelta(days.weekday, unit="D")

    df = pd.DataFrame({
        "date": week_starts.strftime("%Y-%m-%d"),
        "value": [p.mean for p in daily_points],
    })
    return _aggregate(df)


def _aggregate(df: pd.DataFrame) -> List[TrendPoint]:
    grouped = df.groupby("date", sort=True)["value"]
    summary = pd.DataFrame({
        "mean": grouped.mean(),
        "std_dev": grouped.std(ddof=0).fillna(0.0),
        "min": grouped.min(),
        "max": grouped.max(),
        "count": grouped.count(),
    })

    return [
        TrendPoint(
            date=str(date),
            mean=as_float(row["mean"]),
            std_dev=as_float(row["std_dev"]),
            min=as_float(row["min"]),
            max=as_float(row["max"]),
            count=int(row["count"]),
        )
        for date, row in summary.iterrows()
    ]


def day_offsets(points: Sequence[TrendPoint]) -> List[float]:
    """Days elapsed since the first point, for each point."""
    if not points:
        return []
    days = pd.to_datetime([p.date for p in points])
    return [float(d) for d in (days - days[0]).days]


def series_slope(points: Sequence[TrendPoint]) -> float:
    """Pain change per day across the series."""
    return as_float(linear_slope(day_offsets(points), [p.mean for p in points]))
