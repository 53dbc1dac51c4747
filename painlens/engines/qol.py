"""
PAINLENS Quality-of-Life Engines

Two stages over the sleep / mood / activity sub-scores.

QoLPatternEngine:
    Splits each dimension at its median and compares mean pain on the
    "below median" side against the "at/above median" side, using the same
    strength/direction buckets as factor correlations.

QoLDissonanceEngine:
    Compares the most recent 7 days with the 7 days before, separately for
    pain and for each dimension. Flags a QoL decline while pain holds steady
    (or improves). A leading-indicator heuristic surfaced for human review,
    never an automated alert.
"""

import logging
from datetime import date, timedelta
from typing import Any, List, Optional, Sequence, Tuple

from painlens.control.engine_config import EngineConfig
from painlens.core.models import (
    QOL_DIMENSIONS,
    PainRecord,
    QoLDissonance,
    QoLPattern,
    TrendSeries,
)
from painlens.core.statistics import (
    as_float,
    classify_direction,
    classify_strength,
    confidence_from_count,
    mean,
    median,
)

from .base import BaseEngine


logger = logging.getLogger(__name__)

WINDOW_DAYS = 7

# QoL values needed in each window before its mean is trusted
MIN_WINDOW_VALUES = 3

# QoL decline beyond this is reported as high severity
HIGH_SEVERITY_DECLINE = 2.5

DIMENSION_LABELS = {
    "sleep": "sleep quality",
    "mood": "mood",
    "activity": "activity level",
}


# =============================================================================
# Patterns
# =============================================================================

class QoLPatternEngine(BaseEngine):
    """Median-split pain comparison per QoL dimension."""

    name = "qol_patterns"
    stage = 7

    def run(
        self,
        records: Sequence[PainRecord],
        config: EngineConfig,
        **context: Any
    ) -> List[QoLPattern]:
        patterns = []
        for dimension in QOL_DIMENSIONS:
            pairs = [
                (r.qol_value(dimension), float(r.pain_level))
                for r in records
                if r.qol_value(dimension) is not None
            ]
            pattern = analyze_dimension(dimension, pairs, config.min_support_for_correlation)
            if pattern is not None:
                patterns.append(pattern)

        logger.debug(f"Found {len(patterns)} QoL patterns")
        return patterns


def analyze_dimension(
    dimension: str,
    pairs: Sequence[Tuple[float, float]],
    min_support: int,
) -> Optional[QoLPattern]:
    """
    Compare pain below vs at/above the dimension's median.

    Returns None when there is too little data or every value sits on
    one side of the median.
    """
    if len(pairs) < min_support:
        return None

    split = median([value for value, _ in pairs])
    below = [pain for value, pain in pairs if value < split]
    at_or_above = [pain for value, pain in pairs if value >= split]

    if not below or not at_or_above:
        return None

    delta = mean(below) - mean(at_or_above)

    return QoLPattern(
        dimension=dimension,
        correlation_delta=as_float(delta, 2),
        strength=classify_strength(delta),
        direction=classify_direction(delta),
        split_value=as_float(split, 2),
        evidence_count=len(pairs),
        confidence=confidence_from_count(len(pairs)),
        description=describe_pattern(dimension, delta, split),
    )


def describe_pattern(dimension: str, delta: float, split: float) -> str:
    label = DIMENSION_LABELS[dimension]
    if delta == 0:
        return f"Pain is about the same whether {label} is below or above {split:g}."
    side = "higher" if delta > 0 else "lower"
    return (
        f"When {label} is below {split:g}, pain averages "
        f"{abs(delta):.1f} points {side}."
    )


# =============================================================================
# Dissonance
# =============================================================================

class QoLDissonanceEngine(BaseEngine):
    """
    Window-over-window divergence between pain and QoL.

    Context required:
        - daily_trend: TrendSeries (daily resolution)
    """

    name = "qol_dissonance"
    stage = 8

    def run(
        self,
        records: Sequence[PainRecord],
        config: EngineConfig,
        daily_trend: Optional[TrendSeries] = None,
        **context: Any
    ) -> List[QoLDissonance]:
        if not config.enable_qol_dissonance or not records:
            return []
        if daily_trend is None or not daily_trend.points:
            return []

        latest = records[-1].timestamp.date()
        recent, prior = split_windows(latest)

        recent_pain = [p.mean for p in daily_trend.points if _in(p.date, recent)]
        prior_pain = [p.mean for p in daily_trend.points if _in(p.date, prior)]
        if not recent_pain or not prior_pain:
            return []

        pain_change = mean(recent_pain) - mean(prior_pain)
        dissonances = []

        for dimension in QOL_DIMENSIONS:
            recent_qol = _window_values(records, dimension, recent)
            prior_qol = _window_values(records, dimension, prior)
            if len(recent_qol) < MIN_WINDOW_VALUES or len(prior_qol) < MIN_WINDOW_VALUES:
                continue

            qol_change = mean(recent_qol) - mean(prior_qol)
            found = classify_dissonance(
                dimension, pain_change, qol_change,
                pain_band=config.dissonance_pain_band,
                decline_threshold=config.qol_decline_threshold,
            )
            if found is not None:
                dissonances.append(found)

        logger.debug(f"Pain change {pain_change:+.2f}; {len(dissonances)} dissonances")
        return dissonances


def split_windows(latest: date) -> Tuple[Tuple[date, date], Tuple[date, date]]:
    """(recent, prior) inclusive date ranges ending at `latest`."""
    recent_start = latest - timedelta(days=WINDOW_DAYS - 1)
    prior_end = recent_start - timedelta(days=1)
    prior_start = prior_end - timedelta(days=WINDOW_DAYS - 1)
    return (recent_start, latest), (prior_start, prior_end)


def classify_dissonance(
    dimension: str,
    pain_change: float,
    qol_change: float,
    pain_band: float,
    decline_threshold: float,
) -> Optional[QoLDissonance]:
    """
    Decide whether a pain/QoL window change pair is a dissonance.

    Types:
        pain_stable_qol_declining     |pain change| within band, QoL fell
        pain_improving_qol_declining  pain fell beyond band, QoL fell
    """
    if qol_change > -decline_threshold:
        return None

    label = DIMENSION_LABELS[dimension]
    decline = abs(qol_change)
    severity = "high" if decline > HIGH_SEVERITY_DECLINE else "medium"

    if abs(pain_change) <= pain_band:
        kind = "pain_stable_qol_declining"
        description = (
            f"Pain levels holding steady, but {label} declined by "
            f"{decline:.1f} points in the past week."
        )
    elif pain_change < -pain_band:
        kind = "pain_improving_qol_declining"
        description = (
            f"Pain eased by {abs(pain_change):.1f} points, but {label} declined by "
            f"{decline:.1f} points in the past week."
        )
    else:
        return None

    return QoLDissonance(
        type=kind,
        dimension=dimension,
        description=description,
        pain_trend_delta=as_float(pain_change, 2),
        qol_trend_delta=as_float(qol_change, 2),
        severity=severity,
        suggestion=(
            f"Changes in {label} can show up before changes in pain. "
            "This may be worth mentioning to your care team."
        ),
    )


def _in(day: str, window: Tuple[date, date]) -> bool:
    start, end = window
    return start.isoformat() <= day <= end.isoformat()


def _window_values(
    records: Sequence[PainRecord],
    dimension: str,
    window: Tuple[date, date],
) -> List[float]:
    start, end = window
    return [
        r.qol_value(dimension)
        for r in records
        if start <= r.timestamp.date() <= end and r.qol_value(dimension) is not None
    ]
