"""
Statistical Helpers

Small, deterministic building blocks shared by the engines:
    - summarize(): descriptive statistics over pain values
    - median(): robust center
    - classify_strength() / classify_direction(): delta bucketing
    - confidence_from_count(): quantity-only confidence label
    - linear_slope(): least-squares slope for trend direction
"""

from collections import Counter
from typing import Iterable, List, Sequence

import numpy as np
from scipy import stats

from .models import StatisticalSummary


# Strength cutoffs on |mean_with - mean_without|
WEAK_DELTA_CEILING = 0.7
MODERATE_DELTA_CEILING = 1.5

# Confidence cutoffs on number of observations
HIGH_CONFIDENCE_COUNT = 30
MEDIUM_CONFIDENCE_COUNT = 14


def as_float(value: float, digits: int = 4) -> float:
    """Plain Python float, rounded so results compare stably."""
    return round(float(value), digits)


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def median(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.median(values))


def population_std(values: Sequence[float]) -> float:
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=0))


def summarize(values: Iterable[float]) -> StatisticalSummary:
    """
    Descriptive statistics over pain values.

    Mode ties resolve to the smallest value so the result is order-independent.
    """
    values = [float(v) for v in values]
    if not values:
        return StatisticalSummary()

    counts = Counter(values)
    top = max(counts.values())
    mode = min(v for v, c in counts.items() if c == top)

    return StatisticalSummary(
        mean=as_float(mean(values), 2),
        median=as_float(median(values), 2),
        mode=mode,
        std_dev=as_float(population_std(values), 2),
        min=min(values),
        max=max(values),
        count=len(values),
    )


def classify_strength(delta: float) -> str:
    """Bucket an absolute mean difference into weak / moderate / strong."""
    magnitude = abs(delta)
    if magnitude < WEAK_DELTA_CEILING:
        return "weak"
    if magnitude < MODERATE_DELTA_CEILING:
        return "moderate"
    return "strong"


def classify_direction(delta: float) -> str:
    if delta > 0:
        return "increases"
    if delta < 0:
        return "decreases"
    return "neutral"


def confidence_from_count(count: int) -> str:
    """Confidence depends on quantity of data only, never on its variance."""
    if count >= HIGH_CONFIDENCE_COUNT:
        return "high"
    if count >= MEDIUM_CONFIDENCE_COUNT:
        return "medium"
    return "low"


def linear_slope(offsets: List[float], values: List[float]) -> float:
    """Slope of values against offsets; 0.0 when undefined."""
    if len(values) < 2 or len(set(offsets)) < 2:
        return 0.0
    result = stats.linregress(offsets, values)
    if not np.isfinite(result.slope):
        return 0.0
    return float(result.slope)
