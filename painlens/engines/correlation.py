"""
PAINLENS Correlation Engine

Association of categorical factors with pain level.

Measures:
- For each trigger / symptom / medication / location seen in at least
  min_support_for_correlation records: mean pain with vs without it
- Strength (weak / moderate / strong) from |delta|
- Direction (increases / decreases / neutral) from the sign of delta
- Optional lagged variant: factor on day d vs daily pain on day d + lag

Factors below the support floor are omitted entirely. This is a
mean-difference heuristic, not a significance test.
"""

import logging
import re
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from painlens.control.engine_config import EngineConfig
from painlens.core.models import FACTOR_CATEGORIES, Baseline, CorrelationResult, PainRecord
from painlens.core.statistics import as_float, classify_direction, classify_strength, mean

from .base import BaseEngine


logger = logging.getLogger(__name__)


class CorrelationEngine(BaseEngine):
    """
    Per-factor mean-difference analysis across all factor categories.

    Context:
        - baseline: Baseline (fallback for mean_without when every record
          carries the factor, and reference for confidence)
    """

    name = "correlation"
    stage = 5

    def run(
        self,
        records: Sequence[PainRecord],
        config: EngineConfig,
        baseline: Optional[Baseline] = None,
        **context: Any
    ) -> List[CorrelationResult]:
        baseline_value = baseline.value if baseline is not None else 0.0
        results: List[CorrelationResult] = []

        for category in FACTOR_CATEGORIES:
            samples = [(r.factors(category), float(r.pain_level)) for r in records]
            results.extend(compute_correlations(
                samples, category, config.min_support_for_correlation, baseline_value,
            ))

        if config.enable_lagged_correlations:
            for lag in range(1, config.max_lag_days + 1):
                for category in FACTOR_CATEGORIES:
                    samples = lagged_samples(records, category, lag)
                    results.extend(compute_correlations(
                        samples, category, config.min_support_for_correlation,
                        baseline_value, lag_days=lag,
                    ))

        logger.debug(f"Computed {len(results)} correlations")
        return sort_correlations(results)


def compute_correlations(
    samples: Sequence[Tuple[Iterable[str], float]],
    category: str,
    min_support: int,
    baseline_value: float,
    lag_days: int = 0,
) -> List[CorrelationResult]:
    """
    Mean-difference correlation for every factor in one category.

    Args:
        samples: (factor labels, pain) pairs, one per observation
        category: Factor category name
        min_support: Observations a factor needs to be reported
        baseline_value: Fallback for mean_without; reference for confidence
        lag_days: Lag the samples were built with (0 = same record)
    """
    support: Dict[str, int] = defaultdict(int)
    for factors, _ in samples:
        for factor in factors:
            support[factor] += 1

    results = []
    for factor in sorted(support):
        if support[factor] < min_support:
            continue

        with_factor = [pain for factors, pain in samples if factor in factors]
        without_factor = [pain for factors, pain in samples if factor not in factors]

        mean_with = mean(with_factor)
        mean_without = mean(without_factor) if without_factor else baseline_value
        delta = mean_with - mean_without

        above_baseline = sum(1 for pain in with_factor if pain > baseline_value)
        variance = float(np.var(with_factor))

        results.append(CorrelationResult(
            factor=factor,
            label=format_label(factor),
            category=category,
            mean_with_factor=as_float(mean_with, 2),
            mean_without_factor=as_float(mean_without, 2),
            delta=as_float(delta, 2),
            strength=classify_strength(delta),
            direction=classify_direction(delta),
            support_count=len(with_factor),
            confidence=as_float(above_baseline / len(with_factor), 2),
            stability_score=as_float(max(0.0, 1.0 - variance / 10.0), 2),
            lag_days=lag_days,
        ))

    return results


def lagged_samples(
    records: Sequence[PainRecord],
    category: str,
    lag: int,
) -> List[Tuple[frozenset, float]]:
    """
    Pair the factors logged on each day with mean pain `lag` days later.

    Days without a record `lag` days later are skipped.
    """
    day_factors: Dict[date, set] = defaultdict(set)
    day_pain: Dict[date, List[float]] = defaultdict(list)
    for r in records:
        day = r.timestamp.date()
        day_factors[day].update(r.factors(category))
        day_pain[day].append(float(r.pain_level))

    samples = []
    for day in sorted(day_factors):
        target = day + timedelta(days=lag)
        if target in day_pain:
            samples.append((frozenset(day_factors[day]), mean(day_pain[target])))
    return samples


def sort_correlations(results: List[CorrelationResult]) -> List[CorrelationResult]:
    """Largest |delta| first; ties ordered by lag, category, factor."""
    return sorted(
        results,
        key=lambda c: (-abs(c.delta), c.lag_days, c.category, c.factor),
    )


def format_label(key: str) -> str:
    """sleep_deprivation -> Sleep Deprivation"""
    words = [w for w in re.split(r"[-_\s]+", key) if w]
    if not words:
        return key
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)
