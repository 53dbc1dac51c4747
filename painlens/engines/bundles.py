"""
PAINLENS Trigger Bundle Engine

Triggers that are logged together.

Counts every combination of 2..max_bundle_size triggers within the same
record and keeps those seen at least min_bundle_support times. A plain
co-occurrence count: no lift or confidence metric, and no causal claim.
"""

import logging
from collections import defaultdict
from itertools import combinations
from typing import Any, Dict, FrozenSet, List, Sequence

from painlens.control.engine_config import EngineConfig
from painlens.core.models import PainRecord, TriggerBundle
from painlens.core.statistics import as_float, mean

from .base import BaseEngine


logger = logging.getLogger(__name__)


class TriggerBundleEngine(BaseEngine):
    """Co-occurring trigger combinations."""

    name = "bundles"
    stage = 6

    def run(
        self,
        records: Sequence[PainRecord],
        config: EngineConfig,
        **context: Any
    ) -> List[TriggerBundle]:
        if not config.enable_trigger_bundles:
            return []

        bundles = detect_bundles(
            [(r.triggers, float(r.pain_level)) for r in records],
            min_support=config.min_bundle_support,
            max_size=config.max_bundle_size,
        )
        logger.debug(f"Detected {len(bundles)} trigger bundles")
        return bundles


def detect_bundles(
    samples: Sequence[tuple],
    min_support: int,
    max_size: int = 2,
) -> List[TriggerBundle]:
    """
    Count factor combinations within each sample.

    Args:
        samples: (factor labels, pain) pairs
        min_support: Minimum co-occurrence count
        max_size: Largest combination size to enumerate

    Returns:
        Bundles ordered by count (desc), then size, then factors
    """
    pains: Dict[FrozenSet[str], List[float]] = defaultdict(list)

    for factors, pain in samples:
        ordered = sorted(factors)
        for size in range(2, min(max_size, len(ordered)) + 1):
            for combo in combinations(ordered, size):
                pains[frozenset(combo)].append(pain)

    bundles = [
        TriggerBundle(
            factors=combo,
            co_occurrence_count=len(values),
            mean_pain=as_float(mean(values), 2),
        )
        for combo, values in pains.items()
        if len(values) >= min_support
    ]

    return sorted(
        bundles,
        key=lambda b: (-b.co_occurrence_count, len(b.factors), sorted(b.factors)),
    )
