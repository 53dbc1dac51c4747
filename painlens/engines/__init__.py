"""
PAINLENS Engines Module

Registry of all analysis stages.

Usage:
    from painlens.engines import get_engine, list_engines

    # Get specific engine
    baseline = get_engine("baseline").run(records, config)

    # List available engines
    for name, info in list_engines().items():
        print(f"{name}: {info['description']}")
"""

from typing import Any, Dict, List, Type

from .base import BaseEngine
from .baseline import BaselineEngine
from .bundles import TriggerBundleEngine
from .correlation import CorrelationEngine
from .episodes import EpisodeEngine
from .qol import QoLDissonanceEngine, QoLPatternEngine
from .trend import TrendAggregation, TrendEngine


# Engine registry
ENGINE_REGISTRY: Dict[str, Type[BaseEngine]] = {
    "baseline": BaselineEngine,
    "trend": TrendEngine,
    "episodes": EpisodeEngine,
    "correlation": CorrelationEngine,
    "bundles": TriggerBundleEngine,
    "qol_patterns": QoLPatternEngine,
    "qol_dissonance": QoLDissonanceEngine,
}


# Engine metadata
ENGINE_INFO: Dict[str, Dict[str, Any]] = {
    "baseline": {
        "stage": 2,
        "category": "reference",
        "description": "Median pain over the trailing window",
        "requires": [],
    },
    "trend": {
        "stage": 3,
        "category": "aggregation",
        "description": "Daily and weekly pain summary series",
        "requires": [],
    },
    "episodes": {
        "stage": 4,
        "category": "detection",
        "description": "Sustained runs of elevated daily pain",
        "requires": ["baseline", "daily_trend"],
    },
    "correlation": {
        "stage": 5,
        "category": "correlation",
        "description": "Trigger/symptom/medication/location vs pain",
        "requires": ["baseline"],
    },
    "bundles": {
        "stage": 6,
        "category": "co_occurrence",
        "description": "Triggers frequently logged together",
        "requires": [],
    },
    "qol_patterns": {
        "stage": 7,
        "category": "correlation",
        "description": "Sleep/mood/activity median split vs pain",
        "requires": [],
    },
    "qol_dissonance": {
        "stage": 8,
        "category": "divergence",
        "description": "Stable pain with declining quality of life",
        "requires": ["daily_trend"],
    },
}


def get_engine(name: str) -> BaseEngine:
    """
    Get an engine instance by name.
    """
    if name not in ENGINE_REGISTRY:
        available = list(ENGINE_REGISTRY.keys())
        raise ValueError(f"Unknown engine: {name}. Available: {available}")

    engine_class = ENGINE_REGISTRY[name]
    return engine_class()


def list_engines() -> Dict[str, Dict[str, Any]]:
    """List all available engines with metadata."""
    return {name: dict(info) for name, info in ENGINE_INFO.items()}


def engines_in_order() -> List[str]:
    """Engine names sorted by pipeline stage."""
    return sorted(ENGINE_INFO, key=lambda name: ENGINE_INFO[name]["stage"])


__all__ = [
    "BaseEngine",
    "BaselineEngine",
    "TrendEngine",
    "TrendAggregation",
    "EpisodeEngine",
    "CorrelationEngine",
    "TriggerBundleEngine",
    "QoLPatternEngine",
    "QoLDissonanceEngine",
    "get_engine",
    "list_engines",
    "engines_in_order",
    "ENGINE_REGISTRY",
    "ENGINE_INFO",
]
