"""
PAINLENS Core - data model and statistical helpers.

Components:
    - Models: input records and immutable result types
    - Statistics: summaries, strength/direction/confidence buckets, slope
"""

from .models import (
    AnalysisMetadata,
    AnalysisResult,
    Baseline,
    CorrelationResult,
    Episode,
    PainRecord,
    QoLDissonance,
    QoLPattern,
    QualityOfLife,
    StatisticalSummary,
    TrendPoint,
    TrendSeries,
    TriggerBundle,
)

from .statistics import (
    classify_direction,
    classify_strength,
    confidence_from_count,
    summarize,
)

__all__ = [
    # Models
    "AnalysisMetadata",
    "AnalysisResult",
    "Baseline",
    "CorrelationResult",
    "Episode",
    "PainRecord",
    "QoLDissonance",
    "QoLPattern",
    "QualityOfLife",
    "StatisticalSummary",
    "TrendPoint",
    "TrendSeries",
    "TriggerBundle",
    # Statistics
    "classify_direction",
    "classify_strength",
    "confidence_from_count",
    "summarize",
]
