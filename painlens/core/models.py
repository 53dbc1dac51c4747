"""
PAINLENS Data Models

Value types shared by every stage of the analysis pipeline.

Input:
    - QualityOfLife: optional sleep / mood / activity sub-scores
    - PainRecord: one validated diary entry

Output:
    - Baseline, TrendPoint, TrendSeries, Episode
    - CorrelationResult, TriggerBundle
    - QoLPattern, QoLDissonance
    - StatisticalSummary, AnalysisMetadata, AnalysisResult

Every output type is a frozen dataclass whose to_dict() returns plain
JSON-serializable data with no references back to input records.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


# =============================================================================
# Vocabulary
# =============================================================================

CONFIDENCE_LEVELS = ("low", "medium", "high")
STRENGTHS = ("weak", "moderate", "strong")
DIRECTIONS = ("increases", "decreases", "neutral")
SEVERITIES = ("mild", "moderate", "severe")
FACTOR_CATEGORIES = ("trigger", "symptom", "medication", "location")
QOL_DIMENSIONS = ("sleep", "mood", "activity")


# =============================================================================
# Input Records
# =============================================================================

@dataclass(frozen=True)
class QualityOfLife:
    """Quality-of-life sub-scores on a caller-defined scale."""
    sleep_quality: Optional[float] = None
    mood_impact: Optional[float] = None
    activity_level: Optional[float] = None

    def value_for(self, dimension: str) -> Optional[float]:
        """Return the sub-score for a QoL dimension name."""
        attr = QOL_ATTRIBUTES[dimension]
        return getattr(self, attr)

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, attr) is None for attr in QOL_ATTRIBUTES.values())


QOL_ATTRIBUTES: Dict[str, str] = {
    "sleep": "sleep_quality",
    "mood": "mood_impact",
    "activity": "activity_level",
}


@dataclass(frozen=True)
class PainRecord:
    """
    Immutable snapshot of one diary entry.

    Records built by callers are not trusted: the cleaner re-validates every
    field and produces normalized copies.
    """
    timestamp: Any
    pain_level: Any
    triggers: FrozenSet[str] = frozenset()
    symptoms: FrozenSet[str] = frozenset()
    medications: FrozenSet[str] = frozenset()
    locations: FrozenSet[str] = frozenset()
    quality_of_life: Optional[QualityOfLife] = None
    record_id: Optional[str] = None

    def factors(self, category: str) -> FrozenSet[str]:
        """Return the label set for a factor category."""
        return getattr(self, CATEGORY_ATTRIBUTES[category])

    def qol_value(self, dimension: str) -> Optional[float]:
        if self.quality_of_life is None:
            return None
        return self.quality_of_life.value_for(dimension)

    @property
    def day(self) -> str:
        """Calendar day of the (normalized) timestamp as YYYY-MM-DD."""
        return self.timestamp.date().isoformat()


CATEGORY_ATTRIBUTES: Dict[str, str] = {
    "trigger": "triggers",
    "symptom": "symptoms",
    "medication": "medications",
    "location": "locations",
}


# =============================================================================
# Baseline & Trends
# =============================================================================

@dataclass(frozen=True)
class Baseline:
    """Robust (median) reference pain level over a trailing window."""
    value: float
    confidence: str
    method: str = "median"
    window_days: int = 0
    entry_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "confidence": self.confidence,
            "method": self.method,
            "window_days": self.window_days,
            "entry_count": self.entry_count,
        }


@dataclass(frozen=True)
class TrendPoint:
    """One aggregation bucket (day or week)."""
    date: str
    mean: float
    std_dev: float
    min: float
    max: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "mean": self.mean,
            "std_dev": self.std_dev,
            "min": self.min,
            "max": self.max,
            "count": self.count,
        }


@dataclass(frozen=True)
class TrendSeries:
    """Trend points at one resolution with an overall direction."""
    resolution: str
    points: Tuple[TrendPoint, ...] = ()
    slope: float = 0.0
    confidence: str = "low"

    def __len__(self) -> int:
        return len(self.points)

    @property
    def values(self) -> List[float]:
        return [p.mean for p in self.points]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resolution": self.resolution,
            "points": [p.to_dict() for p in self.points],
            "slope": self.slope,
            "confidence": self.confidence,
        }


# =============================================================================
# Episodes
# =============================================================================

@dataclass(frozen=True)
class Episode:
    """A contiguous run of daily points at or above the flare threshold."""
    start_date: str
    end_date: str
    length_days: int
    peak_pain: float
    severity: str
    recovered: bool
    episode_id: str = ""
    mean_pain: float = 0.0
    entry_count: int = 0
    recovery_days: Optional[int] = None
    associated_triggers: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "episode_id": self.episode_id,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "length_days": self.length_days,
            "peak_pain": self.peak_pain,
            "mean_pain": self.mean_pain,
            "severity": self.severity,
            "recovered": self.recovered,
            "entry_count": self.entry_count,
            "recovery_days": self.recovery_days,
            "associated_triggers": list(self.associated_triggers),
        }


# =============================================================================
# Correlations & Bundles
# =============================================================================

@dataclass(frozen=True)
class CorrelationResult:
    """Association between one factor value and pain level."""
    factor: str
    category: str
    mean_with_factor: float
    mean_without_factor: float
    delta: float
    strength: str
    direction: str
    support_count: int
    label: str = ""
    confidence: float = 0.0
    stability_score: float = 0.0
    lag_days: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factor": self.factor,
            "label": self.label,
            "category": self.category,
            "mean_with_factor": self.mean_with_factor,
            "mean_without_factor": self.mean_without_factor,
            "delta": self.delta,
            "strength": self.strength,
            "direction": self.direction,
            "support_count": self.support_count,
            "confidence": self.confidence,
            "stability_score": self.stability_score,
            "lag_days": self.lag_days,
        }


@dataclass(frozen=True)
class TriggerBundle:
    """A group of factors observed together at least min-support times."""
    factors: FrozenSet[str]
    co_occurrence_count: int
    mean_pain: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factors": sorted(self.factors),
            "co_occurrence_count": self.co_occurrence_count,
            "mean_pain": self.mean_pain,
        }


# =============================================================================
# Quality of Life
# =============================================================================

@dataclass(frozen=True)
class QoLPattern:
    """Pain difference between low and high halves of a QoL dimension."""
    dimension: str
    correlation_delta: float
    strength: str
    direction: str = "neutral"
    split_value: float = 0.0
    evidence_count: int = 0
    confidence: str = "low"
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimension": self.dimension,
            "correlation_delta": self.correlation_delta,
            "strength": self.strength,
            "direction": self.direction,
            "split_value": self.split_value,
            "evidence_count": self.evidence_count,
            "confidence": self.confidence,
            "description": self.description,
        }


@dataclass(frozen=True)
class QoLDissonance:
    """Divergence between the recent pain trend and a QoL trend."""
    type: str
    description: str
    pain_trend_delta: float
    qol_trend_delta: float
    dimension: str = ""
    severity: str = "medium"
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "dimension": self.dimension,
            "description": self.description,
            "pain_trend_delta": self.pain_trend_delta,
            "qol_trend_delta": self.qol_trend_delta,
            "severity": self.severity,
            "suggestion": self.suggestion,
        }


# =============================================================================
# Result
# =============================================================================

@dataclass(frozen=True)
class StatisticalSummary:
    """Descriptive statistics over a list of pain values."""
    mean: float = 0.0
    median: float = 0.0
    mode: float = 0.0
    std_dev: float = 0.0
    min: float = 0.0
    max: float = 0.0
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": self.mean,
            "median": self.median,
            "mode": self.mode,
            "std_dev": self.std_dev,
            "min": self.min,
            "max": self.max,
            "count": self.count,
        }


@dataclass(frozen=True)
class AnalysisMetadata:
    """How much data was used and what to be careful about."""
    record_count_used: int
    records_received: int
    records_dropped: int
    data_quality: str
    cautions: Tuple[str, ...]
    config_snapshot: Dict[str, Any] = field(default_factory=dict)
    data_window_start: Optional[str] = None
    data_window_end: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_count_used": self.record_count_used,
            "records_received": self.records_received,
            "records_dropped": self.records_dropped,
            "data_quality": self.data_quality,
            "cautions": list(self.cautions),
            "config_snapshot": dict(self.config_snapshot),
            "data_window": {
                "start": self.data_window_start,
                "end": self.data_window_end,
            },
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Everything the engine derives from one series of records."""
    baseline: Baseline
    daily_trend: TrendSeries
    weekly_trend: TrendSeries
    episodes: Tuple[Episode, ...]
    correlations: Tuple[CorrelationResult, ...]
    trigger_bundles: Tuple[TriggerBundle, ...]
    qol_patterns: Tuple[QoLPattern, ...]
    qol_dissonances: Tuple[QoLDissonance, ...]
    pain_summary: StatisticalSummary
    metadata: AnalysisMetadata

    def correlations_for(self, category: str, lagged: bool = False) -> List[CorrelationResult]:
        """Correlations of one factor category (same-record unless lagged)."""
        return [
            c for c in self.correlations
            if c.category == category and (c.lag_days > 0) == lagged
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseline": self.baseline.to_dict(),
            "daily_trend": self.daily_trend.to_dict(),
            "weekly_trend": self.weekly_trend.to_dict(),
            "episodes": [e.to_dict() for e in self.episodes],
            "correlations": [c.to_dict() for c in self.correlations],
            "trigger_bundles": [b.to_dict() for b in self.trigger_bundles],
            "qol_patterns": [p.to_dict() for p in self.qol_patterns],
            "qol_dissonances": [d.to_dict() for d in self.qol_dissonances],
            "pain_summary": self.pain_summary.to_dict(),
            "metadata": self.metadata.to_dict(),
        }
