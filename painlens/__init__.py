"""
PAINLENS - Pattern analysis for personal pain diaries

A deterministic, explainable engine that turns a log of self-reported pain
records into baselines, trends, flare episodes and factor correlations.

Architecture:
    - cleaning: Record validation (raw → sorted, valid records)
    - engines: Analysis stages (baseline, trend, episodes, correlation,
      bundles, QoL patterns, QoL dissonance)
    - orchestration: analyze() runs the stages in order
    - control: EngineConfig thresholds and toggles
    - config: YAML presets for callers and the CLI

Quick Start:
    from painlens import analyze

    result = analyze(records)
    print(result.baseline.value, result.baseline.confidence)
    for episode in result.episodes:
        print(episode.start_date, episode.severity)
"""

__version__ = "0.1.0"

from painlens.control.engine_config import EngineConfig
from painlens.core.models import AnalysisResult, PainRecord, QualityOfLife
from painlens.orchestration.pipeline import analyze

__all__ = [
    "analyze",
    "AnalysisResult",
    "EngineConfig",
    "PainRecord",
    "QualityOfLife",
    "__version__",
]
