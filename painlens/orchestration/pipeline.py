"""
PAINLENS Analysis Pipeline
==========================

The single public entry point of the engine.

    from painlens import analyze

    result = analyze(records, {"episode_pain_threshold": 6})
    result.baseline.value
    result.episodes
    result.to_dict()

Stages (fixed order):
    1. clean          records → CleanResult
    2. baseline       → Baseline
    3. trend          → daily / weekly TrendSeries
    4. episodes       → Episode list
    5. correlation    → CorrelationResult list
    6. bundles        → TriggerBundle list
    7. qol_patterns   → QoLPattern list
    8. qol_dissonance → QoLDissonance list
    9. metadata       → AnalysisMetadata

The pipeline performs no I/O and reads no clock: identical inputs always
produce equal results. Data problems become cautions, never exceptions.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from painlens.cleaning.cleaner import CleanResult, clean_records
from painlens.control.engine_config import EngineConfig
from painlens.core.models import AnalysisMetadata, AnalysisResult
from painlens.core.statistics import summarize
from painlens.engines import get_engine

logger = logging.getLogger(__name__)

# Valid records needed for "high" overall data quality
HIGH_QUALITY_RECORDS = 60

ConfigInput = Union[None, Mapping[str, Any], EngineConfig]


def resolve_config(config: ConfigInput = None) -> EngineConfig:
    """
    Merge caller configuration over the defaults.

    Raises:
        TypeError: If config is not None, a mapping or an EngineConfig
    """
    return EngineConfig().merged(config)


def analyze(records: Iterable[Any], config: ConfigInput = None) -> AnalysisResult:
    """
    Run the full pattern analysis over a diary.

    Args:
        records: PainRecord instances or mappings, in any order
        config: Partial configuration (mapping or EngineConfig), optional

    Returns:
        AnalysisResult value object

    Raises:
        TypeError: If records is not a collection or config is malformed
                   in shape (invalid values are clamped instead)
    """
    cfg = resolve_config(config)
    cleaned = clean_records(records)
    series = cleaned.records

    logger.info(
        f"Analyzing {cleaned.rows_after} records "
        f"({cleaned.rows_dropped} dropped of {cleaned.rows_before})"
    )

    baseline = get_engine("baseline").run(series, cfg)
    trend = get_engine("trend").run(series, cfg)
    episodes = get_engine("episodes").run(
        series, cfg, baseline=baseline, daily_trend=trend.daily,
    )
    correlations = get_engine("correlation").run(series, cfg, baseline=baseline)
    bundles = get_engine("bundles").run(series, cfg)
    qol_patterns = get_engine("qol_patterns").run(series, cfg)
    dissonances = get_engine("qol_dissonance").run(series, cfg, daily_trend=trend.daily)

    metadata = build_metadata(cleaned, cfg, weekly_suppressed=trend.weekly_suppressed)

    logger.info(
        f"Analysis complete: baseline={baseline.value} ({baseline.confidence}), "
        f"{len(episodes)} episodes, {len(correlations)} correlations, "
        f"{len(bundles)} bundles, {len(dissonances)} dissonances"
    )

    return AnalysisResult(
        baseline=baseline,
        daily_trend=trend.daily,
        weekly_trend=trend.weekly,
        episodes=tuple(episodes),
        correlations=tuple(correlations),
        trigger_bundles=tuple(bundles),
        qol_patterns=tuple(qol_patterns),
        qol_dissonances=tuple(dissonances),
        pain_summary=summarize(r.pain_level for r in series),
        metadata=metadata,
    )


# =============================================================================
# Metadata
# =============================================================================

def build_metadata(
    cleaned: CleanResult,
    config: EngineConfig,
    weekly_suppressed: bool = False,
) -> AnalysisMetadata:
    series = cleaned.records
    return AnalysisMetadata(
        record_count_used=cleaned.rows_after,
        records_received=cleaned.rows_before,
        records_dropped=cleaned.rows_dropped,
        data_quality=assess_data_quality(cleaned.rows_after, config),
        cautions=tuple(generate_cautions(cleaned, config, weekly_suppressed)),
        config_snapshot=config.to_dict(),
        data_window_start=series[0].timestamp.isoformat() if series else None,
        data_window_end=series[-1].timestamp.isoformat() if series else None,
    )


def assess_data_quality(count: int, config: EngineConfig) -> str:
    """Overall coverage label from the number of valid records."""
    if count >= HIGH_QUALITY_RECORDS:
        return "high"
    if count >= config.min_entries_for_trend * 3:
        return "medium"
    return "low"


def generate_cautions(
    cleaned: CleanResult,
    config: EngineConfig,
    weekly_suppressed: bool = False,
) -> List[str]:
    """Human-readable caveats about the analysis."""
    cautions: List[str] = []
    count = cleaned.rows_after

    if cleaned.rows_dropped:
        cautions.append(
            f"{cleaned.rows_dropped} entr{'y was' if cleaned.rows_dropped == 1 else 'ies were'} "
            "left out because the pain level or time could not be read."
        )

    if count == 0:
        cautions.append("No usable entries yet. Insights will appear as you keep logging.")
    elif count < config.min_entries_for_trend:
        cautions.append(
            f"Low sample size ({count} entries). Add more entries for reliable trends."
        )

    if weekly_suppressed:
        cautions.append(
            f"Weekly trend needs at least {config.min_entries_for_trend} entries."
        )

    if count < config.min_support_for_correlation:
        cautions.append(
            "Not enough data for correlation analysis. Keep logging triggers and symptoms."
        )

    has_qol = any(r.quality_of_life is not None for r in cleaned.records)
    if not has_qol:
        cautions.append(
            "Quality of Life data missing. Log sleep, mood, and activity for richer insights."
        )

    return cautions
