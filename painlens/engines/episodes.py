"""
PAINLENS Episode Engine

Flare detection over the daily trend.

States:
    NO_EPISODE  -- scanning; initial state
    IN_EPISODE  -- accumulating consecutive daily points at/above threshold

Transitions:
    NO_EPISODE → IN_EPISODE   point >= threshold (run starts)
    IN_EPISODE → IN_EPISODE   point >= threshold (run grows)
    IN_EPISODE → NO_EPISODE   point <  threshold (run closes; emitted as a
                              recovered episode if long enough, else dropped)

At end of series a qualifying open run is emitted with recovered=False.

Threshold: the configured episode_pain_threshold, or baseline + 2.
"""

import logging
from enum import Enum
from typing import Any, List, Optional, Sequence

import pandas as pd

from painlens.control.engine_config import EngineConfig
from painlens.core.models import Baseline, Episode, PainRecord, TrendPoint, TrendSeries
from painlens.core.statistics import as_float, mean

from .base import BaseEngine


logger = logging.getLogger(__name__)

# Points above baseline that mark a flare when no threshold is configured
BASELINE_OFFSET = 2.0
MAX_PAIN = 10.0


class EpisodeState(Enum):
    NO_EPISODE = "no_episode"
    IN_EPISODE = "in_episode"


class EpisodeEngine(BaseEngine):
    """
    Sustained elevated-pain detection.

    Context required:
        - baseline: Baseline
        - daily_trend: TrendSeries (daily resolution)
    """

    name = "episodes"
    stage = 4

    def run(
        self,
        records: Sequence[PainRecord],
        config: EngineConfig,
        baseline: Optional[Baseline] = None,
        daily_trend: Optional[TrendSeries] = None,
        **context: Any
    ) -> List[Episode]:
        if daily_trend is None or not daily_trend.points:
            return []

        baseline_value = baseline.value if baseline is not None else 0.0
        threshold = resolve_threshold(config, baseline_value)

        episodes = detect_episodes(
            daily_trend.points,
            threshold=threshold,
            min_length=config.episode_min_length_days,
            baseline_value=baseline_value,
            moderate_peak=config.moderate_peak_threshold,
            severe_peak=config.severe_peak_threshold,
        )

        logger.debug(f"Detected {len(episodes)} episodes at threshold {threshold}")
        return episodes


def resolve_threshold(config: EngineConfig, baseline_value: float) -> float:
    """Explicit threshold wins; otherwise baseline + 2, capped at 10."""
    if config.episode_pain_threshold is not None:
        return float(config.episode_pain_threshold)
    return min(MAX_PAIN, baseline_value + BASELINE_OFFSET)


def detect_episodes(
    points: Sequence[TrendPoint],
    threshold: float,
    min_length: int,
    baseline_value: float = 0.0,
    moderate_peak: float = 6.0,
    severe_peak: float = 8.0,
) -> List[Episode]:
    """
    Scan daily points for runs at or above threshold.

    Args:
        points: Daily trend points in date order
        threshold: Flare threshold on the daily mean
        min_length: Shortest run (in daily points) that counts
        baseline_value: Reference level used for recovery timing
        moderate_peak: Peak at/above which an episode is moderate
        severe_peak: Peak at/above which an episode is severe

    Returns:
        Episodes in chronological order
    """
    episodes: List[Episode] = []
    state = EpisodeState.NO_EPISODE
    run: List[TrendPoint] = []

    for idx, point in enumerate(points):
        elevated = point.mean >= threshold

        if state is EpisodeState.NO_EPISODE:
            if elevated:
                state = EpisodeState.IN_EPISODE
                run = [point]
            continue

        # IN_EPISODE
        if elevated:
            run.append(point)
            continue

        if len(run) >= min_length:
            recovery = recovery_days(run[-1], points[idx:], baseline_value)
            episodes.append(_build_episode(
                run, recovered=True, recovery=recovery,
                moderate_peak=moderate_peak, severe_peak=severe_peak,
            ))
        state = EpisodeState.NO_EPISODE
        run = []

    if state is EpisodeState.IN_EPISODE and len(run) >= min_length:
        episodes.append(_build_episode(
            run, recovered=False, recovery=None,
            moderate_peak=moderate_peak, severe_peak=severe_peak,
        ))

    return episodes


def classify_severity(peak: float, moderate_peak: float, severe_peak: float) -> str:
    if peak >= severe_peak:
        return "severe"
    if peak >= moderate_peak:
        return "moderate"
    return "mild"


def recovery_days(
    last_point: TrendPoint,
    following: Sequence[TrendPoint],
    baseline_value: float,
) -> Optional[int]:
    """Days from the episode's last day to the first day below baseline."""
    end = pd.Timestamp(last_point.date)
    for point in following:
        if point.mean < baseline_value:
            return int((pd.Timestamp(point.date) - end).days)
    return None


def _build_episode(
    run: Sequence[TrendPoint],
    recovered: bool,
    recovery: Optional[int],
    moderate_peak: float,
    severe_peak: float,
) -> Episode:
    values = [p.mean for p in run]
    peak = max(values)
    return Episode(
        episode_id=f"episode-{run[0].date}",
        start_date=run[0].date,
        end_date=run[-1].date,
        length_days=len(run),
        peak_pain=as_float(peak, 2),
        mean_pain=as_float(mean(values), 2),
        severity=classify_severity(peak, moderate_peak, severe_peak),
        recovered=recovered,
        entry_count=sum(p.count for p in run),
        recovery_days=recovery,
    )
