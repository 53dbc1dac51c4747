"""
Engine Tests

Run with:
    pytest tests/test_engines.py -v

Each engine is exercised on small synthetic diaries whose expected
output can be worked out by hand.
"""

from datetime import datetime

import pytest

from painlens.cleaning import clean_records
from painlens.control import EngineConfig
from painlens.core.models import Baseline, PainRecord
from painlens.core.statistics import (
    classify_direction,
    classify_strength,
    confidence_from_count,
    summarize,
)
from painlens.engines import (
    ENGINE_INFO,
    ENGINE_REGISTRY,
    BaselineEngine,
    CorrelationEngine,
    EpisodeEngine,
    QoLDissonanceEngine,
    QoLPatternEngine,
    TrendEngine,
    TriggerBundleEngine,
    engines_in_order,
    get_engine,
    list_engines,
)
from painlens.engines.baseline import window_records
from painlens.engines.bundles import detect_bundles
from painlens.engines.correlation import compute_correlations, format_label
from painlens.engines.episodes import detect_episodes, resolve_threshold
from painlens.engines.qol import analyze_dimension
from painlens.engines.trend import compute_daily_points


def cleaned(records):
    return clean_records(records).records


def daily_points(records):
    return compute_daily_points(cleaned(records))


# =============================================================================
# Statistics
# =============================================================================

class TestStatistics:

    def test_strength_boundaries(self):
        assert classify_strength(0.69) == "weak"
        assert classify_strength(0.7) == "moderate"
        assert classify_strength(-1.2) == "moderate"
        assert classify_strength(1.5) == "strong"

    def test_direction_from_sign(self):
        assert classify_direction(1.2) == "increases"
        assert classify_direction(-0.3) == "decreases"
        assert classify_direction(0.0) == "neutral"

    def test_confidence_from_count(self):
        assert confidence_from_count(13) == "low"
        assert confidence_from_count(14) == "medium"
        assert confidence_from_count(30) == "high"

    def test_summary(self):
        summary = summarize([2, 4, 4, 6, 6, 8])

        assert summary.mean == 5.0
        assert summary.median == 5.0
        assert summary.mode == 4.0
        assert summary.min == 2.0
        assert summary.max == 8.0
        assert summary.count == 6

    def test_empty_summary(self):
        assert summarize([]).count == 0


# =============================================================================
# Baseline
# =============================================================================

class TestBaselineEngine:

    def test_median_ignores_outlier(self, daily_records):
        records = cleaned(daily_records([3] * 19 + [10]))

        baseline = BaselineEngine().run(records, EngineConfig())

        assert baseline.value == 3.0
        assert baseline.method == "median"
        assert baseline.entry_count == 20
        assert baseline.confidence == "medium"

    def test_window_excludes_old_records(self, make_record):
        records = cleaned([make_record(0, 9), make_record(40, 2), make_record(41, 2)])

        baseline = BaselineEngine().run(records, EngineConfig())

        assert baseline.value == 2.0
        assert baseline.entry_count == 2

    def test_window_past_earliest_date(self):
        records = (PainRecord(timestamp=datetime(50, 1, 1), pain_level=3),)

        assert window_records(records, 36500) == records

    def test_empty_series(self):
        baseline = BaselineEngine().run((), EngineConfig())

        assert baseline.value == 0.0
        assert baseline.confidence == "low"
        assert baseline.entry_count == 0


# =============================================================================
# Trend
# =============================================================================

class TestTrendEngine:

    def test_daily_aggregation(self, make_record):
        records = cleaned([make_record(0, 2), make_record(0, 6, hour=3), make_record(1, 5)])

        trend = TrendEngine().run(records, EngineConfig())
        first = trend.daily.points[0]

        assert len(trend.daily.points) == 2
        assert first.date == "2024-03-04"
        assert first.mean == 4.0
        assert first.std_dev == 2.0
        assert first.min == 2.0
        assert first.max == 6.0
        assert first.count == 2

    def test_single_record_day_has_zero_spread(self, make_record):
        trend = TrendEngine().run(cleaned([make_record(0, 5)]), EngineConfig())

        assert trend.daily.points[0].std_dev == 0.0

    def test_weekly_buckets_start_monday(self, daily_records):
        records = cleaned(daily_records([4] * 14))

        trend = TrendEngine().run(records, EngineConfig())

        assert not trend.weekly_suppressed
        assert [p.date for p in trend.weekly.points] == ["2024-03-04", "2024-03-11"]
        assert [p.count for p in trend.weekly.points] == [7, 7]

    def test_weekly_count_is_days_with_data(self, make_record):
        records = cleaned(
            [make_record(day, 4) for day in range(7)]
            + [make_record(day, 6, hour=5) for day in range(7)]
        )

        trend = TrendEngine().run(records, EngineConfig())

        assert len(records) == 14
        assert len(trend.weekly.points) == 1
        assert trend.weekly.points[0].count == 7
        assert trend.weekly.points[0].mean == 5.0
        assert all(p.count == 2 for p in trend.daily.points)

    def test_weekly_suppressed_below_minimum(self, daily_records):
        records = cleaned(daily_records([4] * 13))

        trend = TrendEngine().run(records, EngineConfig())

        assert trend.weekly_suppressed
        assert trend.weekly.points == ()
        assert len(trend.daily.points) == 13

    def test_slope_positive_when_worsening(self, daily_records):
        trend = TrendEngine().run(cleaned(daily_records([1, 2, 3])), EngineConfig())

        assert trend.daily.slope == pytest.approx(1.0)

    def test_empty_series(self):
        trend = TrendEngine().run((), EngineConfig())

        assert trend.daily.points == ()
        assert trend.daily.slope == 0.0


# =============================================================================
# Episodes
# =============================================================================

class TestEpisodeDetection:

    def test_single_moderate_episode(self, daily_records):
        points = daily_points(daily_records([3, 3, 7, 7, 7, 3]))

        episodes = detect_episodes(points, threshold=6, min_length=3, baseline_value=5.0)

        assert len(episodes) == 1
        episode = episodes[0]
        assert episode.start_date == "2024-03-06"
        assert episode.end_date == "2024-03-08"
        assert episode.length_days == 3
        assert episode.peak_pain == 7.0
        assert episode.severity == "moderate"
        assert episode.recovered is True
        assert episode.recovery_days == 1

    def test_short_run_not_an_episode(self, daily_records):
        points = daily_points(daily_records([3, 7, 7, 3]))

        assert detect_episodes(points, threshold=6, min_length=3) == []

    def test_open_run_not_recovered(self, daily_records):
        points = daily_points(daily_records([3, 3, 7, 7, 7]))

        episodes = detect_episodes(points, threshold=6, min_length=3, baseline_value=3.0)

        assert len(episodes) == 1
        assert episodes[0].recovered is False
        assert episodes[0].recovery_days is None

    def test_recovery_waits_for_baseline(self, daily_records):
        points = daily_points(daily_records([3, 3, 7, 7, 7, 4, 2]))

        episodes = detect_episodes(points, threshold=6, min_length=3, baseline_value=3.0)

        assert episodes[0].recovery_days == 2

    def test_severity_from_peak(self, daily_records):
        severe = detect_episodes(daily_points(daily_records([2, 7, 9, 7, 2])), 6, 3)
        mild = detect_episodes(daily_points(daily_records([2, 5, 5, 5, 2])), 4, 3)

        assert severe[0].severity == "severe"
        assert mild[0].severity == "mild"

    def test_threshold_from_baseline(self):
        assert resolve_threshold(EngineConfig(), 3.0) == 5.0
        assert resolve_threshold(EngineConfig(), 9.5) == 10.0
        assert resolve_threshold(EngineConfig(episode_pain_threshold=6.0), 3.0) == 6.0


class TestEpisodeEngine:

    def test_default_threshold_from_baseline(self, daily_records):
        records = cleaned(daily_records([2] * 10 + [5, 5, 5] + [2] * 3))
        config = EngineConfig()
        baseline = BaselineEngine().run(records, config)
        trend = TrendEngine().run(records, config)

        episodes = EpisodeEngine().run(
            records, config, baseline=baseline, daily_trend=trend.daily,
        )

        assert baseline.value == 2.0
        assert len(episodes) == 1
        assert episodes[0].length_days == 3
        assert episodes[0].severity == "mild"
        assert episodes[0].recovered is True

    def test_missing_trend_yields_nothing(self):
        assert EpisodeEngine().run((), EngineConfig()) == []


# =============================================================================
# Correlation
# =============================================================================

def _samples(with_pain, without_pain, count=2):
    return [({"x"}, with_pain)] * count + [(set(), without_pain)] * count


class TestCorrelation:

    @pytest.mark.parametrize("with_pain,expected", [
        (5.5, "weak"),
        (6.0, "moderate"),
        (7.0, "strong"),
    ])
    def test_strength_buckets(self, with_pain, expected):
        results = compute_correlations(_samples(with_pain, 5.0), "trigger", 1, 0.0)

        assert len(results) == 1
        assert results[0].strength == expected
        assert results[0].direction == "increases"

    def test_negative_delta_decreases(self):
        result = compute_correlations(_samples(3.0, 6.0), "medication", 1, 0.0)[0]

        assert result.delta == -3.0
        assert result.direction == "decreases"

    def test_support_floor(self):
        below = [({"rain"}, 8.0)] * 4 + [(set(), 2.0)] * 6
        at = [({"rain"}, 8.0)] * 5 + [(set(), 2.0)] * 5

        assert compute_correlations(below, "trigger", 5, 0.0) == []
        assert compute_correlations(at, "trigger", 5, 0.0)[0].support_count == 5

    def test_mean_without_falls_back_to_baseline(self):
        samples = [({"rain"}, 6.0)] * 5

        result = compute_correlations(samples, "trigger", 5, 4.0)[0]

        assert result.mean_without_factor == 4.0
        assert result.delta == 2.0

    def test_label_formatting(self):
        assert format_label("sleep_deprivation") == "Sleep Deprivation"
        assert format_label("weather-change") == "Weather Change"

    def test_all_categories(self, daily_records):
        records = cleaned(daily_records(
            [7, 7, 7, 7, 7, 2, 2, 2, 2, 2],
            symptoms=lambda day, pain: ["stiffness"] if pain == 7 else [],
            locations=lambda day, pain: ["lower_back"] if pain == 7 else [],
        ))

        results = CorrelationEngine().run(records, EngineConfig())
        categories = {r.category for r in results}

        assert categories == {"symptom", "location"}
        assert all(r.delta == 5.0 for r in results)

    def test_lagged_correlation(self, daily_records):
        records = cleaned(daily_records(
            [2 if day % 2 == 0 else 8 for day in range(12)],
            triggers=lambda day, pain: ["late_night"] if day % 2 == 0 else [],
        ))
        config = EngineConfig(enable_lagged_correlations=True, max_lag_days=1)

        results = CorrelationEngine().run(records, config, baseline=Baseline(5.0, "low"))
        same_day = [r for r in results if r.lag_days == 0]
        next_day = [r for r in results if r.lag_days == 1]

        assert same_day[0].delta == -6.0
        assert next_day[0].factor == "late_night"
        assert next_day[0].delta == 6.0
        assert next_day[0].support_count == 6
        assert results[0].lag_days == 0

    def test_lagged_off_by_default(self, daily_records):
        records = cleaned(daily_records(
            [2 if day % 2 == 0 else 8 for day in range(12)],
            triggers=lambda day, pain: ["late_night"] if day % 2 == 0 else [],
        ))

        results = CorrelationEngine().run(records, EngineConfig())

        assert all(r.lag_days == 0 for r in results)


# =============================================================================
# Bundles
# =============================================================================

class TestTriggerBundles:

    def test_pairs_counted(self):
        samples = (
            [({"a", "b"}, 6.0)] * 3
            + [({"a", "b", "c"}, 8.0)]
            + [({"a", "c"}, 4.0)] * 2
        )

        bundles = detect_bundles(samples, min_support=3, max_size=2)

        assert [sorted(b.factors) for b in bundles] == [["a", "b"], ["a", "c"]]
        assert [b.co_occurrence_count for b in bundles] == [4, 3]
        assert bundles[0].mean_pain == 6.5

    def test_triples_when_enabled(self):
        samples = [({"a", "b", "c"}, 5.0)] * 3

        bundles = detect_bundles(samples, min_support=3, max_size=3)

        assert frozenset({"a", "b", "c"}) in {b.factors for b in bundles}
        assert len(bundles) == 4

    def test_engine_toggle(self, daily_records):
        records = cleaned(daily_records([5] * 4, triggers=["stress", "rain"]))

        enabled = TriggerBundleEngine().run(records, EngineConfig())
        disabled = TriggerBundleEngine().run(records, EngineConfig(enable_trigger_bundles=False))

        assert len(enabled) == 1
        assert disabled == []


# =============================================================================
# Quality of Life
# =============================================================================

class TestQoLPatterns:

    def test_poor_sleep_raises_pain(self):
        pairs = [(2.0, 7.0)] * 5 + [(8.0, 3.0)] * 5

        pattern = analyze_dimension("sleep", pairs, min_support=5)

        assert pattern.correlation_delta == 4.0
        assert pattern.strength == "strong"
        assert pattern.direction == "increases"
        assert pattern.split_value == 5.0
        assert pattern.evidence_count == 10
        assert pattern.description == "When sleep quality is below 5, pain averages 4.0 points higher."

    def test_constant_dimension_has_no_pattern(self):
        assert analyze_dimension("mood", [(5.0, 4.0)] * 10, min_support=5) is None

    def test_engine_skips_unlogged_dimensions(self, daily_records):
        records = cleaned(daily_records(
            [7] * 5 + [3] * 5,
            quality_of_life=lambda day, pain: {"sleep_quality": 2 if pain == 7 else 8},
        ))

        patterns = QoLPatternEngine().run(records, EngineConfig())

        assert [p.dimension for p in patterns] == ["sleep"]


class TestQoLDissonance:

    def _run(self, daily_records, pains, sleep, config=None):
        records = cleaned(daily_records(
            pains,
            quality_of_life=lambda day, pain: {"sleep_quality": sleep[day]},
        ))
        config = config or EngineConfig()
        trend = TrendEngine().run(records, config)
        return QoLDissonanceEngine().run(records, config, daily_trend=trend.daily)

    def test_stable_pain_declining_sleep(self, daily_records):
        found = self._run(daily_records, [4] * 14, [7] * 7 + [4] * 7)

        assert len(found) == 1
        assert found[0].type == "pain_stable_qol_declining"
        assert found[0].dimension == "sleep"
        assert found[0].qol_trend_delta == -3.0
        assert found[0].pain_trend_delta == 0.0
        assert found[0].severity == "high"

    def test_improving_pain_declining_sleep(self, daily_records):
        found = self._run(daily_records, [6] * 7 + [4] * 7, [7] * 7 + [5] * 7)

        assert len(found) == 1
        assert found[0].type == "pain_improving_qol_declining"
        assert found[0].pain_trend_delta == -2.0
        assert found[0].severity == "medium"

    def test_worsening_pain_not_flagged(self, daily_records):
        assert self._run(daily_records, [4] * 7 + [6] * 7, [7] * 7 + [4] * 7) == []

    def test_small_decline_not_flagged(self, daily_records):
        assert self._run(daily_records, [4] * 14, [7] * 7 + [6] * 7) == []

    def test_disabled(self, daily_records):
        config = EngineConfig(enable_qol_dissonance=False)

        assert self._run(daily_records, [4] * 14, [7] * 7 + [4] * 7, config) == []

    def test_needs_both_windows(self, daily_records):
        assert self._run(daily_records, [4] * 5, [7, 7, 4, 4, 4]) == []


# =============================================================================
# Registry
# =============================================================================

class TestRegistry:

    def test_get_engine(self):
        engine = get_engine("baseline")

        assert isinstance(engine, BaselineEngine)
        assert engine.name == "baseline"

    def test_unknown_engine(self):
        with pytest.raises(ValueError, match="Unknown engine"):
            get_engine("forecast")

    def test_registry_matches_info(self):
        assert set(ENGINE_REGISTRY) == set(ENGINE_INFO)
        for name, cls in ENGINE_REGISTRY.items():
            assert cls.name == name
            assert cls.stage == ENGINE_INFO[name]["stage"]

    def test_pipeline_order(self):
        assert engines_in_order() == [
            "baseline", "trend", "episodes", "correlation",
            "bundles", "qol_patterns", "qol_dissonance",
        ]

    def test_list_engines_returns_copies(self):
        info = list_engines()
        info["baseline"]["stage"] = 99

        assert ENGINE_INFO["baseline"]["stage"] == 2
