"""
PAINLENS Engine Configuration

Every tunable threshold of the analysis pipeline lives here.
No engine may embed its own defaults.

The configuration is an immutable value passed into analyze() at call time.
Caller-supplied values are merged over the defaults below; values outside
their valid range are clamped to the nearest bound, never rejected.

Keys may be given in snake_case (min_support_for_correlation) or in the
camelCase used by diary front-ends (minSupportForCorrelation).
"""

import logging
import math
import re
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)


# (lower, upper) bounds used for clamping; None means unbounded
BOUNDS: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    "min_entries_for_trend": (1, None),
    "min_support_for_correlation": (1, None),
    "baseline_window_days": (1, 36500),
    "episode_pain_threshold": (0, 10),
    "episode_min_length_days": (1, None),
    "moderate_peak_threshold": (0, 10),
    "severe_peak_threshold": (0, 10),
    "min_bundle_support": (1, None),
    "max_bundle_size": (2, 4),
    "qol_decline_threshold": (0, None),
    "dissonance_pain_band": (0, None),
    "max_lag_days": (1, 14),
}

INTEGER_KEYS = {
    "min_entries_for_trend",
    "min_support_for_correlation",
    "baseline_window_days",
    "episode_min_length_days",
    "min_bundle_support",
    "max_bundle_size",
    "max_lag_days",
}

FLAG_KEYS = {
    "enable_qol_dissonance",
    "enable_trigger_bundles",
    "enable_lagged_correlations",
}


@dataclass(frozen=True)
class EngineConfig:
    """
    Analysis thresholds and feature toggles.

    Use EngineConfig.from_mapping() (or merged()) rather than the constructor
    when values come from outside, so they are coerced and clamped.
    """

    # ==========================================================================
    # DATA SUFFICIENCY
    # ==========================================================================

    # Raw records required before a weekly trend is computed
    min_entries_for_trend: int = 14

    # Records a factor must appear in to be reported
    min_support_for_correlation: int = 5

    # ==========================================================================
    # BASELINE
    # ==========================================================================

    # Trailing window (days before the latest record) for the median baseline
    baseline_window_days: int = 30

    # ==========================================================================
    # EPISODES
    # ==========================================================================

    # Explicit flare threshold; None means baseline + 2
    episode_pain_threshold: Optional[float] = None

    # Consecutive daily points required before a run counts as an episode
    episode_min_length_days: int = 3

    # Peak pain at or above these marks a moderate / severe episode
    moderate_peak_threshold: float = 6.0
    severe_peak_threshold: float = 8.0

    # ==========================================================================
    # BUNDLES
    # ==========================================================================

    min_bundle_support: int = 3
    max_bundle_size: int = 2

    # ==========================================================================
    # QUALITY OF LIFE
    # ==========================================================================

    # Window-over-window QoL drop that counts as a decline
    qol_decline_threshold: float = 1.5

    # Window-over-window pain change treated as "stable"
    dissonance_pain_band: float = 0.5

    # ==========================================================================
    # LAGGED CORRELATIONS
    # ==========================================================================

    max_lag_days: int = 3

    # ==========================================================================
    # FEATURE TOGGLES
    # ==========================================================================

    enable_qol_dissonance: bool = True
    enable_trigger_bundles: bool = True
    enable_lagged_correlations: bool = False

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, overrides: Optional[Mapping[str, Any]] = None) -> "EngineConfig":
        """Build a config from defaults plus (partial) overrides."""
        return cls().merged(overrides)

    def merged(
        self,
        overrides: Union[None, Mapping[str, Any], "EngineConfig"] = None,
    ) -> "EngineConfig":
        """
        Return a new config with overrides applied on top of this one.

        Raises:
            TypeError: If overrides is neither a mapping nor an EngineConfig
        """
        if overrides is None:
            return self._clamped()
        if isinstance(overrides, EngineConfig):
            return overrides._clamped()
        if not isinstance(overrides, Mapping):
            raise TypeError(
                f"config must be a mapping or EngineConfig, got {type(overrides).__name__}"
            )

        known = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        for raw_key, value in overrides.items():
            key = normalize_key(str(raw_key))
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {raw_key}")
                continue
            coerced = _coerce(key, value, getattr(self, key))
            changes[key] = coerced

        return replace(self, **changes)._clamped()

    def _clamped(self) -> "EngineConfig":
        changes: Dict[str, Any] = {}
        for key, (low, high) in BOUNDS.items():
            value = getattr(self, key)
            if value is None:
                continue
            clamped = value
            if low is not None and clamped < low:
                clamped = low
            if high is not None and clamped > high:
                clamped = high
            if key in INTEGER_KEYS:
                clamped = int(clamped)
            else:
                clamped = float(clamped)
            if clamped != value:
                logger.debug(f"Clamped {key}: {value} -> {clamped}")
            changes[key] = clamped

        # Severity buckets must be ordered
        moderate = changes.get("moderate_peak_threshold", self.moderate_peak_threshold)
        severe = changes.get("severe_peak_threshold", self.severe_peak_threshold)
        if moderate > severe:
            changes["moderate_peak_threshold"] = severe

        return replace(self, **changes)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_key(key: str) -> str:
    """minSupportForCorrelation -> min_support_for_correlation"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _coerce(key: str, value: Any, current: Any) -> Any:
    """
    Convert a raw override to the field's type.

    Unusable values (non-numeric strings, NaN) keep the current value.
    """
    if key in FLAG_KEYS:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    if value is None:
        # Only the explicit threshold is optional
        return None if key == "episode_pain_threshold" else current

    if isinstance(value, bool):
        logger.warning(f"Ignoring boolean value for numeric config key: {key}")
        return current

    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric value for {key}: {value!r}")
        return current

    if math.isnan(number):
        return current
    if math.isinf(number):
        bound = BOUNDS[key][1] if number > 0 else BOUNDS[key][0]
        if bound is None:
            return current
        number = float(bound)

    if key in INTEGER_KEYS:
        return int(round(number))
    return number
