"""
PAINLENS Control Plane

Thresholds and feature toggles for the analysis engine.
"""

from .engine_config import EngineConfig, normalize_key

__all__ = ["EngineConfig", "normalize_key"]
