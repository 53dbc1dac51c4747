"""
PAINLENS Orchestration

Runs the analysis stages in order and assembles the result.
"""

from .pipeline import analyze, resolve_config

__all__ = ["analyze", "resolve_config"]
