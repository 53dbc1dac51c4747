"""
PAINLENS Engine Base Class

All analysis stages inherit from this base class.
Provides a common interface for:
- Stage identity (name, stage)
- A pure run() over the cleaned series
- Shared read-only context handed from earlier stages

Architecture:
    Engine reads from: the cleaned series + EngineConfig + earlier stage outputs
    Engine writes to: nothing (returns an immutable value)

Engines hold no state between invocations. Instantiating one is cheap and
the same instance may be reused across calls and threads.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

from painlens.control.engine_config import EngineConfig
from painlens.core.models import PainRecord


logger = logging.getLogger(__name__)


class BaseEngine(ABC):
    """
    Abstract base class for all PAINLENS analysis engines.

    Subclasses must implement:
        - name: Engine identifier
        - stage: Pipeline position (1 = first analysis stage)
        - run(): Execute the analysis

    Usage:
        class BaselineEngine(BaseEngine):
            name = "baseline"
            stage = 2

            def run(self, records, config, **context):
                # ... implementation
                return Baseline(...)
    """

    # Subclasses must define these
    name: str = "base"
    stage: int = 0

    @abstractmethod
    def run(
        self,
        records: Sequence[PainRecord],
        config: EngineConfig,
        **context: Any
    ) -> Any:
        """
        Execute the analysis. Subclasses must implement.

        Args:
            records: Cleaned series, sorted ascending by timestamp
            config: Clamped engine configuration
            **context: Outputs of earlier stages (baseline, daily_trend, ...)

        Returns:
            Immutable stage output
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} stage={self.stage}>"
