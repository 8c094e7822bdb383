# src/stages/base.py — v1
"""Standard stage interface for production providers.

A stage is an async callable taking the RunContext plus its predecessor
artifacts. Its failure classification is declared once, on the class.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from reelforge.config.brand import BrandConfig
from reelforge.logging.run_logger import RunLogger


class FailurePolicy(enum.Enum):
    """How the orchestrator treats an exception raised by a stage."""

    FATAL = "fatal"
    """No substitute artifact exists: abort and record the run."""

    DEGRADES = "degrades"
    """The stage substitutes a lower-quality artifact itself and never raises."""

    ABSORBED = "absorbed"
    """Failure is recorded on the run but never propagates."""


@dataclass(frozen=True)
class RunContext:
    """Per-run context handed to every stage."""

    config: BrandConfig
    run_id: str
    workdir: Path
    logger: RunLogger

    def path(self, *parts: str) -> Path:
        """Return a path inside the run's working directory, creating parents."""
        target = self.workdir.joinpath(*parts)
        target.parent.mkdir(parents=True, exist_ok=True)
        return target


class BaseStage(ABC):
    """Common interface for all stage providers."""

    name: str = ""
    policy: FailurePolicy = FailurePolicy.FATAL

    @abstractmethod
    async def __call__(self, ctx: RunContext, *inputs: Any) -> Any:
        """Produce this stage's artifact from its predecessors."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, policy={self.policy.value})"
