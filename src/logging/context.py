# src/logging/context.py — v3
"""Run and stage identifiers bound to the current task for log records.

Values live in context variables, so each asyncio task sees the identifiers
of the run it belongs to.
"""

from __future__ import annotations

import contextvars
from dataclasses import asdict, dataclass
from typing import Any

_current_run: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "reelforge_run_id", default=None
)
_current_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "reelforge_stage", default=None
)


@dataclass(frozen=True)
class LogContext:
    run_id: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Bound identifiers only; unset ones are omitted."""
        return {key: value for key, value in asdict(self).items() if value is not None}


def get_context() -> LogContext:
    return LogContext(run_id=_current_run.get(), stage=_current_stage.get())


def set_run_context(run_id: str) -> None:
    """Bind a new run; any stage left over from a previous run is dropped."""
    _current_run.set(run_id)
    _current_stage.set(None)


def set_stage_context(stage: str | None) -> None:
    _current_stage.set(stage)


def clear_context() -> None:
    _current_run.set(None)
    _current_stage.set(None)
