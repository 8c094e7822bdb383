# src/core/errors.py — v1
"""Exception hierarchy for the production pipeline.

Providers raise StageError (or anything else). The orchestrator converts
failures of fatal stages into StageFatalError, the only exception that
escapes a run trigger. Publish failures are absorbed into the RunRecord.
"""

from __future__ import annotations


class ReelforgeError(Exception):
    """Base class for all reelforge errors."""


class StageError(ReelforgeError):
    """A stage provider could not produce its artifact."""

    def __init__(self, message: str, stage: str | None = None) -> None:
        self.stage = stage
        super().__init__(message)


class FfmpegError(StageError):
    """ffmpeg exited non-zero or could not be started."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        self.returncode = returncode
        super().__init__(message, stage="render")


class PublishError(StageError):
    """Uploading to the publishing platform failed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, stage="publish")


class StageFatalError(ReelforgeError):
    """A fatal stage failed; the run was recorded as failed and aborted."""

    def __init__(self, stage: str, message: str, run_id: str | None = None) -> None:
        self.stage = stage
        self.run_id = run_id
        super().__init__(message)


class ConfigMissingError(StageFatalError):
    """No brand configuration has been saved yet."""

    def __init__(self, message: str, run_id: str | None = None) -> None:
        super().__init__("config", message, run_id=run_id)
