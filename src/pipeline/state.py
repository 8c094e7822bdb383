# src/pipeline/state.py — v2
"""Mutable in-flight run state.

Accumulates stage artifacts as they are produced and tracks the run phase.
Phases only move forward; FINALIZED can be reached from any phase and is
reached exactly once, producing the frozen RunRecord.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from reelforge.core.models import (
    RunRecord,
    RunStatus,
    ScriptDraft,
    ThumbnailAsset,
    TopicIdea,
    UploadMetadata,
    VisualAsset,
    VoiceoverAsset,
)


class RunPhase(str, enum.Enum):
    """Orchestrator phases, in execution order."""

    INITIALIZING = "initializing"
    CONFIG_VALIDATED = "config_validated"
    RESEARCHING = "researching"
    SCRIPTING = "scripting"
    SYNTHESIZING = "synthesizing"
    VISUALIZING = "visualizing"
    RENDERING = "rendering"
    THUMBNAILING = "thumbnailing"
    METADATA_BUILT = "metadata_built"
    PUBLISHING = "publishing"
    FINALIZED = "finalized"


_PHASE_ORDER: dict[RunPhase, int] = {phase: i for i, phase in enumerate(RunPhase)}


class InvalidTransition(RuntimeError):
    """A phase transition that would move backwards or leave FINALIZED."""


class RunState(BaseModel):
    """Artifacts and phase of the run currently in flight."""

    # === IDENTITY ===
    run_id: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    phase: RunPhase = RunPhase.INITIALIZING
    phases_visited: list[RunPhase] = Field(default_factory=lambda: [RunPhase.INITIALIZING])

    # === ARTIFACTS ===
    topic: TopicIdea | None = None
    script: ScriptDraft | None = None
    voiceover: VoiceoverAsset | None = None
    visual: VisualAsset | None = None
    video_path: str | None = None
    thumbnail: ThumbnailAsset | None = None
    upload: UploadMetadata | None = None

    @property
    def finalized(self) -> bool:
        return self.phase is RunPhase.FINALIZED

    def advance(self, phase: RunPhase) -> None:
        """Move to a later phase."""
        if self.finalized:
            raise InvalidTransition(f"run {self.run_id} is already finalized")
        if _PHASE_ORDER[phase] <= _PHASE_ORDER[self.phase]:
            raise InvalidTransition(f"cannot move from {self.phase.value} to {phase.value}")
        self.phase = phase
        self.phases_visited.append(phase)

    def finalize(
        self,
        status: RunStatus,
        error: str | None = None,
        completed_at: datetime | None = None,
    ) -> RunRecord:
        """Freeze the run into its RunRecord."""
        self.advance(RunPhase.FINALIZED)
        return RunRecord(
            id=self.run_id,
            started_at=self.started_at,
            completed_at=completed_at or datetime.now(timezone.utc),
            status=status,
            topic=self.topic,
            script=self.script,
            voiceover=self.voiceover,
            visual=self.visual,
            video_path=self.video_path,
            thumbnail=self.thumbnail,
            upload=self.upload,
            error=error,
        )
