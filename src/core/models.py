# src/core/models.py — v3
"""Shared Pydantic domain models used across modules.

Stage artifacts are immutable values produced by exactly one stage. RunRecord
is the durable outcome of one run and is frozen once finalized.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class _Artifact(BaseModel):
    """Base for stage artifacts: immutable once produced."""

    model_config = ConfigDict(frozen=True)


# === RESEARCH ===


class TopicSource(_Artifact):
    """A cited source for a topic."""

    title: str
    url: str


class TopicIdea(_Artifact):
    """Topic chosen by the research stage."""

    title: str
    summary: str
    angle: str
    sources: tuple[TopicSource, ...] = ()


# === SCRIPT ===


class ScriptDraft(_Artifact):
    """Narration script, split into hook/body/outro."""

    hook: str
    body: str
    outro: str
    full_script: str
    estimated_duration_seconds: float = 15


# === MEDIA ===


class VoiceoverAsset(_Artifact):
    """Synthesized narration on disk."""

    path: str
    format: Literal["mp3", "wav"] = "mp3"
    duration_seconds: float


class VisualAsset(_Artifact):
    """Background video sequence on disk, tagged with its provenance."""

    path: str
    aspect_ratio: Literal["9:16"] = "9:16"
    duration_seconds: float
    source: Literal["stock", "generated", "mixed"]


class ThumbnailAsset(_Artifact):
    """Rendered thumbnail image."""

    path: str


# === PUBLISHING ===


class UploadMetadata(_Artifact):
    """Title, description and tags sent to the publishing platform."""

    title: str
    description: str
    hashtags: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    scheduled_at: datetime
    watch_url: str | None = None


class UploadResult(_Artifact):
    """Reference returned by a successful publish."""

    video_id: str
    watch_url: str

    @property
    def is_reachable(self) -> bool:
        """True when the watch reference is an absolute http(s) URL."""
        return self.watch_url.startswith(("https://", "http://"))


# === RUN RECORD ===

RunStatus = Literal["success", "failed"]


class RunRecord(BaseModel):
    """Frozen outcome of one pipeline run, appended to history."""

    model_config = ConfigDict(frozen=True)

    id: str
    started_at: datetime
    completed_at: datetime | None = None
    status: RunStatus = "failed"
    topic: TopicIdea | None = None
    script: ScriptDraft | None = None
    voiceover: VoiceoverAsset | None = None
    visual: VisualAsset | None = None
    video_path: str | None = None
    thumbnail: ThumbnailAsset | None = None
    upload: UploadMetadata | None = None
    error: str | None = None
