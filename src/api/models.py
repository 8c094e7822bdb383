# src/api/models.py — v3
"""API-level request and response models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from reelforge.config.brand import BrandConfig, Tone, VideoStyle, VoiceProfile
from reelforge.core.models import RunRecord


class BrandConfigUpdate(BaseModel):
    """Partial brand config; omitted fields keep their stored or default value."""

    model_config = ConfigDict(extra="forbid")

    brand_color: str | None = None
    accent_color: str | None = None
    tone: Tone | None = None
    video_style: VideoStyle | None = None
    voice_profile: VoiceProfile | None = None
    channel_name: str | None = None
    tagline: str | None = None
    hashtags: list[str] | None = None
    keywords: list[str] | None = None
    last_prompted: str | None = None


class ConfigResponse(BaseModel):
    config: BrandConfig | None = None


class HistoryResponse(BaseModel):
    latest: RunRecord | None = None
    history: list[RunRecord]


class RunResponse(BaseModel):
    """Outcome of a run trigger. ok is False only when the run raised."""

    ok: bool
    result: RunRecord | None = None
    error: str | None = None


class DiagnosticsResponse(BaseModel):
    """Deployment readiness as seen by the running service."""

    version: str
    data_root: str
    publishing_configured: bool
    stage_policies: dict[str, str]
