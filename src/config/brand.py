# src/config/brand.py — v1
"""Brand configuration: the per-deployment identity every run is produced for.

Saved once through the config store, read once at the start of each run.
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

Tone = Literal["educational", "hype", "mysterious", "playful", "analytical"]
VideoStyle = Literal["glitch", "holographic", "cyberpunk", "minimal-future", "neon"]
VoiceProfile = Literal["openai_alloy", "openai_nova", "openai_orion"]


class BrandConfig(BaseModel):
    """Channel identity, look and voice."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    brand_color: str
    accent_color: str
    tone: Tone
    video_style: VideoStyle
    voice_profile: VoiceProfile
    channel_name: str
    tagline: str
    hashtags: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    last_prompted: str | None = None

    @field_validator("brand_color", "accent_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not _HEX_COLOR.match(v):
            raise ValueError(f"expected a #RRGGBB color, got {v!r}")
        return v.upper()

    def ffmpeg_color(self, field: Literal["brand_color", "accent_color"]) -> str:
        """Return a color in ffmpeg's 0xRRGGBB notation."""
        return getattr(self, field).replace("#", "0x")


DEFAULT_BRAND: dict[str, Any] = {
    "brand_color": "#12F7FF",
    "accent_color": "#FF2E63",
    "tone": "hype",
    "video_style": "cyberpunk",
    "voice_profile": "openai_alloy",
    "channel_name": "FutureFlash AI",
    "tagline": "Daily neural jolts about tomorrow.",
    "hashtags": ["#AIShorts", "#FutureTech", "#Robotics", "#QuantumLeap"],
    "keywords": ["AI", "technology", "future", "robotics", "innovation"],
}
