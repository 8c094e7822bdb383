# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: data location,
provider credentials, render tooling, HTTP timeouts and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Storage ===
    data_root: Path = Path("./data")
    history_limit: int = 30

    # === Script + voice (OpenAI) ===
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_voice_model: str = "gpt-4o-mini-tts"
    script_temperature: float = 0.8
    voice_speed: float = 1.08

    # === Research + visuals ===
    news_api_key: str = ""
    pexels_api_key: str = ""

    # === Publishing (YouTube) ===
    youtube_client_id: str = ""
    youtube_client_secret: str = ""
    youtube_refresh_token: str = ""
    youtube_category_id: str = "28"
    youtube_privacy_status: Literal["private", "unlisted", "public"] = "unlisted"
    publish_delay_minutes: int = 60

    # === Rendering ===
    ffmpeg_path: str = "ffmpeg"
    thumbnail_font_file: str = ""

    # === HTTP ===
    http_timeout_seconds: float = 30.0
    upload_timeout_seconds: float = 600.0

    # === Fallback selection ===
    fallback_seed: int | None = None

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # === HTTP API ===
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # --- Validators ---

    @field_validator("history_limit")
    @classmethod
    def validate_history_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("history_limit must be >= 1")
        return v

    @field_validator("voice_speed")
    @classmethod
    def validate_voice_speed(cls, v: float) -> float:
        if not 0.25 <= v <= 4.0:
            raise ValueError("voice_speed must be between 0.25 and 4.0")
        return v

    @field_validator("publish_delay_minutes")
    @classmethod
    def validate_publish_delay(cls, v: int) -> int:
        if v < 0:
            raise ValueError("publish_delay_minutes must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        youtube = [
            self.youtube_client_id,
            self.youtube_client_secret,
            self.youtube_refresh_token,
        ]
        if any(youtube) and not all(youtube):
            errors.append(
                "YOUTUBE_CLIENT_ID, YOUTUBE_CLIENT_SECRET and "
                "YOUTUBE_REFRESH_TOKEN must be set together"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def youtube_configured(self) -> bool:
        """True when all OAuth credentials for publishing are present."""
        return bool(self.youtube_refresh_token)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or scripting).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
