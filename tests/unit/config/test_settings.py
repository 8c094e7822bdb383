# tests/unit/config/test_settings.py — v2
"""Tests for config/settings.py — defaults, validation and env loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from reelforge.config.settings import ConfigurationError, Settings, load_settings


class TestDefaults:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.data_root == Path("./data")
        assert s.history_limit == 30
        assert s.openai_model == "gpt-4o-mini"
        assert s.voice_speed == 1.08
        assert s.youtube_privacy_status == "unlisted"
        assert s.publish_delay_minutes == 60
        assert s.ffmpeg_path == "ffmpeg"
        assert s.log_format == "json"
        assert s.youtube_configured is False

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATA_ROOT", str(tmp_path))
        monkeypatch.setenv("NEWS_API_KEY", "news-key")
        monkeypatch.setenv("HISTORY_LIMIT", "5")
        s = Settings(_env_file=None)
        assert s.data_root == tmp_path
        assert s.news_api_key == "news-key"
        assert s.history_limit == 5

    def test_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("OPENAI_MODEL=gpt-4o\nLOG_FORMAT=text\n", encoding="utf-8")
        s = Settings(_env_file=env)
        assert s.openai_model == "gpt-4o"
        assert s.log_format == "text"


class TestValidation:
    def test_history_limit_must_be_positive(self):
        with pytest.raises(ValidationError, match="history_limit"):
            Settings(_env_file=None, history_limit=0)

    @pytest.mark.parametrize("speed", [0.1, 4.5])
    def test_voice_speed_range(self, speed):
        with pytest.raises(ValidationError, match="voice_speed"):
            Settings(_env_file=None, voice_speed=speed)

    def test_negative_publish_delay(self):
        with pytest.raises(ValidationError, match="publish_delay_minutes"):
            Settings(_env_file=None, publish_delay_minutes=-1)

    def test_invalid_privacy_status(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, youtube_privacy_status="secret")

    def test_partial_youtube_credentials(self):
        with pytest.raises(ConfigurationError, match="YOUTUBE_CLIENT_ID"):
            Settings(_env_file=None, youtube_client_id="id")

    def test_full_youtube_credentials(self):
        s = Settings(
            _env_file=None,
            youtube_client_id="id",
            youtube_client_secret="secret",
            youtube_refresh_token="token",
        )
        assert s.youtube_configured is True


class TestLoadSettings:
    def test_overrides(self, tmp_path):
        s = load_settings(_env_file=None, data_root=tmp_path, fallback_seed=3)
        assert s.data_root == tmp_path
        assert s.fallback_seed == 3
