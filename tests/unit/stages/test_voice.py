# tests/unit/stages/test_voice.py — v1
"""Tests for stages/voice.py — text-to-speech voiceover."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from reelforge.core.errors import StageError
from reelforge.stages.voice import VOICE_MAP, VoiceSynthesizer, estimate_duration


class TestEstimateDuration:
    def test_word_rate(self):
        assert estimate_duration(" ".join(["word"] * 26)) == 10

    def test_empty(self):
        assert estimate_duration("") == 0


class TestVoiceSynthesizer:
    @pytest.mark.asyncio
    async def test_missing_key(self, settings, run_context, sample_script):
        with pytest.raises(StageError, match="OPENAI_API_KEY missing"):
            await VoiceSynthesizer(settings)(run_context, sample_script)

    @pytest.mark.asyncio
    async def test_writes_mp3(self, settings, run_context, sample_script):
        client = MagicMock()
        client.audio.speech.create = AsyncMock(return_value=SimpleNamespace(content=b"ID3audio"))

        asset = await VoiceSynthesizer(settings, client=client)(run_context, sample_script)

        path = Path(asset.path)
        assert path == run_context.workdir / "voiceovers" / "voiceover.mp3"
        assert path.read_bytes() == b"ID3audio"
        assert asset.format == "mp3"
        assert asset.duration_seconds == estimate_duration(sample_script.full_script)

        kwargs = client.audio.speech.create.await_args.kwargs
        assert kwargs["voice"] == VOICE_MAP["openai_alloy"]
        assert kwargs["input"] == sample_script.full_script
        assert kwargs["speed"] == settings.voice_speed
