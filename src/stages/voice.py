# src/stages/voice.py — v1
"""Narration synthesis via the OpenAI text-to-speech API."""

from __future__ import annotations

from typing import Any

from reelforge.config.settings import Settings
from reelforge.core.errors import StageError
from reelforge.core.models import ScriptDraft, VoiceoverAsset
from reelforge.storage import layout
from reelforge.stages.base import BaseStage, FailurePolicy, RunContext

VOICE_MAP: dict[str, str] = {
    "openai_alloy": "alloy",
    "openai_nova": "nova",
    "openai_orion": "orion",
}

WORDS_PER_SECOND = 2.6


def estimate_duration(text: str) -> int:
    """Naive narration length estimate from word count."""
    return round(len(text.split()) / WORDS_PER_SECOND)


class VoiceSynthesizer(BaseStage):
    """Turn the script into an mp3 voiceover."""

    name = "voice"
    policy = FailurePolicy.FATAL

    def __init__(self, settings: Settings, client: Any = None) -> None:
        self._api_key = settings.openai_api_key
        self._model = settings.openai_voice_model
        self._speed = settings.voice_speed
        self._timeout = settings.http_timeout_seconds
        self._client = client

    async def __call__(self, ctx: RunContext, script: ScriptDraft) -> VoiceoverAsset:
        if not self._api_key and self._client is None:
            raise StageError(
                "OPENAI_API_KEY missing. Unable to synthesize voiceover.", stage=self.name
            )

        import openai

        client = self._client or openai.AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        try:
            response = await client.audio.speech.create(
                model=self._model,
                voice=VOICE_MAP.get(ctx.config.voice_profile, "alloy"),
                input=script.full_script,
                response_format="mp3",
                speed=self._speed,
            )
        except openai.APIStatusError as e:
            await ctx.logger.warning("Voiceover synthesis failed", text=str(e))
            raise StageError(
                f"Voiceover generation failed: {e.status_code}", stage=self.name
            ) from e
        except openai.OpenAIError as e:
            await ctx.logger.warning("Voiceover synthesis failed", text=str(e))
            raise StageError(f"Voiceover generation failed: {e}", stage=self.name) from e

        target = ctx.path(layout.VOICEOVERS_DIR, "voiceover.mp3")
        target.write_bytes(response.content)
        await ctx.logger("Voiceover generated", path=str(target))

        return VoiceoverAsset(
            path=str(target),
            format="mp3",
            duration_seconds=estimate_duration(script.full_script),
        )
