# src/stages/script.py — v1
"""Script writing via the OpenAI chat completions API (JSON response mode)."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from reelforge.config.settings import Settings
from reelforge.core.errors import StageError
from reelforge.core.models import ScriptDraft, TopicIdea
from reelforge.stages.base import BaseStage, FailurePolicy, RunContext

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You create ultra-engaging AI short-form scripts."

_DEFAULT_HOOK = "THE FUTURE IS HERE."
_DEFAULT_BODY = "AI is evolving faster than hype. [Visual: data torrent]"
_DEFAULT_OUTRO = "Ready for the upgrade?"
_DEFAULT_DURATION = 15

_STAGE_DIRECTION = re.compile(r"\[[^\]]+\]")


def strip_stage_directions(text: str) -> str:
    """Remove ``[bracketed]`` visual/SFX directions and tidy whitespace."""
    return re.sub(r"\s{2,}", " ", _STAGE_DIRECTION.sub("", text)).strip()


def build_prompt(topic: TopicIdea, channel_name: str, tone: str, video_style: str) -> str:
    """Build the user prompt for the script model."""
    return "\n".join(
        [
            f"You are a viral short-form scriptwriter for a futuristic tech channel called {channel_name}.",
            f"Tone: {tone}. Visual style: {video_style}.",
            "Write a script under 40 words (~15 seconds) with a hook in the first 2 seconds.",
            "Structure: HOOK in caps, 2 rapid-fire fact lines, final kicker question.",
            "Avoid filler. Each sentence <= 11 words. Include stage directions in [brackets] for visuals or SFX.",
            f"Topic headline: {topic.title}",
            f"Angle: {topic.angle}",
            f"Sources summary: {topic.summary}",
            "Return JSON with keys hook, body, outro, estimatedDurationSeconds.",
        ]
    )


def parse_script(raw: str) -> ScriptDraft:
    """Parse the model's JSON answer, filling in defaults for missing keys.

    Raises:
        StageError: If the answer is not a JSON object.
    """
    try:
        payload = json.loads(raw or "{}")
    except json.JSONDecodeError as e:
        raise StageError(f"Script model returned invalid JSON: {e}", stage="script") from e
    if not isinstance(payload, dict):
        raise StageError("Script model returned a non-object JSON payload", stage="script")

    hook = str(payload.get("hook") or _DEFAULT_HOOK)
    body = str(payload.get("body") or _DEFAULT_BODY)
    outro = str(payload.get("outro") or _DEFAULT_OUTRO)
    duration = _coerce_duration(payload.get("estimatedDurationSeconds"))

    return ScriptDraft(
        hook=hook,
        body=body,
        outro=outro,
        full_script=" ".join([hook, body, outro]),
        estimated_duration_seconds=duration,
    )


def _coerce_duration(value: Any) -> float:
    try:
        duration = float(value)
    except (TypeError, ValueError):
        return _DEFAULT_DURATION
    return duration if duration > 0 else _DEFAULT_DURATION


class ScriptWriter(BaseStage):
    """Write the narration script for a topic."""

    name = "script"
    policy = FailurePolicy.FATAL

    def __init__(self, settings: Settings, client: Any = None) -> None:
        self._api_key = settings.openai_api_key
        self._model = settings.openai_model
        self._temperature = settings.script_temperature
        self._timeout = settings.http_timeout_seconds
        self._client = client

    async def __call__(self, ctx: RunContext, topic: TopicIdea) -> ScriptDraft:
        if not self._api_key and self._client is None:
            raise StageError("OPENAI_API_KEY missing. Unable to craft script.", stage=self.name)

        config = ctx.config
        prompt = build_prompt(topic, config.channel_name, config.tone, config.video_style)

        import openai

        client = self._client or openai.AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        try:
            resp = await client.chat.completions.create(
                model=self._model,
                temperature=self._temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except openai.APIStatusError as e:
            await ctx.logger.warning("Script generation failed", text=str(e))
            raise StageError(
                f"OpenAI script generation failed: {e.status_code}", stage=self.name
            ) from e
        except openai.OpenAIError as e:
            await ctx.logger.warning("Script generation failed", text=str(e))
            raise StageError(f"OpenAI script generation failed: {e}", stage=self.name) from e

        raw = resp.choices[0].message.content if resp.choices else None
        draft = parse_script(raw or "{}")
        await ctx.logger("Script crafted", draft=draft)
        return draft
