# src/stages/metadata.py — v1
"""Upload metadata: title, description, hashtags, keywords and schedule."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable

from reelforge.config.settings import Settings
from reelforge.core.models import ScriptDraft, TopicIdea, UploadMetadata
from reelforge.stages.base import BaseStage, FailurePolicy, RunContext
from reelforge.stages.script import strip_stage_directions

BASE_HASHTAGS = ["#AI", "#FutureTech", "#Innovation", "#TechNews", "#Shorts"]
EXTRA_KEYWORDS = ["AI facts", "robotics", "quantum computing", "future technology"]


def unique(items: Iterable[str]) -> list[str]:
    """Order-preserving dedupe."""
    return list(dict.fromkeys(items))


class MetadataBuilder(BaseStage):
    """Build upload metadata from the topic and script. Pure, no I/O."""

    name = "metadata"
    policy = FailurePolicy.FATAL

    def __init__(self, settings: Settings, clock=None) -> None:
        self._delay = timedelta(minutes=settings.publish_delay_minutes)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def __call__(self, ctx: RunContext, topic: TopicIdea, script: ScriptDraft) -> UploadMetadata:
        metadata = self.build(ctx, topic, script)
        await ctx.logger("Upload metadata built", title=metadata.title)
        return metadata

    def build(self, ctx: RunContext, topic: TopicIdea, script: ScriptDraft) -> UploadMetadata:
        config = ctx.config
        now = self._clock()
        hashtags = unique([*BASE_HASHTAGS, *config.hashtags])

        description = "\n".join(
            [
                f"{config.channel_name} | {config.tagline}",
                "",
                f"Hook: {strip_stage_directions(script.hook)}",
                "Sources:",
                *(f"• {source.title}: {source.url}" for source in topic.sources),
                "",
                f"#shorts {' '.join(hashtags)}",
            ]
        )

        return UploadMetadata(
            title=f"{topic.title} 🚀 ({now.date().isoformat()})",
            description=description,
            hashtags=hashtags,
            keywords=unique([*config.keywords, *EXTRA_KEYWORDS]),
            scheduled_at=now + self._delay,
        )
