# src/pipeline/providers.py — v1
"""The set of stage providers one orchestrator drives."""

from __future__ import annotations

import random
from dataclasses import dataclass, fields

from reelforge.config.settings import Settings
from reelforge.stages.base import BaseStage


@dataclass
class StageProviders:
    """One provider per production stage."""

    research: BaseStage
    script: BaseStage
    voice: BaseStage
    visuals: BaseStage
    render: BaseStage
    thumbnail: BaseStage
    metadata: BaseStage
    publish: BaseStage

    @classmethod
    def from_settings(cls, settings: Settings, rng: random.Random | None = None) -> StageProviders:
        """Build the production providers.

        Args:
            settings: Application settings (credentials, tooling, timeouts).
            rng: Random source for degraded selections. Seeded from
                ``settings.fallback_seed`` when omitted.
        """
        from reelforge.stages.metadata import MetadataBuilder
        from reelforge.stages.publish import YouTubePublisher
        from reelforge.stages.render import ThumbnailRenderer, VideoRenderer
        from reelforge.stages.research import TopicResearcher
        from reelforge.stages.script import ScriptWriter
        from reelforge.stages.visuals import VisualSourcer
        from reelforge.stages.voice import VoiceSynthesizer

        rng = rng or random.Random(settings.fallback_seed)
        return cls(
            research=TopicResearcher(settings, rng=rng),
            script=ScriptWriter(settings),
            voice=VoiceSynthesizer(settings),
            visuals=VisualSourcer(settings, rng=rng),
            render=VideoRenderer(settings),
            thumbnail=ThumbnailRenderer(settings),
            metadata=MetadataBuilder(settings),
            publish=YouTubePublisher(settings),
        )

    def policies(self) -> dict[str, str]:
        """Stage name to failure policy, for diagnostics."""
        return {
            getattr(self, f.name).name: getattr(self, f.name).policy.value
            for f in fields(self)
        }
