# tests/conftest.py — v2
"""Shared test fixtures for all unit tests.

Provides settings isolated from .env, stores on tmp_path, sample artifacts
and scripted stage providers. No network, no ffmpeg, no OpenAI.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from reelforge.config.brand import DEFAULT_BRAND, BrandConfig
from reelforge.config.settings import Settings
from reelforge.core.models import (
    RunRecord,
    ScriptDraft,
    ThumbnailAsset,
    TopicIdea,
    TopicSource,
    UploadMetadata,
    UploadResult,
    VisualAsset,
    VoiceoverAsset,
)
from reelforge.logging.run_logger import RunLogger
from reelforge.pipeline.providers import StageProviders
from reelforge.stages.base import BaseStage, FailurePolicy, RunContext
from reelforge.storage.config_store import BrandConfigStore
from reelforge.storage.local_writer import LocalWriter
from reelforge.storage.run_store import RunStore


# ---------------------------------------------------------------------------
# Settings and stores
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with no credentials, rooted in tmp_path."""
    return Settings(_env_file=None, data_root=tmp_path / "data", fallback_seed=7)


@pytest.fixture
def writer(settings: Settings) -> LocalWriter:
    return LocalWriter(settings.data_root)


@pytest.fixture
def config_store(writer: LocalWriter) -> BrandConfigStore:
    return BrandConfigStore(writer)


@pytest.fixture
def run_store(writer: LocalWriter) -> RunStore:
    return RunStore(writer, max_history=30)


@pytest.fixture
def brand_config() -> BrandConfig:
    return BrandConfig.model_validate(DEFAULT_BRAND)


@pytest.fixture
def run_context(tmp_path: Path, writer: LocalWriter, brand_config: BrandConfig) -> RunContext:
    run_id = "run-under-test"
    workdir = tmp_path / "data" / "runs" / run_id
    workdir.mkdir(parents=True)
    return RunContext(
        config=brand_config,
        run_id=run_id,
        workdir=workdir,
        logger=RunLogger(writer, f"runs/{run_id}/log.ndjson", run_id),
    )


# ---------------------------------------------------------------------------
# Sample artifacts
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_topic() -> TopicIdea:
    return TopicIdea(
        title="Chip startup ships photonic inference card",
        summary="Light-based accelerator cuts inference latency in half.",
        angle="Speed of light meets speed of hype.",
        sources=[
            TopicSource(title="The Verge", url="https://www.theverge.com/a"),
            TopicSource(title="Ars Technica", url="https://arstechnica.com/b"),
        ],
    )


@pytest.fixture
def sample_script() -> ScriptDraft:
    return ScriptDraft(
        hook="LIGHT JUST BEAT SILICON. [SFX: zap]",
        body="A photonic card runs models twice as fast. Power draw drops by half.",
        outro="Would you trust a laser brain?",
        full_script=(
            "LIGHT JUST BEAT SILICON. [SFX: zap] A photonic card runs models "
            "twice as fast. Power draw drops by half. Would you trust a laser brain?"
        ),
        estimated_duration_seconds=14,
    )


def make_record(run_id: str, status: str = "success", minute: int = 0) -> RunRecord:
    """Build a minimal finalized record."""
    started = datetime(2026, 3, 1, 9, minute, tzinfo=timezone.utc)
    return RunRecord(
        id=run_id,
        started_at=started,
        completed_at=started,
        status=status,
        error=None if status == "success" else "boom",
    )


@pytest.fixture
def record_factory():
    return make_record


# ---------------------------------------------------------------------------
# Scripted stage providers
# ---------------------------------------------------------------------------

class ScriptedStage(BaseStage):
    """Stage that returns a canned artifact (or raises) and records its calls."""

    def __init__(
        self,
        name: str,
        result: Any = None,
        error: Exception | None = None,
        policy: FailurePolicy = FailurePolicy.FATAL,
    ) -> None:
        self.name = name
        self.policy = policy
        self.result = result
        self.error = error
        self.calls: list[tuple[Any, ...]] = []

    async def __call__(self, ctx: RunContext, *inputs: Any) -> Any:
        self.calls.append(inputs)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def scripted_stage():
    return ScriptedStage


@pytest.fixture
def happy_providers(sample_topic: TopicIdea, sample_script: ScriptDraft) -> StageProviders:
    """Providers that all succeed, publishing to a reachable watch URL."""
    return StageProviders(
        research=ScriptedStage("research", sample_topic, policy=FailurePolicy.DEGRADES),
        script=ScriptedStage("script", sample_script),
        voice=ScriptedStage(
            "voice", VoiceoverAsset(path="/tmp/voiceover.mp3", duration_seconds=14)
        ),
        visuals=ScriptedStage(
            "visuals",
            VisualAsset(path="/tmp/sequence.mp4", duration_seconds=14, source="generated"),
            policy=FailurePolicy.DEGRADES,
        ),
        render=ScriptedStage("render", "/tmp/short.mp4"),
        thumbnail=ScriptedStage("thumbnail", ThumbnailAsset(path="/tmp/thumbnail.jpg")),
        metadata=ScriptedStage(
            "metadata",
            UploadMetadata(
                title="Chip startup ships photonic inference card",
                description="desc",
                scheduled_at=datetime(2026, 3, 1, 10, tzinfo=timezone.utc),
            ),
        ),
        publish=ScriptedStage(
            "publish",
            UploadResult(video_id="abc123", watch_url="https://youtube.com/shorts/abc123"),
            policy=FailurePolicy.ABSORBED,
        ),
    )


@pytest.fixture(autouse=True)
def _reset_reelforge_logging():
    """Keep handlers installed by setup_logging() from leaking across tests."""
    yield
    logging.getLogger("reelforge").handlers.clear()
