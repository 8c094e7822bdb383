# tests/unit/logging/test_run_logger.py — v2
"""Tests for logging/run_logger.py — per-run NDJSON event sink."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import pytest

from reelforge.logging.run_logger import RunLogger, read_events
from reelforge.storage.local_writer import LocalWriter


@pytest.fixture
def run_logger(tmp_path) -> RunLogger:
    return RunLogger(LocalWriter(tmp_path), "runs/r1/log.ndjson", "r1")


class TestRunLogger:
    @pytest.mark.asyncio
    async def test_appends_one_line_per_event(self, tmp_path, run_logger):
        await run_logger("Run started")
        await run_logger("Stage started", stage="script")

        lines = (tmp_path / "runs" / "r1" / "log.ndjson").read_text().splitlines()
        assert len(lines) == 2
        assert run_logger.events_written == 2
        first, second = (json.loads(line) for line in lines)
        assert first["message"] == "Run started"
        assert "timestamp" in first
        assert "level" not in first
        assert second["stage"] == "script"

    @pytest.mark.asyncio
    async def test_warning_level_recorded(self, tmp_path, run_logger):
        await run_logger.warning("Upload failed", error="401")
        events = await read_events(LocalWriter(tmp_path), run_logger.log_path)
        assert events == [
            {"timestamp": events[0]["timestamp"], "message": "Upload failed",
             "level": "WARNING", "error": "401"}
        ]

    @pytest.mark.asyncio
    async def test_serializes_models_and_datetimes(self, tmp_path, run_logger, sample_topic):
        when = datetime(2026, 3, 1, 9, tzinfo=timezone.utc)
        await run_logger("Trending topic selected", topic=sample_topic, at=when)
        events = await read_events(LocalWriter(tmp_path), run_logger.log_path)
        assert events[0]["topic"]["title"] == sample_topic.title
        assert events[0]["at"] == "2026-03-01T09:00:00+00:00"

    @pytest.mark.asyncio
    async def test_mirrors_to_service_log(self, run_logger, caplog):
        with caplog.at_level(logging.INFO, logger="reelforge.run"):
            await run_logger("Voiceover generated", path="/tmp/v.mp3")
        assert caplog.records[-1].getMessage() == "Voiceover generated"
        assert caplog.records[-1].data == {"path": "/tmp/v.mp3"}

    @pytest.mark.asyncio
    async def test_read_missing_log(self, tmp_path):
        assert await read_events(LocalWriter(tmp_path), "runs/none/log.ndjson") == []

    @pytest.mark.asyncio
    async def test_failed_append_does_not_raise(self, tmp_path, caplog):
        class FullDisk(LocalWriter):
            async def append_line(self, path: str, line: str) -> None:
                raise OSError(28, "No space left on device")

        events = RunLogger(FullDisk(tmp_path), "runs/r1/log.ndjson", "r1")
        with caplog.at_level(logging.INFO, logger="reelforge.run"):
            await events("Stage started", stage="render")

        assert events.events_written == 0
        assert events.write_failures == 1
        messages = [r.getMessage() for r in caplog.records]
        assert any("No space left" in m for m in messages)
        assert messages[-1] == "Stage started"
