# tests/unit/stages/test_render.py — v1
"""Tests for stages/render.py — captions, filter graphs and ffmpeg calls."""

from __future__ import annotations

from pathlib import Path

import pytest

from reelforge.core.models import ScriptDraft, VisualAsset, VoiceoverAsset
from reelforge.stages.render import (
    MIN_CAPTION_SECONDS,
    ThumbnailRenderer,
    VideoRenderer,
    build_filter_complex,
    build_srt,
    build_thumbnail_filter,
    chunk_script,
    srt_timestamp,
)


class RecordingFfmpeg:
    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    async def __call__(self, args: list[str]) -> None:
        self.calls.append(args)
        Path(args[-1]).write_bytes(b"out")


class TestCaptions:
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "00:00:00,000"), (1.5, "00:00:01,500"), (3661.25, "01:01:01,250")],
    )
    def test_srt_timestamp(self, seconds, expected):
        assert srt_timestamp(seconds) == expected

    def test_chunk_per_sentence(self, sample_script):
        segments = chunk_script(sample_script)
        assert [s.text for s in segments][:2] == [
            "LIGHT JUST BEAT SILICON",
            "[SFX: zap] A photonic card runs models twice as fast",
        ]
        assert all(s.duration >= MIN_CAPTION_SECONDS for s in segments)

    def test_chunk_empty_script(self):
        draft = ScriptDraft(hook="", body="", outro="", full_script="")
        assert chunk_script(draft) == []

    def test_srt_strips_directions(self, sample_script):
        srt = build_srt(sample_script)
        assert srt.startswith("1\n00:00:00,000 --> ")
        assert "[SFX" not in srt
        assert "A photonic card runs models twice as fast" in srt

    def test_srt_cues_are_contiguous(self, sample_script):
        cues = [block.splitlines()[1] for block in build_srt(sample_script).split("\n\n")]
        for previous, current in zip(cues, cues[1:]):
            assert previous.split(" --> ")[1] == current.split(" --> ")[0]


class TestFilters:
    def test_filter_complex_uses_brand_colors(self, brand_config, tmp_path):
        graph = build_filter_complex(brand_config, tmp_path / "captions.srt")
        assert "color=0xFF2E63@0.6" in graph
        assert "color=0x12F7FF@0.75" in graph
        assert graph.endswith("[vout]")
        assert f"subtitles='{tmp_path / 'captions.srt'}'" in graph

    def test_thumbnail_filter(self, brand_config, sample_script):
        vf = build_thumbnail_filter(brand_config, sample_script)
        assert "text='LIGHT JUST BEAT SILICON.'" in vf
        assert "font=Montserrat-Bold" in vf
        assert "Daily neural jolts about tomorrow." in vf

    def test_thumbnail_filter_font_file(self, brand_config, sample_script):
        vf = build_thumbnail_filter(brand_config, sample_script, "/fonts/M.ttf")
        assert "fontfile='/fonts/M.ttf'" in vf


class TestVideoRenderer:
    @pytest.mark.asyncio
    async def test_renders_short(self, settings, run_context, sample_script):
        ffmpeg = RecordingFfmpeg()
        visual = VisualAsset(path="/in/sequence.mp4", duration_seconds=14, source="stock")
        voice = VoiceoverAsset(path="/in/voiceover.mp3", duration_seconds=14)

        video_path = await VideoRenderer(settings, ffmpeg=ffmpeg)(
            run_context, visual, voice, sample_script
        )

        assert video_path == str(run_context.workdir / "short.mp4")
        assert (run_context.workdir / "captions.srt").read_text().startswith("1\n")
        args = ffmpeg.calls[0]
        assert args[:4] == ["-i", "/in/sequence.mp4", "-i", "/in/voiceover.mp3"]
        assert "-shortest" in args


class TestThumbnailRenderer:
    @pytest.mark.asyncio
    async def test_renders_first_frame(self, settings, run_context, sample_script):
        ffmpeg = RecordingFfmpeg()
        thumb = await ThumbnailRenderer(settings, ffmpeg=ffmpeg)(
            run_context, "/out/short.mp4", sample_script
        )
        assert thumb.path == str(run_context.workdir / "thumbnail.jpg")
        assert ffmpeg.calls[0][:4] == ["-i", "/out/short.mp4", "-vframes", "1"]
