# src/stages/render.py — v1
"""Final video assembly and thumbnail rendering with ffmpeg.

Captions are derived from the script: one SRT cue per sentence, timed
proportionally to word count over the clamped clip length.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from pathlib import Path

from reelforge.config.brand import BrandConfig
from reelforge.config.settings import Settings
from reelforge.core.models import ScriptDraft, ThumbnailAsset, VisualAsset, VoiceoverAsset
from reelforge.stages.base import BaseStage, FailurePolicy, RunContext
from reelforge.stages.ffmpeg import escape_filter_value, run_ffmpeg
from reelforge.stages.script import strip_stage_directions
from reelforge.stages.visuals import FfmpegRunner, clamp_duration

MIN_CAPTION_SECONDS = 1.5

_SENTENCE_END = re.compile(r"[.!?]")


@dataclass(frozen=True)
class CaptionSegment:
    text: str
    duration: float


def chunk_script(script: ScriptDraft) -> list[CaptionSegment]:
    """Split the script into sentence-sized caption segments."""
    text = " ".join([script.hook, script.body, script.outro])
    lines = [line.strip() for line in _SENTENCE_END.split(text) if line.strip()]
    if not lines:
        return []

    total_words = sum(len(line.split()) for line in lines)
    seconds = clamp_duration(script.estimated_duration_seconds)
    words_per_second = total_words / seconds

    return [
        CaptionSegment(
            text=line,
            duration=max(MIN_CAPTION_SECONDS, len(line.split()) / words_per_second),
        )
        for line in lines
    ]


def srt_timestamp(value: float) -> str:
    """Format seconds as ``HH:MM:SS,mmm``."""
    millis_total = int(value * 1000)
    hours, rem = divmod(millis_total, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    seconds, millis = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{millis:03d}"


def build_srt(script: ScriptDraft) -> str:
    """Render the caption track, with stage directions removed."""
    rows: list[str] = []
    cursor = 0.0
    for index, segment in enumerate(chunk_script(script), start=1):
        start, cursor = cursor, cursor + segment.duration
        rows.append(
            f"{index}\n{srt_timestamp(start)} --> {srt_timestamp(cursor)}\n"
            f"{strip_stage_directions(segment.text)}\n"
        )
    return "\n".join(rows)


def build_filter_complex(config: BrandConfig, captions_file: Path) -> str:
    """Brand-styled video filter graph with burned-in subtitles."""
    accent = config.ffmpeg_color("accent_color")
    brand = config.ffmpeg_color("brand_color")
    saturation = 1 if config.video_style == "minimal-future" else 1.35
    return "".join(
        [
            "[0:v]fps=60,format=yuv420p,"
            "scale=1080:1920:force_original_aspect_ratio=decrease,"
            "pad=1080:1920:(ow-iw)/2:(oh-ih)/2:black,"
            "eq=contrast=1.1:saturation=1.35:brightness=0.03,split[vbase][vbuf];",
            "[vbuf]tblend=all_mode='screen',format=rgba,"
            "curves=r='0/0 0.35/0.6 0.6/0.9 1/1',"
            f"hue=s={saturation}:H=10*sin(0.7*PI*t)[vglitch];",
            "[vbase][vglitch]blend=all_mode='lighten':all_opacity=0.18,"
            f"drawbox=x=0:y=(mod(t*40,30))*10:w=1080:h=3:color={accent}@0.6,"
            f"drawbox=x=40:y=40:w=6:h=160:color={brand}@0.75,"
            f"drawbox=x=1034:y=1400:w=20:h=200:color={accent}@0.6[vstyled];",
            f"[vstyled]subtitles='{escape_filter_value(str(captions_file))}'"
            ":force_style='FontName=Montserrat,FontSize=52,PrimaryColour=&H00FFFFFF&,"
            "OutlineColour=&H00252525&,Outline=3,Shadow=0,MarginV=90,Alignment=10'[vout]",
        ]
    )


def _drawtext(text: str, font: str, font_file: str, y: str, size: int, color: str) -> str:
    source = (
        f"fontfile='{escape_filter_value(font_file)}'" if font_file else f"font={font}"
    )
    return (
        f"drawtext={source}:text='{escape_filter_value(text)}':"
        f"x=(w-text_w)/2:y={y}:fontsize={size}:fontcolor={color}"
    )


def build_thumbnail_filter(config: BrandConfig, script: ScriptDraft, font_file: str = "") -> str:
    """Frame crop, brand tint, uppercase hook and tagline."""
    hook_text = strip_stage_directions(script.hook).upper()
    hook = _drawtext(hook_text, "Montserrat-Bold", font_file, "H*0.2", 96, "white")
    hook += ":shadowcolor=0x000000AA:shadowx=10:shadowy=10"
    tagline = _drawtext(
        config.tagline,
        "Montserrat-SemiBold",
        font_file,
        "H*0.8",
        48,
        f"{config.ffmpeg_color('accent_color')}FF",
    )
    return ",".join(
        [
            "scale=1080:1920:force_original_aspect_ratio=increase,crop=1080:1920",
            f"drawbox=x=0:y=0:w=1080:h=1920:color={config.ffmpeg_color('brand_color')}@0.15:t=fill",
            hook,
            tagline,
        ]
    )


class VideoRenderer(BaseStage):
    """Mux visuals, narration and captions into the final short."""

    name = "render"
    policy = FailurePolicy.FATAL

    def __init__(self, settings: Settings, ffmpeg: FfmpegRunner | None = None) -> None:
        self._ffmpeg = ffmpeg or functools.partial(run_ffmpeg, binary=settings.ffmpeg_path)

    async def __call__(
        self,
        ctx: RunContext,
        visual: VisualAsset,
        voice: VoiceoverAsset,
        script: ScriptDraft,
    ) -> str:
        output = ctx.path("short.mp4")
        captions = ctx.path("captions.srt")
        captions.write_text(build_srt(script), encoding="utf-8")

        await self._ffmpeg(
            [
                "-i", visual.path,
                "-i", voice.path,
                "-filter_complex", build_filter_complex(ctx.config, captions),
                "-map", "[vout]",
                "-map", "1:a:0",
                "-shortest",
                "-c:v", "libx264",
                "-preset", "veryfast",
                "-pix_fmt", "yuv420p",
                "-c:a", "aac",
                "-b:a", "192k",
                "-movflags", "+faststart",
                str(output),
            ]
        )
        await ctx.logger("Video assembled", output_path=str(output))
        return str(output)


class ThumbnailRenderer(BaseStage):
    """Grab the first frame of the short and brand it."""

    name = "thumbnail"
    policy = FailurePolicy.FATAL

    def __init__(self, settings: Settings, ffmpeg: FfmpegRunner | None = None) -> None:
        self._font_file = settings.thumbnail_font_file
        self._ffmpeg = ffmpeg or functools.partial(run_ffmpeg, binary=settings.ffmpeg_path)

    async def __call__(self, ctx: RunContext, video_path: str, script: ScriptDraft) -> ThumbnailAsset:
        output = ctx.path("thumbnail.jpg")
        await self._ffmpeg(
            [
                "-i", video_path,
                "-vframes", "1",
                "-vf", build_thumbnail_filter(ctx.config, script, self._font_file),
                str(output),
            ]
        )
        await ctx.logger("Thumbnail generated", output_path=str(output))
        return ThumbnailAsset(path=str(output))
