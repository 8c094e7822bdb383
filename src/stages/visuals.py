# src/stages/visuals.py — v1
"""Visual sourcing: Pexels stock footage first, procedural ffmpeg clip as fallback.

This stage degrades instead of failing. Any problem with the stock path is
logged and a generated clip is produced; the result is tagged with its
provenance ("stock" or "generated").
"""

from __future__ import annotations

import functools
import random
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx

from reelforge.config.settings import Settings
from reelforge.core.models import ScriptDraft, VisualAsset
from reelforge.storage import layout
from reelforge.stages.base import BaseStage, FailurePolicy, RunContext
from reelforge.stages.ffmpeg import run_ffmpeg

PEXELS_SEARCH_ENDPOINT = "https://api.pexels.com/videos/search"

MIN_DURATION_SECONDS = 12
MAX_DURATION_SECONDS = 18

FALLBACK_BASE_COLOR = "#101425"
FALLBACK_TINTS: tuple[str, ...] = ("0x0d0d15", "0x1f2940", "0x14213d", "0x000000")

FfmpegRunner = Callable[[list[str]], Awaitable[None]]


def clamp_duration(seconds: float) -> float:
    """Keep clip length inside the short-form window."""
    return max(MIN_DURATION_SECONDS, min(MAX_DURATION_SECONDS, seconds))


def select_fallback_tint(rng: random.Random) -> str:
    """Pick the accent stripe color of the generated clip."""
    return FALLBACK_TINTS[rng.randrange(len(FALLBACK_TINTS))]


def pick_video_file(data: dict[str, Any]) -> str | None:
    """Return the best portrait file link from a Pexels search response."""
    videos = data.get("videos") or []
    if not videos:
        return None
    files = videos[0].get("video_files") or []
    for f in files:
        if (f.get("height") or 0) >= 1920 and f.get("link"):
            return f["link"]
    return files[0].get("link") if files else None


def procedural_args(target: Path, duration: float, tint: str) -> list[str]:
    """ffmpeg arguments for the generated fallback clip."""
    filters = ",".join(
        [
            "format=yuv420p",
            "noise=alls=14:allf=t+u",
            "eq=contrast=1.15:brightness=0.03:saturation=1.6",
            f"drawbox=x=(iw/2-4):y=0:w=8:h=ih:color={tint}:t=fill",
            "vignette=PI/4",
            f"hue=h=90*sin(2*PI*t/{duration:g})",
        ]
    )
    return [
        "-f", "lavfi",
        "-i", f"color=c={FALLBACK_BASE_COLOR}:size=1080x1920:rate=60:d={duration:g}",
        "-vf", filters,
        "-t", f"{duration:g}",
        "-preset", "ultrafast",
        "-r", "60",
        "-pix_fmt", "yuv420p",
        str(target),
    ]


def normalize_args(source: Path, target: Path, duration: float) -> list[str]:
    """ffmpeg arguments to fit stock footage into a silent 1080x1920 frame."""
    return [
        "-i", str(source),
        "-vf",
        "scale=1080:1920:force_original_aspect_ratio=decrease,"
        "pad=1080:1920:(ow-iw)/2:(oh-ih)/2:black",
        "-t", f"{duration:g}",
        "-an",
        "-preset", "veryfast",
        str(target),
    ]


class VisualSourcer(BaseStage):
    """Produce the background video sequence."""

    name = "visuals"
    policy = FailurePolicy.DEGRADES

    def __init__(
        self,
        settings: Settings,
        rng: random.Random | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        ffmpeg: FfmpegRunner | None = None,
    ) -> None:
        self._api_key = settings.pexels_api_key
        self._timeout = settings.http_timeout_seconds
        self._download_timeout = settings.upload_timeout_seconds
        self._rng = rng or random.Random(settings.fallback_seed)
        self._transport = transport
        self._ffmpeg = ffmpeg or functools.partial(run_ffmpeg, binary=settings.ffmpeg_path)

    async def __call__(self, ctx: RunContext, script: ScriptDraft) -> VisualAsset:
        target = ctx.path(layout.VISUALS_DIR, "sequence.mp4")
        duration = clamp_duration(script.estimated_duration_seconds)

        if self._api_key:
            try:
                if await self._from_stock(ctx, target, duration):
                    await ctx.logger("Visual sequence built from stock footage", target=str(target))
                    return VisualAsset(path=str(target), duration_seconds=duration, source="stock")
                await ctx.logger.warning("No stock footage matched, falling back")
            except Exception as e:  # noqa: BLE001
                await ctx.logger.warning("Stock video fetch failed, falling back", error=str(e))
        else:
            await ctx.logger.warning("PEXELS_API_KEY missing, falling back to generated visuals")

        tint = select_fallback_tint(self._rng)
        await self._ffmpeg(procedural_args(target, duration, tint))
        await ctx.logger("Visual sequence generated procedurally", target=str(target), tint=tint)
        return VisualAsset(path=str(target), duration_seconds=duration, source="generated")

    async def _from_stock(self, ctx: RunContext, target: Path, duration: float) -> bool:
        headers = {"Authorization": self._api_key}
        params = {
            "orientation": "portrait",
            "per_page": "5",
            "query": f"{ctx.config.video_style} technology",
        }
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport, follow_redirects=True
        ) as client:
            response = await client.get(PEXELS_SEARCH_ENDPOINT, params=params, headers=headers)
            if response.status_code >= 400:
                raise ValueError(f"Pexels API error {response.status_code}")
            link = pick_video_file(response.json())
            if not link:
                return False

            stock_path = target.with_name("stock.mp4")
            download = await client.get(link, headers=headers, timeout=self._download_timeout)
            if download.status_code >= 400:
                raise ValueError(f"Failed downloading asset: {download.status_code}")
            stock_path.write_bytes(download.content)

        await self._ffmpeg(normalize_args(stock_path, target, duration))
        return True
