# src/stages/ffmpeg.py — v1
"""Async ffmpeg invocation shared by the visual, render and thumbnail stages."""

from __future__ import annotations

import asyncio
import logging

from reelforge.core.errors import FfmpegError

logger = logging.getLogger(__name__)

_STDERR_TAIL = 800


async def run_ffmpeg(args: list[str], binary: str = "ffmpeg") -> None:
    """Run ``ffmpeg -y <args>`` and wait for it to finish.

    Raises:
        FfmpegError: If the binary is missing or exits non-zero.
    """
    cmd = [binary, "-y", *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise FfmpegError(f"ffmpeg not found at {binary!r}") from e

    _, stderr = await proc.communicate()
    if proc.returncode != 0:
        tail = stderr.decode("utf-8", errors="replace")[-_STDERR_TAIL:]
        raise FfmpegError(
            f"ffmpeg exited with code {proc.returncode}: {tail.strip()}",
            returncode=proc.returncode,
        )


def escape_filter_value(value: str) -> str:
    """Escape single quotes for use inside a quoted ffmpeg filter argument."""
    return value.replace("'", "\\'")
