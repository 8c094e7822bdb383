# src/storage/run_manager.py — v2
"""Run lifecycle helpers: run id generation and per-run workspace setup."""

from __future__ import annotations

import uuid
from pathlib import Path

from reelforge.logging.run_logger import RunLogger
from reelforge.storage import layout
from reelforge.storage.base_output_writer import BaseOutputWriter


def generate_run_id() -> str:
    """Generate a unique run identifier (uuid4)."""
    return str(uuid.uuid4())


async def create_run(writer: BaseOutputWriter, run_id: str) -> tuple[Path, RunLogger]:
    """Create the run's working directory and its event sink.

    The directory is owned by this run id and is never reused.

    Returns:
        Tuple of (workdir, run_logger).
    """
    workdir = await writer.ensure_dir(layout.run_dir(run_id))
    run_logger = RunLogger(writer, layout.run_log_path(run_id), run_id)
    return workdir, run_logger
