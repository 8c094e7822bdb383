# src/storage/layout.py — v2
"""Data-root directory structure.

All paths are relative to Settings.data_root:

    config.json
    runs/history.json
    runs/latest.json
    runs/<run_id>/log.ndjson
    runs/<run_id>/voiceovers/voiceover.mp3
    runs/<run_id>/visuals/{stock,sequence}.mp4
    runs/<run_id>/{captions.srt,short.mp4,thumbnail.jpg}
"""

from __future__ import annotations

from pathlib import PurePosixPath

CONFIG_FILE = "config.json"
RUNS_DIR = "runs"
HISTORY_FILE = f"{RUNS_DIR}/history.json"
LATEST_FILE = f"{RUNS_DIR}/latest.json"

RUN_LOG = "log.ndjson"
VOICEOVERS_DIR = "voiceovers"
VISUALS_DIR = "visuals"


def run_dir(run_id: str) -> str:
    """Return the relative directory owned by one run."""
    return str(PurePosixPath(RUNS_DIR) / run_id)


def run_log_path(run_id: str) -> str:
    return str(PurePosixPath(run_dir(run_id)) / RUN_LOG)
