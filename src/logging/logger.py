# src/logging/logger.py — v3
"""Service log formatters and the ``reelforge`` logger tree.

Records carry the run id and stage bound in :mod:`reelforge.logging.context`,
so a line emitted deep inside a stage can be traced back to its run without
threading identifiers through every call.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from reelforge.logging.context import get_context

ROOT_LOGGER = "reelforge"

# Third-party loggers that log every request at INFO.
_CHATTY_LIBRARIES = ("httpx", "httpcore", "openai")


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``data`` extras are passed through as-is."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _record_time(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        bound = get_context().as_dict()
        if bound:
            entry["context"] = bound

        payload = getattr(record, "data", None)
        if payload:
            entry["data"] = payload

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line console format, run id shortened to eight characters."""

    def format(self, record: logging.LogRecord) -> str:
        bound = get_context()
        line = (
            f"{_record_time(record):%Y-%m-%d %H:%M:%S} "
            f"[{record.levelname:8s}] {record.name}"
        )
        if bound.run_id:
            line += f" [{bound.run_id[:8]}]"
        if bound.stage:
            line += f" ({bound.stage})"
        return f"{line} - {record.getMessage()}"


def get_logger(name: str) -> logging.Logger:
    """Child of the ``reelforge`` logger; handlers live on the root only."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """Install console (stderr) and optional rotating-file handlers.

    Safe to call repeatedly: earlier handlers are dropped first, so the CLI
    and the HTTP app can both configure logging in one process.

    Args:
        level: Level name; unknown names fall back to INFO.
        log_format: ``"json"`` or ``"text"``.
        log_file: Service log path, or None for console only.
        rotation: Size that triggers a rollover, e.g. ``"10MB"``.
        retention: Rolled-over files kept beside the live log.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        from reelforge.logging.handlers import create_rotating_handler

        service_log = create_rotating_handler(
            str(log_file), rotation=rotation, retention=retention
        )
        service_log.setFormatter(formatter)
        root.addHandler(service_log)

    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
