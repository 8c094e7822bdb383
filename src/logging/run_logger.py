# src/logging/run_logger.py — v2
"""Per-run structured event sink.

Every event is appended as one JSON object to ``runs/<run_id>/log.ndjson``
and mirrored to the ``reelforge.run`` logger. One RunLogger lives exactly as
long as one run; stages receive it through the RunContext. A failed append
is counted and reported on the service log, and never aborts the run.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from reelforge.logging.logger import get_logger
from reelforge.storage.base_output_writer import BaseOutputWriter

logger = get_logger("run")


class RunLogger:
    """Append-only NDJSON event log for a single run."""

    def __init__(self, writer: BaseOutputWriter, log_path: str | Path, run_id: str) -> None:
        self._writer = writer
        self._log_path = str(log_path)
        self.run_id = run_id
        self.events_written = 0
        self.write_failures = 0

    @property
    def log_path(self) -> str:
        return self._log_path

    async def __call__(self, message: str, **context: Any) -> None:
        await self.event(message, level=logging.INFO, **context)

    async def warning(self, message: str, **context: Any) -> None:
        await self.event(message, level=logging.WARNING, **context)

    async def event(self, message: str, level: int = logging.INFO, **context: Any) -> None:
        """Record one timestamped event."""
        record: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "message": message,
        }
        if level >= logging.WARNING:
            record["level"] = logging.getLevelName(level)
        record.update(context)

        line = json.dumps(record, default=_json_default, ensure_ascii=False)
        try:
            await self._writer.append_line(self._log_path, line)
        except OSError as e:
            # The service log still receives the event below.
            self.write_failures += 1
            logger.warning("Could not append to %s: %s", self._log_path, e)
        else:
            self.events_written += 1

        logger.log(level, message, extra={"data": context} if context else None)


def _json_default(value: Any) -> Any:
    """Serialize pydantic models, paths and datetimes inside event payloads."""
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


async def read_events(writer: BaseOutputWriter, log_path: str | Path) -> list[dict[str, Any]]:
    """Load all events of a run log (used by the CLI and tests)."""
    if not await writer.exists(str(log_path)):
        return []
    raw = (await writer.read(str(log_path))).decode("utf-8")
    return [json.loads(line) for line in raw.splitlines() if line.strip()]
