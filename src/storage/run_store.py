# src/storage/run_store.py — v2
"""Durable run history: a bounded newest-first list plus a latest pointer.

History is append-only. Each append prepends the record, evicts the oldest
entries beyond the limit, persists history.json, then persists latest.json.
"""

from __future__ import annotations

import asyncio
import json
import logging

from pydantic import ValidationError

from reelforge.core.models import RunRecord
from reelforge.storage import layout
from reelforge.storage.base_output_writer import BaseOutputWriter

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 30


class RunStore:
    """JSON-document run store under the data root.

    Appends within one process are serialized by a lock; separate processes
    sharing a data root must not run concurrently.
    """

    def __init__(
        self,
        writer: BaseOutputWriter,
        max_history: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        if max_history < 1:
            raise ValueError("max_history must be >= 1")
        self._writer = writer
        self._max_history = max_history
        self._lock = asyncio.Lock()

    @property
    def max_history(self) -> int:
        return self._max_history

    async def append(self, record: RunRecord) -> None:
        """Prepend a finalized record and update the latest pointer."""
        async with self._lock:
            history = await self.get_history()
            history.insert(0, record)
            evicted = len(history) - self._max_history
            if evicted > 0:
                logger.debug("Evicting %d oldest run(s) from history", evicted)
            history = history[: self._max_history]

            payload = json.dumps(
                [r.model_dump(mode="json") for r in history], indent=2, ensure_ascii=False
            )
            await self._writer.write(layout.HISTORY_FILE, payload)
            await self._writer.write(
                layout.LATEST_FILE, record.model_dump_json(indent=2)
            )

        logger.info(
            "Run %s recorded (status=%s, history=%d)",
            record.id, record.status, len(history),
        )

    async def get_latest(self) -> RunRecord | None:
        """Return the most recently appended record, if any."""
        raw = await self._read_json(layout.LATEST_FILE)
        if not raw:
            return None
        try:
            return RunRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning("Ignoring unreadable latest run: %s", e)
            return None

    async def get_history(self) -> list[RunRecord]:
        """Return the full bounded history, newest first."""
        raw = await self._read_json(layout.HISTORY_FILE)
        if not isinstance(raw, list):
            return []

        records: list[RunRecord] = []
        for item in raw:
            try:
                records.append(RunRecord.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping malformed history entry: %s", e)
        return records

    async def _read_json(self, path: str) -> object:
        if not await self._writer.exists(path):
            return None
        try:
            return json.loads(await self._writer.read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable %s: %s", path, e)
            return None
