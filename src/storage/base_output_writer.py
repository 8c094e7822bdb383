# src/storage/base_output_writer.py — v3
"""Storage seam used by the config store, run store and per-run event logs.

Paths are relative to the data root (``config.json``,
``runs/<id>/log.ndjson``); backends decide where that root lives.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class BaseOutputWriter(ABC):

    @abstractmethod
    async def write(self, path: str, content: bytes | str) -> None:
        """Replace ``path`` so readers never observe a half-written document."""

    @abstractmethod
    async def read(self, path: str) -> bytes:
        """Raw bytes of ``path``; a missing file raises ``FileNotFoundError``."""

    @abstractmethod
    async def exists(self, path: str) -> bool: ...

    @abstractmethod
    async def append_line(self, path: str, line: str) -> None:
        """Add ``line`` plus a newline at the end of ``path``, creating it if absent."""

    @abstractmethod
    async def ensure_dir(self, path: str) -> Path:
        """Create the run working directory (or any other) and return it."""

    @abstractmethod
    async def list_dir(self, path: str) -> list[str]:
        """Sorted entry names under ``path``; empty when it is not a directory."""
