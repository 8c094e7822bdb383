# src/storage/local_writer.py — v3
"""Local filesystem output writer rooted at the deployment data directory."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from reelforge.storage.base_output_writer import BaseOutputWriter


class LocalWriter(BaseOutputWriter):
    """Write documents and artifacts to the local filesystem."""

    def __init__(self, base_path: str | Path | None = None) -> None:
        """Initialize with optional base path.

        Args:
            base_path: Root directory for relative paths. If None, paths are
                used as given.
        """
        self._base = Path(base_path).expanduser() if base_path else None

    @property
    def base_path(self) -> Path | None:
        return self._base

    def resolve(self, path: str) -> Path:
        """Resolve a path relative to base_path."""
        if self._base is not None:
            return self._base / path
        return Path(path)

    async def write(self, path: str, content: bytes | str) -> None:
        """Write to a sibling temp file, then rename over the target."""
        p = self.resolve(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8") if isinstance(content, str) else content
        fd, tmp_name = tempfile.mkstemp(prefix=f".{p.name}.", dir=str(p.parent))
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, p)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def read(self, path: str) -> bytes:
        """Read content from a local file path."""
        return self.resolve(path).read_bytes()

    async def exists(self, path: str) -> bool:
        """Check if a local path exists."""
        return self.resolve(path).exists()

    async def append_line(self, path: str, line: str) -> None:
        """Append a single line, creating the file if needed."""
        p = self.resolve(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("a", encoding="utf-8") as fh:
            fh.write(line.rstrip("\n") + "\n")

    async def ensure_dir(self, path: str) -> Path:
        """Create a directory tree and return it."""
        p = self.resolve(path)
        p.mkdir(parents=True, exist_ok=True)
        return p

    async def list_dir(self, path: str) -> list[str]:
        """List directory contents."""
        p = self.resolve(path)
        if not p.is_dir():
            return []
        return [entry.name for entry in sorted(p.iterdir())]
