# src/logging/handlers.py — v3
"""Rotating handler for the long-lived service log (``logs/reelforge.log``)."""

from __future__ import annotations

import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_SIZE_RE = re.compile(r"^(?P<amount>\d+)\s*(?P<unit>B|KB|MB|GB)?$", re.IGNORECASE)
_UNIT_BYTES = {"B": 1, "KB": 1 << 10, "MB": 1 << 20, "GB": 1 << 30}


def parse_size(size_str: str) -> int:
    """Bytes for a human size like ``'10MB'``, ``'512kb'`` or a bare ``'2048'``."""
    found = _SIZE_RE.match(size_str.strip())
    if found is None:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    unit = (found.group("unit") or "B").upper()
    return int(found.group("amount")) * _UNIT_BYTES[unit]


def create_rotating_handler(
    log_file: str,
    rotation: str = "10MB",
    retention: int = 30,
) -> RotatingFileHandler:
    """Handler rolling ``log_file`` over at ``rotation``, keeping ``retention`` backups.

    The logs directory is created up front; the file itself only appears once
    something is logged.
    """
    target = Path(log_file).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(target),
        maxBytes=parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
        delay=True,
    )
