# src/storage/config_store.py — v1
"""Brand configuration persistence: get, upsert and the run precondition guard."""

from __future__ import annotations

import json
import logging
from typing import Any

from reelforge.config.brand import DEFAULT_BRAND, BrandConfig
from reelforge.core.errors import ConfigMissingError
from reelforge.storage import layout
from reelforge.storage.base_output_writer import BaseOutputWriter

logger = logging.getLogger(__name__)

CONFIG_MISSING_MESSAGE = (
    "Brand configuration missing. Please set brand color, tone, and video style once."
)


class BrandConfigStore:
    """Singleton brand config stored as config.json under the data root."""

    def __init__(self, writer: BaseOutputWriter) -> None:
        self._writer = writer

    async def get(self) -> BrandConfig | None:
        """Return the saved config, or None if nothing was saved yet."""
        if not await self._writer.exists(layout.CONFIG_FILE):
            return None
        raw = json.loads(await self._writer.read(layout.CONFIG_FILE) or b"{}")
        if not raw:
            return None
        return BrandConfig.model_validate(raw)

    async def upsert(self, partial: dict[str, Any]) -> BrandConfig:
        """Merge partial over the stored config (or defaults) and persist.

        Raises:
            pydantic.ValidationError: If the merged config is invalid.
        """
        current = await self.get()
        merged: dict[str, Any] = dict(DEFAULT_BRAND)
        if current is not None:
            merged.update(current.model_dump())
        merged.update({k: v for k, v in partial.items() if v is not None})

        config = BrandConfig.model_validate(merged)
        await self._writer.write(layout.CONFIG_FILE, config.model_dump_json(indent=2))
        logger.info("Brand config saved for channel %r", config.channel_name)
        return config


def require_brand_config(config: BrandConfig | None, run_id: str | None = None) -> BrandConfig:
    """Assert a brand config exists.

    Raises:
        ConfigMissingError: If no config has been saved.
    """
    if config is None:
        raise ConfigMissingError(CONFIG_MISSING_MESSAGE, run_id=run_id)
    return config
