# src/api/facade.py — v3
"""Public API facade: wiring plus the zero-argument run trigger.

Usage:
    from reelforge.api.facade import execute_daily_run
    record = await execute_daily_run()

Callers (HTTP handler, CLI) only translate the result or exception into a
response or exit code; no orchestration logic lives outside the orchestrator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from reelforge.config.settings import Settings, load_settings
from reelforge.core.models import RunRecord
from reelforge.pipeline.orchestrator import RunOrchestrator
from reelforge.pipeline.providers import StageProviders
from reelforge.storage.config_store import BrandConfigStore
from reelforge.storage.local_writer import LocalWriter
from reelforge.storage.run_store import RunStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Stores and orchestrator sharing one data root."""

    settings: Settings
    writer: LocalWriter
    config_store: BrandConfigStore
    run_store: RunStore
    providers: StageProviders
    orchestrator: RunOrchestrator


def build_services(
    settings: Settings | None = None,
    providers: StageProviders | None = None,
) -> Services:
    """Create the stores and orchestrator for a data root.

    Args:
        settings: Global settings. Loaded from .env if None.
        providers: Stage providers. Built from settings if None.
    """
    settings = settings or load_settings()
    writer = LocalWriter(settings.data_root)
    config_store = BrandConfigStore(writer)
    run_store = RunStore(writer, max_history=settings.history_limit)
    providers = providers or StageProviders.from_settings(settings)
    orchestrator = RunOrchestrator(
        config_store=config_store,
        run_store=run_store,
        writer=writer,
        providers=providers,
    )
    return Services(
        settings=settings,
        writer=writer,
        config_store=config_store,
        run_store=run_store,
        providers=providers,
        orchestrator=orchestrator,
    )


async def execute_daily_run(settings: Settings | None = None) -> RunRecord:
    """Run the production pipeline once.

    Returns:
        The finalized RunRecord (status "success" or "failed").

    Raises:
        StageFatalError: The run aborted at a fatal stage or missing config.
    """
    services = build_services(settings)
    logger.info("Triggering daily run (data_root=%s)", services.settings.data_root)
    return await services.orchestrator.execute_daily_run()
