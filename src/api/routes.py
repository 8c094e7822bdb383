# src/api/routes.py — v2
"""HTTP surface: brand config, run history, diagnostics and the run trigger.

POST /api/run maps a raised run failure to HTTP 500 and a recorded failure
(e.g. publishing) to HTTP 200 with status "failed" in the payload. Only one
run may be in flight per app; a second trigger gets HTTP 409.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from reelforge.api.facade import Services, build_services
from reelforge.api.models import (
    BrandConfigUpdate,
    ConfigResponse,
    DiagnosticsResponse,
    HistoryResponse,
    RunResponse,
)
from reelforge.config.settings import Settings
from reelforge.core.errors import StageFatalError
from reelforge.version import __version__

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Runs"])


def _services(request: Request) -> Services:
    return request.app.state.services


@router.get("/config", response_model=ConfigResponse)
async def get_config(request: Request) -> ConfigResponse:
    config = await _services(request).config_store.get()
    return ConfigResponse(config=config)


@router.post("/config", response_model=ConfigResponse)
async def save_config(update: BrandConfigUpdate, request: Request) -> ConfigResponse:
    try:
        config = await _services(request).config_store.upsert(
            update.model_dump(exclude_none=True)
        )
    except ValidationError as e:
        detail = e.errors(include_url=False, include_context=False, include_input=False)
        raise HTTPException(status_code=422, detail=detail) from e
    return ConfigResponse(config=config)


@router.get("/history", response_model=HistoryResponse)
async def get_history(request: Request) -> HistoryResponse:
    store = _services(request).run_store
    latest, history = await asyncio.gather(store.get_latest(), store.get_history())
    return HistoryResponse(latest=latest, history=history)


@router.get("/diagnostics", response_model=DiagnosticsResponse)
async def get_diagnostics(request: Request) -> DiagnosticsResponse:
    services = _services(request)
    return DiagnosticsResponse(
        version=__version__,
        data_root=str(services.settings.data_root),
        publishing_configured=services.settings.youtube_configured,
        stage_policies=services.providers.policies(),
    )


@router.post("/run", response_model=RunResponse)
async def trigger_run(request: Request):
    lock: asyncio.Lock = request.app.state.run_lock
    if lock.locked():
        raise HTTPException(status_code=409, detail="A run is already in progress")

    async with lock:
        try:
            record = await _services(request).orchestrator.execute_daily_run()
        except StageFatalError as e:
            return JSONResponse(
                status_code=500,
                content=RunResponse(ok=False, error=str(e)).model_dump(mode="json"),
            )
        except Exception as e:
            logger.exception("Run trigger crashed")
            return JSONResponse(
                status_code=500,
                content=RunResponse(ok=False, error=str(e)).model_dump(mode="json"),
            )
    return RunResponse(ok=True, result=record)


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Build the FastAPI application around one data root."""
    app = FastAPI(title="reelforge", version=__version__)
    app.state.services = services or build_services(settings)
    app.state.run_lock = asyncio.Lock()
    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app
