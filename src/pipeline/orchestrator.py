# src/pipeline/orchestrator.py — v3
"""Run orchestrator: drives one production run end to end.

Order:
  config check -> research -> script -> voice -> visuals -> render
  -> thumbnail -> metadata -> publish -> record

Every invocation appends exactly one RunRecord to history, including when
the brand config is missing. Fatal stage failures are recorded and then
raised as StageFatalError; publish failures are recorded as a failed run
with all artifacts kept, and are not raised.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

from reelforge.core.errors import ConfigMissingError, StageFatalError
from reelforge.core.models import RunRecord, UploadResult
from reelforge.logging.context import clear_context, set_run_context, set_stage_context
from reelforge.pipeline.state import RunPhase, RunState
from reelforge.stages.base import BaseStage, FailurePolicy, RunContext
from reelforge.storage.config_store import require_brand_config
from reelforge.storage.run_manager import create_run, generate_run_id

if TYPE_CHECKING:
    from reelforge.logging.run_logger import RunLogger
    from reelforge.pipeline.providers import StageProviders
    from reelforge.storage.base_output_writer import BaseOutputWriter
    from reelforge.storage.config_store import BrandConfigStore
    from reelforge.storage.run_store import RunStore

logger = logging.getLogger(__name__)

PUBLISH_FAILED_MESSAGE = "publish failed: check credentials"


class RunOrchestrator:
    """Top-level orchestrator for the daily production run.

    Args:
        config_store: Brand configuration store (read once per run).
        run_store: History/latest store receiving the finalized record.
        writer: Storage backend for the per-run directory and event log.
        providers: Stage providers, each declaring its failure policy.
        clock: Optional UTC clock, for tests.
    """

    def __init__(
        self,
        config_store: BrandConfigStore,
        run_store: RunStore,
        writer: BaseOutputWriter,
        providers: StageProviders,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config_store = config_store
        self._run_store = run_store
        self._writer = writer
        self._providers = providers
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def execute_daily_run(self) -> RunRecord:
        """Execute one run and return its finalized record.

        Raises:
            ConfigMissingError: No brand config saved (the run is still recorded).
            StageFatalError: A fatal stage failed (the run is still recorded).
        """
        run_id = generate_run_id()
        state = RunState(run_id=run_id, started_at=self._clock())
        set_run_context(run_id)
        start_time = time.monotonic()

        try:
            try:
                workdir, events = await create_run(self._writer, run_id)
            except OSError as e:
                fatal = StageFatalError(
                    "workspace", f"Run workspace unavailable: {_describe(e)}", run_id
                )
                await self._abort(state, None, fatal)
                raise fatal from e
            await events("Run started", started_at=state.started_at)

            try:
                config = require_brand_config(await self._config_store.get(), run_id)
            except ConfigMissingError as e:
                await self._abort(state, events, e)
                raise
            except Exception as e:
                fatal = StageFatalError(
                    "config", f"Brand configuration unreadable: {_describe(e)}", run_id
                )
                await self._abort(state, events, fatal)
                raise fatal from e

            state.advance(RunPhase.CONFIG_VALIDATED)
            ctx = RunContext(config=config, run_id=run_id, workdir=workdir, logger=events)

            try:
                await self._produce(state, ctx)
            except StageFatalError as e:
                await self._abort(state, events, e)
                raise

            upload_result = await self._publish(state, ctx)
            record = await self._finish(state, events, upload_result)
        finally:
            set_stage_context(None)
            logger.info("Run %s took %.1fs", run_id, time.monotonic() - start_time)
            clear_context()

        return record

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _produce(self, state: RunState, ctx: RunContext) -> None:
        """Run every stage before publishing, strictly in order."""
        p = self._providers

        state.topic = await self._run_stage(state, RunPhase.RESEARCHING, p.research, ctx)
        state.script = await self._run_stage(
            state, RunPhase.SCRIPTING, p.script, ctx, state.topic
        )
        state.voiceover = await self._run_stage(
            state, RunPhase.SYNTHESIZING, p.voice, ctx, state.script
        )
        state.visual = await self._run_stage(
            state, RunPhase.VISUALIZING, p.visuals, ctx, state.script
        )
        state.video_path = await self._run_stage(
            state, RunPhase.RENDERING, p.render, ctx, state.visual, state.voiceover, state.script
        )
        state.thumbnail = await self._run_stage(
            state, RunPhase.THUMBNAILING, p.thumbnail, ctx, state.video_path, state.script
        )
        state.upload = await self._run_stage(
            state, RunPhase.METADATA_BUILT, p.metadata, ctx, state.topic, state.script
        )

    async def _run_stage(
        self,
        state: RunState,
        phase: RunPhase,
        stage: BaseStage,
        ctx: RunContext,
        *inputs: Any,
    ) -> Any:
        """Advance to phase and run one stage, classifying any failure.

        Only ABSORBED stages let the raw exception through; everything else
        becomes StageFatalError. A DEGRADES stage that raises anyway has no
        substitute artifact left, so it is fatal too.
        """
        state.advance(phase)
        set_stage_context(stage.name)
        await ctx.logger("Stage started", stage=stage.name, phase=phase.value)

        try:
            artifact = await stage(ctx, *inputs)
        except Exception as e:
            await ctx.logger.warning(
                "Stage failed", stage=stage.name, policy=stage.policy.value, error=_describe(e)
            )
            if stage.policy is FailurePolicy.ABSORBED:
                raise
            logger.error("Stage '%s' failed: %s", stage.name, _describe(e))
            raise StageFatalError(stage.name, _describe(e), ctx.run_id) from e

        await ctx.logger("Stage completed", stage=stage.name)
        return artifact

    async def _publish(self, state: RunState, ctx: RunContext) -> UploadResult | None:
        """Run the publish stage; a failure is logged and yields None."""
        try:
            result = await self._run_stage(
                state,
                RunPhase.PUBLISHING,
                self._providers.publish,
                ctx,
                state.video_path,
                state.thumbnail,
                state.upload,
            )
        except Exception as e:
            await ctx.logger.warning("Upload failed", error=_describe(e))
            logger.warning("Publish failed for run %s: %s", ctx.run_id, _describe(e))
            return None

        if not isinstance(result, UploadResult) or not result.is_reachable:
            await ctx.logger.warning("Upload returned no reachable watch URL", result=result)
            return None
        return result

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    async def _finish(
        self, state: RunState, events: RunLogger, upload_result: UploadResult | None
    ) -> RunRecord:
        if upload_result is not None and state.upload is not None:
            state.upload = state.upload.model_copy(update={"watch_url": upload_result.watch_url})
            record = state.finalize("success", completed_at=self._clock())
        else:
            record = state.finalize(
                "failed", PUBLISH_FAILED_MESSAGE, completed_at=self._clock()
            )

        set_stage_context(None)
        await events("Run finished", status=record.status, watch_url=_watch_url(record))
        await self._run_store.append(record)
        return record

    async def _abort(
        self, state: RunState, events: RunLogger | None, error: Exception
    ) -> RunRecord:
        """Record a run that stopped at a fatal failure.

        ``events`` is None when the run directory could not be created.
        """
        message = _describe(error)
        record = state.finalize("failed", message, completed_at=self._clock())
        set_stage_context(None)
        if events is not None:
            await events.warning(
                "Run aborted", phase=state.phases_visited[-2].value, error=message
            )
        await self._run_store.append(record)
        return record


def _watch_url(record: RunRecord) -> str | None:
    return record.upload.watch_url if record.upload else None


def _describe(error: BaseException) -> str:
    """Error text for records and logs; falls back to the exception type."""
    return str(error) or type(error).__name__
