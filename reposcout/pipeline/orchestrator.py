"""
Pipeline Orchestrator, the top-level entry point.

Validates input, then runs Query Translator → Scout → Screener Stage 1
→ Screener Stage 2 in sequence under one overall deadline.  Each stage
is independently callable; this module only sequences them, records
timings on the run's PipelineState and emits progress events.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from reposcout.core.config import Settings
from reposcout.core.errors import InvalidPipelineStateError, PipelineTimeoutError
from reposcout.pipeline.coarse_filter import apply_coarse_filter, get_filter_stats
from reposcout.pipeline.events import (
    PIPELINE_COMPLETE,
    PIPELINE_ERROR,
    PIPELINE_START,
    STAGE_COMPLETE,
    STAGE_START,
    ProgressEmitter,
)
from reposcout.pipeline.fine_scoring import apply_fine_scoring
from reposcout.pipeline.query_translator import translate_query
from reposcout.pipeline.scout import scout_repositories
from reposcout.pipeline.validation import validate_search_input
from reposcout.schemas.pipeline import CoarseFilterConfig, PipelineState
from reposcout.utils.logging import get_logger
from reposcout.utils.timing import Timer

logger = get_logger("reposcout.pipeline.orchestrator")

STAGE_TRANSLATOR = "query_translator"
STAGE_SCOUT = "scout"
STAGE_COARSE = "screener_stage1"
STAGE_FINE = "screener_stage2"


class PipelineDependencies(BaseModel):
    """External collaborators for one or more runs, built by the request layer."""
    index: Any
    llm: Any
    settings: Settings

    class Config:
        arbitrary_types_allowed = True


async def run_search_pipeline(
    query: Any,
    mode: Any = "balanced",
    timeout_ms: int | None = None,
    *,
    deps: PipelineDependencies,
    emitter: ProgressEmitter | None = None,
    coarse_config: CoarseFilterConfig | None = None,
    now: datetime | None = None,
) -> PipelineState:
    """
    Execute the full search pipeline for one query.

    Input is validated before any external call.  The whole run is
    bounded by ``timeout_ms`` (default: ``settings.pipeline_timeout_ms``).

    Raises:
        InvalidQueryError / QueryTooLongError / InvalidModeError
        TranslationError, RateLimitError, IndexSearchError
        InvalidPipelineStateError: no repository survived the coarse filter
        PipelineTimeoutError: deadline expired; carries partial timings
    """
    settings = deps.settings
    trimmed, search_mode = validate_search_input(query, mode, max_length=settings.max_query_length)
    if timeout_ms is None:
        timeout_ms = settings.pipeline_timeout_ms
    if timeout_ms <= 0:
        raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")

    emitter = emitter or ProgressEmitter()
    config = coarse_config or CoarseFilterConfig.from_settings(settings)
    state = PipelineState(query=trimmed, mode=search_mode)

    logger.info("[PIPELINE] Started | mode=%s query: %s", search_mode.value, trimmed[:80])
    emitter.emit(PIPELINE_START, data={"query": trimmed, "mode": search_mode.value, "timeout_ms": timeout_ms})

    try:
        await asyncio.wait_for(
            _run_stages(state, deps, emitter, config, now),
            timeout=timeout_ms / 1000,
        )
    except asyncio.TimeoutError:
        state.execution_time.total = round(state.elapsed_ms, 1)
        partial = state.execution_time.model_dump()
        logger.warning(
            "[PIPELINE] Timed out after %dms during %s | timings=%s",
            timeout_ms,
            state.current_stage,
            partial,
        )
        error = PipelineTimeoutError(
            f"Search pipeline timed out after {timeout_ms}ms",
            execution_time=partial,
            stage=state.current_stage,
        )
        _emit_error(emitter, state, error)
        raise error from None
    except Exception as e:
        logger.warning("[PIPELINE] Failed during %s: %s", state.current_stage, e)
        _emit_error(emitter, state, e)
        raise

    state.current_stage = None
    state.execution_time.total = round(state.elapsed_ms, 1)
    logger.info(
        "[PIPELINE] Done (%.1fms) | candidates=%d coarse=%d top=%d index_calls=%d",
        state.execution_time.total,
        len(state.candidate_repos),
        len(state.coarse_filtered_repos),
        len(state.top_repos),
        state.index_calls,
    )
    emitter.emit(
        PIPELINE_COMPLETE,
        data={
            "total_candidates": len(state.candidate_repos),
            "coarse_filtered": len(state.coarse_filtered_repos),
            "top_repos": len(state.top_repos),
            "execution_time": state.execution_time.model_dump(),
            "warnings": list(state.warnings),
        },
    )
    return state


# ── Stage runner ────────────────────────────────────────────────────

async def _run_stages(
    state: PipelineState,
    deps: PipelineDependencies,
    emitter: ProgressEmitter,
    config: CoarseFilterConfig,
    now: datetime | None,
) -> None:
    settings = deps.settings

    # ── Stage 1: Query Translator ───────────────────────────────────
    _start_stage(state, emitter, STAGE_TRANSLATOR)
    async with Timer(STAGE_TRANSLATOR) as t1:
        state.search_params = await translate_query(state.query, state.mode, llm=deps.llm, settings=settings)
    state.execution_time.query_translator = t1.elapsed_ms
    _complete_stage(
        emitter,
        STAGE_TRANSLATOR,
        t1.elapsed_ms,
        keywords=len(state.search_params.keywords),
        expanded_keywords=len(state.search_params.expanded_keywords),
    )

    # ── Stage 2: Scout ──────────────────────────────────────────────
    _start_stage(state, emitter, STAGE_SCOUT)
    async with Timer(STAGE_SCOUT) as t2:
        result = await scout_repositories(state.search_params, index=deps.index, settings=settings)
    state.candidate_repos = result.candidates
    state.index_calls += result.api_calls
    state.execution_time.scout = t2.elapsed_ms
    if result.failed_strategies:
        state.warnings.append(f"Search strategies failed: {', '.join(result.failed_strategies)}")
    _complete_stage(emitter, STAGE_SCOUT, t2.elapsed_ms, candidates=len(result.candidates))

    # ── Stage 3: Screener Stage 1 (coarse) ──────────────────────────
    _start_stage(state, emitter, STAGE_COARSE)
    with Timer(STAGE_COARSE) as t3:
        state.coarse_filtered_repos = apply_coarse_filter(state.candidate_repos, config, now=now)
    state.execution_time.screener_stage1 = t3.elapsed_ms
    stats = get_filter_stats(state.candidate_repos, state.coarse_filtered_repos, config, now=now)
    logger.debug("[PIPELINE] Coarse filter stats: %s", stats.model_dump())
    _complete_stage(emitter, STAGE_COARSE, t3.elapsed_ms, passed=len(state.coarse_filtered_repos))

    if not state.coarse_filtered_repos:
        raise InvalidPipelineStateError(
            "No repositories matched the search criteria",
            details={"candidates": len(state.candidate_repos), "filter_stats": stats.model_dump()},
        )

    # ── Stage 4: Screener Stage 2 (fine) ────────────────────────────
    _start_stage(state, emitter, STAGE_FINE)
    async with Timer(STAGE_FINE) as t4:
        state.top_repos = await apply_fine_scoring(
            state.coarse_filtered_repos,
            state.query,
            index=deps.index,
            llm=deps.llm,
            settings=settings,
            now=now,
        )
    state.index_calls += len(state.coarse_filtered_repos)
    state.execution_time.screener_stage2 = t4.elapsed_ms

    fallbacks = sum(1 for s in state.top_repos if s.evaluator_fallback)
    if fallbacks:
        state.warnings.append(f"{fallbacks} result(s) scored with neutral evaluator defaults")
    _complete_stage(emitter, STAGE_FINE, t4.elapsed_ms, top_repos=len(state.top_repos))


def _start_stage(state: PipelineState, emitter: ProgressEmitter, stage: str) -> None:
    state.current_stage = stage
    emitter.emit(STAGE_START, stage=stage)


def _complete_stage(emitter: ProgressEmitter, stage: str, elapsed_ms: float, **counts: int) -> None:
    logger.info("[PIPELINE] %s done (%.1fms) | %s", stage, elapsed_ms, counts)
    emitter.emit(STAGE_COMPLETE, stage=stage, data={"elapsed_ms": elapsed_ms, **counts})


def _emit_error(emitter: ProgressEmitter, state: PipelineState, error: Exception) -> None:
    emitter.emit(
        PIPELINE_ERROR,
        stage=state.current_stage,
        data={"code": getattr(error, "code", "INTERNAL_ERROR")},
        message=str(error),
    )
