"""
Thin API route for /search.

No business logic: checks credentials, serves the result cache, calls
orchestrator.run_search_pipeline() and maps pipeline errors to HTTP
status codes.  All heavy lifting lives in the pipeline modules.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from reposcout.core.config import Settings, settings as app_settings
from reposcout.core.errors import RateLimitError, SearchPipelineError
from reposcout.pipeline.cost_estimator import DEFAULT_AVG_REPOS, estimate_cost, provider_for_settings
from reposcout.pipeline.orchestrator import PipelineDependencies, run_search_pipeline
from reposcout.pipeline.validation import validate_search_input
from reposcout.schemas.pipeline import PipelineState
from reposcout.schemas.search import (
    ErrorDetail,
    SearchData,
    SearchMetadata,
    SearchRequest,
    SearchResponse,
)
from reposcout.services.github import has_github_credentials
from reposcout.services.llm import has_llm_credentials
from reposcout.services.search_cache import SearchCache
from reposcout.utils.logging import get_logger

logger = get_logger("reposcout.api.search")

router = APIRouter(tags=["Search"])

STATUS_BY_CODE: dict[str, int] = {
    "INVALID_QUERY": 400,
    "QUERY_TOO_LONG": 400,
    "INVALID_MODE": 400,
    "QUERY_TRANSLATION_ERROR": 400,
    "RATE_LIMIT": 429,
    "INDEX_SEARCH_ERROR": 502,
    "INVALID_PIPELINE_STATE": 422,
    "TIMEOUT": 504,
    "INTERNAL_ERROR": 500,
    "MISSING_ENV_VAR": 500,
}


# ── Dependencies ────────────────────────────────────────────────────

def get_pipeline_dependencies(request: Request) -> PipelineDependencies | None:
    """Clients built at startup; None when credentials are missing."""
    return getattr(request.app.state, "pipeline_deps", None)


def get_search_cache(request: Request) -> SearchCache | None:
    return getattr(request.app.state, "search_cache", None)


# ── Route ───────────────────────────────────────────────────────────

@router.post("/search", response_model=SearchResponse)
async def search_repositories(
    body: SearchRequest,
    deps: PipelineDependencies | None = Depends(get_pipeline_dependencies),
    cache: SearchCache | None = Depends(get_search_cache),
):
    """
    Search GitHub repositories with a natural-language query.

    Body: ``{"query": str, "mode": "focused" | "balanced" | "exploratory"}``
    """
    request_id = uuid.uuid4().hex[:8]
    query_preview = body.query[:80] if isinstance(body.query, str) else body.query
    logger.info("[SEARCH] [%s] Request | mode=%s query: %s", request_id, body.mode, query_preview)

    if deps is None:
        message = _missing_credentials_message(app_settings)
        logger.error("[SEARCH] [%s] %s", request_id, message)
        return _error_response("MISSING_ENV_VAR", message)

    try:
        query, mode = validate_search_input(body.query, body.mode, max_length=deps.settings.max_query_length)

        cached = cache.get(query, mode.value) if cache is not None else None
        if cached is not None:
            logger.info("[SEARCH] [%s] Served from cache (%d results)", request_id, len(cached.top_repos))
            return _success_response(cached, cost_estimate=None)

        state = await run_search_pipeline(query, mode, deps=deps)
    except SearchPipelineError as e:
        logger.warning("[SEARCH] [%s] %s: %s", request_id, e.code, e.message)
        return _error_response(e.code, e.message, _error_details(e))
    except Exception as e:
        logger.exception("[SEARCH] [%s] Unexpected error: %s", request_id, e)
        return _error_response("INTERNAL_ERROR", "An unexpected error occurred while searching")

    timings = state.execution_time
    logger.info(
        "[SEARCH] [%s] Performance | total=%sms translator=%sms scout=%sms stage1=%sms stage2=%sms",
        request_id,
        timings.total,
        timings.query_translator,
        timings.scout,
        timings.screener_stage1,
        timings.screener_stage2,
    )

    estimate = estimate_cost(
        len(state.coarse_filtered_repos) or DEFAULT_AVG_REPOS,
        provider_for_settings(deps.settings),
    )
    logger.info(
        "[SEARCH] [%s] Cost estimate | provider=%s tokens=%d/%d cost=$%.4f",
        request_id,
        estimate.provider,
        estimate.input_tokens,
        estimate.output_tokens,
        estimate.total_cost,
    )

    if cache is not None:
        cache.set(query, mode.value, state)

    logger.info("[SEARCH] [%s] Response | %d results", request_id, len(state.top_repos))
    return _success_response(state, cost_estimate=estimate)


# ── Helpers ─────────────────────────────────────────────────────────

def _success_response(state: PipelineState, *, cost_estimate) -> JSONResponse:
    data = SearchData(
        query=state.query,
        mode=state.mode.value,
        results=state.top_repos,
        metadata=SearchMetadata(
            total_candidates=len(state.candidate_repos),
            coarse_filtered=len(state.coarse_filtered_repos),
            top_repos=len(state.top_repos),
            execution_time=state.execution_time,
            cached=state.cached,
            warnings=state.warnings,
            cost_estimate=cost_estimate,
        ),
    )
    payload = SearchResponse(success=True, data=data)
    return JSONResponse(content=payload.model_dump(mode="json", exclude={"error"}))


def _error_response(code: str, message: str, details=None) -> JSONResponse:
    payload = SearchResponse(success=False, error=ErrorDetail(code=code, message=message, details=details))
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(code, 500),
        content=payload.model_dump(mode="json", exclude={"data"}),
    )


def _error_details(error: SearchPipelineError):
    if isinstance(error, RateLimitError) and error.reset_at is not None:
        return {"reset_at": error.reset_at.isoformat()}
    return error.details


def _missing_credentials_message(settings: Settings) -> str:
    missing = []
    if not has_github_credentials(settings):
        missing.append("GITHUB_TOKEN")
    if not has_llm_credentials(settings):
        missing.append("DEEPSEEK_API_KEY or OPENAI_API_KEY")
    if not missing:
        return "Search pipeline is not initialized"
    return f"Missing required environment variable(s): {', '.join(missing)}"
