"""
PipelineState carries run-scoped state between the pipeline stages.

Created once per invocation of run_search_pipeline(), progressively
enriched by each stage and returned to the caller as the run result.
It is never shared between runs.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, Field

from reposcout.schemas.repository import Repository, SearchMode, SearchParams
from reposcout.schemas.scoring import ScoredRepository


class CoarseFilterConfig(BaseModel):
    """Thresholds for Screener Stage 1.  Supplied once per run."""
    min_stars: int = 50
    updated_within_months: int = 12
    require_readme: bool = True
    target_count: int = 25
    min_count: int = 10

    class Config:
        frozen = True

    @classmethod
    def from_settings(cls, settings: Any) -> "CoarseFilterConfig":
        return cls(
            min_stars=settings.coarse_min_stars,
            updated_within_months=settings.coarse_updated_within_months,
            require_readme=settings.coarse_require_readme,
            target_count=settings.coarse_target_count,
            min_count=settings.coarse_min_count,
        )


class FilterRejections(BaseModel):
    below_min_stars: int = 0
    not_recently_updated: int = 0
    no_readme: int = 0


class FilterStats(BaseModel):
    """Diagnostic breakdown of a coarse-filter pass."""
    total: int = 0
    passed: int = 0
    filtered: int = 0
    filter_rate: float = 0.0
    reasons: FilterRejections = Field(default_factory=FilterRejections)


class ExecutionTime(BaseModel):
    """Elapsed milliseconds per stage; unset stages stay None."""
    query_translator: float | None = None
    scout: float | None = None
    screener_stage1: float | None = None
    screener_stage2: float | None = None
    total: float | None = None


class PipelineState(BaseModel):
    """
    Run-scoped aggregate owned by exactly one pipeline invocation.
    """

    # ── Inputs ───────────────────────────────────────────────────────
    query: str
    mode: SearchMode = SearchMode.BALANCED

    # ── Stage outputs (populated progressively) ─────────────────────
    search_params: SearchParams | None = None
    candidate_repos: list[Repository] = Field(default_factory=list)
    coarse_filtered_repos: list[Repository] = Field(default_factory=list)
    top_repos: list[ScoredRepository] = Field(default_factory=list)

    # ── Metadata ────────────────────────────────────────────────────
    execution_time: ExecutionTime = Field(default_factory=ExecutionTime)
    cached: bool = False
    index_calls: int = 0
    warnings: list[str] = Field(default_factory=list)
    current_stage: str | None = None

    # ── Timing ──────────────────────────────────────────────────────
    start_time: float = Field(default_factory=time.perf_counter, exclude=True)

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000
