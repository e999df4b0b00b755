"""
Schemas for the /search API layer.

SearchRequest/SearchResponse are the external HTTP contract; the
pipeline itself only knows about PipelineState.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from reposcout.schemas.cost import CostEstimate
from reposcout.schemas.pipeline import ExecutionTime
from reposcout.schemas.scoring import ScoredRepository


class SearchRequest(BaseModel):
    # Validated by the pipeline so error codes stay consistent
    query: Any = None
    mode: Any = "balanced"


class SearchMetadata(BaseModel):
    total_candidates: int = 0
    coarse_filtered: int = 0
    top_repos: int = 0
    execution_time: ExecutionTime = Field(default_factory=ExecutionTime)
    cached: bool = False
    warnings: list[str] = Field(default_factory=list)
    cost_estimate: CostEstimate | None = None


class SearchData(BaseModel):
    query: str
    mode: str
    results: list[ScoredRepository] = Field(default_factory=list)
    metadata: SearchMetadata


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Any = None


class SearchResponse(BaseModel):
    success: bool
    data: SearchData | None = None
    error: ErrorDetail | None = None
