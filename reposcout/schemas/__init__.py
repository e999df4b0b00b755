"""
Pydantic schemas for every pipeline boundary.
Each module covers one pipeline stage or cross-cutting concern.
"""

from reposcout.schemas.repository import (
    Repository,
    SearchMode,
    SearchParams,
    StarRange,
)
from reposcout.schemas.scoring import (
    DEFAULT_SCORE,
    DEFAULT_SCORE_WEIGHTS,
    DimensionScores,
    EvaluatorScores,
    RadarPoint,
    ScoredRepository,
    ScoreWeights,
)
from reposcout.schemas.pipeline import (
    CoarseFilterConfig,
    ExecutionTime,
    FilterStats,
    PipelineState,
)
from reposcout.schemas.cost import CostEstimate, MonthlyCostEstimate, ProviderPricing
from reposcout.schemas.search import SearchRequest, SearchResponse

__all__ = [
    # Repository / translator
    "Repository",
    "SearchMode",
    "SearchParams",
    "StarRange",
    # Scoring
    "DEFAULT_SCORE",
    "DEFAULT_SCORE_WEIGHTS",
    "DimensionScores",
    "EvaluatorScores",
    "RadarPoint",
    "ScoredRepository",
    "ScoreWeights",
    # Pipeline
    "CoarseFilterConfig",
    "ExecutionTime",
    "FilterStats",
    "PipelineState",
    # Cost
    "CostEstimate",
    "MonthlyCostEstimate",
    "ProviderPricing",
    # API
    "SearchRequest",
    "SearchResponse",
]
