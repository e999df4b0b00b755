"""
Schemas for Screener Stage 2 (Fine Scoring) output.

DimensionScores carries the seven 0-10 sub-scores and the derived
overall score.  ScoredRepository pairs a Repository with its scores
and the radar-chart breakdown shown by the UI.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from reposcout.schemas.repository import Repository

# Neutral score used whenever a dimension cannot be computed or evaluated
DEFAULT_SCORE = 5.0

DIMENSIONS: tuple[str, ...] = (
    "maturity",
    "activity",
    "community",
    "maintenance",
    "documentation",
    "ease_of_use",
    "relevance",
)

METADATA_DIMENSIONS: tuple[str, ...] = ("maturity", "activity", "community", "maintenance")
EVALUATOR_DIMENSIONS: tuple[str, ...] = ("documentation", "ease_of_use", "relevance")

# Display order and labels for the radar chart
RADAR_LABELS: dict[str, str] = {
    "maturity": "Maturity",
    "activity": "Activity",
    "community": "Community",
    "maintenance": "Maintenance",
    "documentation": "Documentation",
    "ease_of_use": "Ease of Use",
    "relevance": "Relevance",
}


def clamp_score(value: Any, default: float = DEFAULT_SCORE) -> float:
    """
    Coerce a raw score into [0, 10] with one decimal place.

    None, booleans, non-numeric values and NaN/inf fall back to ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return round(max(0.0, min(10.0, number)), 1)


class ScoreWeights(BaseModel):
    """
    Fixed weight vector for the overall score.

    One weight per dimension; weights are non-negative and sum to 1 so
    the overall score stays on the same 0-10 scale as the sub-scores.
    """

    maturity: float = Field(default=0.10, ge=0)
    activity: float = Field(default=0.15, ge=0)
    community: float = Field(default=0.10, ge=0)
    maintenance: float = Field(default=0.10, ge=0)
    documentation: float = Field(default=0.20, ge=0)
    ease_of_use: float = Field(default=0.15, ge=0)
    relevance: float = Field(default=0.20, ge=0)

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _check_sum(self) -> "ScoreWeights":
        total = sum(getattr(self, name) for name in DIMENSIONS)
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"score weights must sum to 1.0, got {total:.4f}")
        return self

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in DIMENSIONS}


DEFAULT_SCORE_WEIGHTS = ScoreWeights()


class DimensionScores(BaseModel):
    """
    Seven sub-scores (0-10, one decimal) plus the derived overall score.

    Build instances through ``from_dimensions`` so ``overall`` is always
    the weighted sum of all seven sub-scores.
    """

    maturity: float = Field(ge=0, le=10)
    activity: float = Field(ge=0, le=10)
    community: float = Field(ge=0, le=10)
    maintenance: float = Field(ge=0, le=10)
    documentation: float = Field(ge=0, le=10)
    ease_of_use: float = Field(ge=0, le=10)
    relevance: float = Field(ge=0, le=10)
    overall: float = Field(ge=0, le=10)

    class Config:
        frozen = True

    @field_validator(*DIMENSIONS, "overall", mode="before")
    @classmethod
    def _round(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return round(float(value), 1)
        return value

    @classmethod
    def from_dimensions(
        cls,
        values: dict[str, float | None],
        weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
    ) -> "DimensionScores":
        """
        Fill missing dimensions with DEFAULT_SCORE, then aggregate.

        A missing dimension is never omitted from the sum; dropping it
        would silently rescale the remaining weights.
        """
        filled = {name: clamp_score(values.get(name)) for name in DIMENSIONS}
        overall = compute_overall(filled, weights)
        return cls(**filled, overall=overall)

    def dimension_items(self) -> list[tuple[str, float]]:
        return [(name, getattr(self, name)) for name in DIMENSIONS]


def compute_overall(values: dict[str, float], weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS) -> float:
    """Weighted sum over all seven dimensions, rounded to one decimal."""
    w = weights.as_dict()
    total = sum(w[name] * values[name] for name in DIMENSIONS)
    return round(max(0.0, min(10.0, total)), 1)


class EvaluatorScores(BaseModel):
    """LLM judgment of a repository's README against the user query."""

    documentation: float = DEFAULT_SCORE
    ease_of_use: float = DEFAULT_SCORE
    relevance: float = DEFAULT_SCORE
    reasoning: dict[str, str] | None = None
    fallback: bool = False

    @classmethod
    def neutral(cls) -> "EvaluatorScores":
        return cls(fallback=True)


class RadarPoint(BaseModel):
    dimension: str
    score: float


class ScoredRepository(BaseModel):
    """A Repository paired with its DimensionScores.  Created only by Stage 2."""

    repository: Repository
    scores: DimensionScores
    radar_chart_data: list[RadarPoint] = Field(default_factory=list)
    reasoning: dict[str, str] | None = None
    evaluator_fallback: bool = False

    class Config:
        frozen = True

    @property
    def full_name(self) -> str:
        return self.repository.full_name

    @property
    def stars(self) -> int:
        return self.repository.stars

    @property
    def overall(self) -> float:
        return self.scores.overall


def build_radar_chart_data(scores: DimensionScores) -> list[RadarPoint]:
    return [
        RadarPoint(dimension=RADAR_LABELS[name], score=value)
        for name, value in scores.dimension_items()
    ]
