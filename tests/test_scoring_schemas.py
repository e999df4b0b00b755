import math

import pytest
from pydantic import ValidationError

from reposcout.schemas.scoring import (
    DEFAULT_SCORE_WEIGHTS,
    DIMENSIONS,
    DimensionScores,
    ScoreWeights,
    build_radar_chart_data,
    clamp_score,
)


@pytest.mark.parametrize(
    "raw, expected",
    [(7, 7.0), (7.25, 7.2), (7.26, 7.3), (-1, 0.0), (11, 10.0), ("6", 6.0),
     (None, 5.0), (True, 5.0), ("high", 5.0), (math.nan, 5.0), (math.inf, 5.0)],
)
def test_clamp_score(raw, expected):
    assert clamp_score(raw) == expected


def test_default_weights_sum_to_one():
    assert sum(DEFAULT_SCORE_WEIGHTS.as_dict().values()) == pytest.approx(1.0)
    assert list(DEFAULT_SCORE_WEIGHTS.as_dict()) == list(DIMENSIONS)


def test_weights_must_sum_to_one():
    with pytest.raises(ValidationError):
        ScoreWeights(relevance=0.5)
    with pytest.raises(ValidationError):
        ScoreWeights(maturity=-0.1, relevance=0.4)


def test_missing_dimensions_are_filled_before_aggregation():
    scores = DimensionScores.from_dimensions({"relevance": 10, "documentation": None})
    assert scores.documentation == 5.0
    assert scores.maturity == 5.0
    # 5.0 everywhere except relevance (weight 0.20) at 10
    assert scores.overall == 6.0


def test_uniform_scores_give_same_overall():
    for value in (0, 3.3, 10):
        scores = DimensionScores.from_dimensions({name: value for name in DIMENSIONS})
        assert scores.overall == value


def test_radar_chart_order():
    scores = DimensionScores.from_dimensions({})
    assert [p.dimension for p in build_radar_chart_data(scores)] == [
        "Maturity", "Activity", "Community", "Maintenance", "Documentation", "Ease of Use", "Relevance",
    ]
