import asyncio

import pytest

from reposcout.core.errors import IndexSearchError, InvalidPipelineStateError, LLMError
from reposcout.pipeline.fine_scoring import apply_fine_scoring, rank_repositories
from reposcout.schemas.scoring import DIMENSIONS, DimensionScores, ScoredRepository
from tests._fixtures.fakes import FIXED_NOW, FakeIndex, FakeLLM, evaluator_reply, make_repo


def _score(repos, settings, *, index=None, llm=None):
    index = index or FakeIndex()
    llm = llm or FakeLLM(handler=lambda messages: evaluator_reply(8, 7, 9))
    return asyncio.run(
        apply_fine_scoring(repos, "widget library", index=index, llm=llm, settings=settings, now=FIXED_NOW)
    )


def test_two_repos_with_one_failure_still_returns_both(settings):
    repos = [make_repo("a/broken", stars=800), make_repo("b/fine", stars=300)]
    index = FakeIndex(readmes={"a/broken": IndexSearchError("boom", status_code=500)})

    def handler(messages):
        if "a/broken" in messages[1]["content"]:
            return LLMError("should not be called without README")
        return evaluator_reply(9, 9, 9)

    llm = FakeLLM(handler=handler)
    results = _score(repos, settings, index=index, llm=llm)

    assert sorted(r.full_name for r in results) == ["a/broken", "b/fine"]
    broken = next(r for r in results if r.full_name == "a/broken")
    fine = next(r for r in results if r.full_name == "b/fine")
    assert broken.evaluator_fallback is True
    assert (broken.scores.documentation, broken.scores.ease_of_use, broken.scores.relevance) == (5.0, 5.0, 5.0)
    assert fine.evaluator_fallback is False
    assert fine.scores.relevance == 9.0
    assert len(llm.calls) == 1


def test_failed_evaluator_call_keeps_repository(settings):
    repos = [make_repo("a/one"), make_repo("b/two")]
    llm = FakeLLM(handler=lambda m: LLMError("down") if "a/one" in m[1]["content"] else evaluator_reply())
    results = _score(repos, settings, llm=llm)
    assert {r.full_name: r.evaluator_fallback for r in results} == {"a/one": True, "b/two": False}


def test_missing_readme_and_slow_fetch_degrade_to_defaults(settings):
    fast = settings.model_copy(update={"readme_fetch_timeout_s": 0.01})
    index = FakeIndex(readmes={"a/none": None}, readme_delay=0.05)
    results = _score([make_repo("a/none"), make_repo("b/slow")], fast, index=index)
    assert all(r.evaluator_fallback for r in results)
    assert sorted(index.readme_calls) == ["a/none", "b/slow"]


def test_overall_is_weighted_sum_of_all_seven(settings):
    results = _score([make_repo(f"o/r{i}", stars=100 * (i + 1)) for i in range(5)], settings)
    weights = settings.score_weights.as_dict()
    for result in results:
        expected = sum(weights[name] * getattr(result.scores, name) for name in DIMENSIONS)
        assert result.overall == pytest.approx(round(expected, 1), abs=1e-9)
        assert 0.0 <= result.overall <= 10.0
        assert [p.dimension for p in result.radar_chart_data] == [
            "Maturity", "Activity", "Community", "Maintenance", "Documentation", "Ease of Use", "Relevance",
        ]


def test_ranking_is_deterministic_and_idempotent(settings):
    repos = [make_repo(f"o/r{i}", stars=50 * (i % 4 + 1), open_issues=i) for i in range(12)]
    first = _score(repos, settings)
    second = _score(list(reversed(repos)), settings)

    assert len(first) == settings.final_results_count
    assert [r.model_dump() for r in first] == [r.model_dump() for r in second]
    keys = [(-r.overall, -r.stars, r.full_name) for r in first]
    assert keys == sorted(keys)


def test_tie_break_by_stars_then_name():
    def scored(name, stars, overall):
        values = {name_: 5.0 for name_ in DIMENSIONS}
        scores = DimensionScores(**values, overall=overall)
        return ScoredRepository(repository=make_repo(name, stars=stars), scores=scores)

    ranked = rank_repositories([
        scored("z/low", 10, 6.0),
        scored("b/tie", 500, 7.0),
        scored("a/tie", 500, 7.0),
        scored("c/more-stars", 900, 7.0),
    ])
    assert [r.full_name for r in ranked] == ["c/more-stars", "a/tie", "b/tie", "z/low"]


@pytest.mark.parametrize(
    "repos",
    [
        [],
        [make_repo("a/one"), make_repo("a/one")],
        [make_repo("a/one"), {"full_name": "b/two"}],
    ],
)
def test_invalid_input_raises(settings, repos):
    with pytest.raises(InvalidPipelineStateError) as exc:
        _score(repos, settings)
    assert exc.value.code == "INVALID_PIPELINE_STATE"
