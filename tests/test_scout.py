import asyncio
from datetime import date

import pytest

from reposcout.core.errors import IndexSearchError, RateLimitError
from reposcout.pipeline.scout import (
    STRATEGY_EXPANDED,
    STRATEGY_RECENCY,
    STRATEGY_STARS,
    build_search_query,
    scout_repositories,
)
from reposcout.schemas.repository import SearchParams, StarRange
from tests._fixtures.fakes import FakeIndex, make_repo


@pytest.fixture
def params() -> SearchParams:
    return SearchParams(
        keywords=["react", "animation"],
        expanded_keywords=["motion", "transition"],
        language="TypeScript",
        star_range=StarRange(min=1000),
        created_after=date(2023, 1, 1),
        topics=["react", "animation", "ui"],
    )


def test_stars_query_uses_full_range_and_two_topics(params, settings):
    assert build_search_query(params, STRATEGY_STARS, settings) == (
        "react animation language:TypeScript stars:>=1000 "
        "topic:react topic:animation created:>2023-01-01"
    )


def test_recency_query_lowers_star_floor(params, settings):
    assert build_search_query(params, STRATEGY_RECENCY, settings) == (
        "react animation language:TypeScript stars:>=333 "
        "topic:react topic:animation created:>2023-01-01"
    )


def test_expanded_query_adds_terms_and_drops_topics(params, settings):
    assert build_search_query(params, STRATEGY_EXPANDED, settings) == (
        "react animation motion transition language:TypeScript stars:>=200 created:>2023-01-01"
    )


def test_bounded_range_and_floors(settings):
    params = SearchParams(keywords=["rust"], expanded_keywords=["web"], star_range=StarRange(min=10, max=1000))
    assert build_search_query(params, STRATEGY_STARS, settings) == "rust stars:10..1000"
    assert build_search_query(params, STRATEGY_RECENCY, settings) == "rust stars:>=10"
    assert build_search_query(params, STRATEGY_EXPANDED, settings) == "rust web stars:>=5"


def test_merges_deduplicates_and_drops_archived_and_forks(params, settings):
    first = make_repo("a/one", stars=900)
    duplicate = make_repo("a/one", stars=1)
    index = FakeIndex(searches=[
        [first, make_repo("a/archived", is_archived=True)],
        [duplicate, make_repo("b/two"), make_repo("b/fork", is_fork=True)],
        [make_repo("c/three")],
    ])

    result = asyncio.run(scout_repositories(params, index=index, settings=settings))

    assert [r.full_name for r in result.candidates] == ["a/one", "b/two", "c/three"]
    assert result.candidates[0].stars == 900
    assert result.api_calls == 3
    assert result.strategy_counts == {"stars": 2, "recency": 3, "expanded": 1}
    assert result.failed_strategies == []
    assert [c["sort"] for c in index.search_calls] == ["stars", "updated", "stars"]
    assert all(c["per_page"] == 30 for c in index.search_calls)


def test_skips_expanded_strategy_without_expansions(settings):
    params = SearchParams(keywords=["orm"], star_range=StarRange(min=50))
    index = FakeIndex(searches=[[make_repo("a/one")], [make_repo("b/two")]])

    result = asyncio.run(scout_repositories(params, index=index, settings=settings))

    assert result.api_calls == 2
    assert len(index.search_calls) == 2
    assert [r.full_name for r in result.candidates] == ["a/one", "b/two"]


def test_failing_strategy_does_not_abort_others(params, settings):
    index = FakeIndex(searches=[
        [make_repo("a/one")],
        IndexSearchError("boom", status_code=500),
        [make_repo("c/three")],
    ])

    result = asyncio.run(scout_repositories(params, index=index, settings=settings))

    assert [r.full_name for r in result.candidates] == ["a/one", "c/three"]
    assert result.failed_strategies == ["recency"]
    assert result.api_calls == 3


def test_rate_limit_passes_through_when_every_strategy_fails(params, settings):
    index = FakeIndex(searches=[
        RateLimitError("limited"),
        IndexSearchError("boom"),
        RateLimitError("limited"),
    ])
    with pytest.raises(RateLimitError):
        asyncio.run(scout_repositories(params, index=index, settings=settings))


def test_partial_rate_limit_is_not_raised(params, settings):
    index = FakeIndex(searches=[RateLimitError("limited"), [make_repo("b/two")], []])
    result = asyncio.run(scout_repositories(params, index=index, settings=settings))
    assert [r.full_name for r in result.candidates] == ["b/two"]


def test_all_failures_without_rate_limit_return_empty_pool(params, settings):
    index = FakeIndex(searches=[IndexSearchError("a"), IndexSearchError("b"), IndexSearchError("c")])
    result = asyncio.run(scout_repositories(params, index=index, settings=settings))
    assert result.candidates == []
    assert result.failed_strategies == ["stars", "recency", "expanded"]


def test_pool_is_capped(params, settings):
    capped = settings.model_copy(update={"max_candidates": 5})
    index = FakeIndex(searches=[[make_repo(f"o/r{i}") for i in range(30)], [], []])
    result = asyncio.run(scout_repositories(params, index=index, settings=capped))
    assert [r.full_name for r in result.candidates] == [f"o/r{i}" for i in range(5)]
