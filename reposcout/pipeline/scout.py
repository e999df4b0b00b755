"""
Pipeline Stage 2: Scout, multi-strategy repository search.

Strategies (one index call each, run concurrently):
  1. stars     primary keywords, sorted by stars, full star range
  2. recency   primary keywords, sorted by last update, lowered star floor
  3. expanded  primary + expanded keywords, sorted by stars, lowest star
               floor, no topic qualifiers; only issued when expansions exist

Results are merged in strategy order, deduplicated by full_name, and
archived or forked repositories are dropped.
"""

from __future__ import annotations

import asyncio
from typing import Any

from pydantic import BaseModel, Field

from reposcout.core.config import Settings
from reposcout.core.errors import RateLimitError
from reposcout.schemas.repository import Repository, SearchParams, StarRange
from reposcout.services.github import GitHubClient
from reposcout.utils.logging import get_logger

logger = get_logger("reposcout.pipeline.scout")

STRATEGY_STARS = "stars"
STRATEGY_RECENCY = "recency"
STRATEGY_EXPANDED = "expanded"

# strategy → index sort order
STRATEGY_SORT: dict[str, str] = {
    STRATEGY_STARS: "stars",
    STRATEGY_RECENCY: "updated",
    STRATEGY_EXPANDED: "stars",
}

MAX_TOPIC_QUALIFIERS = 2


class ScoutResult(BaseModel):
    """Candidate pool plus bookkeeping about the index calls that built it."""
    candidates: list[Repository] = Field(default_factory=list)
    api_calls: int = 0
    strategy_counts: dict[str, int] = Field(default_factory=dict)
    failed_strategies: list[str] = Field(default_factory=list)


def calculate_star_range(strategy: str, star_range: StarRange, settings: Settings) -> StarRange:
    """
    Star qualifier for one strategy.

    The stars strategy uses the translated range as-is; recency and
    expanded lower the floor so they surface different projects.
    """
    low = star_range.min or 0
    if strategy == STRATEGY_RECENCY:
        return StarRange(min=max(settings.recency_min_floor, low // settings.recency_star_divisor))
    if strategy == STRATEGY_EXPANDED:
        return StarRange(min=max(settings.expanded_min_floor, low // settings.expanded_star_divisor))
    return StarRange(min=low, max=star_range.max)


def build_search_query(params: SearchParams, strategy: str, settings: Settings) -> str:
    """
    Build a GitHub search query string for one strategy.

    Example:
        'react animation language:TypeScript stars:>=1000 topic:react created:>2023-01-01'
    """
    keywords = list(params.keywords)
    if strategy == STRATEGY_EXPANDED:
        keywords += params.expanded_keywords
    parts = [" ".join(keywords)]

    if params.language:
        parts.append(f"language:{params.language}")

    stars = calculate_star_range(strategy, params.star_range, settings)
    if stars.max is not None:
        parts.append(f"stars:{stars.min}..{stars.max}")
    else:
        parts.append(f"stars:>={stars.min}")

    if strategy != STRATEGY_EXPANDED:
        parts.extend(f"topic:{topic}" for topic in params.topics[:MAX_TOPIC_QUALIFIERS])

    if params.created_after:
        parts.append(f"created:>{params.created_after.isoformat()}")

    return " ".join(parts)


def plan_strategies(params: SearchParams) -> list[str]:
    strategies = [STRATEGY_STARS, STRATEGY_RECENCY]
    if params.expanded_keywords:
        strategies.append(STRATEGY_EXPANDED)
    return strategies


async def scout_repositories(
    params: SearchParams,
    *,
    index: GitHubClient,
    settings: Settings,
) -> ScoutResult:
    """
    Gather a candidate pool of up to ``max_candidates`` repositories.

    A failing strategy contributes nothing.  When every issued strategy
    fails and at least one of them was rate limited, the RateLimitError
    is re-raised so the caller can report it.
    """
    strategies = plan_strategies(params)
    queries = {s: build_search_query(params, s, settings) for s in strategies}
    for strategy, q in queries.items():
        logger.debug("[SCOUT] %s query: %s", strategy, q)

    outcomes = await asyncio.gather(
        *(
            index.search_repositories(
                queries[s],
                sort=STRATEGY_SORT[s],
                order="desc",
                per_page=settings.results_per_strategy,
            )
            for s in strategies
        ),
        return_exceptions=True,
    )

    merged: list[Repository] = []
    strategy_counts: dict[str, int] = {}
    failed: list[str] = []
    rate_limit: RateLimitError | None = None

    for strategy, outcome in zip(strategies, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("[SCOUT] Strategy %s failed: %s", strategy, outcome)
            failed.append(strategy)
            strategy_counts[strategy] = 0
            if isinstance(outcome, RateLimitError) and rate_limit is None:
                rate_limit = outcome
            continue
        strategy_counts[strategy] = len(outcome)
        merged.extend(outcome)

    if len(failed) == len(strategies) and rate_limit is not None:
        raise rate_limit

    unique = _deduplicate(merged)
    kept = [r for r in unique if not r.is_archived and not r.is_fork]
    candidates = kept[: settings.max_candidates]

    logger.info(
        "[SCOUT] %s | merged=%d unique=%d dropped_archived_or_fork=%d candidates=%d",
        _format_counts(strategy_counts),
        len(merged),
        len(unique),
        len(unique) - len(kept),
        len(candidates),
    )
    if len(candidates) < settings.min_candidates:
        logger.warning(
            "[SCOUT] Low candidate yield: %d (target %d-%d)",
            len(candidates),
            settings.min_candidates,
            settings.max_candidates,
        )

    return ScoutResult(
        candidates=candidates,
        api_calls=len(strategies),
        strategy_counts=strategy_counts,
        failed_strategies=failed,
    )


def _deduplicate(repos: list[Repository]) -> list[Repository]:
    """First occurrence wins, so earlier strategies take precedence."""
    seen: set[str] = set()
    unique: list[Repository] = []
    for repo in repos:
        if repo.full_name in seen:
            continue
        seen.add(repo.full_name)
        unique.append(repo)
    return unique


def _format_counts(counts: dict[str, Any]) -> str:
    return ", ".join(f"{name}={count}" for name, count in counts.items())
