"""
Pipeline Stage 4: Screener Stage 2, fine scoring.

  1. Fetch every README concurrently (per-call timeout, failures → "")
  2. Metadata scores: maturity, activity, community, maintenance
  3. Evaluator scores: documentation, ease of use, relevance
  4. Weighted aggregation over all seven dimensions
  5. Rank by overall desc, stars desc, full_name asc; keep the top N

A failing README fetch or evaluator call degrades that repository to
neutral scores; it never drops the repository or fails the stage.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from reposcout.core.config import Settings
from reposcout.core.errors import InvalidPipelineStateError
from reposcout.pipeline.dimensions import calculate_metadata_scores
from reposcout.pipeline.evaluator import batch_evaluate
from reposcout.schemas.repository import Repository
from reposcout.schemas.scoring import (
    DimensionScores,
    EvaluatorScores,
    ScoredRepository,
    build_radar_chart_data,
)
from reposcout.services.github import GitHubClient
from reposcout.services.llm import LLMClient
from reposcout.utils.logging import get_logger

logger = get_logger("reposcout.pipeline.fine_scoring")


async def apply_fine_scoring(
    repos: list[Repository],
    query: str,
    *,
    index: GitHubClient,
    llm: LLMClient,
    settings: Settings,
    now: datetime | None = None,
) -> list[ScoredRepository]:
    """
    Score and rank the coarse-filtered repositories.

    Raises:
        InvalidPipelineStateError: ``repos`` is empty, contains something
            other than Repository, or repeats a full_name.
    """
    _check_input(repos)
    now = now or datetime.now(timezone.utc)

    readmes = await fetch_readmes(repos, index=index, settings=settings)
    logger.info(
        "[FINE] README fetch: %d/%d with content",
        sum(1 for text in readmes if text),
        len(repos),
    )

    evaluations = await batch_evaluate(list(zip(repos, readmes)), query, llm=llm, settings=settings)

    scored = [
        score_repository(repo, evaluation, settings=settings, now=now)
        for repo, evaluation in zip(repos, evaluations)
    ]
    ranked = rank_repositories(scored)[: settings.final_results_count]

    fallbacks = sum(1 for s in scored if s.evaluator_fallback)
    logger.info(
        "[FINE] Scored %d repos (evaluator fallbacks=%d), returning top %d",
        len(scored),
        fallbacks,
        len(ranked),
    )
    return ranked


async def fetch_readmes(
    repos: list[Repository],
    *,
    index: GitHubClient,
    settings: Settings,
) -> list[str]:
    """All READMEs concurrently; a missing or failed fetch yields ""."""

    async def fetch(repo: Repository) -> str:
        text = await asyncio.wait_for(
            index.fetch_readme(repo.full_name),
            timeout=settings.readme_fetch_timeout_s,
        )
        return text or ""

    outcomes = await asyncio.gather(*(fetch(r) for r in repos), return_exceptions=True)

    readmes: list[str] = []
    for repo, outcome in zip(repos, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("[FINE] README fetch failed for %s: %r", repo.full_name, outcome)
            readmes.append("")
        else:
            readmes.append(outcome)
    return readmes


def score_repository(
    repo: Repository,
    evaluation: EvaluatorScores,
    *,
    settings: Settings,
    now: datetime | None = None,
) -> ScoredRepository:
    values: dict[str, float | None] = dict(calculate_metadata_scores(repo, now))
    values.update(
        documentation=evaluation.documentation,
        ease_of_use=evaluation.ease_of_use,
        relevance=evaluation.relevance,
    )
    scores = DimensionScores.from_dimensions(values, settings.score_weights)
    return ScoredRepository(
        repository=repo,
        scores=scores,
        radar_chart_data=build_radar_chart_data(scores),
        reasoning=evaluation.reasoning,
        evaluator_fallback=evaluation.fallback,
    )


def rank_repositories(scored: list[ScoredRepository]) -> list[ScoredRepository]:
    """Deterministic order: overall desc, then stars desc, then full_name asc."""
    return sorted(scored, key=lambda s: (-s.overall, -s.stars, s.full_name))


def _check_input(repos: list[Repository]) -> None:
    if not isinstance(repos, list) or not repos:
        raise InvalidPipelineStateError("Fine scoring requires a non-empty list of repositories")
    seen: set[str] = set()
    for repo in repos:
        if not isinstance(repo, Repository):
            raise InvalidPipelineStateError(
                f"Fine scoring received a {type(repo).__name__}, expected Repository"
            )
        if repo.full_name in seen:
            raise InvalidPipelineStateError(
                f"Duplicate repository in fine scoring input: {repo.full_name}",
                details={"full_name": repo.full_name},
            )
        seen.add(repo.full_name)
