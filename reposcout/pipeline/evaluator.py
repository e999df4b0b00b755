"""
LLM README evaluator for Screener Stage 2.

Scores documentation, ease of use and relevance (0-10) from the README,
repository metadata and the user query.  Calls are drained from an
asyncio.Queue by a fixed pool of workers, so at most
``evaluator_concurrency`` requests are in flight at once.

Never raises for a single repository: any failure yields the neutral
5.0 scores with ``fallback=True``.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from reposcout.core.config import Settings
from reposcout.core.errors import LLMError
from reposcout.prompts.evaluator import build_evaluator_prompt
from reposcout.schemas.repository import Repository
from reposcout.schemas.scoring import DEFAULT_SCORE, EvaluatorScores, clamp_score
from reposcout.services.llm import LLMClient
from reposcout.utils.logging import get_logger
from reposcout.utils.text import clean_json_response, truncate

logger = get_logger("reposcout.pipeline.evaluator")

MAX_REASONING_CHARS = 200


async def evaluate_repository(
    repo: Repository,
    readme: str,
    query: str,
    *,
    llm: LLMClient,
    settings: Settings,
) -> EvaluatorScores:
    """Score one repository.  An empty README skips the LLM call."""
    if not readme or not readme.strip():
        logger.info("[EVALUATOR] %s: no README content, using neutral scores", repo.full_name)
        return EvaluatorScores.neutral()

    system_prompt, user_prompt = build_evaluator_prompt(
        repo, truncate(readme, settings.readme_preview_chars), query
    )
    try:
        raw = await llm.complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            timeout_s=settings.evaluator_timeout_s,
            max_tokens=settings.evaluator_max_tokens,
        )
        data = json.loads(clean_json_response(raw))
    except LLMError as e:
        logger.warning("[EVALUATOR] %s: LLM call failed (%s), using neutral scores", repo.full_name, e)
        return EvaluatorScores.neutral()
    except json.JSONDecodeError as e:
        logger.warning("[EVALUATOR] %s: invalid JSON (%s), using neutral scores", repo.full_name, e)
        return EvaluatorScores.neutral()

    if not isinstance(data, dict):
        logger.warning("[EVALUATOR] %s: response was not a JSON object, using neutral scores", repo.full_name)
        return EvaluatorScores.neutral()

    return EvaluatorScores(
        documentation=clamp_score(data.get("documentation"), DEFAULT_SCORE),
        ease_of_use=clamp_score(data.get("ease_of_use"), DEFAULT_SCORE),
        relevance=clamp_score(data.get("relevance"), DEFAULT_SCORE),
        reasoning=_parse_reasoning(data.get("reasoning")),
    )


async def batch_evaluate(
    items: list[tuple[Repository, str]],
    query: str,
    *,
    llm: LLMClient,
    settings: Settings,
) -> list[EvaluatorScores]:
    """
    Evaluate (repository, readme) pairs with a bounded worker pool.

    Returns one EvaluatorScores per input, in input order.
    """
    if not items:
        return []

    queue: asyncio.Queue[tuple[int, Repository, str]] = asyncio.Queue()
    for position, (repo, readme) in enumerate(items):
        queue.put_nowait((position, repo, readme))

    results: list[EvaluatorScores | None] = [None] * len(items)

    async def worker() -> None:
        while True:
            try:
                position, repo, readme = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                results[position] = await _evaluate_isolated(repo, readme, query, llm=llm, settings=settings)
            finally:
                queue.task_done()

    pool_size = max(1, min(settings.evaluator_concurrency, len(items)))
    logger.info("[EVALUATOR] Evaluating %d repositories with %d workers", len(items), pool_size)
    await asyncio.gather(*(worker() for _ in range(pool_size)))

    return [r if r is not None else EvaluatorScores.neutral() for r in results]


async def _evaluate_isolated(
    repo: Repository,
    readme: str,
    query: str,
    *,
    llm: LLMClient,
    settings: Settings,
) -> EvaluatorScores:
    try:
        return await evaluate_repository(repo, readme, query, llm=llm, settings=settings)
    except Exception as e:
        logger.warning("[EVALUATOR] %s: unexpected error (%s), using neutral scores", repo.full_name, e)
        return EvaluatorScores.neutral()


def _parse_reasoning(value: Any) -> dict[str, str] | None:
    if not isinstance(value, dict):
        return None
    reasoning = {
        str(key): truncate(text.strip(), MAX_REASONING_CHARS)
        for key, text in value.items()
        if isinstance(text, str) and text.strip()
    }
    return reasoning or None
