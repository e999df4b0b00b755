"""
Pipeline Stage 1: LLM-based query translation.

Turns a free-text query plus search mode into SearchParams.  The LLM
proposes keywords, expansions, language, star range and topics; mode
limits are then enforced in code so a chatty model cannot widen a
focused search.
"""

from __future__ import annotations

import json
import math
from datetime import date
from typing import Any

from reposcout.core.config import Settings
from reposcout.core.errors import LLMError, TranslationError
from reposcout.prompts.query_translator import build_query_translator_prompt
from reposcout.schemas.repository import SearchMode, SearchParams, StarRange
from reposcout.services.llm import LLMClient
from reposcout.utils.logging import get_logger
from reposcout.utils.text import clean_json_response, clean_terms, normalize_topic

logger = get_logger("reposcout.pipeline.query_translator")

MAX_KEYWORDS = 6
MAX_TOPICS = 10

# Maximum expanded keywords per mode
EXPANSION_LIMITS: dict[SearchMode, int] = {
    SearchMode.FOCUSED: 0,
    SearchMode.BALANCED: 3,
    SearchMode.EXPLORATORY: 8,
}

TRANSLATOR_MAX_TOKENS = 300


async def translate_query(
    query: str,
    mode: SearchMode | str,
    *,
    llm: LLMClient,
    settings: Settings,
) -> SearchParams:
    """
    Translate a natural-language query into structured search parameters.

    Raises:
        TranslationError: the LLM failed, returned something that is not
            a JSON object, or produced no usable keyword.
    """
    mode = SearchMode(mode)
    system_prompt, user_prompt = build_query_translator_prompt(
        query,
        mode.value,
        default_min_stars=settings.default_min_stars,
        popular_min_stars=settings.popular_min_stars,
        mature_min_stars=settings.mature_min_stars,
        emerging_min_stars=settings.emerging_min_stars,
        emerging_max_stars=settings.emerging_max_stars,
    )

    try:
        raw = await llm.complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            timeout_s=settings.query_translator_timeout_s,
            max_tokens=TRANSLATOR_MAX_TOKENS,
        )
    except LLMError as e:
        logger.warning("[TRANSLATOR] LLM call failed: %s", e)
        raise TranslationError(f"Failed to translate query: {e}") from e

    try:
        data = json.loads(clean_json_response(raw))
    except json.JSONDecodeError as e:
        logger.warning("[TRANSLATOR] Invalid JSON from LLM: %s", e)
        raise TranslationError("Failed to translate query: LLM returned invalid JSON") from e

    if not isinstance(data, dict):
        raise TranslationError("Failed to translate query: LLM response was not a JSON object")

    params = _build_search_params(data, mode, settings)
    logger.info(
        "[TRANSLATOR] mode=%s keywords=%s expanded=%d language=%s stars=%s topics=%s",
        mode.value,
        params.keywords,
        len(params.expanded_keywords),
        params.language,
        params.star_range.model_dump(exclude_none=True),
        params.topics,
    )
    return params


def _build_search_params(data: dict[str, Any], mode: SearchMode, settings: Settings) -> SearchParams:
    keywords = clean_terms(data.get("keywords"), MAX_KEYWORDS)
    if not keywords:
        raise TranslationError("Failed to translate query: no keywords extracted")

    limit = EXPANSION_LIMITS[mode]
    primary = {k.lower() for k in keywords}
    expanded = [
        term
        for term in clean_terms(data.get("expanded_keywords"))
        if term.lower() not in primary
    ][:limit]

    topics: list[str] = []
    for topic in clean_terms(data.get("topics")):
        normalized = normalize_topic(topic)
        if normalized and normalized not in topics:
            topics.append(normalized)

    language = data.get("language")
    if not isinstance(language, str) or not language.strip():
        language = None
    else:
        language = language.strip()

    return SearchParams(
        keywords=keywords,
        expanded_keywords=expanded,
        language=language,
        star_range=_parse_star_range(data.get("starRange", data.get("star_range")), settings),
        created_after=_parse_date(data.get("createdAfter", data.get("created_after"))),
        topics=topics[:MAX_TOPICS],
    )


def _parse_star_range(value: Any, settings: Settings) -> StarRange:
    """Accept {"min": n, "max"?: m}; anything unusable falls back to the default minimum."""
    if not isinstance(value, dict):
        return StarRange(min=settings.default_min_stars)

    low = _as_non_negative_int(value.get("min"))
    high = _as_non_negative_int(value.get("max"))
    if low is None:
        low = settings.default_min_stars
    if high is not None and high < low:
        logger.warning("[TRANSLATOR] Ignoring inverted star range %s..%s", low, high)
        high = None
    return StarRange(min=low, max=high)


def _as_non_negative_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return int(value)


def _parse_date(value: Any) -> date | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        logger.warning("[TRANSLATOR] Ignoring invalid createdAfter value: %r", value)
        return None
