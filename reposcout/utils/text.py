"""
Text utilities shared by the pipeline stages:
  - LLM response cleanup (markdown code fences)
  - Search-term and topic normalization
  - README truncation
  - Cache-key normalization

All functions are pure (no I/O, no LLM).
"""

from __future__ import annotations

import re

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")
_WHITESPACE = re.compile(r"\s+")


def clean_json_response(text: str) -> str:
    """
    Strip markdown code fences the LLM sometimes wraps around JSON.

    Examples:
        '```json\\n{"a": 1}\\n```' → '{"a": 1}'
        '  {"a": 1} '              → '{"a": 1}'
    """
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned)
        cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def clean_terms(values: object, limit: int | None = None) -> list[str]:
    """
    Normalize an LLM-provided list of search terms.

    Non-list input yields []. Non-string and blank items are dropped,
    whitespace collapsed, and duplicates removed case-insensitively
    (first occurrence wins).
    """
    if not isinstance(values, list):
        return []
    seen: set[str] = set()
    terms: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        term = _WHITESPACE.sub(" ", value).strip()
        if not term or term.lower() in seen:
            continue
        seen.add(term.lower())
        terms.append(term)
    if limit is not None:
        terms = terms[:limit]
    return terms


def normalize_topic(topic: str) -> str:
    """GitHub topics are lowercase and hyphenated: "State Management" → "state-management"."""
    return _WHITESPACE.sub("-", topic.strip().lower())


def truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def normalize_query(query: str) -> str:
    """Case- and whitespace-insensitive form of a query, used for cache keys."""
    return _WHITESPACE.sub(" ", query.strip().lower())
