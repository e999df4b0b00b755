"""
Input validation, run before any external call is made.
"""

from __future__ import annotations

from typing import Any

from reposcout.core.errors import InvalidModeError, InvalidQueryError, QueryTooLongError
from reposcout.schemas.repository import SearchMode

DEFAULT_MAX_QUERY_LENGTH = 200


def validate_search_input(
    query: Any,
    mode: Any = SearchMode.BALANCED,
    *,
    max_length: int = DEFAULT_MAX_QUERY_LENGTH,
) -> tuple[str, SearchMode]:
    """
    Check the raw query and mode supplied by a caller.

    Returns:
        (trimmed_query, SearchMode)

    Raises:
        InvalidQueryError:  query missing, not a string, or blank
        QueryTooLongError:  trimmed query longer than ``max_length``
        InvalidModeError:   mode is not focused / balanced / exploratory
    """
    if not isinstance(query, str):
        raise InvalidQueryError("Query is required and must be a string")

    trimmed = query.strip()
    if not trimmed:
        raise InvalidQueryError("Query cannot be empty")
    if len(trimmed) > max_length:
        raise QueryTooLongError(
            f"Query too long (max {max_length} characters)",
            details={"length": len(trimmed), "max_length": max_length},
        )

    if isinstance(mode, SearchMode):
        return trimmed, mode
    try:
        return trimmed, SearchMode(mode)
    except (TypeError, ValueError):
        allowed = ", ".join(m.value for m in SearchMode)
        raise InvalidModeError(
            f"Invalid mode. Must be one of: {allowed}",
            details={"mode": mode},
        ) from None
