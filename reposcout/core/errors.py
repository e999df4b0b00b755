"""
Exception taxonomy for the search pipeline.

Every error that can reach a caller carries a stable ``code`` so the
request layer can map it to a response without string matching.

  - Input validation:   InvalidQueryError, QueryTooLongError, InvalidModeError
  - External transient: RateLimitError, IndexSearchError, LLMError
  - Structural:         TranslationError, InvalidPipelineStateError
  - Deadline:           PipelineTimeoutError
"""

from __future__ import annotations

from datetime import datetime
from typing import Any


class SearchPipelineError(Exception):
    """Base class for errors surfaced by the search pipeline."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidQueryError(SearchPipelineError):
    code = "INVALID_QUERY"


class QueryTooLongError(InvalidQueryError):
    code = "QUERY_TOO_LONG"


class InvalidModeError(SearchPipelineError):
    code = "INVALID_MODE"


class TranslationError(SearchPipelineError):
    """The query could not be turned into usable search parameters."""

    code = "QUERY_TRANSLATION_ERROR"


class RateLimitError(SearchPipelineError):
    """The repository index refused the call because quota is exhausted."""

    code = "RATE_LIMIT"

    def __init__(self, message: str, *, reset_at: datetime | None = None, details: Any = None):
        super().__init__(message, details=details)
        self.reset_at = reset_at


class IndexSearchError(SearchPipelineError):
    """A repository index call failed for a reason other than rate limiting."""

    code = "INDEX_SEARCH_ERROR"

    def __init__(self, message: str, *, status_code: int | None = None, details: Any = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class InvalidPipelineStateError(SearchPipelineError):
    """A stage received input violating its structural precondition."""

    code = "INVALID_PIPELINE_STATE"


class PipelineTimeoutError(SearchPipelineError):
    """
    The overall deadline expired.

    ``execution_time`` holds whatever per-stage timings were collected
    before the deadline, and ``stage`` the stage that was running.
    """

    code = "TIMEOUT"

    def __init__(
        self,
        message: str,
        *,
        execution_time: dict[str, float | None] | None = None,
        stage: str | None = None,
    ):
        super().__init__(message, details={"execution_time": execution_time or {}, "stage": stage})
        self.execution_time = execution_time or {}
        self.stage = stage


class LLMError(Exception):
    """LLM call failed; callers decide whether this is fatal."""


class LLMTimeoutError(LLMError):
    pass


class LLMResponseError(LLMError):
    """Empty, truncated or otherwise unusable completion."""
