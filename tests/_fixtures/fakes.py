"""
In-memory stand-ins for the repository index and the LLM client.

Both record their calls so tests can assert on what was (or was not)
sent to an external service.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from reposcout.core.errors import LLMResponseError
from reposcout.schemas.repository import Repository

FIXED_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_repo(
    full_name: str = "acme/widget",
    *,
    stars: int = 500,
    forks: int = 50,
    open_issues: int = 20,
    created_years_ago: float = 3,
    updated_days_ago: float = 10,
    pushed_days_ago: float | None = None,
    has_readme: bool = True,
    is_archived: bool = False,
    is_fork: bool = False,
    language: str | None = "Python",
    description: str | None = "A test repository",
    now: datetime = FIXED_NOW,
) -> Repository:
    owner, name = full_name.split("/", 1)
    pushed = pushed_days_ago if pushed_days_ago is not None else updated_days_ago
    return Repository(
        owner=owner,
        name=name,
        full_name=full_name,
        html_url=f"https://github.com/{full_name}",
        description=description,
        stars=stars,
        forks=forks,
        language=language,
        topics=[],
        created_at=now - timedelta(days=365 * created_years_ago),
        updated_at=now - timedelta(days=updated_days_ago),
        pushed_at=now - timedelta(days=pushed),
        has_readme=has_readme,
        is_archived=is_archived,
        is_fork=is_fork,
        license="MIT",
        open_issues_count=open_issues,
    )


def translator_reply(
    keywords: list[str] | None = None,
    expanded: list[str] | None = None,
    *,
    language: str | None = "Python",
    star_range: dict | None = None,
    topics: list[str] | None = None,
) -> str:
    return json.dumps({
        "keywords": keywords if keywords is not None else ["web", "framework"],
        "expanded_keywords": expanded if expanded is not None else ["http", "server"],
        "language": language,
        "starRange": star_range or {"min": 50},
        "topics": topics if topics is not None else ["web"],
    })


def evaluator_reply(documentation: Any = 8, ease_of_use: Any = 7, relevance: Any = 9) -> str:
    return json.dumps({
        "documentation": documentation,
        "ease_of_use": ease_of_use,
        "relevance": relevance,
        "reasoning": {"documentation": "clear", "ease_of_use": "ok", "relevance": "match"},
    })


def is_translator_call(messages: list[dict[str, str]]) -> bool:
    return "query translator" in messages[0]["content"]


class FakeLLM:
    """
    Replies come from ``handler(messages)`` when given, otherwise from
    ``replies`` in call order.  A reply that is an Exception is raised.
    """

    provider = "openai"
    supports_json_mode = True

    def __init__(
        self,
        replies: list[str | Exception] | None = None,
        *,
        handler: Callable[[list[dict[str, str]]], str | Exception] | None = None,
        delay: float = 0.0,
    ):
        self._replies = list(replies or [])
        self._handler = handler
        self.delay = delay
        self.calls: list[dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def complete(self, messages, *, timeout_s, max_tokens=None, temperature=None) -> str:
        self.calls.append({"messages": messages, "timeout_s": timeout_s, "max_tokens": max_tokens})
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
            if self._handler is not None:
                reply = self._handler(messages)
            elif self._replies:
                reply = self._replies.pop(0)
            else:
                reply = LLMResponseError("no scripted reply")
            if isinstance(reply, Exception):
                raise reply
            return reply
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


class FakeIndex:
    """
    ``searches`` are returned in call order (an Exception entry is raised);
    ``readmes`` maps full_name to text, None (not found) or an Exception.
    Unlisted READMEs default to a short document.
    """

    def __init__(
        self,
        searches: list[list[Repository] | Exception] | None = None,
        readmes: dict[str, str | None | Exception] | None = None,
        *,
        search_delay: float = 0.0,
        readme_delay: float = 0.0,
    ):
        self._searches = list(searches or [])
        self.readmes = readmes or {}
        self.search_delay = search_delay
        self.readme_delay = readme_delay
        self.search_calls: list[dict[str, Any]] = []
        self.readme_calls: list[str] = []
        self.closed = False

    async def search_repositories(self, query, *, sort="stars", order="desc", per_page=30):
        self.search_calls.append({"query": query, "sort": sort, "per_page": per_page})
        result = self._searches.pop(0) if self._searches else []
        await asyncio.sleep(self.search_delay)
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def fetch_readme(self, full_name):
        self.readme_calls.append(full_name)
        await asyncio.sleep(self.readme_delay)
        value = self.readmes.get(full_name, f"# {full_name}\n\nUsage: pip install it.")
        if isinstance(value, Exception):
            raise value
        return value

    @property
    def total_calls(self) -> int:
        return len(self.search_calls) + len(self.readme_calls)

    async def aclose(self) -> None:
        self.closed = True
