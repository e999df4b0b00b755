"""
Async GitHub REST client for the repository index.

Two operations are used by the pipeline:
  - search_repositories(): GET /search/repositories
  - fetch_readme():        GET /repos/{owner}/{repo}/readme (raw media type)

Rate limiting is surfaced as RateLimitError so the caller can treat it as
recoverable; every other failure raises IndexSearchError.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from reposcout.core.config import Settings
from reposcout.core.errors import IndexSearchError, RateLimitError
from reposcout.schemas.repository import Repository
from reposcout.utils.logging import get_logger

logger = get_logger("reposcout.services.github")

RATE_LIMIT_WARNING_THRESHOLD = 100
USER_AGENT = "reposcout/1.0.0"


class GitHubClient:
    """Thin async wrapper over the GitHub REST API, sharing one connection pool."""

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = "https://api.github.com",
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("No GitHub token provided, rate limits will be strict")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    async def search_repositories(
        self,
        query: str,
        *,
        sort: str = "stars",
        order: str = "desc",
        per_page: int = 30,
    ) -> list[Repository]:
        """Run one repository search and convert the first page of items."""
        try:
            response = await self._client.get(
                "/search/repositories",
                params={"q": query, "sort": sort, "order": order, "per_page": per_page},
            )
        except httpx.HTTPError as exc:
            raise IndexSearchError(f"GitHub search failed: {exc}") from exc

        self._check_response(response, f"search '{query}'")

        try:
            payload = response.json()
        except ValueError as exc:
            raise IndexSearchError(f"GitHub search returned invalid JSON: {exc}") from exc

        repos: list[Repository] = []
        for item in payload.get("items", []) if isinstance(payload, dict) else []:
            try:
                repos.append(Repository.from_github(item))
            except (AttributeError, KeyError, TypeError, ValidationError) as exc:
                label = item.get("full_name", "?") if isinstance(item, dict) else repr(item)[:60]
                logger.warning("Skipping malformed search item %s: %s", label, exc)
        return repos

    async def fetch_readme(self, full_name: str) -> str | None:
        """Return the raw README text, or None when the repository has none."""
        try:
            response = await self._client.get(
                f"/repos/{full_name}/readme",
                headers={"Accept": "application/vnd.github.raw+json"},
            )
        except httpx.HTTPError as exc:
            raise IndexSearchError(f"README fetch failed for {full_name}: {exc}") from exc

        if response.status_code == 404:
            logger.debug("README not found for %s", full_name)
            return None
        self._check_response(response, f"README {full_name}")
        return response.text

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Internal helpers ────────────────────────────────────────────

    def _check_response(self, response: httpx.Response, what: str) -> None:
        self._log_rate_limit(response)

        if response.status_code == 429 or (
            response.status_code == 403 and _is_rate_limited(response)
        ):
            reset_at = _parse_reset(response.headers.get("x-ratelimit-reset"))
            raise RateLimitError(
                "GitHub API rate limit exceeded. Please wait a few minutes and try again.",
                reset_at=reset_at,
            )
        if response.status_code == 422:
            raise IndexSearchError(
                "Invalid GitHub search query. Please refine your search terms.",
                status_code=422,
            )
        if response.is_error:
            raise IndexSearchError(
                f"GitHub API error for {what}: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

    def _log_rate_limit(self, response: httpx.Response) -> None:
        remaining = response.headers.get("x-ratelimit-remaining")
        limit = response.headers.get("x-ratelimit-limit")
        if remaining is None or not remaining.isdigit():
            return
        if int(remaining) < RATE_LIMIT_WARNING_THRESHOLD:
            logger.warning("GitHub API rate limit warning: %s/%s requests remaining", remaining, limit or "?")


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.headers.get("x-ratelimit-remaining") == "0":
        return True
    try:
        body = response.json()
    except ValueError:
        return "rate limit" in response.text.lower()
    message = body.get("message", "") if isinstance(body, dict) else ""
    return "rate limit" in str(message).lower()


def _parse_reset(value: Any) -> datetime | None:
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError):
        return None


def has_github_credentials(settings: Settings) -> bool:
    return bool(settings.github_token)


def build_github_client(settings: Settings) -> GitHubClient:
    return GitHubClient(
        settings.github_token,
        base_url=settings.github_api_base,
        timeout_s=settings.index_request_timeout_s,
    )
