"""
Schemas for the repository index and Query Translator output.

Repository is a read-only snapshot of one GitHub search result.
SearchParams is the structured object that flows from the Query
Translator into the Scout.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SearchMode(str, Enum):
    """Controls how widely the Query Translator expands keywords."""
    FOCUSED = "focused"
    BALANCED = "balanced"
    EXPLORATORY = "exploratory"


class StarRange(BaseModel):
    min: int | None = None
    max: int | None = None


class SearchParams(BaseModel):
    """Structured search parameters extracted from the user query."""
    keywords: list[str]
    expanded_keywords: list[str] = Field(default_factory=list)
    language: str | None = None
    star_range: StarRange = Field(default_factory=StarRange)
    created_after: date | None = None
    topics: list[str] = Field(default_factory=list)


class Repository(BaseModel):
    """
    Immutable snapshot of a repository from the search index.

    One instance per repository per pipeline run.
    """
    owner: str
    name: str
    full_name: str
    html_url: str
    description: str | None = None
    stars: int = 0
    forks: int = 0
    language: str | None = None
    topics: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    pushed_at: datetime | None = None
    has_readme: bool = True
    is_archived: bool = False
    is_fork: bool = False
    license: str | None = None
    open_issues_count: int = 0
    default_branch: str = "main"

    class Config:
        frozen = True

    @property
    def last_pushed_at(self) -> datetime:
        return self.pushed_at or self.updated_at

    @classmethod
    def from_github(cls, item: dict[str, Any]) -> "Repository":
        """
        Convert one item of ``GET /search/repositories`` into a Repository.

        The search API does not report README presence, so it is assumed.
        """
        if not isinstance(item, dict):
            raise TypeError(f"search item must be an object, got {type(item).__name__}")
        owner = item.get("owner")
        owner = owner if isinstance(owner, dict) else {}
        license_info = item.get("license")
        license_info = license_info if isinstance(license_info, dict) else {}
        return cls(
            owner=owner.get("login") or item["full_name"].split("/", 1)[0],
            name=item["name"],
            full_name=item["full_name"],
            html_url=item.get("html_url") or f"https://github.com/{item['full_name']}",
            description=item.get("description"),
            stars=item.get("stargazers_count") or 0,
            forks=item.get("forks_count") or 0,
            language=item.get("language"),
            topics=item.get("topics") or [],
            created_at=item["created_at"],
            updated_at=item["updated_at"],
            pushed_at=item.get("pushed_at"),
            has_readme=True,
            is_archived=bool(item.get("archived", False)),
            is_fork=bool(item.get("fork", False)),
            license=license_info.get("spdx_id"),
            open_issues_count=item.get("open_issues_count") or 0,
            default_branch=item.get("default_branch") or "main",
        )
