"""
Metadata-based dimension scores (0-10, one decimal).

  maturity     repository age + log-scaled stars + estimated releases
  activity     push recency + open-issue activity + stars (recency weighted)
  community    stars/forks ratio + stars + forks
  maintenance  push recency + open-issue load relative to popularity

Every function is deterministic for a Repository snapshot and a
reference time ``now``; pass ``now`` explicitly for reproducible scores.
The remaining three dimensions come from the LLM evaluator.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from reposcout.schemas.repository import Repository

SECONDS_PER_DAY = 60 * 60 * 24
DAYS_PER_YEAR = 365


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def _years_since(moment: datetime, now: datetime) -> float:
    seconds = (now - _aware(moment)).total_seconds()
    return max(0.0, seconds / (SECONDS_PER_DAY * DAYS_PER_YEAR))


def _days_since(moment: datetime, now: datetime) -> int:
    seconds = (now - _aware(moment)).total_seconds()
    return max(0, math.floor(seconds / SECONDS_PER_DAY))


def _finish(total: float) -> float:
    return min(round(total, 1), 10.0)


def calculate_maturity(repo: Repository, now: datetime | None = None) -> float:
    age_years = _years_since(repo.created_at, _now(now))

    # Age (0-3.5)
    if age_years < 1:
        age_score = age_years * 1.5
    elif age_years < 3:
        age_score = 1.5 + (age_years - 1) * 0.75
    elif age_years < 5:
        age_score = 3 + (age_years - 3) * 0.25
    else:
        age_score = 3.5

    # Stars (0-5, log scale)
    stars = repo.stars
    if stars < 100:
        stars_score = stars / 100 * 2
    elif stars < 1000:
        stars_score = 2 + math.log10(stars / 100) * 1.5
    elif stars < 10000:
        stars_score = 3.5 + math.log10(stars / 1000)
    else:
        stars_score = 4.5 + min(math.log10(stars / 10000) * 0.5, 0.5)

    # Release history is not in the search payload; assume one release per six months
    releases = min(age_years * 2, 20)
    if releases < 5:
        releases_score = releases * 0.3
    elif releases < 20:
        releases_score = 1.5 + (releases - 5) * 0.1
    else:
        releases_score = 3.0

    return _finish(age_score + stars_score + releases_score)


def _push_recency(days: int) -> tuple[float, float]:
    """(recency points 0-5, multiplier applied to the stars contribution)"""
    if days < 1:
        return 5.0, 1.0
    if days < 7:
        return 4.5 - days / 7 * 0.5, 1.0
    if days < 30:
        return 3.5 - (days - 7) / 23 * 0.5, 0.8
    if days < 90:
        return 2 - (days - 30) / 60, 0.5
    if days < 180:
        return 1 - (days - 90) / 90 * 0.5, 0.3
    if days < 365:
        return 0.5, 0.1
    return 0.0, 0.0


def calculate_activity(repo: Repository, now: datetime | None = None) -> float:
    days = _days_since(repo.last_pushed_at, _now(now))
    recency_score, multiplier = _push_recency(days)

    # Open issues (0-3); 10-200 is the healthy band
    issues = repo.open_issues_count
    if issues == 0:
        issues_score = 0.0
    elif issues < 10:
        issues_score = issues / 10 * 1.5
    elif issues < 50:
        issues_score = 1.5 + (issues - 10) / 40 * 0.8
    elif issues < 200:
        issues_score = 2.3 + (issues - 50) / 150 * 0.7
    else:
        issues_score = max(3 - (issues - 200) / 500, 2)

    # Stars as an activity proxy (0-2), only credited for recent pushes
    stars = repo.stars
    if stars < 100:
        stars_score = stars / 100 * 0.8
    elif stars < 1000:
        stars_score = 0.8 + (stars - 100) / 900 * 0.6
    else:
        stars_score = min(1.4 + math.log10(stars / 1000) * 0.3, 2)
    stars_score *= multiplier

    return _finish(recency_score + issues_score + stars_score)


def calculate_community(repo: Repository, now: datetime | None = None) -> float:
    stars, forks = repo.stars, repo.forks

    # Stars/forks ratio (0-4)
    ratio = stars / forks if forks > 0 else float(stars)
    if ratio < 3:
        ratio_score = ratio / 3 * 1.2
    elif ratio < 5:
        ratio_score = 1.2 + (ratio - 3) / 2 * 0.8
    elif ratio < 10:
        ratio_score = 2.0 + (ratio - 5) / 5 * 0.8
    elif ratio < 20:
        ratio_score = 2.8 + (ratio - 10) / 10 * 0.6
    elif ratio < 50:
        ratio_score = 3.4 + (ratio - 20) / 30 * 0.4
    else:
        ratio_score = min(3.8 + (ratio - 50) / 100, 4)

    # Stars (0-3)
    if stars < 100:
        stars_score = stars / 100
    elif stars < 1000:
        stars_score = 1 + (stars - 100) / 900
    elif stars < 10000:
        stars_score = 2 + (stars - 1000) / 9000 * 0.8
    else:
        stars_score = min(2.8 + math.log10(stars / 10000) * 0.2, 3)

    # Forks (0-3)
    if forks < 10:
        forks_score = forks / 10
    elif forks < 100:
        forks_score = 1 + (forks - 10) / 90
    elif forks < 1000:
        forks_score = 2 + (forks - 100) / 900 * 0.8
    else:
        forks_score = min(2.8 + math.log10(forks / 1000) * 0.2, 3)

    return _finish(ratio_score + stars_score + forks_score)


def calculate_maintenance(repo: Repository, now: datetime | None = None) -> float:
    if repo.is_archived:
        return 0.0

    # Push recency (0-6)
    days = _days_since(repo.last_pushed_at, _now(now))
    if days < 7:
        update_score = 6.0
    elif days < 30:
        update_score = 5 - (days - 7) / 23 * 1.5
    elif days < 90:
        update_score = 3.5 - (days - 30) / 60 * 2
    elif days < 180:
        update_score = 1.5 - (days - 90) / 90
    elif days < 365:
        update_score = 0.5
    else:
        update_score = 0.0

    # Issue load (0-4) against an expected 2·sqrt(stars) open issues
    expected = math.sqrt(repo.stars) * 2
    issue_ratio = repo.open_issues_count / expected if expected > 0 else 1.0
    if issue_ratio < 0.5:
        issue_score = 4.0
    elif issue_ratio < 1:
        issue_score = 3.5
    elif issue_ratio < 2:
        issue_score = 2.5
    elif issue_ratio < 4:
        issue_score = 1.5
    else:
        issue_score = 0.5

    return _finish(update_score + issue_score)


def calculate_metadata_scores(repo: Repository, now: datetime | None = None) -> dict[str, float]:
    now = _now(now)
    return {
        "maturity": calculate_maturity(repo, now),
        "activity": calculate_activity(repo, now),
        "community": calculate_community(repo, now),
        "maintenance": calculate_maintenance(repo, now),
    }
