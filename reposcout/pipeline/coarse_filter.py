"""
Pipeline Stage 3: Screener Stage 1, rule-based coarse filter.

Reduces the Scout's 50-100 candidates to ~10-25 using metadata only:
  - minimum stars
  - updated within the last N months (N * 30 days)
  - README present (when required)

Archived and forked repositories are already removed by the Scout and
are not re-checked here.  Pure and synchronous.
"""

from __future__ import annotations

from datetime import datetime, timezone

from reposcout.schemas.pipeline import CoarseFilterConfig, FilterRejections, FilterStats
from reposcout.schemas.repository import Repository
from reposcout.utils.logging import get_logger

logger = get_logger("reposcout.pipeline.coarse_filter")

DEFAULT_COARSE_FILTER_CONFIG = CoarseFilterConfig()

DAYS_PER_MONTH = 30


def days_since(moment: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since ``moment`` (floored)."""
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (now - moment).days


def meets_filter_criteria(
    repo: Repository,
    config: CoarseFilterConfig,
    now: datetime | None = None,
) -> bool:
    if repo.stars < config.min_stars:
        return False
    if days_since(repo.updated_at, now) > config.updated_within_months * DAYS_PER_MONTH:
        return False
    if config.require_readme and not repo.has_readme:
        return False
    return True


def apply_coarse_filter(
    candidates: list[Repository],
    config: CoarseFilterConfig = DEFAULT_COARSE_FILTER_CONFIG,
    *,
    now: datetime | None = None,
) -> list[Repository]:
    """
    Filter, sort by stars (descending, stable) and select.

    Selection:
      - fewer than ``min_count`` survivors → all of them (low-yield warning)
      - more than ``target_count``         → the first ``target_count``
      - otherwise                          → all of them
    """
    now = now or datetime.now(timezone.utc)
    passed = [r for r in candidates if meets_filter_criteria(r, config, now)]
    ranked = sorted(passed, key=lambda r: r.stars, reverse=True)

    logger.info(
        "[COARSE] %d/%d passed (min_stars=%d, updated_within=%dmo, require_readme=%s)",
        len(ranked),
        len(candidates),
        config.min_stars,
        config.updated_within_months,
        config.require_readme,
    )

    if len(ranked) < config.min_count:
        logger.warning("[COARSE] Only %d repos passed filter (min: %d)", len(ranked), config.min_count)
        return ranked
    if len(ranked) > config.target_count:
        logger.info("[COARSE] Selected top %d from %d", config.target_count, len(ranked))
        return ranked[: config.target_count]
    return ranked


def get_filter_stats(
    candidates: list[Repository],
    filtered: list[Repository],
    config: CoarseFilterConfig = DEFAULT_COARSE_FILTER_CONFIG,
    *,
    now: datetime | None = None,
) -> FilterStats:
    """
    Diagnostic breakdown of a filter pass.

    A candidate failing several rules is counted under each of them, so
    the per-reason counts can add up to more than ``filtered``.
    ``filter_rate`` is the percentage of candidates that were kept.
    """
    now = now or datetime.now(timezone.utc)
    max_days_old = config.updated_within_months * DAYS_PER_MONTH
    reasons = FilterRejections()
    for repo in candidates:
        if repo.stars < config.min_stars:
            reasons.below_min_stars += 1
        if days_since(repo.updated_at, now) > max_days_old:
            reasons.not_recently_updated += 1
        if config.require_readme and not repo.has_readme:
            reasons.no_readme += 1

    total = len(candidates)
    return FilterStats(
        total=total,
        passed=len(filtered),
        filtered=total - len(filtered),
        filter_rate=round(len(filtered) / total * 100, 1) if total else 0.0,
        reasons=reasons,
    )
