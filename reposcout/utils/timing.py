"""
Stage timing context manager.

Usage:
    with Timer("coarse_filter") as t:
        filtered = apply_coarse_filter(candidates)
    state.execution_time.screener_stage1 = t.elapsed_ms

    async with Timer("scout") as t:
        result = await scout_repositories(params, index=index)
"""

from __future__ import annotations

import time
from typing import Any

from reposcout.utils.logging import get_logger

logger = get_logger("reposcout.timing")


class Timer:
    """Simple context-manager timer (sync + async compatible)."""

    def __init__(self, label: str = ""):
        self.label = label
        self._start: float = 0.0
        self.elapsed_s: float = 0.0

    @property
    def elapsed_ms(self) -> float:
        return round(self.elapsed_s * 1000, 1)

    # Sync
    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: Any) -> None:
        self._stop()

    # Async
    async def __aenter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    async def __aexit__(self, *_: Any) -> None:
        self._stop()

    def _stop(self) -> None:
        self.elapsed_s = time.perf_counter() - self._start
        if self.label:
            logger.debug("%s completed in %.1fms", self.label, self.elapsed_ms)
