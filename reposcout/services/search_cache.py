"""
In-memory search result cache.

Avoids repeating LLM and index calls for recently answered queries.
  - LRU eviction at ``max_entries``
  - TTL-based invalidation (a hit refreshes the entry's age)
  - Key: normalized query + mode
  - Process-local, no persistence

Owned by the request layer; the pipeline never reads or writes it.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable

from reposcout.schemas.pipeline import PipelineState
from reposcout.utils.logging import get_logger
from reposcout.utils.text import normalize_query

logger = get_logger("reposcout.services.search_cache")


class SearchCache:
    def __init__(
        self,
        *,
        ttl_seconds: float = 15 * 60,
        max_entries: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, PipelineState]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(query: str, mode: str) -> str:
        return f"{normalize_query(query)}:{mode}"

    def get(self, query: str, mode: str) -> PipelineState | None:
        """Return a copy of the cached state marked ``cached=True``, or None."""
        key = self.make_key(query, mode)
        entry = self._entries.get(key)
        now = self._clock()

        if entry is not None and now - entry[0] > self.ttl_seconds:
            del self._entries[key]
            entry = None

        if entry is None:
            self.misses += 1
            logger.debug("[CACHE] MISS: %s", key)
            return None

        self._entries[key] = (now, entry[1])
        self._entries.move_to_end(key)
        self.hits += 1
        logger.info("[CACHE] HIT: %s", key)
        return entry[1].model_copy(update={"cached": True})

    def set(self, query: str, mode: str, state: PipelineState) -> None:
        key = self.make_key(query, mode)
        self._entries[key] = (self._clock(), state)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("[CACHE] Evicted: %s", evicted)

    def clear(self) -> None:
        self._entries.clear()
        logger.info("[CACHE] Cleared all entries")

    def stats(self) -> dict[str, int]:
        return {
            "size": len(self._entries),
            "max": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
        }

    def __len__(self) -> int:
        return len(self._entries)
