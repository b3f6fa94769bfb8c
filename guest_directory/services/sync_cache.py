"""
Key-addressed in-memory cache with read-through and single-flight fetches
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

ALL_GUESTS = "all-guests"


def guest_key(guest_id: int) -> str:
    return f"guest:{guest_id}"


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    fetched_at: float
    stale: bool = False


class SyncCache:
    """Last-known values per key, each with a stale flag.

    A read of a missing or stale key starts one fetch; readers arriving while
    it is in flight await the same future instead of fetching again. Writes
    only ever replace, mark stale or drop whole entries.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, asyncio.Future] = {}
        # bumped on every write to a key; a fetch started under an older
        # generation hands its value to its readers but does not store it
        self._generations: Dict[str, int] = {}

    def is_fresh(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.stale:
            return False
        if self.ttl is not None and self._clock() - entry.fetched_at >= self.ttl:
            return False
        return True

    def peek(self, key: str) -> Optional[Any]:
        """Current value for ``key``, fresh or not, without fetching"""
        entry = self._entries.get(key)
        return entry.value if entry else None

    async def read(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        if self.is_fresh(key):
            return self._entries[key].value

        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(self._load(key, fetch, self._generations.get(key, 0)))
            self._inflight[key] = future
        else:
            logger.debug(f"Joining in-flight fetch for {key}")
        return await asyncio.shield(future)

    async def _load(self, key: str, fetch: Callable[[], Awaitable[Any]], generation: int) -> Any:
        try:
            value = await fetch()
            if self._generations.get(key, 0) == generation:
                self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())
            else:
                logger.debug(f"Discarding fetch for {key}: key changed while in flight")
            return value
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]

    def write(self, key: str, value: Any) -> None:
        self._bump(key)
        self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())

    def invalidate(self, key: str) -> None:
        self._bump(key)
        entry = self._entries.get(key)
        if entry is not None and not entry.stale:
            self._entries[key] = CacheEntry(value=entry.value, fetched_at=entry.fetched_at, stale=True)

    def remove(self, key: str) -> None:
        self._bump(key)
        self._entries.pop(key, None)

    def clear(self) -> None:
        for key in set(self._entries) | set(self._inflight):
            self._bump(key)
        self._entries.clear()

    def snapshot(self) -> Dict[str, CacheEntry]:
        return dict(self._entries)

    def _bump(self, key: str) -> None:
        self._generations[key] = self._generations.get(key, 0) + 1
        # later readers start their own fetch instead of joining an outdated one
        self._inflight.pop(key, None)
