# src/cache/memory_cache.py — v1
"""In-process lookaside cache (CACHE_BACKEND=memory).

Suitable for single-process deployments and tests. Operations never await
between reading and writing the dict, so set_if_absent is atomic with respect
to other tasks on the same event loop.
"""

from __future__ import annotations

import fnmatch
import time
from datetime import timedelta
from typing import Callable

from trackgen.cache.base_lookaside_cache import BaseLookasideCache


class MemoryLookasideCache(BaseLookasideCache):
    """Dict-backed cache with per-key monotonic expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        return self._live_value(key)

    async def set_if_absent(self, key: str, value: str, ttl: timedelta) -> bool:
        if self._live_value(key) is not None:
            return False
        self._store(key, value, ttl)
        return True

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        self._store(key, value, ttl)

    async def exists(self, key: str) -> bool:
        return self._live_value(key) is not None

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def keys_matching(self, pattern: str) -> list[str]:
        self._purge_expired()
        return [k for k in self._entries if fnmatch.fnmatchcase(k, pattern)]

    def _store(self, key: str, value: str, ttl: timedelta) -> None:
        self._entries[key] = (value, self._clock() + ttl.total_seconds())

    def _live_value(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, (_, exp) in self._entries.items() if exp <= now]:
            del self._entries[key]
