# src/cache/redis_cache.py — v1
"""Redis-based lookaside cache (CACHE_BACKEND=redis).

Uses the asyncio client from the 'redis' package so no cache round-trip
blocks the event loop. Suitable for distributed/multi-instance deployments:
the NX write is the single arbitration point between racing allocators.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import timedelta
from typing import Iterator

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from trackgen.cache.base_lookaside_cache import BaseLookasideCache
from trackgen.core.errors import InfrastructureError

logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors(operation: str, key: str) -> Iterator[None]:
    try:
        yield
    except RedisError as e:
        logger.warning("Redis %s failed for %s: %s", operation, key, e)
        raise InfrastructureError("cache", operation, str(e)) from e


class RedisLookasideCache(BaseLookasideCache):
    """Redis-backed cache for distributed deployments."""

    def __init__(
        self,
        redis_url: str | None = None,
        client: aioredis.Redis | None = None,
    ) -> None:
        if client is None:
            if not redis_url:
                raise ValueError("redis_url or client is required")
            client = aioredis.Redis.from_url(redis_url, decode_responses=True)
        self._client = client

    async def get(self, key: str) -> str | None:
        with _translate_errors("get", key):
            return await self._client.get(key)

    async def set_if_absent(self, key: str, value: str, ttl: timedelta) -> bool:
        with _translate_errors("set_if_absent", key):
            written = await self._client.set(
                key, value, nx=True, ex=_seconds(ttl)
            )
        return bool(written)

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        with _translate_errors("set", key):
            await self._client.set(key, value, ex=_seconds(ttl))

    async def exists(self, key: str) -> bool:
        with _translate_errors("exists", key):
            return await self._client.exists(key) > 0

    async def delete(self, key: str) -> None:
        with _translate_errors("delete", key):
            await self._client.delete(key)

    async def keys_matching(self, pattern: str) -> list[str]:
        # incremental SCAN; KEYS is O(N) on the server
        with _translate_errors("keys_matching", pattern):
            return [key async for key in self._client.scan_iter(match=pattern)]

    async def aclose(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()


def _seconds(ttl: timedelta) -> int:
    return max(1, int(ttl.total_seconds()))
