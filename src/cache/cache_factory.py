# src/cache/cache_factory.py — v1
"""Factory for lookaside cache instantiation."""

from __future__ import annotations

from trackgen.cache.base_lookaside_cache import BaseLookasideCache
from trackgen.config.settings import Settings


def create_lookaside_cache(settings: Settings | None = None) -> BaseLookasideCache:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseLookasideCache implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from trackgen.cache.memory_cache import MemoryLookasideCache
        return MemoryLookasideCache()

    if backend == "redis":
        from trackgen.cache.redis_cache import RedisLookasideCache
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisLookasideCache(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
