# tests/unit/cache/test_unit_redis_cache.py — v1
"""Tests for cache/redis_cache.py — mocked asyncio Redis client."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from trackgen.cache.redis_cache import RedisLookasideCache
from trackgen.core.errors import InfrastructureError


@pytest.fixture
def client():
    mock = MagicMock()
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.exists = AsyncMock(return_value=0)
    mock.delete = AsyncMock(return_value=1)
    mock.aclose = AsyncMock()
    return mock


@pytest.fixture
def cache(client):
    return RedisLookasideCache(client=client)


class TestConstruction:
    def test_requires_url_or_client(self):
        with pytest.raises(ValueError, match="redis_url"):
            RedisLookasideCache()

    def test_from_url_does_not_connect(self):
        cache = RedisLookasideCache(redis_url="redis://localhost:6379/0")
        assert cache is not None


class TestRedisLookasideCache:
    @pytest.mark.asyncio
    async def test_set_if_absent_uses_nx_and_ttl(self, cache, client):
        assert await cache.set_if_absent("tracking:X", "reserved", timedelta(hours=24))
        client.set.assert_awaited_once_with("tracking:X", "reserved", nx=True, ex=86400)

    @pytest.mark.asyncio
    async def test_set_if_absent_lost(self, cache, client):
        client.set.return_value = None
        assert not await cache.set_if_absent("tracking:X", "reserved", timedelta(hours=1))

    @pytest.mark.asyncio
    async def test_set_with_ttl(self, cache, client):
        await cache.set("search:1", "{}", timedelta(minutes=30))
        client.set.assert_awaited_once_with("search:1", "{}", ex=1800)

    @pytest.mark.asyncio
    async def test_sub_second_ttl_rounds_up(self, cache, client):
        await cache.set("k", "v", timedelta(milliseconds=10))
        client.set.assert_awaited_once_with("k", "v", ex=1)

    @pytest.mark.asyncio
    async def test_get(self, cache, client):
        client.get.return_value = "permanent"
        assert await cache.get("tracking:X") == "permanent"

    @pytest.mark.asyncio
    async def test_exists(self, cache, client):
        assert not await cache.exists("tracking:X")
        client.exists.return_value = 1
        assert await cache.exists("tracking:X")

    @pytest.mark.asyncio
    async def test_delete(self, cache, client):
        await cache.delete("search:1")
        client.delete.assert_awaited_once_with("search:1")

    @pytest.mark.asyncio
    async def test_keys_matching_scans(self, cache, client):
        async def scan_iter(match):
            for key in ("search:1", "search:2"):
                yield key

        client.scan_iter = MagicMock(side_effect=scan_iter)
        assert await cache.keys_matching("search:*") == ["search:1", "search:2"]
        client.scan_iter.assert_called_once_with(match="search:*")

    @pytest.mark.asyncio
    async def test_aclose(self, cache, client):
        await cache.aclose()
        client.aclose.assert_awaited_once()


class TestErrorTranslation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, args", [
        ("get", ("k",)),
        ("exists", ("k",)),
        ("delete", ("k",)),
        ("set", ("k", "v", timedelta(seconds=5))),
        ("set_if_absent", ("k", "v", timedelta(seconds=5))),
    ])
    async def test_redis_error_becomes_infrastructure_error(self, cache, client, method, args):
        redis_method = "set" if method == "set_if_absent" else method
        getattr(client, redis_method).side_effect = RedisConnectionError("refused")

        with pytest.raises(InfrastructureError) as exc_info:
            await getattr(cache, method)(*args)
        assert exc_info.value.component == "cache"
        assert exc_info.value.operation == method
