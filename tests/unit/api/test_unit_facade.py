# tests/unit/api/test_unit_facade.py — v1
"""Tests for api/facade.py — TrackingService wiring and logging context."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from trackgen.api.facade import TrackingService
from trackgen.api.models import AllocationResponse
from trackgen.config.settings import Settings
from trackgen.core.errors import GenerationExhaustedError
from trackgen.core.models import SearchCriteria
from trackgen.logging.context import get_context


@pytest.fixture
def settings():
    return Settings(_env_file=None, store_backend="memory", retry_base_delay_s=0.0)


@pytest.fixture
def service(settings, memory_cache, memory_store):
    return TrackingService.from_settings(settings, cache=memory_cache, store=memory_store)


class TestFromSettings:
    def test_uses_explicit_backends(self, service, memory_cache, memory_store):
        assert service._cache is memory_cache
        assert service._store is memory_store

    def test_builds_backends_from_settings(self, settings):
        from trackgen.cache.memory_cache import MemoryLookasideCache
        from trackgen.store.memory_store import MemoryRecordStore

        service = TrackingService.from_settings(settings)
        assert isinstance(service._cache, MemoryLookasideCache)
        assert isinstance(service._store, MemoryRecordStore)


class TestTrackingService:
    @pytest.mark.asyncio
    async def test_next_tracking_number(self, service, sample_input, memory_store):
        response = await service.next_tracking_number(sample_input)
        assert isinstance(response, AllocationResponse)
        assert response.status == "success"
        assert len(response.tracking_number) == 11
        assert await memory_store.exists(response.tracking_number)

    @pytest.mark.asyncio
    async def test_context_cleared_after_call(self, service, sample_input):
        await service.next_tracking_number(sample_input)
        assert get_context().as_dict() == {}

    @pytest.mark.asyncio
    async def test_context_cleared_after_failure(self, service, sample_input):
        service.engine.allocate = AsyncMock(side_effect=GenerationExhaustedError(5))
        with pytest.raises(GenerationExhaustedError):
            await service.next_tracking_number(sample_input)
        assert get_context().as_dict() == {}

    @pytest.mark.asyncio
    async def test_search_with_keywords(self, service, sample_input):
        allocated = await service.next_tracking_number(sample_input)
        response = await service.search(tracking_number=allocated.tracking_number)
        assert response.total_found == 1
        assert response.results[0].customer_slug == "redbox-logistics"

    @pytest.mark.asyncio
    async def test_search_with_criteria(self, service, sample_input):
        await service.next_tracking_number(sample_input)
        response = await service.search(SearchCriteria(destination_country_id="ID"))
        assert response.total_found == 1

    @pytest.mark.asyncio
    async def test_list(self, service, sample_input):
        for _ in range(3):
            await service.next_tracking_number(sample_input)
        page = await service.list_tracking_numbers(0, 2)
        assert page.total_elements == 3
        assert len(page.data) == 2
        assert page.has_next

    @pytest.mark.asyncio
    async def test_get_and_invalidate(self, service, sample_input):
        allocated = await service.next_tracking_number(sample_input)
        record = await service.get(allocated.tracking_number)
        assert record is not None
        await service.search(tracking_number=allocated.tracking_number)
        assert await service.invalidate_caches() >= 2

    @pytest.mark.asyncio
    async def test_aclose_closes_backends(self):
        cache = AsyncMock()
        store = AsyncMock()
        service = TrackingService.from_settings(
            Settings(_env_file=None), cache=cache, store=store
        )
        await service.aclose()
        cache.aclose.assert_awaited_once()
        store.aclose.assert_awaited_once()
