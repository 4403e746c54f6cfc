# tests/integration/service/test_int_tracking_service.py — v1
"""End-to-end flows through TrackingService on the in-process cache and SQLite.

No external services required.
"""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from trackgen.api.facade import TrackingService
from trackgen.cache.memory_cache import MemoryLookasideCache
from trackgen.config.settings import Settings


@pytest_asyncio.fixture
async def service(sqlite_path):
    settings = Settings(
        _env_file=None,
        cache_backend="memory",
        store_backend="sqlite",
        store_sqlite_path=sqlite_path,
        retry_base_delay_s=0.0,
    )
    svc = TrackingService.from_settings(settings)
    yield svc
    await svc.aclose()


class TestAllocateSearchList:
    @pytest.mark.asyncio
    async def test_round_trip(self, service, input_factory):
        allocated = await service.next_tracking_number(input_factory())
        assert allocated.tracking_number.startswith("MIG")

        found = await service.search(tracking_number=allocated.tracking_number)
        assert found.source == "store"
        assert found.results[0].customer_name == "RedBox Logistics"

        again = await service.search(tracking_number=allocated.tracking_number)
        assert again.source == "cache"

        page = await service.list_tracking_numbers(0, 10)
        assert page.synced_with_cache
        assert [d.tracking_number for d in page.data] == [allocated.tracking_number]

    @pytest.mark.asyncio
    async def test_concurrent_allocations_unique(self, service, input_factory):
        responses = await asyncio.gather(
            *(service.next_tracking_number(input_factory()) for _ in range(100))
        )
        numbers = {r.tracking_number for r in responses}
        assert len(numbers) == 100

        page = await service.list_tracking_numbers(0, 1000)
        assert page.total_elements == 100
        assert {d.tracking_number for d in page.data} == numbers

    @pytest.mark.asyncio
    async def test_routes_and_customers(self, service, input_factory):
        await service.next_tracking_number(input_factory())
        await service.next_tracking_number(input_factory(
            origin_country_id="SG", destination_country_id="US",
            customer_name="Acme Freight", customer_slug="acme-freight",
        ))

        by_route = await service.search(origin_country_id="SG", destination_country_id="US")
        assert by_route.total_found == 1
        assert by_route.results[0].tracking_number.startswith("SU")

        by_slug = await service.search(customer_slug="REDBOX")
        assert by_slug.total_found == 1
        assert by_slug.results[0].origin_country_id == "MY"

    @pytest.mark.asyncio
    async def test_paging_newest_first(self, service, input_factory):
        allocated = []
        for _ in range(7):
            allocated.append((await service.next_tracking_number(input_factory())).tracking_number)

        first = await service.list_tracking_numbers(0, 3)
        last = await service.list_tracking_numbers(2, 3)
        assert first.total_pages == 3
        assert [d.tracking_number for d in last.data] == [allocated[0]]
        assert first.data[0].tracking_number == allocated[-1]

    @pytest.mark.asyncio
    async def test_second_service_sees_persisted_numbers(self, service, sqlite_path, input_factory):
        allocated = await service.next_tracking_number(input_factory())

        other = TrackingService.from_settings(
            Settings(_env_file=None, store_backend="sqlite", store_sqlite_path=sqlite_path),
            cache=MemoryLookasideCache(),
        )
        try:
            record = await other.get(allocated.tracking_number)
            assert record is not None
            assert await other.engine._store.exists(allocated.tracking_number)
        finally:
            await other.aclose()
