# src/api/facade.py — v1
"""Public API facade — single entry point for allocation, search and listing.

Usage:
    from trackgen.api.facade import TrackingService
    service = TrackingService.from_settings()
    response = await service.next_tracking_number(request)

GenerationInput validates its own fields, so invalid requests fail with
pydantic.ValidationError before reaching the allocation engine.
"""

from __future__ import annotations

import logging
import uuid

from trackgen.api.models import AllocationResponse
from trackgen.cache.base_lookaside_cache import BaseLookasideCache
from trackgen.cache.cache_factory import create_lookaside_cache
from trackgen.config.settings import Settings
from trackgen.consistency.catalog import TrackingCatalog
from trackgen.core.models import (
    GenerationInput,
    PagedResponse,
    SearchCriteria,
    SearchResponse,
    TrackingRecord,
)
from trackgen.generation.allocator import AllocationEngine
from trackgen.generation.format_policy import FormatPolicy, create_random_source
from trackgen.generation.retry import RetryConfig
from trackgen.logging.context import clear_context, set_request_context
from trackgen.store.base_record_store import BaseRecordStore
from trackgen.store.store_factory import create_record_store

logger = logging.getLogger(__name__)


class TrackingService:
    """Wires the allocation engine and catalog over one cache and one store."""

    def __init__(
        self,
        engine: AllocationEngine,
        catalog: TrackingCatalog,
        cache: BaseLookasideCache,
        store: BaseRecordStore,
    ) -> None:
        self.engine = engine
        self.catalog = catalog
        self._cache = cache
        self._store = store

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        cache: BaseLookasideCache | None = None,
        store: BaseRecordStore | None = None,
    ) -> TrackingService:
        """Build a service from settings; explicit backends override the factories.

        Args:
            settings: Global settings. Loaded from .env if None.
            cache: Lookaside cache. Created from settings if None.
            store: Record store. Created from settings if None.
        """
        settings = settings or Settings()
        cache = cache or create_lookaside_cache(settings)
        store = store or create_record_store(settings)

        engine = AllocationEngine(
            policy=FormatPolicy.from_settings(settings),
            cache=cache,
            store=store,
            random_source=create_random_source(),
            retry_config=RetryConfig.from_settings(settings),
            reservation_ttl=settings.cache_ttl,
        )
        catalog = TrackingCatalog(
            cache=cache,
            store=store,
            entry_ttl=settings.cache_ttl,
            snapshot_ttl=settings.snapshot_ttl,
            search_ttl=settings.search_cache_ttl,
            default_limit=settings.search_default_limit,
        )
        logger.info(
            "Tracking service ready: cache=%s, store=%s",
            type(cache).__name__, type(store).__name__,
        )
        return cls(engine=engine, catalog=catalog, cache=cache, store=store)

    async def next_tracking_number(self, request: GenerationInput) -> AllocationResponse:
        """Allocate a tracking number.

        Raises:
            GenerationExhaustedError: Every candidate collided.
            InfrastructureError: Cache or store unavailable.
        """
        _begin("allocate")
        try:
            record = await self.engine.allocate(request)
        finally:
            clear_context()
        return AllocationResponse.from_record(record)

    async def search(
        self,
        criteria: SearchCriteria | None = None,
        **fields: str | None,
    ) -> SearchResponse:
        """Search by criteria object or keyword fields (tracking_number, customer_name, ...)."""
        _begin("search")
        try:
            return await self.catalog.search(criteria or SearchCriteria(**fields))
        finally:
            clear_context()

    async def list_tracking_numbers(self, page: int = 0, size: int = 10) -> PagedResponse:
        _begin("list")
        try:
            return await self.catalog.list_page(page, size)
        finally:
            clear_context()

    async def get(self, tracking_number: str) -> TrackingRecord | None:
        return await self.catalog.get(tracking_number)

    async def invalidate_caches(self) -> int:
        return await self.catalog.invalidate_all()

    async def aclose(self) -> None:
        """Release cache and store connections."""
        await self._cache.aclose()
        await self._store.aclose()


def _begin(operation: str) -> None:
    set_request_context(uuid.uuid4().hex[:12], operation)
