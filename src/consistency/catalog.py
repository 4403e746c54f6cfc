# src/consistency/catalog.py — v1
"""Read side: search, paginated listing and point lookup over cache + store.

The record store is authoritative. The cache holds two kinds of derived
data, both rebuilt whole and never patched:

- search results under search:<criteria hash> (short TTL)
- a snapshot of every record, newest first, under all_tracking_numbers

Cache failures and undecodable cache payloads degrade to store reads and
are only logged. Store failures propagate.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from pydantic import TypeAdapter, ValidationError

from trackgen.cache.base_lookaside_cache import BaseLookasideCache
from trackgen.cache.keys import SEARCH_PREFIX, SNAPSHOT_KEY, search_key, tracking_key
from trackgen.core.errors import CacheDeserializationError, InfrastructureError
from trackgen.core.models import (
    PERMANENT,
    PagedResponse,
    SearchCriteria,
    SearchResponse,
    TrackingInfo,
    TrackingRecord,
    utcnow,
)
from trackgen.store.base_record_store import BaseRecordStore

logger = logging.getLogger(__name__)

_SNAPSHOT_ADAPTER = TypeAdapter(list[TrackingInfo])


class TrackingCatalog:
    """Keeps search and listing caches coherent with the record store."""

    def __init__(
        self,
        cache: BaseLookasideCache,
        store: BaseRecordStore,
        entry_ttl: timedelta = timedelta(hours=24),
        snapshot_ttl: timedelta = timedelta(hours=24),
        search_ttl: timedelta = timedelta(minutes=30),
        default_limit: int = 50,
    ) -> None:
        self._cache = cache
        self._store = store
        self._entry_ttl = entry_ttl
        self._snapshot_ttl = snapshot_ttl
        self._search_ttl = search_ttl
        self._default_limit = default_limit

    # --- Search ---

    async def search(self, criteria: SearchCriteria) -> SearchResponse:
        """Cached search; on miss queries the store and repopulates the cache."""
        criteria = criteria.normalized()
        key = search_key(criteria.cache_key())

        cached = await self._cached_search(key)
        if cached is not None:
            logger.debug("Search served from cache (%s)", key)
            return cached.model_copy(update={"source": "cache", "searched_at": utcnow()})

        limit = self._default_limit if criteria.is_empty else None
        records = await self._store.query(criteria, limit=limit)
        response = SearchResponse.build([r.to_info() for r in records], source="store")
        await self._populate_search(key, response)
        return response

    async def _cached_search(self, key: str) -> SearchResponse | None:
        try:
            payload = await self._cache.get(key)
        except InfrastructureError as e:
            logger.warning("Search cache unavailable, querying store: %s", e)
            return None
        if payload is None:
            return None
        try:
            return _decode_search(key, payload)
        except CacheDeserializationError as e:
            logger.warning("%s; treating as miss", e)
            return None

    async def _populate_search(self, key: str, response: SearchResponse) -> None:
        try:
            await self._cache.set(key, response.model_dump_json(), self._search_ttl)
            for info in response.results:
                await self._cache.set(
                    tracking_key(info.tracking_number), PERMANENT, self._entry_ttl
                )
        except InfrastructureError as e:
            logger.warning("Failed to cache search result: %s", e)

    # --- Listing ---

    async def list_page(self, page: int, size: int) -> PagedResponse:
        """Page of records, newest first.

        Refreshes the snapshot first (best-effort), slices it when possible
        and otherwise reads the page and total count from the store.
        """
        if page < 0:
            raise ValueError("page must be >= 0")
        if size < 1:
            raise ValueError("page size must be >= 1")

        try:
            await self.refresh_snapshot()
        except InfrastructureError as e:
            logger.warning("Snapshot refresh failed: %s", e)

        from_cache = await self._page_from_snapshot(page, size)
        if from_cache is not None:
            return from_cache
        return await self._page_from_store(page, size)

    async def refresh_snapshot(self) -> int:
        """Rewrite the full snapshot from the store. Returns the record count."""
        records = await self._store.list_records(order_by="created_at", descending=True)
        infos = [r.to_info() for r in records]
        payload = _SNAPSHOT_ADAPTER.dump_json(infos).decode("utf-8")
        await self._cache.set(SNAPSHOT_KEY, payload, self._snapshot_ttl)
        logger.debug("Snapshot refreshed with %d records", len(infos))
        return len(infos)

    async def _page_from_snapshot(self, page: int, size: int) -> PagedResponse | None:
        try:
            payload = await self._cache.get(SNAPSHOT_KEY)
        except InfrastructureError as e:
            logger.warning("Snapshot unavailable, paging from store: %s", e)
            return None
        if payload is None:
            return None
        try:
            infos = _decode_snapshot(payload)
        except CacheDeserializationError as e:
            logger.warning("%s; paging from store", e)
            return None

        start = page * size
        if start >= len(infos):
            return None
        return PagedResponse.build(
            infos[start : start + size], page, size, len(infos), synced_with_cache=True
        )

    async def _page_from_store(self, page: int, size: int) -> PagedResponse:
        records = await self._store.list_records(
            order_by="created_at", descending=True, skip=page * size, take=size
        )
        total = await self._store.count()
        return PagedResponse.build(
            [r.to_info() for r in records], page, size, total, synced_with_cache=False
        )

    # --- Point lookup / maintenance ---

    async def get(self, tracking_number: str) -> TrackingRecord | None:
        """Store lookup; a hit refreshes the identifier's permanent marker."""
        record = await self._store.get(tracking_number)
        if record is not None:
            try:
                await self._cache.set(
                    tracking_key(tracking_number), PERMANENT, self._entry_ttl
                )
            except InfrastructureError as e:
                logger.warning("Failed to refresh cache marker: %s", e)
        return record

    async def invalidate_all(self) -> int:
        """Drop the snapshot and every cached search. Returns keys removed."""
        keys = [SNAPSHOT_KEY, *await self._cache.keys_matching(f"{SEARCH_PREFIX}*")]
        for key in keys:
            await self._cache.delete(key)
        logger.info("Invalidated %d cached listing/search keys", len(keys))
        return len(keys)


def _decode_search(key: str, payload: str) -> SearchResponse:
    try:
        return SearchResponse.model_validate_json(payload)
    except ValidationError as e:
        raise CacheDeserializationError(key, str(e)) from e


def _decode_snapshot(payload: str) -> list[TrackingInfo]:
    try:
        return _SNAPSHOT_ADAPTER.validate_json(payload)
    except ValidationError as e:
        raise CacheDeserializationError(SNAPSHOT_KEY, str(e)) from e
