# src/generation/allocator.py — v1
"""Allocation engine: candidate → uniqueness check → reservation → persistence.

Each attempt runs the full pipeline:
  1. Build a candidate with the format policy
  2. Reject if the cache holds the key in any state
  3. Reject if the record store already has it
  4. Reserve with an atomic set-if-absent write (state "reserved")
  5. Persist the record, then mark the key "permanent" (best-effort)

Any rejection raises CollisionError and the whole pipeline is retried with
capped exponential backoff. When attempts run out the caller gets
GenerationExhaustedError. InfrastructureError is never retried here.

A reservation whose persistence fails is left to expire with its TTL; it is
never promoted and never deleted.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

from trackgen.cache.base_lookaside_cache import BaseLookasideCache
from trackgen.cache.keys import tracking_key
from trackgen.core.errors import (
    CollisionError,
    GenerationExhaustedError,
    InfrastructureError,
)
from trackgen.core.models import PERMANENT, RESERVED, GenerationInput, TrackingRecord
from trackgen.generation.format_policy import FormatPolicy, RandomSource
from trackgen.generation.retry import RetryConfig, compute_delay
from trackgen.logging.context import set_tracking_context
from trackgen.store.base_record_store import BaseRecordStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AllocationEngine:
    """Hands out globally unique tracking numbers to concurrent callers."""

    def __init__(
        self,
        policy: FormatPolicy,
        cache: BaseLookasideCache,
        store: BaseRecordStore,
        random_source: RandomSource,
        retry_config: RetryConfig | None = None,
        reservation_ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._policy = policy
        self._cache = cache
        self._store = store
        self._random = random_source
        self._retry = retry_config or RetryConfig()
        self._ttl = reservation_ttl
        self._clock = clock
        self._sleep = sleep

    async def allocate(self, request: GenerationInput) -> TrackingRecord:
        """Allocate and persist a new tracking number for the request.

        Raises:
            GenerationExhaustedError: Every attempt collided.
            InfrastructureError: Cache or store failed.
        """
        last_collision: CollisionError | None = None
        attempts = self._retry.max_attempts

        for attempt in range(attempts):
            try:
                return await self._attempt(request)
            except CollisionError as e:
                last_collision = e
                logger.debug("Collision on attempt %d/%d: %s", attempt + 1, attempts, e)
                if attempt + 1 >= attempts:
                    break
                delay = compute_delay(self._retry, attempt)
                logger.warning(
                    "Tracking number collision (attempt %d/%d), retrying in %.2fs",
                    attempt + 1, attempts, delay,
                )
                await self._sleep(delay)

        logger.error("Tracking number generation exhausted after %d attempts", attempts)
        raise GenerationExhaustedError(attempts, last_collision) from last_collision

    async def reserve(self, candidate: str) -> None:
        """Claim a candidate in the cache after both existence checks pass.

        Raises:
            CollisionError: Candidate already cached, persisted, or won by another caller.
        """
        key = tracking_key(candidate)
        if await self._cache.exists(key):
            raise CollisionError(candidate, "cache")
        if await self._store.exists(candidate):
            raise CollisionError(candidate, "store")
        if not await self._cache.set_if_absent(key, RESERVED, self._ttl):
            raise CollisionError(candidate, "reservation")

    async def _attempt(self, request: GenerationInput) -> TrackingRecord:
        candidate = self._policy.generate(request, self._random, now=self._clock())
        set_tracking_context(candidate)

        await self.reserve(candidate)

        record = TrackingRecord.from_input(candidate, request, created_at=self._clock())
        try:
            saved = await self._store.put(record)
        except InfrastructureError:
            logger.error("Persisting %s failed; reservation left to expire", candidate)
            raise

        await self._promote(candidate)
        logger.info("Allocated tracking number %s", candidate)
        return saved

    async def _promote(self, candidate: str) -> None:
        try:
            await self._cache.set(tracking_key(candidate), PERMANENT, self._ttl)
        except InfrastructureError as e:
            logger.warning("Could not mark %s permanent in cache: %s", candidate, e)
