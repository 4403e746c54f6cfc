# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides sample generation inputs, in-memory cache/store backends, a fixed
clock and a scripted random source. No external services — all I/O is in
memory or mocked.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from trackgen.cache.base_lookaside_cache import BaseLookasideCache
from trackgen.cache.memory_cache import MemoryLookasideCache
from trackgen.core.errors import InfrastructureError
from trackgen.core.models import GenerationInput, TrackingRecord
from trackgen.generation.format_policy import FormatPolicy
from trackgen.generation.retry import RetryConfig
from trackgen.store.memory_store import MemoryRecordStore

FIXED_NOW = datetime(2025, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


class ScriptedRandom:
    """Random source that replays a fixed sequence of indices."""

    def __init__(self, values: list[int] | None = None):
        self._values = list(values or [0])
        self._pos = 0

    def randrange(self, stop: int) -> int:
        value = self._values[self._pos % len(self._values)]
        self._pos += 1
        return value % stop


class UnavailableCache(BaseLookasideCache):
    """Cache whose every operation fails like an unreachable server."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def _fail(self, operation: str):
        self.calls.append(operation)
        raise InfrastructureError("cache", operation, "connection refused")

    async def get(self, key):
        self._fail("get")

    async def set_if_absent(self, key, value, ttl):
        self._fail("set_if_absent")

    async def set(self, key, value, ttl):
        self._fail("set")

    async def exists(self, key):
        self._fail("exists")

    async def delete(self, key):
        self._fail("delete")

    async def keys_matching(self, pattern):
        self._fail("keys_matching")


def make_input(**overrides) -> GenerationInput:
    defaults = dict(
        origin_country_id="MY",
        destination_country_id="ID",
        weight=Decimal("1.234"),
        created_at=datetime(2018, 11, 20, 11, 29, 32, tzinfo=timezone.utc),
        customer_id=uuid.UUID("de619854-b59b-425e-9db4-943979e1bd49"),
        customer_name="RedBox Logistics",
        customer_slug="redbox-logistics",
    )
    defaults.update(overrides)
    return GenerationInput(**defaults)


def make_record(tracking_number: str, offset_s: int = 0, **overrides) -> TrackingRecord:
    return TrackingRecord.from_input(
        tracking_number,
        make_input(**overrides),
        created_at=FIXED_NOW + timedelta(seconds=offset_s),
    )


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_input() -> GenerationInput:
    return make_input()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


# === FIXTURES: Backends ===


@pytest.fixture
def memory_cache() -> MemoryLookasideCache:
    return MemoryLookasideCache()


@pytest.fixture
def memory_store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture
def unavailable_cache() -> UnavailableCache:
    return UnavailableCache()


@pytest.fixture
def policy() -> FormatPolicy:
    return FormatPolicy()


@pytest.fixture
def fast_retry() -> RetryConfig:
    return RetryConfig(max_attempts=5, base_delay_s=0.0, max_delay_s=0.0, jitter=False)


@pytest.fixture
def no_sleep():
    """Replacement for asyncio.sleep that records requested delays."""
    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    _sleep.delays = delays  # type: ignore[attr-defined]
    return _sleep


@pytest.fixture
def input_factory():
    return make_input


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def scripted_random():
    return ScriptedRandom
