# src/store/base_record_store.py — v1
"""Abstract record store interface and the shared search plan.

The store is the source of truth for identifier existence. put() must
reject a second record with an already-persisted tracking number by raising
CollisionError; any other backend failure surfaces as InfrastructureError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from trackgen.core.models import SearchCriteria, TrackingRecord

ORDERABLE_FIELDS = ("created_at", "tracking_number")


@dataclass(frozen=True)
class FieldFilter:
    """One predicate of a search plan."""

    field: str
    value: str
    contains: bool = False

    def matches(self, record: TrackingRecord) -> bool:
        actual = str(getattr(record, self.field))
        if self.contains:
            return self.value.lower() in actual.lower()
        return actual == self.value


def plan_query(criteria: SearchCriteria) -> list[FieldFilter]:
    """Translate criteria into conjunctive filters.

    Only the most specific populated field is used: tracking number, then
    customer name, then customer slug, then origin (with destination when
    both are given), then destination. Empty criteria give no filters.
    """
    c = criteria.normalized()
    if c.tracking_number:
        return [FieldFilter("tracking_number", c.tracking_number)]
    if c.customer_name:
        return [FieldFilter("customer_name", c.customer_name, contains=True)]
    if c.customer_slug:
        return [FieldFilter("customer_slug", c.customer_slug, contains=True)]
    if c.origin_country_id:
        filters = [FieldFilter("origin_country_id", c.origin_country_id)]
        if c.destination_country_id:
            filters.append(
                FieldFilter("destination_country_id", c.destination_country_id)
            )
        return filters
    if c.destination_country_id:
        return [FieldFilter("destination_country_id", c.destination_country_id)]
    return []


class BaseRecordStore(ABC):
    """Unified interface for durable record backends."""

    @abstractmethod
    async def exists(self, tracking_number: str) -> bool:
        """Authoritative existence check."""

    @abstractmethod
    async def get(self, tracking_number: str) -> TrackingRecord | None:
        """Fetch a record by tracking number."""

    @abstractmethod
    async def put(self, record: TrackingRecord) -> TrackingRecord:
        """Persist a new record.

        Raises:
            CollisionError: If the tracking number is already persisted.
            InfrastructureError: On any other backend failure.
        """

    @abstractmethod
    async def query(
        self, criteria: SearchCriteria, limit: int | None = None
    ) -> list[TrackingRecord]:
        """Search by criteria using plan_query() semantics."""

    @abstractmethod
    async def count(self) -> int:
        """Total number of persisted records."""

    @abstractmethod
    async def list_records(
        self,
        order_by: str = "created_at",
        descending: bool = True,
        skip: int = 0,
        take: int | None = None,
    ) -> list[TrackingRecord]:
        """Ordered slice of all records; take=None means no upper bound."""

    async def aclose(self) -> None:
        """Release backend resources."""


def check_order_field(order_by: str) -> None:
    if order_by not in ORDERABLE_FIELDS:
        raise ValueError(f"Unsupported order field: {order_by!r}")
