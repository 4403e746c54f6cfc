# src/store/memory_store.py — v1
"""In-process record store (STORE_BACKEND=memory).

Non-persistent; intended for tests and single-process demos.
"""

from __future__ import annotations

from trackgen.core.errors import CollisionError
from trackgen.core.models import SearchCriteria, TrackingRecord
from trackgen.store.base_record_store import (
    BaseRecordStore,
    check_order_field,
    plan_query,
)


class MemoryRecordStore(BaseRecordStore):
    """Dict-backed store keyed by tracking number."""

    def __init__(self) -> None:
        self._records: dict[str, TrackingRecord] = {}

    async def exists(self, tracking_number: str) -> bool:
        return tracking_number in self._records

    async def get(self, tracking_number: str) -> TrackingRecord | None:
        return self._records.get(tracking_number)

    async def put(self, record: TrackingRecord) -> TrackingRecord:
        if record.tracking_number in self._records:
            raise CollisionError(record.tracking_number, "store")
        self._records[record.tracking_number] = record
        return record

    async def query(
        self, criteria: SearchCriteria, limit: int | None = None
    ) -> list[TrackingRecord]:
        filters = plan_query(criteria)
        matched = [
            r for r in self._records.values()
            if all(f.matches(r) for f in filters)
        ]
        return matched if limit is None else matched[:limit]

    async def count(self) -> int:
        return len(self._records)

    async def list_records(
        self,
        order_by: str = "created_at",
        descending: bool = True,
        skip: int = 0,
        take: int | None = None,
    ) -> list[TrackingRecord]:
        check_order_field(order_by)
        # ties fall back to insertion order, like rowid in the SQLite store
        ordered = sorted(
            enumerate(self._records.values()),
            key=lambda pair: (getattr(pair[1], order_by), pair[0]),
            reverse=descending,
        )
        end = None if take is None else skip + take
        return [record for _, record in ordered[skip:end]]
