# src/store/sqlite_store.py — v1
"""SQLite-based record store (STORE_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency. Statements run in a worker
thread via asyncio.to_thread so the event loop never waits on disk I/O;
a threading lock serializes access to the single connection. The unique
index on tracking_number backs up the cache reservation.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from trackgen.core.errors import CollisionError, InfrastructureError
from trackgen.core.models import SearchCriteria, TrackingRecord
from trackgen.store.base_record_store import (
    BaseRecordStore,
    check_order_field,
    plan_query,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS tracking_numbers (
    id TEXT PRIMARY KEY,
    tracking_number TEXT NOT NULL,
    created_at TEXT NOT NULL,
    origin_country_id TEXT NOT NULL,
    destination_country_id TEXT NOT NULL,
    weight TEXT NOT NULL,
    order_created_at TEXT NOT NULL,
    customer_id TEXT NOT NULL,
    customer_name TEXT NOT NULL,
    customer_slug TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_tracking_number ON tracking_numbers(tracking_number);
CREATE INDEX IF NOT EXISTS idx_created_at ON tracking_numbers(created_at);
CREATE INDEX IF NOT EXISTS idx_route ON tracking_numbers(origin_country_id, destination_country_id);
"""

_COLUMNS = (
    "id",
    "tracking_number",
    "created_at",
    "origin_country_id",
    "destination_country_id",
    "weight",
    "order_created_at",
    "customer_id",
    "customer_name",
    "customer_slug",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM tracking_numbers"


class SqliteRecordStore(BaseRecordStore):
    """SQLite-backed durable store."""

    def __init__(self, db_path: Path | str) -> None:
        if str(db_path) == ":memory:":
            target = ":memory:"
        else:
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            target = str(path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(target, check_same_thread=False)
        if target != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def exists(self, tracking_number: str) -> bool:
        rows = await self._run(
            "exists",
            "SELECT 1 FROM tracking_numbers WHERE tracking_number = ? LIMIT 1",
            (tracking_number,),
        )
        return bool(rows)

    async def get(self, tracking_number: str) -> TrackingRecord | None:
        rows = await self._run(
            "get", f"{_SELECT} WHERE tracking_number = ?", (tracking_number,)
        )
        return _to_record(rows[0]) if rows else None

    async def put(self, record: TrackingRecord) -> TrackingRecord:
        placeholders = ", ".join("?" for _ in _COLUMNS)
        sql = (
            f"INSERT INTO tracking_numbers ({', '.join(_COLUMNS)}) "
            f"VALUES ({placeholders})"
        )
        try:
            await self._run("put", sql, _to_row(record), commit=True)
        except sqlite3.IntegrityError as e:
            raise CollisionError(record.tracking_number, "store") from e
        return record

    async def query(
        self, criteria: SearchCriteria, limit: int | None = None
    ) -> list[TrackingRecord]:
        clauses: list[str] = []
        params: list[Any] = []
        for f in plan_query(criteria):
            if f.contains:
                clauses.append(f"LOWER({f.field}) LIKE ? ESCAPE '\\'")
                params.append(f"%{_escape_like(f.value.lower())}%")
            else:
                clauses.append(f"{f.field} = ?")
                params.append(f.value)

        sql = _SELECT
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        rows = await self._run("query", sql, tuple(params))
        return [_to_record(row) for row in rows]

    async def count(self) -> int:
        rows = await self._run("count", "SELECT COUNT(*) FROM tracking_numbers", ())
        return int(rows[0][0])

    async def list_records(
        self,
        order_by: str = "created_at",
        descending: bool = True,
        skip: int = 0,
        take: int | None = None,
    ) -> list[TrackingRecord]:
        check_order_field(order_by)
        direction = "DESC" if descending else "ASC"
        sql = f"{_SELECT} ORDER BY {order_by} {direction}, rowid {direction} LIMIT ? OFFSET ?"
        rows = await self._run(
            "list", sql, (-1 if take is None else take, skip)
        )
        return [_to_record(row) for row in rows]

    async def aclose(self) -> None:
        """Close the database connection once in-flight statements finish."""
        await asyncio.to_thread(self._close)

    async def _run(
        self,
        operation: str,
        sql: str,
        params: tuple[Any, ...],
        commit: bool = False,
    ) -> list[tuple[Any, ...]]:
        try:
            return await asyncio.to_thread(self._execute, sql, params, commit)
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            logger.error("SQLite %s failed: %s", operation, e)
            raise InfrastructureError("store", operation, str(e)) from e

    def _close(self) -> None:
        with self._lock:
            self._conn.close()

    def _execute(
        self, sql: str, params: tuple[Any, ...], commit: bool
    ) -> list[tuple[Any, ...]]:
        with self._lock:
            cursor = self._conn.execute(sql, params)
            rows = cursor.fetchall()
            if commit:
                self._conn.commit()
            return rows


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _to_row(record: TrackingRecord) -> tuple[Any, ...]:
    return (
        record.id,
        record.tracking_number,
        _iso(record.created_at),
        record.origin_country_id,
        record.destination_country_id,
        str(record.weight),
        _iso(record.order_created_at),
        str(record.customer_id),
        record.customer_name,
        record.customer_slug,
    )


def _to_record(row: tuple[Any, ...]) -> TrackingRecord:
    return TrackingRecord(**dict(zip(_COLUMNS, row)))
