# src/store/store_factory.py — v1
"""Factory for record store instantiation."""

from __future__ import annotations

from trackgen.config.settings import Settings
from trackgen.store.base_record_store import BaseRecordStore


def create_record_store(settings: Settings | None = None) -> BaseRecordStore:
    """Instantiate the configured durable store.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseRecordStore implementation.
    """
    backend = "memory" if settings is None else settings.store_backend

    if backend == "memory":
        from trackgen.store.memory_store import MemoryRecordStore
        return MemoryRecordStore()

    if backend == "sqlite":
        from trackgen.store.sqlite_store import SqliteRecordStore
        return SqliteRecordStore(db_path=settings.store_sqlite_path)

    raise ValueError(f"Unsupported store backend: {backend!r}")
