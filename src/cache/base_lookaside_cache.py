# src/cache/base_lookaside_cache.py — v1
"""Abstract lookaside cache interface.

Values are plain strings. Every write carries a TTL; entries vanish on
expiry regardless of content. Backend failures surface as InfrastructureError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta


class BaseLookasideCache(ABC):
    """Unified interface for key-value cache backends."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value for key, or None if absent or expired."""

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl: timedelta) -> bool:
        """Atomically write key only if it does not exist. True if written."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        """Unconditionally write key with expiry."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether key is present and unexpired."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key; a missing key is not an error."""

    @abstractmethod
    async def keys_matching(self, pattern: str) -> list[str]:
        """List keys matching a glob-style pattern (e.g. 'search:*')."""

    async def aclose(self) -> None:
        """Release backend resources."""
