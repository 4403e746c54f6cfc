# src/core/errors.py — v1
"""Failure taxonomy shared by the allocation engine, caches and stores.

Only GenerationExhaustedError and InfrastructureError are meant to reach
callers. CollisionError is retried inside the allocation engine and
CacheDeserializationError is downgraded to a cache miss.
"""

from __future__ import annotations


class TrackingError(Exception):
    """Base class for all trackgen failures."""


class CollisionError(TrackingError):
    """Candidate identifier is already reserved or persisted."""

    def __init__(self, tracking_number: str, source: str):
        self.tracking_number = tracking_number
        self.source = source
        super().__init__(f"Tracking number {tracking_number} exists in {source}")


class GenerationExhaustedError(TrackingError):
    """Every allocation attempt collided; not retried further."""

    def __init__(self, attempts: int, last_error: Exception | None = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Unable to generate unique tracking number after {attempts} attempts"
        )


class InfrastructureError(TrackingError):
    """Cache or record store is unreachable or erroring."""

    def __init__(self, component: str, operation: str, detail: str = ""):
        self.component = component
        self.operation = operation
        message = f"{component} {operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CacheDeserializationError(TrackingError):
    """Cached payload could not be decoded."""

    def __init__(self, key: str, detail: str = ""):
        self.key = key
        super().__init__(f"Cannot decode cached value for {key!r}: {detail}")
