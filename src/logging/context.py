# src/logging/context.py — v1
"""Contextual logging support — attach request_id, operation, tracking_number to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per facade call.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_tracking_number: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "tracking_number", default=None
)


@dataclass(frozen=True)
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    operation: str | None = None
    tracking_number: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        operation=_operation.get(),
        tracking_number=_tracking_number.get(),
    )


def set_request_context(request_id: str, operation: str | None = None) -> None:
    """Set request-level context (called once per facade call)."""
    _request_id.set(request_id)
    _operation.set(operation)
    _tracking_number.set(None)


def set_tracking_context(tracking_number: str | None) -> None:
    """Set the candidate or identifier currently being handled."""
    _tracking_number.set(tracking_number)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _operation.set(None)
    _tracking_number.set(None)
