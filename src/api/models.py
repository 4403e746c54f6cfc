# src/api/models.py — v1
"""API-level models: AllocationResponse, ErrorResponse."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from trackgen.core.errors import GenerationExhaustedError, InfrastructureError
from trackgen.core.models import TrackingRecord, utcnow


class AllocationResponse(BaseModel):
    """Return value of TrackingService.next_tracking_number()."""

    tracking_number: str
    created_at: datetime
    status: str = "success"

    @classmethod
    def from_record(cls, record: TrackingRecord) -> AllocationResponse:
        return cls(tracking_number=record.tracking_number, created_at=record.created_at)


class ErrorResponse(BaseModel):
    """Machine-readable error code plus a message safe to show callers."""

    error_code: str
    message: str
    timestamp: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorResponse:
        if isinstance(exc, GenerationExhaustedError):
            return cls(
                error_code="GENERATION_FAILED",
                message="Unable to generate unique tracking number after multiple attempts",
            )
        if isinstance(exc, InfrastructureError):
            return cls(
                error_code="SERVICE_UNAVAILABLE",
                message="A backing service is unavailable, please retry later",
            )
        if isinstance(exc, ValueError):
            return cls(error_code="INVALID_PARAMETERS", message=str(exc))
        return cls(
            error_code="INTERNAL_ERROR",
            message="An unexpected error occurred while generating tracking number",
        )
