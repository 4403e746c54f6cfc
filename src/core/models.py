# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from trackgen.core.hashing import string_hash

CacheState = Literal["reserved", "permanent"]
RESERVED: CacheState = "reserved"
PERMANENT: CacheState = "permanent"

ResultSource = Literal["cache", "store"]

COUNTRY_CODE_PATTERN = r"^[A-Z]{2}$"
SLUG_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# === GENERATION ===


class GenerationInput(BaseModel):
    """Caller-supplied shipment details.

    Country codes are ISO 3166-1 alpha-2 (two uppercase letters), the slug is
    kebab-case and the weight is in kilograms. Invalid input raises
    pydantic.ValidationError before any identifier is built.
    """

    model_config = ConfigDict(frozen=True)

    origin_country_id: str = Field(pattern=COUNTRY_CODE_PATTERN)
    destination_country_id: str = Field(pattern=COUNTRY_CODE_PATTERN)
    weight: Decimal = Field(ge=Decimal("0.001"), le=Decimal("999.999"))
    created_at: datetime
    customer_id: uuid.UUID
    customer_name: str = Field(min_length=1, max_length=100, pattern=r"\S")
    customer_slug: str = Field(pattern=SLUG_PATTERN)


# === RECORDS ===


class TrackingInfo(BaseModel):
    """Public projection of a record, used in search and listing payloads."""

    tracking_number: str
    created_at: datetime
    origin_country_id: str
    destination_country_id: str
    weight: Decimal
    customer_id: uuid.UUID
    customer_name: str
    customer_slug: str


class TrackingRecord(BaseModel):
    """Durable entity: created once by the allocation engine, never updated."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    tracking_number: str
    created_at: datetime
    origin_country_id: str
    destination_country_id: str
    weight: Decimal
    order_created_at: datetime
    customer_id: uuid.UUID
    customer_name: str
    customer_slug: str

    @classmethod
    def from_input(
        cls,
        tracking_number: str,
        request: GenerationInput,
        created_at: datetime | None = None,
    ) -> TrackingRecord:
        return cls(
            tracking_number=tracking_number,
            created_at=created_at or utcnow(),
            origin_country_id=request.origin_country_id,
            destination_country_id=request.destination_country_id,
            weight=request.weight,
            order_created_at=request.created_at,
            customer_id=request.customer_id,
            customer_name=request.customer_name,
            customer_slug=request.customer_slug,
        )

    def to_info(self) -> TrackingInfo:
        return TrackingInfo(
            tracking_number=self.tracking_number,
            created_at=self.created_at,
            origin_country_id=self.origin_country_id,
            destination_country_id=self.destination_country_id,
            weight=self.weight,
            customer_id=self.customer_id,
            customer_name=self.customer_name,
            customer_slug=self.customer_slug,
        )


# === SEARCH ===


class SearchCriteria(BaseModel):
    """Optional search fields; blank strings count as absent."""

    model_config = ConfigDict(frozen=True)

    tracking_number: str | None = None
    customer_name: str | None = None
    customer_slug: str | None = None
    origin_country_id: str | None = None
    destination_country_id: str | None = None

    def normalized(self) -> SearchCriteria:
        """Strip whitespace and turn blank fields into None."""
        values = {
            name: (value.strip() or None) if isinstance(value, str) else value
            for name, value in self.model_dump().items()
        }
        return SearchCriteria(**values)

    @property
    def is_empty(self) -> bool:
        return all(not value for value in self.model_dump().values())

    def cache_key(self) -> str:
        """32-bit hash of the colon-joined fields.

        Distinct criteria can share a key; a hit for a colliding tuple
        returns the other tuple's results until the entry expires.
        """
        raw = ":".join(
            value or ""
            for value in (
                self.tracking_number,
                self.customer_name,
                self.customer_slug,
                self.origin_country_id,
                self.destination_country_id,
            )
        )
        return str(string_hash(raw))


class SearchResponse(BaseModel):
    """Search results plus where they were served from."""

    results: list[TrackingInfo] = Field(default_factory=list)
    total_found: int = 0
    message: str = "No results found"
    searched_at: datetime = Field(default_factory=utcnow)
    source: ResultSource = "store"

    @classmethod
    def build(cls, results: list[TrackingInfo], source: ResultSource) -> SearchResponse:
        return cls(
            results=results,
            total_found=len(results),
            message="Results found" if results else "No results found",
            source=source,
        )


# === LISTING ===


class PagedResponse(BaseModel):
    """One page of records, newest first."""

    data: list[TrackingInfo] = Field(default_factory=list)
    current_page: int
    page_size: int
    total_elements: int
    total_pages: int
    has_next: bool
    has_previous: bool
    retrieved_at: datetime = Field(default_factory=utcnow)
    synced_with_cache: bool = False

    @classmethod
    def build(
        cls,
        data: list[TrackingInfo],
        page: int,
        size: int,
        total: int,
        synced_with_cache: bool,
    ) -> PagedResponse:
        total_pages = math.ceil(total / size)
        return cls(
            data=data,
            current_page=page,
            page_size=size,
            total_elements=total,
            total_pages=total_pages,
            has_next=page < total_pages - 1,
            has_previous=page > 0,
            synced_with_cache=synced_with_cache,
        )
