# src/generation/format_policy.py — v1
"""Candidate tracking-number construction.

A candidate is four concatenated segments:

    route (3) | customer (2) | time (2) | random (>= 4)

The first three are deterministic for a given route, customer slug and
wall-clock second; the random suffix separates concurrent requests that
share all three. Pure computation, no I/O.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Protocol

from trackgen.config.settings import FIXED_SEGMENTS_LENGTH, Settings
from trackgen.core.hashing import string_hash
from trackgen.core.models import GenerationInput

DEFAULT_CHARSET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class RandomSource(Protocol):
    """Anything exposing randrange(stop); must be safe for concurrent use."""

    def randrange(self, stop: int) -> int: ...


def create_random_source() -> RandomSource:
    """OS-entropy generator; thread-safe without extra locking."""
    return random.SystemRandom()


class FormatPolicy:
    """Builds candidates within [min_length, max_length] over a fixed charset."""

    def __init__(
        self,
        charset: str = DEFAULT_CHARSET,
        min_length: int = 8,
        max_length: int = 16,
        min_random_length: int = 4,
    ) -> None:
        if not charset:
            raise ValueError("charset must not be empty")
        self.charset = charset
        self.min_length = min_length
        self.max_length = max_length
        self.min_random_length = min_random_length
        self._symbols = frozenset(charset)

    @classmethod
    def from_settings(cls, settings: Settings) -> FormatPolicy:
        return cls(
            charset=settings.tracking_charset,
            min_length=settings.tracking_min_length,
            max_length=settings.tracking_max_length,
            min_random_length=settings.tracking_min_random_length,
        )

    @property
    def base(self) -> int:
        return len(self.charset)

    def generate(
        self,
        request: GenerationInput,
        entropy: RandomSource,
        now: datetime | None = None,
    ) -> str:
        """Produce one candidate for the request at instant `now` (default: current time)."""
        prefix = (
            self.route_segment(request.origin_country_id, request.destination_country_id)
            + self.customer_segment(request.customer_slug)
            + self.time_segment(now or datetime.now(timezone.utc))
        )
        suffix = self.random_segment(entropy, self.random_length(len(prefix)))
        return (prefix + suffix)[: self.max_length]

    def route_segment(self, origin: str, destination: str) -> str:
        o, d = origin[0], destination[0]
        return o + d + self.charset[(ord(o) + ord(d)) % self.base]

    def customer_segment(self, customer_slug: str) -> str:
        h = abs(string_hash(customer_slug))
        return self.charset[h % self.base] + self.charset[(h // self.base) % self.base]

    def time_segment(self, now: datetime) -> str:
        t = int(now.timestamp()) % (self.base * self.base)
        return self.charset[t % self.base] + self.charset[t // self.base]

    def random_segment(self, entropy: RandomSource, length: int) -> str:
        return "".join(self.charset[entropy.randrange(self.base)] for _ in range(length))

    def random_length(self, used: int = FIXED_SEGMENTS_LENGTH) -> int:
        return min(
            self.max_length - used,
            max(self.min_random_length, self.min_length - used),
        )

    def is_valid(self, tracking_number: str) -> bool:
        return (
            self.min_length <= len(tracking_number) <= self.max_length
            and all(ch in self._symbols for ch in tracking_number)
        )
