# src/generation/retry.py — v1
"""Collision retry policy with capped exponential backoff."""

from __future__ import annotations

import random
from dataclasses import dataclass

from trackgen.config.settings import Settings


@dataclass(frozen=True)
class RetryConfig:
    """Backoff configuration for collision retries."""

    max_attempts: int = 5
    base_delay_s: float = 0.1
    backoff_factor: float = 2.0
    max_delay_s: float = 2.0
    jitter: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryConfig:
        return cls(
            max_attempts=settings.max_generation_attempts,
            base_delay_s=settings.retry_base_delay_s,
            backoff_factor=settings.retry_backoff_factor,
            max_delay_s=settings.retry_max_delay_s,
            jitter=settings.retry_jitter,
        )


def compute_delay(config: RetryConfig, attempt: int) -> float:
    """Delay before retry number `attempt` (0-based), never above max_delay_s."""
    delay = min(config.base_delay_s * (config.backoff_factor ** attempt), config.max_delay_s)
    if config.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return min(delay, config.max_delay_s)
