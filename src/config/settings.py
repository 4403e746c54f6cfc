# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for identifier format, cache lifetimes, retry policy,
backend selection and logging.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# route (3) + customer (2) + time (2)
FIXED_SEGMENTS_LENGTH = 7


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Identifier format ===
    tracking_charset: str = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
    tracking_min_length: int = 8
    tracking_max_length: int = 16
    tracking_min_random_length: int = 4

    # === Cache lifetimes ===
    cache_ttl_hours: int = 24
    snapshot_ttl_hours: int = 24
    search_cache_ttl_minutes: int = 30

    # === Collision retry ===
    max_generation_attempts: int = 5
    retry_base_delay_s: float = 0.1
    retry_backoff_factor: float = 2.0
    retry_max_delay_s: float = 2.0
    retry_jitter: bool = True

    # === Search ===
    search_default_limit: int = 50

    # === Lookaside cache ===
    cache_backend: Literal["memory", "redis"] = "memory"
    cache_redis_url: str = ""

    # === Record store ===
    store_backend: Literal["memory", "sqlite"] = "sqlite"
    store_sqlite_path: Path = Path("~/.trackgen/tracking_numbers.db")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("max_generation_attempts", "search_default_limit")
    @classmethod
    def validate_positive(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if not self.tracking_charset:
            errors.append("TRACKING_CHARSET must not be empty")
        elif len(set(self.tracking_charset)) != len(self.tracking_charset):
            errors.append("TRACKING_CHARSET must not contain duplicate symbols")

        if self.tracking_min_length > self.tracking_max_length:
            errors.append("TRACKING_MIN_LENGTH must be <= TRACKING_MAX_LENGTH")

        floor = FIXED_SEGMENTS_LENGTH + self.tracking_min_random_length
        if self.tracking_max_length < floor:
            errors.append(
                f"TRACKING_MAX_LENGTH must be >= {floor} "
                "(fixed segments plus random floor)"
            )

        if self.retry_base_delay_s < 0 or self.retry_max_delay_s < 0:
            errors.append("retry delays must be >= 0")

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(hours=self.cache_ttl_hours)

    @property
    def snapshot_ttl(self) -> timedelta:
        return timedelta(hours=self.snapshot_ttl_hours)

    @property
    def search_cache_ttl(self) -> timedelta:
        return timedelta(minutes=self.search_cache_ttl_minutes)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-process config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
