# src/cache/keys.py — v1
"""Key layout shared by the allocation engine and the consistency layer."""

from __future__ import annotations

TRACKING_PREFIX = "tracking:"
SEARCH_PREFIX = "search:"
SNAPSHOT_KEY = "all_tracking_numbers"


def tracking_key(tracking_number: str) -> str:
    return f"{TRACKING_PREFIX}{tracking_number}"


def search_key(criteria_hash: str) -> str:
    return f"{SEARCH_PREFIX}{criteria_hash}"
