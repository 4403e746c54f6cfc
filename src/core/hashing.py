# src/core/hashing.py — v1
"""Stable string hashing.

Python's built-in hash() is salted per process, so anything that must
produce the same value across workers and restarts goes through here.
"""

from __future__ import annotations

_MASK_32 = 0xFFFFFFFF
_SIGN_BIT = 0x80000000


def string_hash(value: str) -> int:
    """Signed 32-bit polynomial hash: h = 31 * h + ord(ch) over the string."""
    h = 0
    for ch in value:
        h = (31 * h + ord(ch)) & _MASK_32
    if h & _SIGN_BIT:
        h -= 1 << 32
    return h
