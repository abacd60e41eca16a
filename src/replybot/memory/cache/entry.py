"""
Time-stamped cache entries.

A :class:`CacheEntry` pairs a value with the wall-clock millisecond at which it
was fetched. Freshness is always judged against a TTL supplied by the caller so
the same entry type can back both the infinite-TTL settings snapshot and the
hourly model list.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


def now_ms() -> int:
    """Current wall-clock time in integer milliseconds."""

    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Immutable value + fetch timestamp. Replace the entry, never mutate it."""

    data: T
    fetched_at_ms: int

    def age_ms(self, now: int | None = None) -> int:
        return (now_ms() if now is None else now) - self.fetched_at_ms

    def is_fresh(self, ttl_ms: float, now: int | None = None) -> bool:
        """Return ``True`` while the entry is younger than ``ttl_ms``."""

        if math.isinf(ttl_ms):
            return True
        return self.age_ms(now) < ttl_ms


__all__ = ["CacheEntry", "now_ms"]
