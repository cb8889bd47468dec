"""Summary: In-memory time-to-live cache.

Importance: Absorbs repeated inbox polling without re-querying every provider.
Alternatives: Use Redis or a cachetools TTLCache with background eviction.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


class TtlCache(Generic[T]):
    """Summary: Key-value store whose entries expire lazily on access.

    Importance: Keeps cost proportional to reads; expired entries linger until touched.
    Alternatives: Sweep expired entries on a background timer.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Summary: Initialize an empty cache.

        Importance: An injectable clock lets tests simulate expiry without sleeping.
        Alternatives: Read the system clock directly.
        """

        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def set(self, key: str, value: T, ttl: float | None = None) -> None:
        """Store a value, expiring ``ttl`` seconds from now when given."""

        expires_at = self._clock() + ttl if ttl is not None else None
        self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def get(self, key: str, default: T | None = None) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return default
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return default
        return entry.value

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return False
        return True

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        """Count stored entries, including expired ones not yet touched."""

        return len(self._entries)

    def __len__(self) -> int:
        return self.size()
