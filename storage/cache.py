"""
In-memory key -> freshness token cache with time-based eviction.

Bounded by time, not size: an entry lives for `retention` seconds after it was
last written. Expired entries are dropped lazily, on access and on purge().
Nothing is persisted. A fresh process starts with an empty cache.
"""

import time
from typing import Callable


class ExpiringCache:
    def __init__(self, retention: float, clock: Callable[[], float] = time.monotonic):
        if retention <= 0:
            raise ValueError(f"retention must be positive, got {retention}")
        self._retention = retention
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}  # key -> (token, expires_at)

    def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        token, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return token

    def set(self, key: str, token: str) -> None:
        self._entries[key] = (token, self._clock() + self._retention)

    def purge(self) -> int:
        """Drop every expired entry. Returns how many were dropped."""
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
