"""A thread-safe key/value cache whose entries expire after a time-to-live."""

from __future__ import annotations

import threading
import time
from typing import Callable, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """Entries expire ``ttl`` seconds after they were set.

    A ``ttl`` of ``None`` or ``0`` in :meth:`set` means the default TTL; a
    negative ``ttl`` (or a non-positive default) means the entry never
    expires. Reading an entry does not extend its life.
    """

    def __init__(
        self,
        default_ttl: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[K, tuple[V, float | None]] = {}
        self._lock = threading.Lock()

    def _expiry(self, ttl: float | None) -> float | None:
        if ttl is None or ttl == 0:
            ttl = self.default_ttl
        if ttl is None or ttl <= 0:
            return None
        return self._clock() + ttl

    def _alive(self, expires: float | None, now: float) -> bool:
        return expires is None or now < expires

    def set(self, key: K, value: V, ttl: float | None = None) -> None:
        with self._lock:
            self._entries[key] = (value, self._expiry(ttl))

    def get(self, key: K) -> V | None:
        """Return the live value for ``key``, or None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires = entry
            if not self._alive(expires, self._clock()):
                del self._entries[key]
                return None
            return value

    def delete(self, key: K) -> bool:
        """Remove ``key``; return whether it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def items(self) -> dict[K, V]:
        """A snapshot of all live entries."""
        with self._lock:
            now = self._clock()
            return {
                key: value
                for key, (value, expires) in self._entries.items()
                if self._alive(expires, now)
            }

    def delete_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [
                key for key, (_, expires) in self._entries.items()
                if not self._alive(expires, now)
            ]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def __len__(self) -> int:
        return len(self.items())