"""A fixed set of locks shared out between integer keys."""

from __future__ import annotations

import threading


class IntStripedMutex:
    """Fine-grained locking by integer key.

    Equal keys always map to the same lock; the number of locks is fixed.
    """

    def __init__(self, stripes: int) -> None:
        if stripes < 1:
            raise ValueError("stripes must be at least 1")
        self._stripes = [threading.Lock() for _ in range(stripes)]

    def __len__(self) -> int:
        return len(self._stripes)

    def get_lock(self, key: int) -> threading.Lock:
        return self._stripes[key % len(self._stripes)]

    def lock(self, key: int) -> None:
        self.get_lock(key).acquire()

    def unlock(self, key: int) -> None:
        self.get_lock(key).release()

    def locked(self, key: int) -> bool:
        return self.get_lock(key).locked()