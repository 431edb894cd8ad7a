"""An auto-expiring cache of per-encounter statistics."""

from __future__ import annotations

import copy
import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from golbat.ttl_cache import TTLCache

DEFAULT_ENCOUNTER_TTL = 60 * 60.0


@dataclass
class EncounterValue:
    """What is known about one encounter id."""

    first_wild: int = 0
    first_encounter: int = 0
    _accounts_seen: set[str] = field(default_factory=set, repr=False)

    def set_account_seen(self, username: str) -> bool:
        """Mark ``username`` as having seen this encounter.

        Returns whether the account had already seen it.
        """
        if username in self._accounts_seen:
            return True
        self._accounts_seen.add(username)
        return False

    def num_accounts_seen(self) -> int:
        return len(self._accounts_seen)


class EncounterCache:
    """Encounter values keyed by encounter id, expiring after a TTL.

    Reading an entry does not extend its life. Values handed out are copies
    that share the set of accounts seen; changes to the other fields must be
    stored again with :meth:`put`.
    """

    def __init__(
        self,
        default_ttl: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            default_ttl = DEFAULT_ENCOUNTER_TTL
        self.default_ttl = default_ttl
        self._cache: TTLCache[int, EncounterValue] = TTLCache(default_ttl, clock)

    def update_ttl(self, encounter_id: int, ttl: float) -> None:
        """Restart the life of an existing entry with ``ttl``; no-op if absent."""
        self.put(encounter_id, self.get(encounter_id), ttl)

    def put(self, encounter_id: int, value: EncounterValue | None, ttl: float = 0.0) -> None:
        """Add or replace an entry. A ``ttl`` of 0 means the default TTL."""
        if value is not None:
            self._cache.set(encounter_id, copy.copy(value), ttl)

    def get(self, encounter_id: int) -> EncounterValue | None:
        value = self._cache.get(encounter_id)
        if value is None:
            return None
        return copy.copy(value)

    def get_or_create(self, encounter_id: int) -> EncounterValue:
        """Return the cached value, or a fresh one that is not yet stored."""
        value = self.get(encounter_id)
        return value if value is not None else EncounterValue()

    def run(self, stop_event: threading.Event, interval: float = 1.0) -> int:
        """Purge expired entries every ``interval`` seconds until stopped.

        Returns how many expired entries were removed.
        """
        removed = 0
        while not stop_event.wait(interval):
            removed += self._cache.delete_expired()
        return removed