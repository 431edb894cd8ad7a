"""Tappables: map objects that hold a Pokemon encounter or an item reward."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

# A lured or fort tappable lives this long; no despawn time is known for it.
FORT_TAPPABLE_TTL = 120
# How long a spawnpoint tappable without a known despawn time is kept.
UNKNOWN_TTL_NEW = 20 * 60
# How far an already expired, unverified expiry is pushed out.
UNKNOWN_TTL_EXTEND = 10 * 60

_SECONDS_PER_HOUR = 3600
_FLOAT_TOLERANCE = 1e-6
_HEX_RE = re.compile(r"[+-]?[0-9a-fA-F]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _float_almost_equal(a: float, b: float, tolerance: float) -> bool:
    return math.isclose(a, b, rel_tol=0.0, abs_tol=tolerance)


@dataclass
class Tappable:
    """A tappable and what it rewards.

    Either ``fort_id`` or ``spawn_id`` tells where it was found. Optional
    fields are None when unknown.
    """

    id: int = 0
    lat: float = 0.0
    lon: float = 0.0
    fort_id: str | None = None
    spawn_id: int | None = None
    type: str = ""
    encounter: int | None = None
    item_id: int | None = None
    count: int | None = None
    expire_timestamp: int | None = None
    expire_timestamp_verified: bool = False
    updated: int = 0

    def set_spawnpoint(self, spawnpoint_hex: str) -> None:
        """Set ``spawn_id`` from a hexadecimal spawnpoint id; empty text is ignored.

        Raises ValueError when the text is not a 64-bit signed hex number.
        """
        if spawnpoint_hex == "":
            return
        if not _HEX_RE.fullmatch(spawnpoint_hex):
            raise ValueError(f"invalid spawnpoint id {spawnpoint_hex!r}")
        value = int(spawnpoint_hex, 16)
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise ValueError(f"spawnpoint id {spawnpoint_hex!r} out of range")
        self.spawn_id = value

    def set_expire_timestamp(self, timestamp_ms: int, despawn_sec: int | None = None) -> None:
        """Work out when the tappable expires, as seen at ``timestamp_ms``.

        ``despawn_sec`` is the second of the hour at which the tappable's
        spawnpoint despawns, or None when that is not known. Only a known
        despawn second yields a verified expiry.
        """
        self.expire_timestamp_verified = False
        now = int(timestamp_ms / 1000)
        if self.spawn_id:
            if despawn_sec is not None:
                local = datetime.fromtimestamp(now)
                second_of_hour = local.second + local.minute * 60
                offset = int(despawn_sec) - second_of_hour
                if offset < 0:
                    offset += _SECONDS_PER_HOUR
                self.expire_timestamp = now + offset
                self.expire_timestamp_verified = True
            else:
                self.set_unknown_timestamp(now)
        elif self.fort_id:
            self.expire_timestamp = now + FORT_TAPPABLE_TTL

    def set_unknown_timestamp(self, now: int) -> None:
        """Guess an expiry when the despawn time is unknown."""
        if self.expire_timestamp is None:
            self.expire_timestamp = now + UNKNOWN_TTL_NEW
        elif self.expire_timestamp < now:
            self.expire_timestamp = now + UNKNOWN_TTL_EXTEND

    def has_changes(self, other: Tappable) -> bool:
        """Whether ``other`` differs in anything worth saving.

        The update time is ignored; coordinates are compared with a tolerance.
        """
        return (
            self.id != other.id
            or self.fort_id != other.fort_id
            or self.spawn_id != other.spawn_id
            or self.type != other.type
            or self.encounter != other.encounter
            or self.item_id != other.item_id
            or self.count != other.count
            or self.expire_timestamp != other.expire_timestamp
            or self.expire_timestamp_verified != other.expire_timestamp_verified
            or not _float_almost_equal(self.lat, other.lat, _FLOAT_TOLERANCE)
            or not _float_almost_equal(self.lon, other.lon, _FLOAT_TOLERANCE)
        )

    def to_json(self) -> dict[str, Any]:
        """The tappable as served by the API."""
        return {
            "id": self.id,
            "lat": self.lat,
            "lon": self.lon,
            "fort_id": self.fort_id,
            "spawn_id": self.spawn_id,
            "type": self.type,
            "pokemon_id": self.encounter,
            "item_id": self.item_id,
            "count": self.count,
            "expire_timestamp": self.expire_timestamp,
            "expire_timestamp_verified": self.expire_timestamp_verified,
            "updated": self.updated,
        }