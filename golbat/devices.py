"""Last known location of each scanning device."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from golbat.ttl_cache import TTLCache

_SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class DeviceLocation:
    latitude: float
    longitude: float
    last_update: int
    scan_context: str

    def to_api(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "last_update": self.last_update,
            "scan_context": self.scan_context,
        }


class DeviceRegistry:
    """Device locations that are forgotten ``device_hours`` after their last update.

    ``clock`` returns Unix time in seconds; it stamps updates and drives expiry.
    """

    def __init__(self, device_hours: float, clock: Callable[[], float] = time.time) -> None:
        self._ttl = device_hours * _SECONDS_PER_HOUR
        self._clock = clock
        self._locations: TTLCache[str, DeviceLocation] = TTLCache(self._ttl, clock)

    def update(self, device_id: str, lat: float, lon: float, scan_context: str) -> None:
        location = DeviceLocation(
            latitude=lat,
            longitude=lon,
            last_update=int(self._clock()),
            scan_context=scan_context,
        )
        self._locations.set(device_id, location, self._ttl)

    def all_devices(self) -> dict[str, dict[str, Any]]:
        return {device: loc.to_api() for device, loc in self._locations.items().items()}