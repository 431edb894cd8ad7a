"""Geographic locations, bounding boxes and route helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Location:
    """A latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

    def tuple(self) -> tuple[float, float]:
        """Return the location as ``(latitude, longitude)``."""
        return self.latitude, self.longitude


@dataclass(frozen=True)
class ApiLocation:
    """A location as sent by API clients (``{"lat": .., "lon": ..}``)."""

    latitude: float
    longitude: float

    def to_location(self) -> Location:
        return Location(self.latitude, self.longitude)


@dataclass(frozen=True)
class Bbox:
    """A bounding box given by its longitude and latitude extremes."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float


USE_CURRENT_LOCATION = Location(0.0, 0.0)


def normalize_lon(value: float) -> float:
    """Wrap a longitude into the range [-180, 180)."""
    value = math.fmod(value + 180.0, 360.0)
    if value < 0:
        value += 360.0
    return value - 180.0


def split_route(route: Sequence[T], parts: int) -> list[list[T]]:
    """Split ``route`` into ``parts`` consecutive pieces.

    The first ``parts - 1`` pieces are all ``len(route) // parts`` long; the
    last piece takes whatever remains.
    """
    split_len = len(route) // parts
    routes: list[list[T]] = []
    start = 0
    for _ in range(parts - 1):
        routes.append(list(route[start:start + split_len]))
        start += split_len
    routes.append(list(route[start:]))
    return routes