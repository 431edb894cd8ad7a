"""Geofences, point-in-polygon tests and GeoJSON area matching."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from golbat.geo.areas import AreaName
from golbat.geo.location import Location

Point = Sequence[float]
Ring = Sequence[Point]

_GEOMETRY_TYPES = frozenset(
    {
        "Point",
        "MultiPoint",
        "LineString",
        "MultiLineString",
        "Polygon",
        "MultiPolygon",
        "GeometryCollection",
    }
)


def _div(a: float, b: float) -> float:
    """Divide with IEEE semantics for a zero divisor."""
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


@dataclass(frozen=True)
class BoundingBox:
    minimum_latitude: float = 0.0
    minimum_longitude: float = 0.0
    maximum_latitude: float = 0.0
    maximum_longitude: float = 0.0


class Geofence:
    """A polygon given by its vertices; the last vertex joins the first."""

    def __init__(self, fence: Iterable[Location] | None = None) -> None:
        self.fence: list[Location] = list(fence or [])

    def __repr__(self) -> str:
        return f"Geofence({self.fence!r})"

    def bounding_box(self) -> BoundingBox:
        if not self.fence:
            return BoundingBox()
        lats = [p.latitude for p in self.fence]
        lons = [p.longitude for p in self.fence]
        return BoundingBox(
            minimum_latitude=min(lats),
            minimum_longitude=min(lons),
            maximum_latitude=max(lats),
            maximum_longitude=max(lons),
        )

    def to_polygon_string(self) -> str:
        return ",".join(f"{p.latitude:f} {p.longitude:f}" for p in self.fence)

    def points(self) -> list[Location]:
        return self.fence

    def add(self, point: Location) -> None:
        self.fence.append(point)

    def is_closed(self) -> bool:
        return len(self.fence) >= 3

    def contains(self, point: Location) -> bool:
        """Ray-casting containment test."""
        if not self.is_closed():
            return False
        inside = _raycast_intersects(point, self.fence[-1], self.fence[0])
        for start, end in zip(self.fence, self.fence[1:]):
            if _raycast_intersects(point, start, end):
                inside = not inside
        return inside

    def to_feature(self) -> dict[str, Any]:
        """Return the fence as a GeoJSON Polygon feature."""
        ring = [[p.longitude, p.latitude] for p in self.fence]
        return {
            "type": "Feature",
            "geometry": {"type": "Polygon", "coordinates": [ring]},
            "properties": {},
        }


def _raycast_intersects(point: Location, start: Location, end: Location) -> bool:
    if start.longitude > end.longitude:
        start, end = end, start

    lat, lon = point.latitude, point.longitude
    while lon == start.longitude or lon == end.longitude:
        lon = math.nextafter(lon, math.inf)

    if lon < start.longitude or lon > end.longitude:
        return False

    if start.latitude > end.latitude:
        if lat > start.latitude:
            return False
        if lat < end.latitude:
            return True
    else:
        if lat > end.latitude:
            return False
        if lat < start.latitude:
            return True

    ray_slope = _div(lon - start.longitude, lat - start.latitude)
    diag_slope = _div(end.longitude - start.longitude, end.latitude - start.latitude)
    return ray_slope >= diag_slope


def _ray_intersect(p: Point, s: Point, e: Point) -> tuple[bool, bool]:
    """Return (intersects, on_boundary) for a ray from ``p`` against edge s-e."""
    px, py = float(p[0]), float(p[1])
    if s[0] > e[0]:
        s, e = e, s
    if px == s[0]:
        if py == s[1]:
            return False, True
        if s[0] == e[0]:
            if s[1] > e[1] and s[1] >= py >= e[1]:
                return False, True
            if e[1] > s[1] and e[1] >= py >= s[1]:
                return False, True
        px = math.nextafter(px, math.inf)
    elif px == e[0]:
        if py == e[1]:
            return False, True
        px = math.nextafter(px, math.inf)

    if px < s[0] or px > e[0]:
        return False, False

    if s[1] > e[1]:
        if py > s[1]:
            return False, False
        if py < e[1]:
            return True, False
    else:
        if py > e[1]:
            return False, False
        if py < s[1]:
            return True, False

    ray_slope = _div(py - s[1], px - s[0])
    diag_slope = _div(e[1] - s[1], e[0] - s[0])
    if ray_slope == diag_slope:
        return False, True
    return ray_slope <= diag_slope, False


def _ring_contains(ring: Ring, point: Point) -> bool:
    if not ring:
        return False
    xs = [c[0] for c in ring]
    ys = [c[1] for c in ring]
    if not (min(xs) <= point[0] <= max(xs) and min(ys) <= point[1] <= max(ys)):
        return False
    inside, on = _ray_intersect(point, ring[0], ring[-1])
    if on:
        return True
    for start, end in zip(ring, ring[1:]):
        crosses, on = _ray_intersect(point, start, end)
        if on:
            return True
        if crosses:
            inside = not inside
    return inside


def polygon_contains(polygon: Sequence[Ring], point: Point) -> bool:
    """Test an ``[x, y]`` point against a GeoJSON polygon (outer ring and holes)."""
    if not polygon or not _ring_contains(polygon[0], point):
        return False
    return not any(_ring_contains(hole, point) for hole in polygon[1:])


def multi_polygon_contains(multi_polygon: Iterable[Sequence[Ring]], point: Point) -> bool:
    return any(polygon_contains(polygon, point) for polygon in multi_polygon)


def _property_string(properties: Any, key: str, default: str) -> str:
    if isinstance(properties, dict):
        value = properties.get(key)
        if isinstance(value, str):
            return value
    return default


def _feature_area(feature: dict[str, Any], point: Point) -> AreaName | None:
    geometry = feature.get("geometry") or {}
    kind = geometry.get("type")
    coordinates = geometry.get("coordinates") or []
    if kind == "Polygon":
        matched = polygon_contains(coordinates, point)
    elif kind == "MultiPolygon":
        matched = multi_polygon_contains(coordinates, point)
    else:
        return None
    if not matched:
        return None
    properties = feature.get("properties")
    name = _property_string(properties, "name", "unknown")
    parent = _property_string(properties, "parent", name)
    return AreaName(parent=parent, name=name)


def match_geofences(
    feature_collection: dict[str, Any] | None, lat: float, lon: float
) -> list[AreaName]:
    """Return the areas of all polygon features containing the point."""
    if feature_collection is None:
        return []
    point = (lon, lat)
    areas = []
    for feature in feature_collection.get("features") or []:
        area = _feature_area(feature, point)
        if area is not None:
            areas.append(area)
    return areas


def _flatten_positions(coordinates: Any) -> Iterable[Sequence[float]]:
    if (
        isinstance(coordinates, (list, tuple))
        and coordinates
        and isinstance(coordinates[0], (int, float))
    ):
        yield coordinates
        return
    for item in coordinates or []:
        yield from _flatten_positions(item)


class GeofenceIndex:
    """Features pre-filtered by bounding box for fast area lookups."""

    def __init__(self, feature_collection: dict[str, Any] | None) -> None:
        self._entries: list[tuple[tuple[float, float, float, float], dict[str, Any]]] = []
        if feature_collection is None:
            return
        for feature in feature_collection.get("features") or []:
            geometry = feature.get("geometry") or {}
            positions = list(_flatten_positions(geometry.get("coordinates")))
            if not positions:
                continue
            xs = [p[0] for p in positions]
            ys = [p[1] for p in positions]
            self._entries.append(((min(xs), min(ys), max(xs), max(ys)), feature))

    def __len__(self) -> int:
        return len(self._entries)

    def match(self, lat: float, lon: float) -> list[AreaName]:
        point = (lon, lat)
        areas = []
        for (min_x, min_y, max_x, max_y), feature in self._entries:
            if not (min_x <= lon <= max_x and min_y <= lat <= max_y):
                continue
            area = _feature_area(feature, point)
            if area is not None:
                areas.append(area)
        return areas


def normalise_fence_request(body: bytes | str) -> dict[str, Any]:
    """Turn a GeoJSON geometry, a GeoJSON feature or a ``{"fence": [...]}``
    body into a GeoJSON feature.

    Raises ValueError when the body is none of these.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValueError(f"invalid fence request: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("invalid fence request: expected a JSON object")

    kind = data.get("type")
    if kind in _GEOMETRY_TYPES:
        return {"type": "Feature", "geometry": data, "properties": {}}
    if kind == "Feature":
        feature = dict(data)
        if not isinstance(feature.get("properties"), dict):
            feature["properties"] = {}
        return feature

    fence = data.get("fence")
    if fence is None:
        fence = []
    if not isinstance(fence, list):
        raise ValueError("invalid fence request: 'fence' must be a list")
    locations = []
    for entry in fence:
        if not isinstance(entry, dict):
            raise ValueError("invalid fence request: fence entries must be objects")
        try:
            locations.append(
                Location(float(entry.get("lat", 0.0)), float(entry.get("lon", 0.0)))
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid fence request: {exc}") from exc
    return Geofence(locations).to_feature()