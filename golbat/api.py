"""Validation of API request bodies for gym lookups and searches."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from golbat.geo.location import ApiLocation, Bbox

MAX_GYM_IDS = 500
DEFAULT_SEARCH_LIMIT = 500
MAX_SEARCH_LIMIT = 10000
MAX_SEARCH_DISTANCE = 500_000


class ApiError(Exception):
    """A request that must be answered with an HTTP error."""

    def __init__(self, status: int, body: Any) -> None:
        super().__init__(f"{int(status)}: {body}")
        self.status = int(status)
        self.body = body


@dataclass(frozen=True)
class LocationDistance:
    location: ApiLocation
    distance: float


@dataclass(frozen=True)
class GymSearchFilter:
    """One search filter; all given criteria must match."""

    name: str | None = None
    description: str | None = None
    location_distance: LocationDistance | None = None
    bbox: Bbox | None = None


@dataclass(frozen=True)
class GymSearch:
    filters: list[GymSearchFilter] = field(default_factory=list)
    limit: int = DEFAULT_SEARCH_LIMIT


def check_api_secret(header: str, api_secret: str) -> bool:
    """Whether the secret header satisfies the configured API secret."""
    if not api_secret:
        return True
    return header == api_secret


def _bad_request(message: str) -> ApiError:
    return ApiError(HTTPStatus.BAD_REQUEST, {"error": message})


def _ids_from(payload: Any) -> list[str]:
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get("ids")
        if payload is None:
            return []
    if not isinstance(payload, list):
        raise TypeError("ids must be a list")
    ids = []
    for item in payload:
        if item is None:
            ids.append("")
        elif isinstance(item, str):
            ids.append(item)
        else:
            raise TypeError("ids must be strings")
    return ids


def normalise_gym_ids(payload: Any) -> list[str]:
    """Extract gym ids from ``{"ids": [...]}`` or a bare list.

    Empty ids are dropped and duplicates removed, keeping first-seen order.
    Raises ApiError for a malformed body or too many ids.
    """
    try:
        ids = _ids_from(payload)
    except TypeError:
        raise _bad_request('invalid JSON body; expected {"ids":[...] }') from None
    unique = list(dict.fromkeys(i for i in ids if i))
    if len(unique) > MAX_GYM_IDS:
        raise ApiError(
            HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
            {"error": "too many ids", "max_supported": MAX_GYM_IDS},
        )
    return unique


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _float(value: Any) -> float:
    if value is None:
        return 0.0
    if not _is_number(value):
        raise TypeError("expected a number")
    return float(value)


def _optional_object(value: Any) -> dict[str, Any] | None:
    if value is None or isinstance(value, dict):
        return value
    raise TypeError("expected an object")


def _optional_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise TypeError("expected a string")


def _parse_filter(data: dict[str, Any]) -> GymSearchFilter:
    location_distance = None
    raw_ld = _optional_object(data.get("location_distance"))
    if raw_ld is not None:
        raw_loc = _optional_object(raw_ld.get("location")) or {}
        location_distance = LocationDistance(
            location=ApiLocation(_float(raw_loc.get("lat")), _float(raw_loc.get("lon"))),
            distance=_float(raw_ld.get("distance")),
        )
    bbox = None
    raw_bbox = _optional_object(data.get("bbox"))
    if raw_bbox is not None:
        bbox = Bbox(
            min_lon=_float(raw_bbox.get("min_lon")),
            min_lat=_float(raw_bbox.get("min_lat")),
            max_lon=_float(raw_bbox.get("max_lon")),
            max_lat=_float(raw_bbox.get("max_lat")),
        )
    return GymSearchFilter(
        name=_optional_text(data.get("name")),
        description=_optional_text(data.get("description")),
        location_distance=location_distance,
        bbox=bbox,
    )


def _decode_search(payload: Any) -> tuple[list[GymSearchFilter], int | None]:
    if payload is None:
        return [], None
    if not isinstance(payload, dict):
        raise TypeError("expected an object")
    raw_filters = payload.get("filters")
    if raw_filters is None:
        raw_filters = []
    if not isinstance(raw_filters, list):
        raise TypeError("filters must be a list")
    filters = [_parse_filter(_optional_object(f) or {}) for f in raw_filters]
    limit = payload.get("limit")
    if limit is not None and (not isinstance(limit, int) or isinstance(limit, bool)):
        raise TypeError("limit must be an integer")
    return filters, limit


def _in_range(lat: float, lon: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lon <= 180


def _validate_filter(search_filter: GymSearchFilter) -> GymSearchFilter:
    ld = search_filter.location_distance
    if ld is not None:
        if ld.distance <= 0:
            raise _bad_request("distance must be > 0")
        if ld.distance > MAX_SEARCH_DISTANCE:
            ld = LocationDistance(ld.location, float(MAX_SEARCH_DISTANCE))
            search_filter = GymSearchFilter(
                search_filter.name, search_filter.description, ld, search_filter.bbox
            )
        if not _in_range(ld.location.latitude, ld.location.longitude):
            raise _bad_request("lat must be [-90,90], lon must be [-180,180]")
    bbox = search_filter.bbox
    if bbox is not None:
        if not (_in_range(bbox.min_lat, bbox.min_lon) and _in_range(bbox.max_lat, bbox.max_lon)):
            raise _bad_request(
                "bbox coordinates out of range: lat must be [-90,90], lon must be [-180,180]"
            )
        if bbox.min_lat > bbox.max_lat:
            raise _bad_request("bbox invalid: minLat must be <= maxLat")
        if bbox.min_lon > bbox.max_lon:
            raise _bad_request("bbox invalid: minLon must be <= maxLon")
    return search_filter


def parse_gym_search(payload: Any) -> GymSearch:
    """Validate a decoded gym search body.

    Distances are capped at ``MAX_SEARCH_DISTANCE`` metres; the limit defaults
    to ``DEFAULT_SEARCH_LIMIT`` and is capped at ``MAX_SEARCH_LIMIT``.
    Raises ApiError with status 400 for an invalid request.
    """
    try:
        filters, limit = _decode_search(payload)
    except TypeError:
        raise _bad_request("invalid JSON body") from None
    if not filters:
        raise _bad_request("filters array is required")
    filters = [_validate_filter(f) for f in filters]

    effective = limit if limit is not None and limit > 0 else DEFAULT_SEARCH_LIMIT
    return GymSearch(filters=filters, limit=min(effective, MAX_SEARCH_LIMIT))