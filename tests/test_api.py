import pytest

from golbat.api import (
    DEFAULT_SEARCH_LIMIT,
    MAX_GYM_IDS,
    MAX_SEARCH_DISTANCE,
    MAX_SEARCH_LIMIT,
    ApiError,
    check_api_secret,
    normalise_gym_ids,
    parse_gym_search,
)
from golbat.geo.location import ApiLocation, Bbox


@pytest.mark.parametrize(
    "header, configured, expected",
    [
        ("", "", True),
        ("anything", "", True),
        ("secret", "secret", True),
        ("wrong", "secret", False),
    ],
)
def test_check_api_secret(header, configured, expected):
    assert check_api_secret(header, configured) is expected


def test_gym_ids_from_object_are_deduplicated():
    assert normalise_gym_ids({"ids": ["a", "b", "a", "", "c"]}) == ["a", "b", "c"]


def test_gym_ids_from_bare_list():
    assert normalise_gym_ids(["x", "x", "y"]) == ["x", "y"]


def test_gym_ids_empty_inputs():
    assert normalise_gym_ids(None) == []
    assert normalise_gym_ids({}) == []
    assert normalise_gym_ids({"ids": [None, ""]}) == []


@pytest.mark.parametrize("payload", [{"ids": 5}, "text", [1, 2], {"ids": [True]}])
def test_gym_ids_invalid_body(payload):
    with pytest.raises(ApiError) as info:
        normalise_gym_ids(payload)
    assert info.value.status == 400
    assert info.value.body == {"error": 'invalid JSON body; expected {"ids":[...] }'}


def test_gym_ids_limit():
    exact = [f"gym-{i}" for i in range(MAX_GYM_IDS)]
    assert normalise_gym_ids({"ids": exact}) == exact
    with pytest.raises(ApiError) as info:
        normalise_gym_ids(exact + ["one-more"])
    assert info.value.status == 413
    assert info.value.body == {"error": "too many ids", "max_supported": MAX_GYM_IDS}


def test_search_requires_filters():
    for payload in ({}, {"filters": []}, None):
        with pytest.raises(ApiError) as info:
            parse_gym_search(payload)
        assert info.value.body == {"error": "filters array is required"}


@pytest.mark.parametrize(
    "payload",
    [[], {"filters": "x"}, {"filters": [{"name": 3}]}, {"filters": [{}], "limit": 1.5}],
)
def test_search_invalid_body(payload):
    with pytest.raises(ApiError) as info:
        parse_gym_search(payload)
    assert info.value.status == 400
    assert info.value.body == {"error": "invalid JSON body"}


def test_search_parses_filter_fields():
    search = parse_gym_search(
        {
            "filters": [
                {
                    "name": "central park",
                    "description": "playground",
                    "location_distance": {
                        "location": {"lat": 40.7829, "lon": -73.9654},
                        "distance": 500,
                    },
                    "bbox": {"min_lon": -74.0, "min_lat": 40.7, "max_lon": -73.9, "max_lat": 40.8},
                }
            ],
            "limit": 25,
        }
    )
    (search_filter,) = search.filters
    assert search_filter.name == "central park"
    assert search_filter.description == "playground"
    assert search_filter.location_distance.location == ApiLocation(40.7829, -73.9654)
    assert search_filter.location_distance.distance == 500
    assert search_filter.bbox == Bbox(-74.0, 40.7, -73.9, 40.8)
    assert search.limit == 25


def test_search_limit_defaults_and_cap():
    assert parse_gym_search({"filters": [{}]}).limit == DEFAULT_SEARCH_LIMIT
    assert parse_gym_search({"filters": [{}], "limit": 0}).limit == DEFAULT_SEARCH_LIMIT
    big = parse_gym_search({"filters": [{}], "limit": MAX_SEARCH_LIMIT * 3})
    assert big.limit == MAX_SEARCH_LIMIT


def test_search_distance_is_capped():
    search = parse_gym_search(
        {
            "filters": [
                {"location_distance": {"location": {"lat": 1, "lon": 2},
                                       "distance": MAX_SEARCH_DISTANCE * 2}}
            ]
        }
    )
    assert search.filters[0].location_distance.distance == MAX_SEARCH_DISTANCE


@pytest.mark.parametrize(
    "search_filter, message",
    [
        ({"location_distance": {"location": {"lat": 1, "lon": 2}, "distance": 0}},
         "distance must be > 0"),
        ({"location_distance": {"location": {"lat": 91, "lon": 2}, "distance": 10}},
         "lat must be [-90,90], lon must be [-180,180]"),
        ({"bbox": {"min_lon": -181, "min_lat": 0, "max_lon": 0, "max_lat": 0}},
         "bbox coordinates out of range: lat must be [-90,90], lon must be [-180,180]"),
        ({"bbox": {"min_lon": 0, "min_lat": 10, "max_lon": 1, "max_lat": 5}},
         "bbox invalid: minLat must be <= maxLat"),
        ({"bbox": {"min_lon": 10, "min_lat": 0, "max_lon": 5, "max_lat": 1}},
         "bbox invalid: minLon must be <= maxLon"),
    ],
)
def test_search_filter_validation(search_filter, message):
    with pytest.raises(ApiError) as info:
        parse_gym_search({"filters": [search_filter]})
    assert info.value.status == 400
    assert info.value.body == {"error": message}