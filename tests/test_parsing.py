from neighborhood_map.models import Position
from neighborhood_map.photos_client import (
    build_venue_search_params,
    meta_code,
    parse_photo_url,
    parse_venue_id,
)
from neighborhood_map.places_client import (
    build_nearby_search_params,
    parse_geocode_response,
    parse_places_response,
    response_status,
)


def test_parse_places_skips_missing_fields():
    response = {
        "status": "OK",
        "results": [
            {"name": "Whitney Oaks Golf Club", "geometry": {"location": {"lat": 38.8, "lng": -121.2}}},
            {"geometry": {"location": {"lat": 1.0, "lng": 2.0}}},
            {"name": "No Geometry"},
            {"name": "Bad Coords", "geometry": {"location": {"lat": "x", "lng": 2.0}}},
        ],
    }

    parsed = parse_places_response(response)

    assert [p.name for p in parsed] == ["Whitney Oaks Golf Club"]
    assert parsed[0].position == Position(lat=38.8, lon=-121.2)
    assert parsed[0].place["name"] == "Whitney Oaks Golf Club"


def test_parse_places_empty_and_status():
    assert parse_places_response({"status": "ZERO_RESULTS", "results": []}) == []
    assert parse_places_response({}) == []
    assert response_status({"status": "OK"}) == "OK"
    assert response_status({}) == "UNKNOWN_ERROR"


def test_nearby_search_params():
    params = build_nearby_search_params(Position(lat=38.79, lon=-121.23), 8000, "Donuts", "k")

    assert params == {
        "location": "38.79,-121.23",
        "radius": "8000",
        "keyword": "Donuts",
        "key": "k",
    }


def test_parse_geocode_first_result():
    response = {
        "status": "OK",
        "results": [
            {"geometry": {"location": {"lat": 38.79, "lng": -121.23}}},
            {"geometry": {"location": {"lat": 0.0, "lng": 0.0}}},
        ],
    }

    assert parse_geocode_response(response) == Position(lat=38.79, lon=-121.23)
    assert parse_geocode_response({"results": []}) is None


def test_venue_params_and_id():
    params = build_venue_search_params(Position(lat=1.5, lon=2.5), "Joe's Pizza")
    assert params["ll"] == "1.5,2.5"
    assert params["query"] == "Joe's Pizza"
    assert params["intent"] == "match"
    assert params["limit"] == 1

    response = {"meta": {"code": 200}, "response": {"venues": [{"name": "x"}, {"id": "abc"}]}}
    assert parse_venue_id(response) == "abc"
    assert parse_venue_id({"response": {"venues": []}}) is None
    assert meta_code(response) == 200
    assert meta_code({}) is None


def test_photo_url_from_prefix_and_suffix():
    response = {
        "response": {
            "photos": {
                "count": 2,
                "items": [
                    {"prefix": "https://fastly.4sqi.net/img/general/"},
                    {"prefix": "https://fastly.4sqi.net/img/general/", "suffix": "/123_abc.jpg"},
                ],
            }
        }
    }

    assert parse_photo_url(response) == "https://fastly.4sqi.net/img/general/300x300/123_abc.jpg"
    assert parse_photo_url({"response": {"photos": {"count": 0, "items": []}}}) is None
