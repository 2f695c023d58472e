import asyncio

import requests

from neighborhood_map.http import BudgetExceededError, RequestMetrics
from neighborhood_map.models import Position
from neighborhood_map.providers import (
    FoursquareImageProvider,
    GoogleGeocoder,
    GooglePlacesProvider,
    Outcome,
)

CENTER = Position(lat=38.79, lon=-121.23)


class FakePlacesClient:
    def __init__(self, response):
        self.response = response

    def nearby_search(self, center, radius_m, keyword):
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def geocode(self, address):
        return self.nearby_search(None, 0, address)


class FakeFoursquareClient:
    def __init__(self, venues, photos):
        self.venues = venues
        self.photos = photos

    def search_venues(self, position, name):
        if isinstance(self.venues, Exception):
            raise self.venues
        return self.venues

    def venue_photos(self, venue_id):
        return self.photos


def places_result(response):
    metrics = RequestMetrics()
    provider = GooglePlacesProvider(FakePlacesClient(response), metrics=metrics)
    return asyncio.run(provider.nearby_search(CENTER, 8000, "Donuts")), metrics


def test_places_ok_is_success():
    result, _ = places_result(
        {"status": "OK", "results": [{"name": "A", "geometry": {"location": {"lat": 1, "lng": 2}}}]}
    )

    assert result.outcome is Outcome.SUCCESS
    assert [p.name for p in result.value] == ["A"]


def test_places_zero_results_is_empty():
    result, metrics = places_result({"status": "ZERO_RESULTS", "results": []})

    assert result.outcome is Outcome.EMPTY
    assert metrics.failures_places == 0


def test_places_error_status_is_error():
    result, metrics = places_result({"status": "REQUEST_DENIED", "error_message": "bad key"})

    assert result.outcome is Outcome.ERROR
    assert "REQUEST_DENIED" in result.detail
    assert "bad key" in result.detail
    assert metrics.failures_places == 1


def test_places_transport_and_budget_errors_are_error():
    for exc in (requests.ConnectionError("down"), BudgetExceededError("over")):
        result, metrics = places_result(exc)
        assert result.outcome is Outcome.ERROR
        assert metrics.failures_places == 1


def test_geocoder_outcomes():
    ok = GoogleGeocoder(
        FakePlacesClient({"status": "OK", "results": [{"geometry": {"location": {"lat": 1, "lng": 2}}}]})
    )
    empty = GoogleGeocoder(FakePlacesClient({"status": "ZERO_RESULTS", "results": []}))
    failed = GoogleGeocoder(FakePlacesClient({"status": "OVER_QUERY_LIMIT"}))

    assert asyncio.run(ok.geocode("Rocklin, CA")).value == Position(lat=1.0, lon=2.0)
    assert asyncio.run(empty.geocode("Nowhere")).outcome is Outcome.EMPTY
    assert asyncio.run(failed.geocode("Rocklin, CA")).outcome is Outcome.ERROR


def test_foursquare_venue_and_photo_outcomes():
    provider = FoursquareImageProvider(
        FakeFoursquareClient(
            {"meta": {"code": 200}, "response": {"venues": [{"id": "v1"}]}},
            {"meta": {"code": 200}, "response": {"photos": {"items": [{"prefix": "p/", "suffix": "/s.jpg"}]}}},
        ),
        photo_size="100x100",
    )

    venue = asyncio.run(provider.search_venue(CENTER, "A"))
    photo = asyncio.run(provider.search_photos(venue.value))

    assert venue.value == "v1"
    assert photo.value == "p/100x100/s.jpg"


def test_foursquare_failures():
    metrics = RequestMetrics()
    provider = FoursquareImageProvider(
        FakeFoursquareClient(
            {"meta": {"code": 400}},
            {"meta": {"code": 200}, "response": {"photos": {"count": 0, "items": []}}},
        ),
        metrics=metrics,
    )

    assert asyncio.run(provider.search_venue(CENTER, "A")).outcome is Outcome.ERROR
    assert asyncio.run(provider.search_photos("v1")).outcome is Outcome.EMPTY
    assert metrics.failures_venues == 1
    assert metrics.failures_photos == 0

    provider.client.venues = requests.Timeout("slow")
    assert asyncio.run(provider.search_venue(CENTER, "A")).outcome is Outcome.ERROR
    assert metrics.failures_venues == 2
