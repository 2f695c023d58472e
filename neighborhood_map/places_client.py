"""Google Places nearby search and Geocoding clients with response parsing."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from . import config
from .http import HttpClient, RequestBudget
from .models import PlaceResult, Position

logger = logging.getLogger(__name__)

STATUS_OK = "OK"
STATUS_ZERO_RESULTS = "ZERO_RESULTS"


class PlacesClient:
    def __init__(
        self,
        http_client: HttpClient,
        api_key: str,
        budget: RequestBudget,
    ) -> None:
        self.http = http_client
        self.api_key = api_key
        self.budget = budget

    def nearby_search(self, center: Position, radius_m: int, keyword: str) -> Dict[str, Any]:
        params = build_nearby_search_params(center, radius_m, keyword, self.api_key)
        self.budget.consume("places")
        return self.http.get_json(config.PLACES_NEARBY_SEARCH_URL, params)


class GeocodingClient:
    def __init__(
        self,
        http_client: HttpClient,
        api_key: str,
        budget: RequestBudget,
    ) -> None:
        self.http = http_client
        self.api_key = api_key
        self.budget = budget

    def geocode(self, address: str) -> Dict[str, Any]:
        self.budget.consume("geocode")
        return self.http.get_json(config.GEOCODE_URL, {"address": address, "key": self.api_key})


def build_nearby_search_params(
    center: Position,
    radius_m: int,
    keyword: str,
    api_key: str,
) -> Dict[str, Any]:
    return {
        "location": f"{center.lat},{center.lon}",
        "radius": str(int(radius_m)),
        "keyword": keyword,
        "key": api_key,
    }


def response_status(response: Dict[str, Any]) -> str:
    return str(response.get("status") or "UNKNOWN_ERROR")


# Adapter/mapper for Places response fields

def parse_places_response(response: Dict[str, Any]) -> List[PlaceResult]:
    results = response.get("results") or []
    parsed: List[PlaceResult] = []
    for p in results:
        name = p.get("name")
        if not name:
            continue
        position = _parse_location(p)
        if position is None:
            logger.debug("Dropping place without coordinates: %s", name)
            continue
        parsed.append(PlaceResult(name=name, position=position, place=dict(p)))
    return parsed


def parse_geocode_response(response: Dict[str, Any]) -> Optional[Position]:
    results = response.get("results") or []
    if not results:
        return None
    return _parse_location(results[0])


def _parse_location(item: Dict[str, Any]) -> Optional[Position]:
    location = (item.get("geometry") or {}).get("location") or {}
    lat = location.get("lat")
    lon = location.get("lng") if location.get("lng") is not None else location.get("lon")
    if lat is None or lon is None:
        return None
    try:
        return Position(lat=float(lat), lon=float(lon))
    except (TypeError, ValueError):
        return None
