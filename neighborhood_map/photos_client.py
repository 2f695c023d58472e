"""Foursquare venue and photo search client with response parsing."""
from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

from . import config
from .http import HttpClient, RequestBudget
from .models import Position


class FoursquareClient:
    def __init__(
        self,
        http_client: HttpClient,
        client_id: str,
        client_secret: str,
        budget: RequestBudget,
        api_version: str = config.FOURSQUARE_API_VERSION,
    ) -> None:
        self.http = http_client
        self.client_id = client_id
        self.client_secret = client_secret
        self.budget = budget
        self.api_version = api_version

    def _auth_params(self) -> Dict[str, str]:
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "v": self.api_version,
        }

    def search_venues(self, position: Position, name: str) -> Dict[str, Any]:
        params = build_venue_search_params(position, name)
        params.update(self._auth_params())
        self.budget.consume("venues")
        return self.http.get_json(config.FOURSQUARE_VENUE_SEARCH_URL, params)

    def venue_photos(self, venue_id: str) -> Dict[str, Any]:
        url = config.FOURSQUARE_VENUE_PHOTOS_URL.format(venue_id=quote(venue_id, safe=""))
        params: Dict[str, Any] = {"limit": 1}
        params.update(self._auth_params())
        self.budget.consume("photos")
        return self.http.get_json(url, params)


def build_venue_search_params(position: Position, name: str) -> Dict[str, Any]:
    return {
        "ll": f"{position.lat},{position.lon}",
        "query": name,
        "intent": "match",
        "limit": 1,
    }


def meta_code(response: Dict[str, Any]) -> Optional[int]:
    code = (response.get("meta") or {}).get("code")
    try:
        return int(code) if code is not None else None
    except (TypeError, ValueError):
        return None


def parse_venue_id(response: Dict[str, Any]) -> Optional[str]:
    venues = (response.get("response") or {}).get("venues") or []
    for venue in venues:
        venue_id = venue.get("id")
        if venue_id:
            return str(venue_id)
    return None


def parse_photo_url(
    response: Dict[str, Any],
    size: str = config.FOURSQUARE_PHOTO_SIZE,
) -> Optional[str]:
    photos = (response.get("response") or {}).get("photos") or {}
    for item in photos.get("items") or []:
        prefix = item.get("prefix")
        suffix = item.get("suffix")
        if prefix and suffix:
            return f"{prefix}{size}{suffix}"
    return None
