"""Async provider adapters returning tagged outcomes.

The HTTP clients are blocking (requests); each adapter runs one call in a
worker thread via ``asyncio.to_thread`` so only the awaiting task suspends.
Results come back on the event loop, which is the only place registry state
is touched.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Optional, Protocol, TypeVar

import requests

from . import config
from .http import BudgetExceededError, RequestMetrics
from .models import PlaceResult, Position
from .photos_client import FoursquareClient, meta_code, parse_photo_url, parse_venue_id
from .places_client import (
    STATUS_OK,
    STATUS_ZERO_RESULTS,
    GeocodingClient,
    PlacesClient,
    parse_geocode_response,
    parse_places_response,
    response_status,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures a provider call may raise that must stay scoped to that call.
PROVIDER_ERRORS = (requests.RequestException, ValueError, BudgetExceededError)


class Outcome(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    outcome: Outcome
    value: Optional[T] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @classmethod
    def success(cls, value: T) -> "ProviderResult[T]":
        return cls(Outcome.SUCCESS, value=value)

    @classmethod
    def empty(cls, detail: str = "") -> "ProviderResult[T]":
        return cls(Outcome.EMPTY, detail=detail)

    @classmethod
    def error(cls, detail: str) -> "ProviderResult[T]":
        return cls(Outcome.ERROR, detail=detail)


class PlacesProvider(Protocol):
    async def nearby_search(
        self, center: Position, radius_m: int, keyword: str
    ) -> ProviderResult[List[PlaceResult]]: ...


class ImageProvider(Protocol):
    async def search_venue(self, position: Position, name: str) -> ProviderResult[str]: ...

    async def search_photos(self, venue_id: str) -> ProviderResult[str]: ...


class Geocoder(Protocol):
    async def geocode(self, address: str) -> ProviderResult[Position]: ...


class GooglePlacesProvider:
    def __init__(self, client: PlacesClient, metrics: Optional[RequestMetrics] = None) -> None:
        self.client = client
        self.metrics = metrics

    async def nearby_search(
        self, center: Position, radius_m: int, keyword: str
    ) -> ProviderResult[List[PlaceResult]]:
        try:
            response = await asyncio.to_thread(self.client.nearby_search, center, radius_m, keyword)
        except PROVIDER_ERRORS as exc:
            _record_failure(self.metrics, "places")
            return ProviderResult.error(f"{type(exc).__name__}: {exc}")

        status = response_status(response)
        if status == STATUS_ZERO_RESULTS:
            return ProviderResult.empty(status)
        if status != STATUS_OK:
            _record_failure(self.metrics, "places")
            message = response.get("error_message")
            return ProviderResult.error(f"{status}: {message}" if message else status)
        places = parse_places_response(response)
        if not places:
            return ProviderResult.empty(status)
        return ProviderResult.success(places)


class GoogleGeocoder:
    def __init__(self, client: GeocodingClient, metrics: Optional[RequestMetrics] = None) -> None:
        self.client = client
        self.metrics = metrics

    async def geocode(self, address: str) -> ProviderResult[Position]:
        try:
            response = await asyncio.to_thread(self.client.geocode, address)
        except PROVIDER_ERRORS as exc:
            _record_failure(self.metrics, "geocode")
            return ProviderResult.error(f"{type(exc).__name__}: {exc}")

        status = response_status(response)
        if status == STATUS_ZERO_RESULTS:
            return ProviderResult.empty(status)
        if status != STATUS_OK:
            _record_failure(self.metrics, "geocode")
            return ProviderResult.error(status)
        position = parse_geocode_response(response)
        if position is None:
            return ProviderResult.empty("no geometry in geocode result")
        return ProviderResult.success(position)


class FoursquareImageProvider:
    def __init__(
        self,
        client: FoursquareClient,
        metrics: Optional[RequestMetrics] = None,
        photo_size: str = config.FOURSQUARE_PHOTO_SIZE,
    ) -> None:
        self.client = client
        self.metrics = metrics
        self.photo_size = photo_size

    async def search_venue(self, position: Position, name: str) -> ProviderResult[str]:
        try:
            response = await asyncio.to_thread(self.client.search_venues, position, name)
        except PROVIDER_ERRORS as exc:
            _record_failure(self.metrics, "venues")
            return ProviderResult.error(f"{type(exc).__name__}: {exc}")
        code = meta_code(response)
        if code is not None and code != 200:
            _record_failure(self.metrics, "venues")
            return ProviderResult.error(f"meta code {code}")
        venue_id = parse_venue_id(response)
        if venue_id is None:
            return ProviderResult.empty("no venue match")
        return ProviderResult.success(venue_id)

    async def search_photos(self, venue_id: str) -> ProviderResult[str]:
        try:
            response = await asyncio.to_thread(self.client.venue_photos, venue_id)
        except PROVIDER_ERRORS as exc:
            _record_failure(self.metrics, "photos")
            return ProviderResult.error(f"{type(exc).__name__}: {exc}")
        code = meta_code(response)
        if code is not None and code != 200:
            _record_failure(self.metrics, "photos")
            return ProviderResult.error(f"meta code {code}")
        photo_url = parse_photo_url(response, self.photo_size)
        if photo_url is None:
            return ProviderResult.empty("no photos")
        return ProviderResult.success(photo_url)


def _record_failure(metrics: Optional[RequestMetrics], kind: str) -> None:
    if metrics is not None:
        metrics.inc_failure(kind)
