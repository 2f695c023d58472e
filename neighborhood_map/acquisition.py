"""Category acquisition: places search, dedup, marker creation."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from . import config
from .enrichment import EnrichmentPipeline
from .map_surface import MapSurface, category_icon
from .models import LocationRecord, PlaceResult, Position
from .payloads import placeholder_payload
from .providers import Outcome, PlacesProvider
from .registry import LocationRegistry

logger = logging.getLogger(__name__)


@dataclass
class AcquisitionStats:
    categories_ok: List[str] = field(default_factory=list)
    categories_empty: List[str] = field(default_factory=list)
    categories_failed: List[str] = field(default_factory=list)
    inserted: int = 0
    duplicates: int = 0
    over_cap: int = 0


class AcquisitionPipeline:
    """Fills the registry from one nearby search per category.

    Category searches run concurrently and finish in any order; each one is
    failure-isolated. Results are capped per category, deduplicated by name
    against the whole registry, and every new record gets its marker and an
    enrichment task.
    """

    def __init__(
        self,
        registry: LocationRegistry,
        surface: MapSurface,
        places: PlacesProvider,
        enrichment: Optional[EnrichmentPipeline] = None,
        center: Optional[Position] = None,
        radius_m: Optional[int] = None,
        max_results: Optional[int] = None,
        on_record: Optional[Callable[[LocationRecord], None]] = None,
    ) -> None:
        self.registry = registry
        self.surface = surface
        self.places = places
        self.enrichment = enrichment
        self.center = center or Position.from_dict(config.BASE_CENTER)
        self.radius_m = config.SEARCH_RADIUS_M if radius_m is None else int(radius_m)
        self.max_results = (
            config.MAX_RESULTS_PER_CATEGORY if max_results is None else int(max_results)
        )
        self.on_record = on_record
        self.stats = AcquisitionStats()

    async def acquire_all(self, categories: Optional[Iterable[str]] = None) -> AcquisitionStats:
        source = config.CATEGORIES if categories is None else categories
        wanted = [c for c in source if c != config.ALL_LOCATIONS]
        results = await asyncio.gather(
            *(self.acquire_category(category) for category in wanted),
            return_exceptions=True,
        )
        for category, result in zip(wanted, results):
            if isinstance(result, Exception):
                logger.error(
                    "Acquisition for %s failed: %s", category, result, exc_info=result
                )
                self.stats.categories_failed.append(category)
        return self.stats

    async def acquire_category(self, category: str) -> List[LocationRecord]:
        result = await self.places.nearby_search(self.center, self.radius_m, category)
        if result.outcome is Outcome.ERROR:
            logger.error("Places API call for %s filter failed: %s", category, result.detail)
            self.stats.categories_failed.append(category)
            return []
        if result.outcome is Outcome.EMPTY:
            logger.info("Places API returned nothing for %s", category)
            self.stats.categories_empty.append(category)
            return []

        logger.info("Places API succeeded for %s", category)
        self.stats.categories_ok.append(category)
        places = list(result.value or [])
        if len(places) > self.max_results:
            self.stats.over_cap += len(places) - self.max_results
            places = places[: self.max_results]

        added: List[LocationRecord] = []
        for place in places:
            record = self.add_place(place, category)
            if record is not None:
                added.append(record)
        return added

    def add_place(self, place: PlaceResult, category: str) -> Optional[LocationRecord]:
        if place.name in self.registry:
            logger.warning("%s already exists in locations", place.name)
            self.stats.duplicates += 1
            return None

        marker = self.surface.create_marker(place.position, category_icon(category), place.name)
        record = LocationRecord(
            name=place.name,
            category=category,
            position=place.position,
            marker=marker,
            display_payload=placeholder_payload(place.name, category),
            place=dict(place.place),
        )
        if self.on_record is not None:
            self.on_record(record)
        self.registry.insert_if_absent(record)
        self.stats.inserted += 1
        if self.enrichment is not None:
            self.enrichment.schedule(record)
        return record
