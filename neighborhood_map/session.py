"""Session orchestration."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from . import config
from .acquisition import AcquisitionPipeline
from .enrichment import EnrichmentPipeline
from .http import RequestMetrics
from .map_surface import InMemoryMapSurface, MapSurface
from .models import LocationRecord, Position
from .popup import PopupController, Scheduler
from .projection import FilterProjection, MarkerVisibilitySynchronizer
from .providers import Geocoder, ImageProvider, PlacesProvider
from .registry import LocationRegistry

logger = logging.getLogger(__name__)


class MapSession:
    """Wires the registry, projection, synchronizer, popups and pipelines.

    One session per map. ``start`` centers the map, runs the category
    searches and (by default) waits for photo enrichment to settle.
    """

    def __init__(
        self,
        places: PlacesProvider,
        images: Optional[ImageProvider] = None,
        geocoder: Optional[Geocoder] = None,
        surface: Optional[MapSurface] = None,
        base_address: Optional[str] = None,
        center: Optional[Position] = None,
        radius_m: Optional[int] = None,
        max_results: Optional[int] = None,
        bounce_seconds: float = config.BOUNCE_DURATION_SECONDS,
        schedule: Optional[Scheduler] = None,
        metrics: Optional[RequestMetrics] = None,
    ) -> None:
        self.base_address = base_address or config.BASE_ADDRESS
        self.center = center or Position.from_dict(config.BASE_CENTER)
        self.geocoder = geocoder
        self.metrics = metrics
        self.registry = LocationRegistry()
        self.surface: MapSurface = surface if surface is not None else InMemoryMapSurface()
        self.projection = FilterProjection(self.registry)
        self.synchronizer = MarkerVisibilitySynchronizer(self.registry, self.surface, self.projection)
        self.popups = PopupController(
            self.registry, self.surface, bounce_seconds=bounce_seconds, schedule=schedule
        )
        self.enrichment = EnrichmentPipeline(self.registry, images) if images is not None else None
        self.acquisition = AcquisitionPipeline(
            self.registry,
            self.surface,
            places,
            enrichment=self.enrichment,
            center=self.center,
            radius_m=radius_m,
            max_results=max_results,
            on_record=self.popups.bind,
        )
        self.map_centered = False

    async def start(self, wait_for_enrichment: bool = True) -> Dict[str, Any]:
        logger.info("Stage 1: center map on %s", self.base_address)
        await self.center_map()
        logger.info("Stage 2: acquire locations")
        await self.acquisition.acquire_all()
        if self.enrichment is not None and wait_for_enrichment:
            logger.info("Stage 3: wait for photo enrichment (%s pending)", self.enrichment.pending)
            await self.enrichment.drain()
        return self.summary()

    async def center_map(self) -> bool:
        if self.geocoder is None:
            return False
        result = await self.geocoder.geocode(self.base_address)
        if not result.ok:
            logger.warning(
                "Geocoding %s failed (%s); keeping default map center",
                self.base_address,
                result.detail or result.outcome.value,
            )
            return False
        self.surface.set_center(result.value)
        self.map_centered = True
        return True

    def select_filter(self, category: str) -> Tuple[LocationRecord, ...]:
        self.projection.select(category)
        return self.visible_places()

    def visible_places(self) -> Tuple[LocationRecord, ...]:
        return self.projection.visible.value

    def open_place(self, name: str) -> Optional[str]:
        """List-click path: open the popup for ``name`` and return its content.

        Only names in the visible list can be opened; anything else is logged
        and leaves popup state unchanged.
        """
        if name not in self.projection.visible_names():
            logger.warning("%s is not in the visible list; popup not opened", name)
            return None
        if not self.popups.select_by_name(name):
            return None
        record = self.registry.find_by_name(name)
        return record.display_payload if record is not None else None

    def summary(self) -> Dict[str, Any]:
        stats = self.acquisition.stats
        summary: Dict[str, Any] = {
            "base_address": self.base_address,
            "map_centered": self.map_centered,
            "selected_filter": self.projection.selected,
            "locations": len(self.registry),
            "visible": len(self.visible_places()),
            "by_category": {
                category: len(self.registry.filter_by_category(category))
                for category in config.CATEGORIES
            },
            "categories_ok": list(stats.categories_ok),
            "categories_empty": list(stats.categories_empty),
            "categories_failed": list(stats.categories_failed),
            "duplicates_skipped": stats.duplicates,
            "over_cap_discarded": stats.over_cap,
        }
        if self.enrichment is not None:
            e = self.enrichment.stats
            summary["enrichment"] = {
                "scheduled": e.scheduled,
                "enriched": e.enriched,
                "empty": e.empty,
                "failed": e.failed,
                "pending": self.enrichment.pending,
            }
        else:
            summary["enrichment"] = {"mode": "off"}
        if self.metrics is not None:
            summary["requests"] = {
                kind: {
                    "network": self.metrics.network_count(kind),
                    "failures": self.metrics.failure_count(kind),
                }
                for kind in ("places", "venues", "photos", "geocode")
            }
        return summary


def render_summary(summary: Dict[str, Any]) -> List[str]:
    lines = []
    lines.append(f"Base address: {summary['base_address']}")
    lines.append(f"Map centered: {'yes' if summary.get('map_centered') else 'no (default view)'}")
    lines.append(f"Locations: {summary['locations']}")
    lines.append(f"Filter: {summary['selected_filter']} ({summary['visible']} visible)")
    for category, count in summary.get("by_category", {}).items():
        lines.append(f"  {category}: {count}")
    if summary.get("categories_failed"):
        lines.append("Failed categories: " + ", ".join(summary["categories_failed"]))
    if summary.get("categories_empty"):
        lines.append("Empty categories: " + ", ".join(summary["categories_empty"]))
    lines.append(
        "Dedup: duplicates_skipped={dup}, over_cap_discarded={cap}".format(
            dup=summary.get("duplicates_skipped", 0),
            cap=summary.get("over_cap_discarded", 0),
        )
    )
    enrichment = summary.get("enrichment", {})
    if enrichment.get("mode") == "off":
        lines.append("Enrichment: DISABLED")
    else:
        lines.append(
            "Enrichment: enriched={enriched}/{scheduled}, empty={empty}, failed={failed}, pending={pending}".format(
                enriched=enrichment.get("enriched", 0),
                scheduled=enrichment.get("scheduled", 0),
                empty=enrichment.get("empty", 0),
                failed=enrichment.get("failed", 0),
                pending=enrichment.get("pending", 0),
            )
        )
    requests_stats = summary.get("requests")
    if requests_stats:
        lines.append("Request stats:")
        for kind, counts in requests_stats.items():
            lines.append(
                "  {kind}: network={network}, failures={failures}".format(
                    kind=kind.capitalize(),
                    network=counts.get("network", 0),
                    failures=counts.get("failures", 0),
                )
            )
    return lines
