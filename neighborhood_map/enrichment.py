"""Best-effort photo enrichment of location popups."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Set

from .models import LocationRecord, Position
from .payloads import enriched_payload
from .providers import ImageProvider, Outcome
from .registry import LocationRegistry

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentStats:
    scheduled: int = 0
    enriched: int = 0
    empty: int = 0
    failed: int = 0

    def record(self, outcome: Outcome) -> None:
        if outcome is Outcome.SUCCESS:
            self.enriched += 1
        elif outcome is Outcome.EMPTY:
            self.empty += 1
        else:
            self.failed += 1


class EnrichmentPipeline:
    """Looks up a venue photo for each new location and rewrites its payload.

    Each record's chain is venue search then photo search; chains for
    different records run independently. Any failure or empty stage leaves
    the placeholder payload in place. Nothing is retried or cancelled.
    """

    def __init__(self, registry: LocationRegistry, images: ImageProvider) -> None:
        self.registry = registry
        self.images = images
        self.stats = EnrichmentStats()
        self._tasks: Set["asyncio.Task[Outcome]"] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, record: LocationRecord) -> "asyncio.Task[Outcome]":
        """Start enrichment for ``record`` without waiting for it."""
        task = asyncio.create_task(self._run(record.name, record.position))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self.stats.scheduled += 1
        return task

    async def drain(self) -> None:
        """Wait until every scheduled enrichment has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _run(self, name: str, position: Position) -> Outcome:
        try:
            outcome = await self.enrich(name, position)
        except Exception:
            logger.exception("Enrichment for %s failed unexpectedly", name)
            outcome = Outcome.ERROR
        self.stats.record(outcome)
        return outcome

    async def enrich(self, name: str, position: Position) -> Outcome:
        venue = await self.images.search_venue(position, name)
        if not venue.ok:
            _log_stage(name, "venue search", venue.outcome, venue.detail)
            return venue.outcome

        photo = await self.images.search_photos(venue.value)
        if not photo.ok:
            _log_stage(name, "photo search", photo.outcome, photo.detail)
            return photo.outcome

        if self.registry.update_payload(name, enriched_payload(name, photo.value)):
            logger.info("Photo added for %s", name)
        return Outcome.SUCCESS


def _log_stage(name: str, stage: str, outcome: Outcome, detail: str) -> None:
    if outcome is Outcome.ERROR:
        logger.warning("Image %s failed for %s: %s", stage, name, detail)
    else:
        logger.info("Image %s found nothing for %s", stage, name)
