"""Filter projection and marker visibility synchronization."""
from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from . import config
from .map_surface import MapSurface
from .models import LocationRecord
from .observable import Computed, Observable
from .registry import LocationRegistry

logger = logging.getLogger(__name__)

VisibleSet = Tuple[LocationRecord, ...]


class FilterProjection:
    """Derives the visible locations from the selected filter.

    ``visible`` is recomputed whenever ``selected_category`` changes or the
    registry gains a record, and pushes the new tuple to its subscribers.
    """

    def __init__(self, registry: LocationRegistry, selected: str = config.ALL_LOCATIONS) -> None:
        _validate_filter(selected)
        self.registry = registry
        self.selected_category: Observable[str] = Observable(selected, name="selected_category")
        self.visible: Computed[VisibleSet] = Computed(
            self._compute,
            [self.selected_category, registry.version],
            name="visible_locations",
        )

    def _compute(self) -> VisibleSet:
        return tuple(self.registry.filter_by_category(self.selected_category.value))

    @property
    def selected(self) -> str:
        return self.selected_category.value

    def select(self, category: str) -> None:
        _validate_filter(category)
        logger.info("Filter selected: %s", category)
        self.selected_category.set(category)

    def subscribe(self, listener: Callable[[VisibleSet], None]) -> Callable[[], None]:
        return self.visible.subscribe(listener)

    def visible_names(self) -> List[str]:
        return [record.name for record in self.visible.value]


class MarkerVisibilitySynchronizer:
    """Keeps exactly the visible records' markers attached to the surface."""

    def __init__(
        self,
        registry: LocationRegistry,
        surface: MapSurface,
        projection: FilterProjection,
    ) -> None:
        self.registry = registry
        self.surface = surface
        self.sync_count = 0
        self._unsubscribe = projection.subscribe(self.sync)
        self.sync(projection.visible.value)

    def sync(self, visible: VisibleSet) -> None:
        for record in self.registry:
            self.surface.detach(record.marker)
        for record in visible:
            self.surface.attach(record.marker)
        self.sync_count += 1
        logger.debug("Markers synced: %s of %s visible", len(visible), len(self.registry))

    def close(self) -> None:
        self._unsubscribe()


def _validate_filter(category: str) -> None:
    if category not in config.FILTERS:
        raise ValueError(
            f"Unknown filter {category!r}; expected one of: " + ", ".join(config.FILTERS)
        )
