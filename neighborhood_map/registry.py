"""In-memory registry of discovered locations."""
from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from . import config
from .models import LocationRecord
from .observable import Observable

logger = logging.getLogger(__name__)


class CategoryView:
    """Lazy, restartable view over the registry's records for one filter.

    Iteration reads the registry's current contents each time; the view
    itself holds no copy.
    """

    def __init__(self, records: List[LocationRecord], category: str) -> None:
        self._records = records
        self.category = category

    def __iter__(self) -> Iterator[LocationRecord]:
        for record in self._records:
            if record.matches(self.category):
                yield record

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def names(self) -> List[str]:
        return [record.name for record in self]


class LocationRegistry:
    """Owns every LocationRecord discovered during a session.

    Names are unique: inserting a record whose name is already present keeps
    the existing record. Discovery order is preserved. ``version`` is an
    observable counter bumped on every new insertion.
    """

    def __init__(self) -> None:
        self._records: List[LocationRecord] = []
        self._by_name: Dict[str, LocationRecord] = {}
        self.version: Observable[int] = Observable(0, name="registry.version")

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LocationRecord]:
        return iter(tuple(self._records))

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def names(self) -> List[str]:
        return [record.name for record in self._records]

    def insert_if_absent(self, record: LocationRecord) -> LocationRecord:
        existing = self._by_name.get(record.name)
        if existing is not None:
            logger.debug("%s already exists in locations", record.name)
            return existing
        self._records.append(record)
        self._by_name[record.name] = record
        self.version.set(self.version.value + 1)
        return record

    def find_by_name(self, name: str) -> Optional[LocationRecord]:
        return self._by_name.get(name)

    def filter_by_category(self, category: str) -> CategoryView:
        if category not in config.FILTERS:
            logger.warning("Filtering locations by unknown category %r", category)
        return CategoryView(self._records, category)

    def update_payload(self, name: str, payload: str) -> bool:
        """Replace a placeholder payload with enriched content.

        Returns False (and changes nothing) when the name is unknown or the
        record has already been enriched.
        """
        record = self._by_name.get(name)
        if record is None:
            logger.debug("No location named %s to update", name)
            return False
        if record.enriched:
            logger.debug("%s already enriched; keeping existing payload", name)
            return False
        record.display_payload = payload
        record.enriched = True
        return True
