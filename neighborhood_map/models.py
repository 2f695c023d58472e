"""Core data types shared by the registry, pipelines and map surface."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List

from . import config

if TYPE_CHECKING:
    from .map_surface import Marker


@dataclass(frozen=True)
class Position:
    lat: float
    lon: float

    def as_list(self) -> List[float]:
        return [self.lat, self.lon]

    @classmethod
    def from_dict(cls, point: Dict[str, Any]) -> "Position":
        return cls(lat=float(point["lat"]), lon=float(point["lon"]))


@dataclass(frozen=True)
class PlaceResult:
    """One candidate returned by a places nearby search."""

    name: str
    position: Position
    place: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(eq=False)
class LocationRecord:
    """A discovered point of interest, owned by the LocationRegistry.

    ``name`` is the dedup key. ``marker`` is created once, when the record is
    built, and never replaced. ``display_payload`` starts as a placeholder and
    is swapped for enriched content at most once (``enriched`` flips to True).
    Visibility is never stored here; it is derived from ``category`` and the
    active filter.
    """

    name: str
    category: str
    position: Position
    marker: "Marker"
    display_payload: str
    place: Dict[str, Any] = field(default_factory=dict)
    enriched: bool = False

    def matches(self, category: str) -> bool:
        return category == config.ALL_LOCATIONS or self.category == category
