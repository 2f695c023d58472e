"""Map surface contract, marker icons and a headless in-memory surface."""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from . import config
from .models import Position

logger = logging.getLogger(__name__)

MARKER_EVENTS = ("click", "mouseover", "mouseout")
POPUP_EVENTS = ("closeclick",)

EventCallback = Callable[[], None]


class Animation(str, Enum):
    BOUNCE = "bounce"
    DROP = "drop"


@dataclass(frozen=True)
class MarkerIcon:
    color: str
    url: str
    size: Tuple[int, int] = config.MARKER_ICON_SIZE
    anchor: Tuple[int, int] = config.MARKER_ICON_ANCHOR

    @property
    def hex_color(self) -> str:
        return f"#{self.color.lower()}"


def make_marker_icon(color: str) -> MarkerIcon:
    return MarkerIcon(color=color, url=config.MARKER_ICON_URL_TEMPLATE.format(color=color))


def category_icon(category: str) -> MarkerIcon:
    color = config.CATEGORY_ICON_COLORS.get(category)
    if color is None:
        raise ValueError(f"No icon color configured for category: {category}")
    return make_marker_icon(color)


def highlighted_icon() -> MarkerIcon:
    return make_marker_icon(config.HIGHLIGHT_ICON_COLOR)


@dataclass(eq=False)
class Marker:
    """Handle for one pin on the map surface. Compared by identity."""

    marker_id: int
    position: Position
    title: str
    icon: MarkerIcon
    animation: Optional[Animation] = None
    attached: bool = False
    listeners: Dict[str, List[EventCallback]] = field(default_factory=dict, repr=False)


class MapSurface(Protocol):
    def create_marker(self, position: Position, icon: MarkerIcon, title: str) -> Marker: ...

    def attach(self, marker: Marker) -> None: ...

    def detach(self, marker: Marker) -> None: ...

    def set_icon(self, marker: Marker, icon: MarkerIcon) -> None: ...

    def on_event(self, marker: Marker, event: str, callback: EventCallback) -> None: ...

    def open_popup(self, anchor: Marker, content: str) -> None: ...

    def close_popup(self) -> None: ...

    def on_popup_event(self, event: str, callback: EventCallback) -> None: ...

    def set_animation(self, marker: Marker, animation: Optional[Animation]) -> None: ...

    def get_animation(self, marker: Marker) -> Optional[Animation]: ...

    def set_center(self, position: Position) -> None: ...


class InMemoryMapSurface:
    """Headless map surface that records state instead of drawing it.

    Used by the CLI and tests; ``trigger`` and ``trigger_popup`` stand in for
    user input on a real map widget.
    """

    def __init__(
        self,
        center: Optional[Position] = None,
        zoom: int = config.DEFAULT_ZOOM,
    ) -> None:
        self.center = center or Position.from_dict(config.DEFAULT_MAP_CENTER)
        self.zoom = zoom
        self.markers: List[Marker] = []
        self.popup_anchor: Optional[Marker] = None
        self.popup_content: Optional[str] = None
        self._popup_listeners: Dict[str, List[EventCallback]] = {}
        self._ids = itertools.count(1)

    def create_marker(self, position: Position, icon: MarkerIcon, title: str) -> Marker:
        marker = Marker(
            marker_id=next(self._ids),
            position=position,
            title=title,
            icon=icon,
            animation=Animation.DROP,
        )
        self.markers.append(marker)
        return marker

    def attach(self, marker: Marker) -> None:
        marker.attached = True

    def detach(self, marker: Marker) -> None:
        marker.attached = False

    def attached_markers(self) -> List[Marker]:
        return [m for m in self.markers if m.attached]

    def set_icon(self, marker: Marker, icon: MarkerIcon) -> None:
        marker.icon = icon

    def on_event(self, marker: Marker, event: str, callback: EventCallback) -> None:
        if event not in MARKER_EVENTS:
            raise ValueError(f"Unknown marker event: {event}")
        marker.listeners.setdefault(event, []).append(callback)

    def trigger(self, marker: Marker, event: str) -> None:
        for callback in list(marker.listeners.get(event, [])):
            callback()

    def open_popup(self, anchor: Marker, content: str) -> None:
        self.popup_anchor = anchor
        self.popup_content = content

    def close_popup(self) -> None:
        self.popup_anchor = None
        self.popup_content = None

    def on_popup_event(self, event: str, callback: EventCallback) -> None:
        if event not in POPUP_EVENTS:
            raise ValueError(f"Unknown popup event: {event}")
        self._popup_listeners.setdefault(event, []).append(callback)

    def trigger_popup(self, event: str) -> None:
        if event == "closeclick":
            self.close_popup()
        for callback in list(self._popup_listeners.get(event, [])):
            callback()

    def set_animation(self, marker: Marker, animation: Optional[Animation]) -> None:
        marker.animation = animation

    def get_animation(self, marker: Marker) -> Optional[Animation]:
        return marker.animation

    def set_center(self, position: Position) -> None:
        logger.info("Map centered at %.6f, %.6f", position.lat, position.lon)
        self.center = position
