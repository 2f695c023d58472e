"""Single-popup selection controller bound to marker and list clicks."""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from . import config
from .map_surface import Animation, MapSurface, Marker, highlighted_icon
from .models import LocationRecord
from .payloads import bare_payload
from .registry import LocationRegistry

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]


class PopupState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


def call_later(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class PopupController:
    """State machine with states CLOSED and OPEN(marker).

    At most one marker owns the popup. Clicking the marker that already owns
    it only toggles its bounce; closing the popup returns to CLOSED. Hover
    swaps icons and never touches popup state.
    """

    def __init__(
        self,
        registry: LocationRegistry,
        surface: MapSurface,
        bounce_seconds: float = config.BOUNCE_DURATION_SECONDS,
        schedule: Optional[Scheduler] = None,
    ) -> None:
        self.registry = registry
        self.surface = surface
        self.bounce_seconds = bounce_seconds
        self.schedule = schedule or call_later
        self.open_marker: Optional[Marker] = None
        self._records_by_marker: Dict[int, LocationRecord] = {}
        self._bounce_timers: Dict[int, Any] = {}
        surface.on_popup_event("closeclick", self.on_close)

    @property
    def state(self) -> PopupState:
        return PopupState.CLOSED if self.open_marker is None else PopupState.OPEN

    def bind(self, record: LocationRecord) -> None:
        marker = record.marker
        default = marker.icon
        highlight = highlighted_icon()
        self._records_by_marker[id(marker)] = record
        self.surface.on_event(marker, "click", lambda: self.select(marker))
        self.surface.on_event(marker, "mouseover", lambda: self.surface.set_icon(marker, highlight))
        self.surface.on_event(marker, "mouseout", lambda: self.surface.set_icon(marker, default))

    def select(self, marker: Marker) -> None:
        self._toggle_bounce(marker)
        if marker is self.open_marker:
            logger.warning("%s popup already opened", marker.title)
            return
        record = self._records_by_marker.get(id(marker)) or self.registry.find_by_name(marker.title)
        content = record.display_payload if record is not None else bare_payload(marker.title)
        self.open_marker = marker
        self.surface.open_popup(marker, content)
        logger.info("Popup opened for %s", marker.title)

    def select_by_name(self, name: str) -> bool:
        record = self.registry.find_by_name(name)
        if record is None:
            logger.warning("No location named %s to select", name)
            return False
        logger.info("%s selected", name)
        self.select(record.marker)
        return True

    def on_close(self) -> None:
        if self.open_marker is not None:
            logger.debug("Popup closed for %s", self.open_marker.title)
        self.open_marker = None

    def _toggle_bounce(self, marker: Marker) -> None:
        timer = self._bounce_timers.pop(id(marker), None)
        if timer is not None:
            timer.cancel()
        if self.surface.get_animation(marker) is Animation.BOUNCE:
            self.surface.set_animation(marker, None)
            return
        self.surface.set_animation(marker, Animation.BOUNCE)
        self._bounce_timers[id(marker)] = self.schedule(
            self.bounce_seconds, lambda: self._stop_bounce(marker)
        )

    def _stop_bounce(self, marker: Marker) -> None:
        self._bounce_timers.pop(id(marker), None)
        if self.surface.get_animation(marker) is Animation.BOUNCE:
            self.surface.set_animation(marker, None)
