"""HTML export of the map surface state with folium."""
from __future__ import annotations

from html import escape
from typing import Iterable, List, Tuple

import folium
from folium import Element
from folium.plugins import BeautifyIcon

from . import config
from .map_surface import InMemoryMapSurface
from .models import LocationRecord

LEGEND_STYLE = (
    "position: fixed; bottom: 24px; left: 24px; z-index: 9999; "
    "background: #ffffff; padding: 8px 12px; border-radius: 6px; "
    "font: 12px Arial, sans-serif; box-shadow: 0 1px 4px rgba(0,0,0,0.3);"
)


def legend_rows() -> List[Tuple[str, str]]:
    return [(category, f"#{config.CATEGORY_ICON_COLORS[category]}") for category in config.CATEGORIES]


def legend_html(selected_filter: str) -> str:
    items = "".join(
        f"<div><span style='display:inline-block;width:10px;height:10px;"
        f"background:{color};margin-right:6px;'></span>{escape(category)}</div>"
        for category, color in legend_rows()
    )
    return (
        f"<div id='map-legend' style='{LEGEND_STYLE}'>"
        f"<b>{escape(selected_filter)}</b>{items}</div>"
    )


def build_folium_map(
    surface: InMemoryMapSurface,
    records: Iterable[LocationRecord],
    selected_filter: str = config.ALL_LOCATIONS,
) -> folium.Map:
    """Draw every attached marker with its popup; the open popup starts shown."""
    fmap = folium.Map(
        location=surface.center.as_list(),
        zoom_start=surface.zoom,
        tiles="OpenStreetMap",
        control_scale=True,
    )
    for record in records:
        marker = record.marker
        if not marker.attached:
            continue
        color = marker.icon.hex_color
        folium.Marker(
            location=record.position.as_list(),
            tooltip=record.name,
            popup=folium.Popup(
                record.display_payload,
                max_width=320,
                show=marker is surface.popup_anchor,
            ),
            icon=BeautifyIcon(
                icon="circle",
                icon_shape="marker",
                background_color=color,
                border_color=color,
                text_color="#ffffff",
            ),
        ).add_to(fmap)
    fmap.get_root().html.add_child(Element(legend_html(selected_filter)))
    return fmap


def save_map_html(
    path: str,
    surface: InMemoryMapSurface,
    records: Iterable[LocationRecord],
    selected_filter: str = config.ALL_LOCATIONS,
) -> None:
    build_folium_map(surface, records, selected_filter).save(path)
