"""Popup content templates."""
from __future__ import annotations

from html import escape

from . import config

OUTDOOR_TEMPLATE = (
    "<div class='place-popup outdoor'>"
    "<h4>{name}</h4>"
    "<p>{category} nearby. Photo on its way.</p>"
    "</div>"
)
FOOD_TEMPLATE = (
    "<div class='place-popup food'>"
    "<h4>{name}</h4>"
    "<p>{category} nearby. Photo on its way.</p>"
    "</div>"
)
ENRICHED_TEMPLATE = (
    "<div class='place-popup enriched'>"
    "<h4>{name}</h4>"
    "<img src='{photo_url}' alt='{name}' width='150'>"
    "</div>"
)


def bare_payload(name: str) -> str:
    return f"<div>{escape(name)}</div>"


def placeholder_payload(name: str, category: str) -> str:
    if category in config.OUTDOOR_CATEGORIES:
        template = OUTDOOR_TEMPLATE
    elif category in config.FOOD_CATEGORIES:
        template = FOOD_TEMPLATE
    else:
        return bare_payload(name)
    return template.format(name=escape(name), category=escape(category))


def enriched_payload(name: str, photo_url: str) -> str:
    return ENRICHED_TEMPLATE.format(name=escape(name), photo_url=escape(photo_url, quote=True))
