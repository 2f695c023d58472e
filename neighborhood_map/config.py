"""Project configuration.

Loads map parameters from map_config.json when available, falling back to
the Rocklin defaults. Keep provider request shapes centralized here.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

_REPO_ROOT = Path(__file__).resolve().parent.parent

# --- API endpoints ---

PLACES_NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
FOURSQUARE_VENUE_SEARCH_URL = "https://api.foursquare.com/v2/venues/search"
FOURSQUARE_VENUE_PHOTOS_URL = "https://api.foursquare.com/v2/venues/{venue_id}/photos"

FOURSQUARE_API_VERSION = "20170801"
FOURSQUARE_PHOTO_SIZE = "300x300"

# --- Filters ---

ALL_LOCATIONS = "All Locations"
CATEGORIES: List[str] = [
    "Golf Courses",
    "Donuts",
    "Breweries",
    "Mexican Restaurants",
    "Parks",
]
FILTERS: List[str] = [ALL_LOCATIONS] + CATEGORIES

OUTDOOR_CATEGORIES = {"Golf Courses", "Parks"}
FOOD_CATEGORIES = {"Donuts", "Breweries", "Mexican Restaurants"}

# --- Marker styling ---

CATEGORY_ICON_COLORS: Dict[str, str] = {
    "Golf Courses": "000099",
    "Donuts": "ff4d94",
    "Breweries": "663300",
    "Mexican Restaurants": "ff9900",
    "Parks": "33cc33",
}
HIGHLIGHT_ICON_COLOR = "FFFF24"
MARKER_ICON_URL_TEMPLATE = (
    "http://chart.googleapis.com/chart?chst=d_map_spin&chld=1.15|0|{color}|40|_|%E2%80%A2"
)
MARKER_ICON_SIZE = (21, 34)
MARKER_ICON_ANCHOR = (10, 34)
BOUNCE_DURATION_SECONDS = 1.4

# --- Map defaults (mutable, see load_map_config) ---

BASE_ADDRESS = "Rocklin, CA"
BASE_CENTER: Dict[str, float] = {"lat": 38.7907339, "lon": -121.23578279999998}
DEFAULT_MAP_CENTER: Dict[str, float] = {"lat": 0.0, "lon": 0.0}
DEFAULT_ZOOM = 12

SEARCH_RADIUS_M = 8000
MAX_RESULTS_PER_CATEGORY = 5

# --- Budgets (per session) ---

MAX_PLACES_REQUESTS_PER_SESSION = 10
MAX_VENUE_REQUESTS_PER_SESSION = 50
MAX_PHOTO_REQUESTS_PER_SESSION = 50
MAX_GEOCODE_REQUESTS_PER_SESSION = 2

# --- HTTP ---

HTTP_TIMEOUT_SECONDS = 20
HTTP_RETRY_MAX = 3
HTTP_BACKOFF_BASE = 0.5
HTTP_BACKOFF_MAX = 8.0

# --- Outputs ---

OUTPUT_DIR = "out"


def load_map_config(path: Optional[str] = None) -> bool:
    """Load map configuration from a JSON file.

    Updates module-level globals with values from the config file.
    Returns True if config was loaded, False if file not found.
    """
    if path is None:
        path = str(_REPO_ROOT / "map_config.json")

    config_path = Path(path)
    if not config_path.exists():
        return False

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    globals_ref = globals()

    address = (data.get("address") or "").strip()
    if address:
        globals_ref["BASE_ADDRESS"] = address

    center = data.get("center", {})
    center_lat = center.get("lat")
    center_lon = center.get("lon")
    if center_lat is not None and center_lon is not None:
        globals_ref["BASE_CENTER"] = {"lat": float(center_lat), "lon": float(center_lon)}

    radius = data.get("radius_m")
    if radius is not None:
        globals_ref["SEARCH_RADIUS_M"] = int(radius)

    max_results = data.get("max_results_per_category")
    if max_results is not None:
        globals_ref["MAX_RESULTS_PER_CATEGORY"] = max(0, int(max_results))

    return True
