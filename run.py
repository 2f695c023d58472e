"""CLI entrypoint."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from neighborhood_map import config
from neighborhood_map.http import HttpClient, RequestBudget, RequestMetrics
from neighborhood_map.map_surface import InMemoryMapSurface
from neighborhood_map.photos_client import FoursquareClient
from neighborhood_map.places_client import GeocodingClient, PlacesClient
from neighborhood_map.providers import FoursquareImageProvider, GoogleGeocoder, GooglePlacesProvider
from neighborhood_map.render import save_map_html
from neighborhood_map.reporting import (
    ensure_dir,
    location_rows,
    write_json_object,
    write_locations_csv,
    write_locations_json,
    write_summary,
)
from neighborhood_map.session import MapSession, render_summary

logger = logging.getLogger("run")


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def load_env(path: str = ".env", root_dir: Optional[Path] = None) -> None:
    """Optionally load a repo-root .env file without overriding real env vars."""
    root = Path(root_dir) if root_dir else _repo_root()
    env_path = (root / path).resolve()
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def _env(name: str) -> str:
    return (os.environ.get(name) or "").strip()


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Neighborhood map of nearby places")
    parser.add_argument("--preflight", action="store_true", help="Run offline checks only")
    parser.add_argument(
        "--filter",
        choices=config.FILTERS,
        default=config.ALL_LOCATIONS,
        help="Filter to apply after loading (default: All Locations)",
    )
    parser.add_argument("--open", dest="open_name", type=str, default=None, help="Open the popup for a place by name")
    parser.add_argument("--no-enrich", action="store_true", help="Skip Foursquare photo enrichment")
    parser.add_argument("--no-html", action="store_true", help="Do not write map.html")
    parser.add_argument("--config", dest="config_path", type=str, default=None, help="Path to map_config.json")
    parser.add_argument("--out", type=str, default=config.OUTPUT_DIR)
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def build_budget(metrics: RequestMetrics) -> RequestBudget:
    return RequestBudget(
        limits={
            "places": config.MAX_PLACES_REQUESTS_PER_SESSION,
            "venues": config.MAX_VENUE_REQUESTS_PER_SESSION,
            "photos": config.MAX_PHOTO_REQUESTS_PER_SESSION,
            "geocode": config.MAX_GEOCODE_REQUESTS_PER_SESSION,
        },
        metrics=metrics,
    )


def build_session(
    api_key: str,
    foursquare_id: str,
    foursquare_secret: str,
    enrich: bool = True,
    metrics: Optional[RequestMetrics] = None,
) -> MapSession:
    metrics = metrics if metrics is not None else RequestMetrics()
    budget = build_budget(metrics)
    http_client = HttpClient(
        timeout=config.HTTP_TIMEOUT_SECONDS,
        retry_max=config.HTTP_RETRY_MAX,
        backoff_base=config.HTTP_BACKOFF_BASE,
        backoff_max=config.HTTP_BACKOFF_MAX,
    )
    places = GooglePlacesProvider(PlacesClient(http_client, api_key, budget), metrics=metrics)
    geocoder = GoogleGeocoder(GeocodingClient(http_client, api_key, budget), metrics=metrics)

    images = None
    if enrich:
        if foursquare_id and foursquare_secret:
            images = FoursquareImageProvider(
                FoursquareClient(http_client, foursquare_id, foursquare_secret, budget),
                metrics=metrics,
            )
        else:
            logger.warning(
                "Foursquare credentials not configured; popups keep placeholder content. "
                "Set FOURSQUARE_CLIENT_ID and FOURSQUARE_CLIENT_SECRET."
            )

    return MapSession(
        places=places,
        images=images,
        geocoder=geocoder,
        surface=InMemoryMapSurface(),
        metrics=metrics,
    )


def run_preflight(api_key: str, foursquare_id: str, foursquare_secret: str) -> int:
    ok = True

    if api_key:
        print("Google Maps API key: OK")
    else:
        print("Google Maps API key: MISSING")
        ok = False

    if foursquare_id and foursquare_secret:
        print("Foursquare credentials: OK")
    else:
        print("Foursquare credentials: MISSING (enrichment disabled)")

    print(f"Base address: {config.BASE_ADDRESS}")
    print(
        "Search: center={lat},{lon} radius_m={radius} max_results={cap}".format(
            lat=config.BASE_CENTER["lat"],
            lon=config.BASE_CENTER["lon"],
            radius=config.SEARCH_RADIUS_M,
            cap=config.MAX_RESULTS_PER_CATEGORY,
        )
    )
    print("Categories: " + ", ".join(config.CATEGORIES))
    print("Preflight: PASS" if ok else "Preflight: FAIL")
    return 0 if ok else 1


async def run_session(session: MapSession, args: argparse.Namespace) -> int:
    await session.start()
    session.select_filter(args.filter)

    if args.open_name:
        content = session.open_place(args.open_name)
        if content is None:
            print(f"No place named {args.open_name!r}", file=sys.stderr)
        else:
            print(content)

    out_dir = args.out
    ensure_dir(out_dir)
    visible_names = [record.name for record in session.visible_places()]
    rows = location_rows(session.registry, session.center, visible_names)
    write_locations_json(os.path.join(out_dir, "locations.json"), rows)
    write_locations_csv(os.path.join(out_dir, "locations.csv"), rows)
    summary = session.summary()
    write_json_object(os.path.join(out_dir, "summary.json"), summary)
    lines = render_summary(summary)
    write_summary(os.path.join(out_dir, "summary.txt"), lines)
    if not args.no_html and isinstance(session.surface, InMemoryMapSurface):
        save_map_html(
            os.path.join(out_dir, "map.html"),
            session.surface,
            session.registry,
            session.projection.selected,
        )

    for line in lines:
        print(line)
    return 0


def main(argv: Optional[list] = None) -> int:
    load_env()
    args = parse_args(argv)
    try:
        config.load_map_config(args.config_path)
    except (OSError, ValueError) as exc:
        print(f"Error: could not load map config: {exc}", file=sys.stderr)
        return 1
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    api_key = _env("GOOGLE_MAPS_API_KEY")
    foursquare_id = _env("FOURSQUARE_CLIENT_ID")
    foursquare_secret = _env("FOURSQUARE_CLIENT_SECRET")

    if args.preflight:
        return run_preflight(api_key, foursquare_id, foursquare_secret)

    if not api_key:
        print("Missing GOOGLE_MAPS_API_KEY in environment", file=sys.stderr)
        return 1

    try:
        session = build_session(
            api_key,
            foursquare_id,
            foursquare_secret,
            enrich=not args.no_enrich,
        )
        return asyncio.run(run_session(session, args))
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
