"""Output reporting helpers."""
from __future__ import annotations

import csv
import json
import os
import tempfile
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO

from .geo import distance_km
from .models import LocationRecord, Position

LOCATION_FIELDS = [
    "name",
    "category",
    "lat",
    "lon",
    "distance_km_to_center",
    "place_id",
    "vicinity",
    "rating",
    "enriched",
    "visible",
]


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _fsync_dir(path: str) -> None:
    try:
        dir_fd = os.open(path, os.O_DIRECTORY)
    except OSError:
        return
    try:
        os.fsync(dir_fd)
    except OSError:
        pass
    finally:
        os.close(dir_fd)


@contextmanager
def atomic_writer(
    path: str,
    mode: str = "w",
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> Iterator[TextIO]:
    dir_path = os.path.dirname(path) or "."
    base = os.path.basename(path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=".tmp", dir=dir_path)
    try:
        with os.fdopen(fd, mode, encoding=encoding, newline=newline) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        _fsync_dir(dir_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def atomic_write_text(path: str, text: str) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        f.write(text)


def location_row(
    record: LocationRecord,
    center: Position,
    visible_names: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    visible = set(visible_names) if visible_names is not None else None
    return {
        "name": record.name,
        "category": record.category,
        "lat": record.position.lat,
        "lon": record.position.lon,
        "distance_km_to_center": round(distance_km(center, record.position), 3),
        "place_id": record.place.get("place_id"),
        "vicinity": record.place.get("vicinity"),
        "rating": record.place.get("rating"),
        "enriched": record.enriched,
        "visible": record.name in visible if visible is not None else None,
    }


def location_rows(
    records: Iterable[LocationRecord],
    center: Position,
    visible_names: Optional[Iterable[str]] = None,
) -> List[Dict[str, Any]]:
    names = list(visible_names) if visible_names is not None else None
    return [location_row(record, center, names) for record in records]


def write_locations_json(path: str, rows: Iterable[Dict[str, Any]]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump(list(rows), f, ensure_ascii=False, indent=2)


def write_locations_csv(path: str, rows: Iterable[Dict[str, Any]]) -> None:
    rows = list(rows)
    if not rows:
        with atomic_writer(path, mode="w", encoding="utf-8", newline="") as f:
            f.write("")
        return

    with atomic_writer(path, mode="w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=LOCATION_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow({key: row.get(key) for key in LOCATION_FIELDS})


def write_json_object(path: str, payload: Dict[str, Any]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def write_summary(path: str, summary_lines: List[str]) -> None:
    atomic_write_text(path, "\n".join(summary_lines))
