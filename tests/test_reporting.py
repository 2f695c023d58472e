import csv
import json

from neighborhood_map.map_surface import InMemoryMapSurface, category_icon
from neighborhood_map.models import LocationRecord, Position
from neighborhood_map.reporting import (
    LOCATION_FIELDS,
    atomic_write_text,
    location_rows,
    write_json_object,
    write_locations_csv,
    write_locations_json,
    write_summary,
)


def make_records():
    surface = InMemoryMapSurface()
    records = []
    for name, category, lat in [("Park 1", "Parks", 38.79), ("Donut 1", "Donuts", 38.80)]:
        position = Position(lat=lat, lon=-121.23)
        records.append(
            LocationRecord(
                name=name,
                category=category,
                position=position,
                marker=surface.create_marker(position, category_icon(category), name),
                display_payload=name,
                place={"place_id": f"id-{name}", "vicinity": "Rocklin"},
            )
        )
    return records


def test_atomic_write_text(tmp_path):
    path = tmp_path / "atomic.txt"

    atomic_write_text(str(path), "first")
    assert path.read_text(encoding="utf-8") == "first"

    atomic_write_text(str(path), "second")
    assert path.read_text(encoding="utf-8") == "second"

    leftovers = [p for p in tmp_path.iterdir() if p.name != "atomic.txt"]
    assert not leftovers


def test_location_rows_mark_visibility_and_distance():
    rows = location_rows(make_records(), Position(lat=38.79, lon=-121.23), ["Donut 1"])

    assert [r["visible"] for r in rows] == [False, True]
    assert rows[0]["distance_km_to_center"] == 0.0
    assert 1.0 < rows[1]["distance_km_to_center"] < 1.2
    assert rows[0]["place_id"] == "id-Park 1"
    assert rows[0]["rating"] is None


def test_locations_json_and_csv_writers(tmp_path):
    rows = location_rows(make_records(), Position(lat=38.79, lon=-121.23))
    json_path = tmp_path / "locations.json"
    csv_path = tmp_path / "locations.csv"

    write_locations_json(str(json_path), rows)
    write_locations_csv(str(csv_path), rows)

    loaded = json.loads(json_path.read_text(encoding="utf-8"))
    assert [r["name"] for r in loaded] == ["Park 1", "Donut 1"]
    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        assert reader.fieldnames == LOCATION_FIELDS
        assert [r["category"] for r in reader] == ["Parks", "Donuts"]


def test_empty_csv_and_summary(tmp_path):
    csv_path = tmp_path / "empty.csv"
    write_locations_csv(str(csv_path), [])
    assert csv_path.read_text(encoding="utf-8") == ""

    summary_path = tmp_path / "summary.txt"
    write_summary(str(summary_path), ["a", "b"])
    assert summary_path.read_text(encoding="utf-8") == "a\nb"

    obj_path = tmp_path / "summary.json"
    write_json_object(str(obj_path), {"locations": 2})
    assert json.loads(obj_path.read_text(encoding="utf-8")) == {"locations": 2}
