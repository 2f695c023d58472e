import pytest

from neighborhood_map import config
from neighborhood_map.map_surface import InMemoryMapSurface, category_icon
from neighborhood_map.models import LocationRecord, Position
from neighborhood_map.projection import FilterProjection, MarkerVisibilitySynchronizer
from neighborhood_map.registry import LocationRegistry


def add(registry, surface, name, category):
    position = Position(lat=38.79, lon=-121.23)
    marker = surface.create_marker(position, category_icon(category), name)
    return registry.insert_if_absent(
        LocationRecord(
            name=name,
            category=category,
            position=position,
            marker=marker,
            display_payload=name,
        )
    )


def make_view():
    registry = LocationRegistry()
    surface = InMemoryMapSurface()
    projection = FilterProjection(registry)
    sync = MarkerVisibilitySynchronizer(registry, surface, projection)
    return registry, surface, projection, sync


def attached_names(surface):
    return sorted(m.title for m in surface.attached_markers())


def test_five_donuts_visible_under_donuts_only():
    registry, surface, projection, _ = make_view()
    for idx in range(5):
        add(registry, surface, f"Donut {idx}", "Donuts")

    projection.select("Donuts")
    assert len(projection.visible.value) == 5
    assert len(surface.attached_markers()) == 5

    projection.select("Parks")
    assert projection.visible.value == ()
    assert surface.attached_markers() == []


def test_all_locations_attaches_every_marker():
    registry, surface, projection, _ = make_view()
    for category in ["Donuts", "Parks", "Breweries"]:
        for idx in range(2):
            add(registry, surface, f"{category} {idx}", category)

    projection.select("Parks")
    projection.select(config.ALL_LOCATIONS)

    assert len(projection.visible.value) == 6
    assert len(surface.attached_markers()) == 6
    assert all(record.marker.attached for record in registry)


def test_new_record_respects_active_filter():
    registry, surface, projection, _ = make_view()
    projection.select("Parks")

    add(registry, surface, "Park 1", "Parks")
    add(registry, surface, "Donut 1", "Donuts")

    assert projection.visible_names() == ["Park 1"]
    assert attached_names(surface) == ["Park 1"]


def test_attached_set_matches_visible_after_each_change():
    registry, surface, projection, sync = make_view()
    add(registry, surface, "Park 1", "Parks")
    add(registry, surface, "Golf 1", "Golf Courses")
    add(registry, surface, "Donut 1", "Donuts")

    for choice in config.FILTERS:
        projection.select(choice)
        assert attached_names(surface) == sorted(projection.visible_names())

    assert sync.sync_count >= len(config.FILTERS)


def test_filter_change_from_subscriber_is_serialized():
    registry, surface, projection, _ = make_view()
    add(registry, surface, "Park 1", "Parks")
    add(registry, surface, "Donut 1", "Donuts")
    rounds = []

    def chain(visible):
        rounds.append([r.name for r in visible])
        if projection.selected == "Parks":
            projection.select("Donuts")

    projection.subscribe(chain)
    projection.select("Parks")

    assert rounds == [["Park 1"], ["Donut 1"]]
    assert projection.selected == "Donuts"
    assert attached_names(surface) == ["Donut 1"]


def test_unknown_filter_is_rejected():
    registry, surface, projection, _ = make_view()
    add(registry, surface, "Park 1", "Parks")

    with pytest.raises(ValueError):
        projection.select("Museums")

    assert projection.selected == config.ALL_LOCATIONS
    assert attached_names(surface) == ["Park 1"]


def test_closed_synchronizer_stops_syncing():
    registry, surface, projection, sync = make_view()
    sync.close()
    add(registry, surface, "Park 1", "Parks")

    assert surface.attached_markers() == []
