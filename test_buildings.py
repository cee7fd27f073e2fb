"""
Tests for footprint normalization and height resolution.
"""

import pytest
from shapely.errors import GEOSException
from shapely.geometry import Polygon

from sunsight.buildings import (
    build_polygon_ring,
    detect_pin_building,
    extract_building_height,
    normalize_buildings,
    parse_building_levels,
    parse_metric_height,
    resolve_height,
    simplify_buildings,
)
from sunsight.errors import InvalidArgumentError
from sunsight.models import BuildingFeature, HeightSource, Location


@pytest.mark.parametrize("raw, expected", [
    ("12", 12.0),
    ("12.5", 12.5),
    ("12 m", 12.0),
    (" 7.25m", 7.25),
    ("abc", None),
    ("", None),
    (None, None),
])
def test_parse_metric_height(raw, expected):
    assert parse_metric_height(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("4", 4),
    ("3.5", 3),
    ("0", None),
    ("-2", None),
    ("several", None),
    (None, None),
])
def test_parse_building_levels(raw, expected):
    assert parse_building_levels(raw) == expected


def test_measured_height_wins_and_backfills_levels():
    parsed = resolve_height(31.0, None)

    assert parsed.height == 31.0
    assert parsed.levels == 11  # ceil(31 / 3)
    assert parsed.height_source == HeightSource.MEASURED


def test_measured_height_keeps_given_levels():
    parsed = resolve_height(38.5, 12)

    assert (parsed.height, parsed.levels, parsed.height_source) == (38.5, 12, HeightSource.MEASURED)


def test_levels_estimate_height_at_three_meters_per_level():
    parsed = resolve_height(None, 20)

    assert (parsed.height, parsed.levels, parsed.height_source) == (60.0, 20, HeightSource.ESTIMATED)


def test_non_positive_measured_height_falls_back_to_levels():
    parsed = resolve_height(0.0, 2)

    assert parsed.height == 6.0
    assert parsed.height_source == HeightSource.ESTIMATED


def test_no_hints_default_to_one_storey():
    parsed = extract_building_height({"building": "yes"})

    assert (parsed.height, parsed.levels, parsed.height_source) == (3.0, 1, HeightSource.UNKNOWN)


def test_ring_is_closed_when_open():
    geometry = [{"lat": 0, "lon": 0}, {"lat": 0, "lon": 1}, {"lat": 1, "lon": 1}, {"lat": 1, "lon": 0}]

    ring = build_polygon_ring(geometry)

    assert len(ring) == 5
    assert ring[0] == ring[-1] == (0.0, 0.0)


def test_closed_ring_is_left_alone():
    ring = build_polygon_ring([(0, 0), (1, 0), (1, 1), (0, 0)])

    assert ring == ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0))


def test_short_geometry_has_no_ring():
    assert build_polygon_ring([(0, 0), (1, 0), (1, 1)]) is None


def test_normalize_fixture(buildings):
    by_id = {b.id: b for b in buildings}

    # 1007 has three points, 1008 is not a building
    assert sorted(by_id) == [1001, 1002, 1003, 1004, 1005, 1006]

    assert by_id[1001].height == 45.0
    assert by_id[1001].levels == 15
    assert by_id[1001].name == "Pacific Heights Towers"
    assert by_id[1001].ring[0] == by_id[1001].ring[-1]
    assert by_id[1002].height_source == HeightSource.ESTIMATED
    assert by_id[1002].height == 60.0
    assert by_id[1004].height == 12.0
    assert by_id[1005].height_source == HeightSource.UNKNOWN
    assert by_id[1006].levels == 12


def test_normalize_returns_immutable_snapshot(buildings):
    assert isinstance(buildings, tuple)
    with pytest.raises(AttributeError):
        buildings[0].height = 1.0


def test_normalize_empty_input():
    assert normalize_buildings([]) == ()


@pytest.mark.parametrize("ring", [
    ((0, 0), (1, 0), (0, 0)),
    ((0, 0), (1, 0), (1, 1), (0, 1)),
])
def test_malformed_ring_is_rejected_on_construction(ring):
    with pytest.raises(InvalidArgumentError):
        BuildingFeature(id=1, ring=ring, height=3.0, levels=1, height_source=HeightSource.UNKNOWN)


def test_non_positive_height_is_rejected_on_construction():
    ring = ((0, 0), (1, 0), (1, 1), (0, 0))
    with pytest.raises(InvalidArgumentError):
        BuildingFeature(id=1, ring=ring, height=0.0, levels=1, height_source=HeightSource.UNKNOWN)


def test_simplify_removes_collinear_vertices(make_building):
    base = make_building(1, 37.7900, 37.7902, -122.4296, -122.4292, 10.0)
    ring = base.ring[:1] + ((-122.4294, 37.7900),) + base.ring[1:]
    feature = BuildingFeature(id=1, ring=ring, height=10.0, levels=3, height_source=HeightSource.MEASURED)

    (simplified,) = simplify_buildings([feature], tolerance=1e-7)

    assert len(simplified.ring) == 5
    assert simplified.height == 10.0


def test_simplify_drops_collapsed_footprints(make_building):
    tiny = make_building(1, 37.79000, 37.79001, -122.42940, -122.42939, 10.0)
    normal = make_building(2, 37.7900, 37.7902, -122.4296, -122.4292, 10.0)

    result = simplify_buildings([tiny, normal], tolerance=0.0001)

    assert [b.id for b in result] == [2]


def test_normalize_with_simplification(raw_records):
    result = normalize_buildings(raw_records, simplify_tolerance=0.00001)

    assert len(result) == 6


def test_detect_pin_building(buildings, pin_location):
    pin = detect_pin_building(buildings, pin_location)

    assert pin is not None
    assert pin.id == 1001


def test_detect_pin_building_outside_everything(buildings):
    assert detect_pin_building(buildings, Location(37.8, -122.5)) is None


def test_overflowing_height_tag_is_ignored():
    assert parse_metric_height("1e400") is None
    assert extract_building_height({"building": "yes", "height": "1e400"}).height_source == HeightSource.UNKNOWN


def test_overflowing_height_does_not_sink_the_batch(raw_records):
    raw_records[0]["tags"]["height"] = "1e400"

    result = normalize_buildings(raw_records)

    by_id = {b.id: b for b in result}
    assert len(result) == 6
    assert by_id[1001].height == 3.0
    assert by_id[1001].height_source == HeightSource.UNKNOWN


def test_simplify_failure_keeps_original_footprint(monkeypatch, make_building):
    broken = make_building(1, 37.7910, 37.7912, -122.4296, -122.4292, 10.0)
    base = make_building(2, 37.7900, 37.7902, -122.4296, -122.4292, 10.0)
    ring = base.ring[:1] + ((-122.4294, 37.7900),) + base.ring[1:]
    other = BuildingFeature(id=2, ring=ring, height=10.0, levels=3, height_source=HeightSource.MEASURED)
    original = Polygon.simplify

    def failing(self, tolerance, preserve_topology=True):
        if self.bounds[1] == 37.7910:
            raise GEOSException("TopologyException: side location conflict")
        return original(self, tolerance, preserve_topology=preserve_topology)

    monkeypatch.setattr(Polygon, "simplify", failing)

    result = simplify_buildings([broken, other], tolerance=1e-7)

    assert [b.id for b in result] == [1, 2]
    assert result[0] is broken
    assert len(result[1].ring) == 5
