"""
Shared pytest fixtures.
A small synthetic building set around Pacific Heights, San Francisco, in the
Overpass `out body geom` record shape.
"""

from datetime import datetime, timedelta, timezone

import pytest

from sunsight.buildings import normalize_buildings
from sunsight.models import BuildingFeature, HeightSource, Location

PST = timezone(timedelta(hours=-8))
PIN_LAT, PIN_LNG = 37.7906, -122.4294


def _way(way_id, tags, south, north, west, east, close=True):
    geometry = [
        {"lat": south, "lon": west},
        {"lat": south, "lon": east},
        {"lat": north, "lon": east},
        {"lat": north, "lon": west},
    ]
    if close:
        geometry.append({"lat": south, "lon": west})
    return {"type": "way", "id": way_id, "tags": tags, "geometry": geometry}


@pytest.fixture
def raw_records():
    """Raw footprint records, including ones the normalizer must drop."""
    return [
        # the observer stands inside this one; left unclosed on purpose
        _way(1001, {"building": "apartments", "height": "45", "name": "Pacific Heights Towers"},
             37.7903, 37.7907, -122.4297, -122.4291, close=False),
        _way(1002, {"building": "yes", "building:levels": "20"},
             37.7899, 37.79015, -122.4296, -122.4292),
        _way(1003, {"building": "house", "building:levels": "3"},
             37.7910, 37.7912, -122.4296, -122.4292),
        _way(1004, {"building": "yes", "height": "12 m"},
             37.7904, 37.7908, -122.4286, -122.4282),
        _way(1005, {"building": "garage"},
             37.7904, 37.7906, -122.4305, -122.4302),
        _way(1006, {"building": "yes", "height": "38.5", "building:levels": "12"},
             37.7898, 37.7900, -122.4304, -122.4300),
        {"type": "way", "id": 1007, "tags": {"building": "yes"},
         "geometry": [{"lat": 37.7901, "lon": -122.4290},
                      {"lat": 37.7902, "lon": -122.4289},
                      {"lat": 37.7901, "lon": -122.4288}]},
        _way(1008, {"highway": "footway"}, 37.7901, 37.7902, -122.4290, -122.4289),
    ]


@pytest.fixture
def buildings(raw_records):
    return normalize_buildings(raw_records)


@pytest.fixture
def pin_location():
    return Location(PIN_LAT, PIN_LNG)


@pytest.fixture
def winter_noon():
    """Dec 31, 2025, 12:03 PM PST."""
    return datetime(2025, 12, 31, 12, 3, tzinfo=PST)


@pytest.fixture
def make_building():
    """Factory for rectangular buildings given their bounds."""

    def factory(building_id, south, north, west, east, height, source=HeightSource.MEASURED):
        ring = ((west, south), (east, south), (east, north), (west, north), (west, south))
        return BuildingFeature(
            id=building_id,
            ring=ring,
            height=height,
            levels=max(1, round(height / 3)),
            height_source=source,
        )

    return factory
