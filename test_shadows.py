"""
Tests for shadow projection.
"""

import pytest

from sunsight import geodesy
from sunsight.geodesy import angular_difference, bearing, distance_m
from sunsight.models import SunPosition
from sunsight.shadows import ShadowCaster, cast_shadows


@pytest.fixture
def tower(make_building):
    return make_building(7, 37.7896, 37.7898, -122.4296, -122.4292, 30.0)


@pytest.mark.parametrize("altitude", [-10, 0])
def test_no_shadows_when_sun_is_down(tower, altitude):
    assert cast_shadows(SunPosition(azimuth=180, altitude=altitude), [tower]) == ()


def test_shadow_points_away_from_the_sun(tower):
    (shadow,) = cast_shadows(SunPosition(azimuth=180, altitude=45), [tower])

    assert shadow.building_id == 7
    assert shadow.shadow_length == pytest.approx(30.0)
    assert shadow.ring[0] == shadow.ring[-1]
    assert len(shadow.ring) == len(tower.ring)
    for before, after in zip(tower.ring, shadow.ring):
        assert distance_m(before, after) == pytest.approx(30.0, abs=0.01)
        assert angular_difference(bearing(before, after), 0) < 1e-6


def test_shadow_length_grows_as_the_sun_drops():
    caster = ShadowCaster()

    assert caster.shadow_length(10, 60) < caster.shadow_length(10, 30) < caster.shadow_length(10, 10)
    assert caster.shadow_length(10, 45) == pytest.approx(10)


def test_overlong_shadows_are_dropped(tower, make_building):
    shed = make_building(8, 37.7900, 37.7901, -122.4290, -122.4289, 3.0)

    # 30 m at 0.5° is ~3.4 km, 3 m is ~340 m
    shadows = cast_shadows(SunPosition(azimuth=120, altitude=0.5), [tower, shed])

    assert [s.building_id for s in shadows] == [8]


def test_custom_cap(tower):
    caster = ShadowCaster(max_shadow_length_m=20)

    assert caster.cast(SunPosition(azimuth=180, altitude=45), [tower]) == ()


def test_degenerate_translation_is_skipped(monkeypatch, tower, make_building):
    broken = make_building(99, 37.7900, 37.7901, -122.4290, -122.4289, 10.0)
    original = geodesy.translate_ring

    def flaky(ring, azimuth, meters):
        if ring == broken.ring:
            raise ValueError("bad ring")
        return original(ring, azimuth, meters)

    monkeypatch.setattr(geodesy, "translate_ring", flaky)

    shadows = cast_shadows(SunPosition(azimuth=200, altitude=30), [broken, tower])

    assert [s.building_id for s in shadows] == [7]


def test_shadows_for_fixture_buildings(buildings):
    shadows = cast_shadows(SunPosition(azimuth=177, altitude=29), buildings)

    assert {s.building_id for s in shadows} == {b.id for b in buildings}
