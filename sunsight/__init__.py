"""
sunsight: sun position and building line-of-sight analysis.
"""

from .analysis import SunAnalysis, SunAnalyzer, day_key, floor_to_elevation
from .blockage import BlockageEngine, check_day, check_instant, filter_buildings_by_sun_bearing
from .buildings import detect_pin_building, normalize_buildings, simplify_buildings
from .errors import GeometricDegenerateError, InvalidArgumentError, SunsightError
from .geodesy import angular_difference, bearing_to_compass
from .models import (
    ArcPoint,
    BlockagePoint,
    BlockageResult,
    BuildingFeature,
    DayType,
    HeightSource,
    Location,
    ShadowPolygon,
    SunPosition,
    SunTimes,
    SunVisibility,
    SunWindow,
    derive_sun_visibility,
)
from .shadows import ShadowCaster, cast_shadows
from .sun_calculator import SunCalculator, get_day_path, get_sun_position, get_sun_times
from .sun_windows import compute_sun_windows

__version__ = "0.1.0"

__all__ = [
    "SunAnalysis",
    "SunAnalyzer",
    "day_key",
    "floor_to_elevation",
    "BlockageEngine",
    "check_day",
    "check_instant",
    "filter_buildings_by_sun_bearing",
    "detect_pin_building",
    "normalize_buildings",
    "simplify_buildings",
    "GeometricDegenerateError",
    "InvalidArgumentError",
    "SunsightError",
    "angular_difference",
    "bearing_to_compass",
    "ArcPoint",
    "BlockagePoint",
    "BlockageResult",
    "BuildingFeature",
    "DayType",
    "HeightSource",
    "Location",
    "ShadowPolygon",
    "SunPosition",
    "SunTimes",
    "SunVisibility",
    "SunWindow",
    "derive_sun_visibility",
    "ShadowCaster",
    "cast_shadows",
    "SunCalculator",
    "get_day_path",
    "get_sun_position",
    "get_sun_times",
    "compute_sun_windows",
]
