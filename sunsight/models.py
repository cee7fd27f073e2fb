"""
Value types shared by the ephemeris, building model, line-of-sight engine,
sun window aggregator and shadow caster.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import cached_property
from typing import Optional, Tuple

from shapely.geometry import Polygon

from .errors import CoordinateRangeError, InvalidArgumentError, InvalidRingError

Coordinate = Tuple[float, float]  # (lon, lat)
Ring = Tuple[Coordinate, ...]


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    name: Optional[str] = None

    def __post_init__(self):
        lat, lng = self.latitude, self.longitude
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise CoordinateRangeError(lat, lng)
        if not (-90 <= lat <= 90 and -180 <= lng <= 180):
            raise CoordinateRangeError(lat, lng)


@dataclass(frozen=True)
class SunPosition:
    azimuth: float  # compass degrees (0=N, 90=E, 180=S, 270=W)
    altitude: float  # degrees above horizon


class DayType(str, Enum):
    NORMAL = "normal"
    POLAR_DAY = "polar_day"
    POLAR_NIGHT = "polar_night"


@dataclass(frozen=True)
class SunTimes:
    """Named instants for one calendar day at one location.

    Twilight and sunrise/sunset fields are ``None`` when the sun does not
    cross the corresponding altitude on that day.
    """

    solar_noon: datetime
    nadir: datetime
    sunrise: Optional[datetime]
    sunset: Optional[datetime]
    golden_hour_start: Optional[datetime]
    golden_hour_end: Optional[datetime]
    civil_dawn: Optional[datetime]
    civil_dusk: Optional[datetime]
    nautical_dawn: Optional[datetime]
    nautical_dusk: Optional[datetime]
    astronomical_dawn: Optional[datetime]
    astronomical_dusk: Optional[datetime]
    day_length: float  # minutes
    day_type: DayType = DayType.NORMAL


@dataclass(frozen=True)
class ArcPoint:
    azimuth: float
    altitude: float
    time: datetime


class HeightSource(str, Enum):
    MEASURED = "measured"
    ESTIMATED = "estimated"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class BuildingFeature:
    """A building footprint with a resolved height.

    Built once per raw record and never patched afterwards.
    """

    id: int
    ring: Ring
    height: float  # meters
    levels: int
    height_source: HeightSource
    name: Optional[str] = None

    def __post_init__(self):
        if len(self.ring) < 4:
            raise InvalidRingError(self.id, f"{len(self.ring)} points, need at least 4")
        if tuple(self.ring[0]) != tuple(self.ring[-1]):
            raise InvalidRingError(self.id, "ring is not closed")
        if not self.height > 0:
            raise InvalidArgumentError(f"Building {self.id} height must be positive, got {self.height}")
        if self.levels < 1:
            raise InvalidArgumentError(f"Building {self.id} levels must be >= 1, got {self.levels}")

    @cached_property
    def polygon(self) -> Polygon:
        return Polygon(self.ring)


@dataclass(frozen=True)
class BlockageResult:
    blocked: bool
    blocking_height: Optional[float] = None
    block_distance: Optional[int] = None  # meters from observer to the occluding wall


@dataclass(frozen=True)
class BlockagePoint:
    time: datetime
    azimuth: float
    altitude: float
    blocked: bool


@dataclass(frozen=True)
class SunWindow:
    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60.0


@dataclass(frozen=True)
class ShadowPolygon:
    building_id: int
    shadow_length: float  # meters
    ring: Ring


class SunVisibility(str, Enum):
    VISIBLE = "visible"
    BLOCKED = "blocked"
    BELOW = "below"


def derive_sun_visibility(
    position: Optional[SunPosition], blockage: Optional[BlockageResult]
) -> SunVisibility:
    """Single source of truth for the sun's visual state."""
    if position is None or position.altitude <= 0:
        return SunVisibility.BELOW
    if blockage is not None and blockage.blocked:
        return SunVisibility.BLOCKED
    return SunVisibility.VISIBLE
