"""
Sun visibility analysis module.
Runs the ephemeris, line-of-sight, sun window and shadow steps for one
observer request and memoizes the day-level results per calendar day.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from .blockage import BlockageEngine
from .buildings import detect_pin_building
from .config import BLOCKAGE_PARAMS, BUILDING_PARAMS
from .models import (
    ArcPoint,
    BlockagePoint,
    BlockageResult,
    BuildingFeature,
    Location,
    ShadowPolygon,
    SunPosition,
    SunTimes,
    SunVisibility,
    SunWindow,
    derive_sun_visibility,
)
from .shadows import ShadowCaster
from .sun_calculator import SunCalculator
from .sun_windows import compute_sun_windows

logger = logging.getLogger(__name__)

DayKey = Tuple[float, float, str]


def floor_to_elevation(floor: int) -> float:
    """Observer eye height for a floor number; floor 1 is ground level."""
    return max(0.0, (floor - 1) * BUILDING_PARAMS["meters_per_level"])


def day_key(location: Location, instant: datetime) -> DayKey:
    """Key that changes with location or local calendar day, not time of day."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        instant = instant.replace(tzinfo=timezone.utc)
    midnight = instant.replace(hour=0, minute=0, second=0, microsecond=0)
    return (location.latitude, location.longitude, midnight.astimezone(timezone.utc).isoformat())


@dataclass(frozen=True)
class DayAnalysis:
    day_path: Tuple[ArcPoint, ...]
    blockage_points: Tuple[BlockagePoint, ...]
    sun_windows: Tuple[SunWindow, ...]


@dataclass(frozen=True)
class SunAnalysis:
    location: Location
    instant: datetime
    observer_elevation: float
    position: SunPosition
    times: SunTimes
    blockage: BlockageResult
    visibility: SunVisibility
    day_path: Tuple[ArcPoint, ...]
    blockage_points: Tuple[BlockagePoint, ...]
    sun_windows: Tuple[SunWindow, ...]
    shadows: Tuple[ShadowPolygon, ...]
    pin_building: Optional[BuildingFeature]


class SunAnalyzer:
    """Answers whether an observer can see the sun among surrounding buildings."""

    def __init__(self,
                 buildings: Iterable[BuildingFeature],
                 floor: int = 1,
                 facing: Optional[float] = None,
                 field_of_view: float = BLOCKAGE_PARAMS["default_field_of_view_deg"],
                 include_shadows: bool = True,
                 engine: Optional[BlockageEngine] = None,
                 caster: Optional[ShadowCaster] = None):
        """
        Initialize the analyzer with a building snapshot and observer parameters.

        Args:
            buildings: Building features; copied into an immutable snapshot
            floor: Observer floor (1 = ground)
            facing: Optional compass direction the observer faces
            field_of_view: Field of view in degrees around `facing`
            include_shadows: Whether to cast building shadows
            engine: Line-of-sight engine (defaults from config)
            caster: Shadow caster (defaults from config)
        """
        self.buildings = tuple(buildings)
        self.floor = floor
        self.observer_elevation = floor_to_elevation(floor)
        self.facing = facing
        self.field_of_view = field_of_view
        self.include_shadows = include_shadows
        self.engine = engine or BlockageEngine()
        self.caster = caster or ShadowCaster()

        self._day_key: Optional[DayKey] = None
        self._day: Optional[DayAnalysis] = None
        self.day_computations = 0

    def analyze_day(self, location: Location, instant: datetime) -> DayAnalysis:
        """
        Day path, blockage map and sun windows for the instant's calendar day.

        Recomputed only when the location or calendar day changes.
        """
        key = day_key(location, instant)
        if key == self._day_key and self._day is not None:
            return self._day

        logger.info(f"Computing day blockage for {location.latitude}, {location.longitude} on {key[2]}")
        day_path = SunCalculator(location).calculate_day_path(instant)
        points = self.engine.check_day(
            location, day_path, self.buildings, self.observer_elevation,
            self.facing, self.field_of_view,
        )
        windows = compute_sun_windows(points)
        logger.info(f"Found {len(windows)} sun windows over {len(points)} above-horizon samples")

        self._day_key = key
        self._day = DayAnalysis(day_path=day_path, blockage_points=points, sun_windows=windows)
        self.day_computations += 1
        return self._day

    def analyze(self, location: Location, instant: datetime) -> SunAnalysis:
        """
        Run the full analysis for one location and instant.

        Args:
            location: Observer location
            instant: Datetime of interest

        Returns:
            SunAnalysis with position, times, visibility, sun windows and shadows
        """
        try:
            calculator = SunCalculator(location)
            position = calculator.calculate_sun_position(instant)
            times = calculator.calculate_sun_times(instant)
            logger.info(f"Sun position: altitude={position.altitude:.1f}°, azimuth={position.azimuth:.1f}°")

            blockage = self.engine.check_instant(
                location, position, self.buildings, self.observer_elevation,
                self.facing, self.field_of_view,
            )
            visibility = derive_sun_visibility(position, blockage)
            day = self.analyze_day(location, instant)
            shadows = self.caster.cast(position, self.buildings) if self.include_shadows else ()

            return SunAnalysis(
                location=location,
                instant=instant,
                observer_elevation=self.observer_elevation,
                position=position,
                times=times,
                blockage=blockage,
                visibility=visibility,
                day_path=day.day_path,
                blockage_points=day.blockage_points,
                sun_windows=day.sun_windows,
                shadows=shadows,
                pin_building=detect_pin_building(self.buildings, location),
            )

        except Exception as e:
            logger.error(f"Error analyzing sun visibility: {e}")
            raise
