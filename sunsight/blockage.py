"""
Line-of-sight blockage module.
Casts a sight ray from an observer toward the sun and decides whether a
building footprint occludes it, for one instant or for a whole day path.
"""

import math
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from shapely.errors import GEOSException
from shapely.geometry import LineString

from . import geodesy
from .config import BLOCKAGE_PARAMS
from .errors import GeometricDegenerateError
from .models import (
    ArcPoint,
    BlockagePoint,
    BlockageResult,
    BuildingFeature,
    Coordinate,
    Location,
    SunPosition,
)

logger = logging.getLogger(__name__)

NOT_BLOCKED = BlockageResult(blocked=False)


def is_sun_in_field_of_view(sun_azimuth: float, facing: float, fov: float = 180) -> bool:
    """Check whether the sun azimuth falls within the observer's field of view."""
    return geodesy.angular_difference(sun_azimuth, facing) <= fov / 2


def _intersection_coords(geom) -> List[Coordinate]:
    if geom.is_empty:
        return []
    if hasattr(geom, "geoms"):
        coords: List[Coordinate] = []
        for part in geom.geoms:
            coords.extend(_intersection_coords(part))
        return coords
    # Point, or LineString where the ray runs along a wall
    return [(c[0], c[1]) for c in geom.coords]


def ray_intersections(ray: LineString, building: BuildingFeature) -> List[Coordinate]:
    """
    Points where a ray crosses a building's footprint ring.

    Raises:
        GeometricDegenerateError: If the ring cannot be intersected
    """
    try:
        return _intersection_coords(ray.intersection(building.polygon.exterior))
    except (GEOSException, ValueError) as e:
        raise GeometricDegenerateError(building.id, "ray intersection", e) from e


class BlockageEngine:
    """Decides whether buildings occlude the sun for an observer."""

    def __init__(self,
                 ray_length_m: float = BLOCKAGE_PARAMS["ray_length_m"],
                 bearing_tolerance: float = BLOCKAGE_PARAMS["bearing_tolerance_deg"],
                 min_intersection_distance_m: float = BLOCKAGE_PARAMS["min_intersection_distance_m"]):
        """
        Initialize the engine.

        Args:
            ray_length_m: Length of the sight ray toward the sun
            bearing_tolerance: Candidate pruning tolerance in degrees
            min_intersection_distance_m: Intersections nearer than this are ignored
        """
        self.ray_length_m = ray_length_m
        self.bearing_tolerance = bearing_tolerance
        self.min_intersection_distance_m = min_intersection_distance_m

    def filter_buildings_by_sun_bearing(self,
                                        buildings: Iterable[BuildingFeature],
                                        observer: Location,
                                        sun_azimuth: float,
                                        tolerance: Optional[float] = None) -> List[BuildingFeature]:
        """Keep only buildings whose centroid lies roughly in the sun's direction."""
        if tolerance is None:
            tolerance = self.bearing_tolerance
        origin = (observer.longitude, observer.latitude)

        candidates = []
        for building in buildings:
            try:
                centroid = building.polygon.centroid
                if centroid.is_empty:
                    continue
                building_bearing = geodesy.bearing(origin, (centroid.x, centroid.y))
            except (GEOSException, ValueError) as e:
                logger.debug(f"Skipping building {building.id} in bearing filter: {e}")
                continue
            if geodesy.angular_difference(building_bearing, sun_azimuth) <= tolerance:
                candidates.append(building)
        return candidates

    def _nearest_hit(self, origin: Coordinate, ray: LineString,
                     building: BuildingFeature) -> Optional[float]:
        nearest = math.inf
        for point in ray_intersections(ray, building):
            dist = geodesy.distance_m(origin, point)
            if self.min_intersection_distance_m <= dist < nearest:
                nearest = dist
        return None if nearest == math.inf else nearest

    def check_instant(self,
                      observer: Location,
                      sun_position: SunPosition,
                      buildings: Sequence[BuildingFeature],
                      observer_elevation: float,
                      facing: Optional[float] = None,
                      field_of_view: float = BLOCKAGE_PARAMS["default_field_of_view_deg"]) -> BlockageResult:
        """
        Determine whether the sun is occluded for the observer at one instant.

        Args:
            observer: Observer location
            sun_position: Sun azimuth/altitude
            buildings: Immutable snapshot of building features
            observer_elevation: Observer eye height above ground in meters
            facing: Optional compass direction the observer looks toward
            field_of_view: Total field of view in degrees around `facing`

        Returns:
            BlockageResult; the nearest occluding building along the ray wins
        """
        azimuth, altitude = sun_position.azimuth, sun_position.altitude
        if altitude <= 0:
            return NOT_BLOCKED

        if facing is not None and not is_sun_in_field_of_view(azimuth, facing, field_of_view):
            return BlockageResult(blocked=True)

        origin = (observer.longitude, observer.latitude)
        ray = LineString([origin, geodesy.destination(origin, azimuth, self.ray_length_m)])
        tan_altitude = math.tan(math.radians(altitude))

        nearest_block: Optional[Tuple[float, float]] = None
        for building in self.filter_buildings_by_sun_bearing(buildings, observer, azimuth):
            if building.height <= 0:
                continue
            try:
                dist = self._nearest_hit(origin, ray, building)
            except GeometricDegenerateError as e:
                logger.debug(str(e))
                continue
            if dist is None:
                continue

            sun_ray_height = observer_elevation + dist * tan_altitude
            if building.height > sun_ray_height and (nearest_block is None or dist < nearest_block[0]):
                nearest_block = (dist, building.height)

        if nearest_block is None:
            return NOT_BLOCKED

        dist, height = nearest_block
        return BlockageResult(blocked=True, blocking_height=height, block_distance=round(dist))

    def check_day(self,
                  observer: Location,
                  day_path: Iterable[ArcPoint],
                  buildings: Sequence[BuildingFeature],
                  observer_elevation: float,
                  facing: Optional[float] = None,
                  field_of_view: float = BLOCKAGE_PARAMS["default_field_of_view_deg"]) -> Tuple[BlockagePoint, ...]:
        """Compute the blockage verdict for every above-horizon sample of a day path."""
        points = []
        for sample in day_path:
            if sample.altitude <= 0:
                continue
            result = self.check_instant(
                observer,
                SunPosition(azimuth=sample.azimuth, altitude=sample.altitude),
                buildings,
                observer_elevation,
                facing,
                field_of_view,
            )
            points.append(BlockagePoint(
                time=sample.time,
                azimuth=sample.azimuth,
                altitude=sample.altitude,
                blocked=result.blocked,
            ))
        return tuple(points)


_default_engine = BlockageEngine()


def filter_buildings_by_sun_bearing(buildings: Iterable[BuildingFeature],
                                    observer: Location,
                                    sun_azimuth: float,
                                    tolerance: float = BLOCKAGE_PARAMS["bearing_tolerance_deg"]) -> List[BuildingFeature]:
    """Keep only buildings roughly in the sun's direction from the observer."""
    return _default_engine.filter_buildings_by_sun_bearing(buildings, observer, sun_azimuth, tolerance)


def check_instant(observer: Location,
                  sun_position: SunPosition,
                  buildings: Sequence[BuildingFeature],
                  observer_elevation: float,
                  facing: Optional[float] = None,
                  field_of_view: float = BLOCKAGE_PARAMS["default_field_of_view_deg"]) -> BlockageResult:
    """Blockage verdict for one instant using the default engine."""
    return _default_engine.check_instant(
        observer, sun_position, buildings, observer_elevation, facing, field_of_view
    )


def check_day(observer: Location,
              day_path: Iterable[ArcPoint],
              buildings: Sequence[BuildingFeature],
              observer_elevation: float,
              facing: Optional[float] = None,
              field_of_view: float = BLOCKAGE_PARAMS["default_field_of_view_deg"]) -> Tuple[BlockagePoint, ...]:
    """Per-sample blockage map for a day path using the default engine."""
    return _default_engine.check_day(
        observer, day_path, buildings, observer_elevation, facing, field_of_view
    )
