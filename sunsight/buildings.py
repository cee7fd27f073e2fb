"""
Building geometry module.
Turns raw OpenStreetMap footprint records into BuildingFeature values with a
resolved height and height provenance.
"""

import math
import re
import logging
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from shapely.errors import GEOSException
from shapely.geometry import Point, Polygon

from .config import BUILDING_PARAMS
from .models import BuildingFeature, HeightSource, Location, Ring

logger = logging.getLogger(__name__)

_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


class ParsedHeight(NamedTuple):
    height: float
    levels: int
    height_source: HeightSource


def parse_metric_height(raw: Optional[str]) -> Optional[float]:
    """Parse an OSM `height` tag ("12", "12.5", "12 m") into meters, or None."""
    if not raw:
        return None
    match = _LEADING_FLOAT.match(str(raw))
    if match is None:
        return None
    height = float(match.group(0))
    # "1e400" parses to inf
    return height if math.isfinite(height) else None


def parse_building_levels(raw: Optional[str]) -> Optional[int]:
    """Parse an OSM `building:levels` tag into a positive integer, or None."""
    if not raw:
        return None
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return None
    levels = int(match.group(0))
    return levels if levels > 0 else None


def resolve_height(measured: Optional[float], levels: Optional[int]) -> ParsedHeight:
    """
    Resolve a building height from a measured value and a level count.

    Order: a positive measured height wins; otherwise levels times
    METERS_PER_LEVEL; otherwise a single default storey.
    """
    per_level = BUILDING_PARAMS["meters_per_level"]
    if measured is not None and measured > 0:
        return ParsedHeight(
            height=measured,
            levels=levels if levels is not None else math.ceil(measured / per_level),
            height_source=HeightSource.MEASURED,
        )
    if levels is not None:
        return ParsedHeight(levels * per_level, levels, HeightSource.ESTIMATED)
    return ParsedHeight(
        BUILDING_PARAMS["default_height_m"],
        BUILDING_PARAMS["default_levels"],
        HeightSource.UNKNOWN,
    )


def extract_building_height(tags: Mapping[str, str]) -> ParsedHeight:
    """Extract building height from an OSM tags dict."""
    return resolve_height(
        parse_metric_height(tags.get("height")),
        parse_building_levels(tags.get("building:levels")),
    )


def _coordinate(point: Any) -> Tuple[float, float]:
    if isinstance(point, Mapping):
        return (float(point["lon"]), float(point["lat"]))
    lon, lat = point
    return (float(lon), float(lat))


def build_polygon_ring(geometry: Sequence[Any]) -> Optional[Ring]:
    """
    Convert raw node geometry into a closed (lon, lat) ring.

    Args:
        geometry: Sequence of {"lat", "lon"} dicts or (lon, lat) pairs

    Returns:
        Closed ring, or None if the geometry has fewer than 4 points
    """
    min_points = BUILDING_PARAMS["min_ring_points"]
    if len(geometry) < min_points:
        return None

    ring: List[Tuple[float, float]] = [_coordinate(p) for p in geometry]
    if ring[0] != ring[-1]:
        ring.append(ring[0])

    return tuple(ring) if len(ring) >= min_points else None


def _is_valid_ring(ring: Sequence[Any]) -> bool:
    return len(ring) >= BUILDING_PARAMS["min_ring_points"]


def normalize_buildings(
    raw_records: Iterable[Dict[str, Any]],
    simplify_tolerance: Optional[float] = None,
) -> Tuple[BuildingFeature, ...]:
    """
    Normalize raw footprint records into building features.

    Args:
        raw_records: Overpass-style way records with `id`, `tags`, `geometry`
        simplify_tolerance: Optional simplification tolerance in degrees

    Returns:
        Tuple of BuildingFeature values; unusable records are dropped
    """
    features: List[BuildingFeature] = []
    skipped = 0

    for record in raw_records:
        tags = record.get("tags") or {}
        if not tags.get("building"):
            skipped += 1
            continue

        ring = build_polygon_ring(record.get("geometry") or [])
        if ring is None:
            logger.debug(f"Dropping way {record.get('id')}: fewer than 4 geometry points")
            skipped += 1
            continue

        parsed = extract_building_height(tags)
        features.append(
            BuildingFeature(
                id=record["id"],
                ring=ring,
                height=parsed.height,
                levels=parsed.levels,
                height_source=parsed.height_source,
                name=tags.get("name"),
            )
        )

    logger.info(f"Normalized {len(features)} buildings, skipped {skipped} records")

    if simplify_tolerance is not None:
        return simplify_buildings(features, simplify_tolerance)
    return tuple(features)


def simplify_buildings(
    features: Iterable[BuildingFeature],
    tolerance: float = BUILDING_PARAMS["simplify_tolerance_deg"],
) -> Tuple[BuildingFeature, ...]:
    """
    Simplify building footprints, dropping ones that collapse.

    A footprint whose simplified ring has fewer than 4 points is dropped. If
    simplification itself fails, the original footprint is kept.
    """
    simplified: List[BuildingFeature] = []

    for feature in features:
        try:
            geom = feature.polygon.simplify(tolerance, preserve_topology=False)
            if geom.is_empty or not isinstance(geom, Polygon):
                logger.debug(f"Dropping building {feature.id}: simplified to {geom.geom_type}")
                continue
            ring = tuple(geom.exterior.coords)
            if not _is_valid_ring(ring):
                logger.debug(f"Dropping building {feature.id}: simplified ring collapsed")
                continue
            simplified.append(
                BuildingFeature(
                    id=feature.id,
                    ring=ring,
                    height=feature.height,
                    levels=feature.levels,
                    height_source=feature.height_source,
                    name=feature.name,
                )
            )
        except (GEOSException, ValueError) as e:
            logger.debug(f"Keeping original footprint for building {feature.id}: {e}")
            if _is_valid_ring(feature.ring):
                simplified.append(feature)

    return tuple(simplified)


def detect_pin_building(
    features: Iterable[BuildingFeature], location: Location
) -> Optional[BuildingFeature]:
    """Find the building footprint that contains the location, or None."""
    point = Point(location.longitude, location.latitude)
    for feature in features:
        try:
            if feature.polygon.covers(point):
                return feature
        except GEOSException as e:
            logger.debug(f"Skipping building {feature.id} in pin detection: {e}")
    return None
