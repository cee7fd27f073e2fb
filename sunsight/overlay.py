"""
Overlay geometry module.
Builds plain GeoJSON-like features for the sun arc, sun point, direction
lines and shadows. Styling is left to the rendering layer.
"""

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from shapely.geometry import LineString, Point, Polygon, mapping

from .config import OVERLAY_PARAMS
from .models import ArcPoint, BlockagePoint, ShadowPolygon, SunPosition, SunVisibility


Feature = Dict[str, Any]


def project_point(center: Tuple[float, float], azimuth: float, altitude: float,
                  scale: float = OVERLAY_PARAMS["arc_scale_deg"]) -> Tuple[float, float]:
    """
    Project a sky position onto the map around a center point.

    The horizon maps to `scale` degrees from the center and the zenith to
    the center itself.

    Args:
        center: (lon, lat) of the observer
        azimuth: Compass azimuth in degrees
        altitude: Altitude in degrees
        scale: Projection radius at the horizon in degrees

    Returns:
        (lon, lat) of the projected point
    """
    distance = max(0.0, (90 - altitude) / 90) * scale
    rad = math.radians(azimuth)
    lat = center[1] + distance * math.cos(rad)
    lng = center[0] + distance * math.sin(rad) / math.cos(math.radians(center[1]))
    return (lng, lat)


def _line_feature(layer: str, coords: Sequence[Tuple[float, float]]) -> Feature:
    return {
        "type": "Feature",
        "properties": {"layer": layer},
        "geometry": mapping(LineString(coords)),
    }


def build_arc_segments(center: Tuple[float, float],
                       day_path: Sequence[ArcPoint],
                       blockage_points: Optional[Sequence[BlockagePoint]] = None,
                       scale: float = OVERLAY_PARAMS["arc_scale_deg"]) -> List[Feature]:
    """
    Split the above-horizon arc into single-status line segments.

    Each segment after the first starts at the last coordinate of the
    previous one so the rendered arc has no gaps.
    """
    above = [p for p in day_path if p.altitude > 0]
    if len(above) < 2:
        return []

    if not blockage_points:
        coords = [project_point(center, p.azimuth, p.altitude, scale) for p in above]
        return [_line_feature("arc", coords)]

    blocked_times = {bp.time for bp in blockage_points if bp.blocked}

    segments: List[Tuple[bool, List[Tuple[float, float]]]] = []
    for p in above:
        blocked = p.time in blocked_times
        coord = project_point(center, p.azimuth, p.altitude, scale)
        if not segments or segments[-1][0] != blocked:
            start = [segments[-1][1][-1], coord] if segments else [coord]
            segments.append((blocked, start))
        else:
            segments[-1][1].append(coord)

    return [
        _line_feature("arc-blocked" if blocked else "arc", coords)
        for blocked, coords in segments
        if len(coords) >= 2
    ]


def build_overlay_features(center: Tuple[float, float],
                           position: SunPosition,
                           day_path: Sequence[ArcPoint],
                           visibility: SunVisibility,
                           blockage_points: Optional[Sequence[BlockagePoint]] = None,
                           facing: Optional[float] = None,
                           scale: float = OVERLAY_PARAMS["arc_scale_deg"]) -> List[Feature]:
    """
    Build the full set of sun overlay features for one instant.

    Returns:
        Features tagged by a `layer` property: arc, arc-blocked, below,
        sunrise, sunset, sun and direction
    """
    features = build_arc_segments(center, day_path, blockage_points, scale)

    floor = OVERLAY_PARAMS["below_horizon_floor_deg"]
    below = [p for p in day_path if floor < p.altitude <= 0]
    if len(below) > 1:
        features.append(_line_feature(
            "below", [project_point(center, p.azimuth, p.altitude, scale) for p in below]
        ))

    sunrise_point = next((p for p in day_path if p.altitude >= 0), None)
    if sunrise_point is not None:
        features.append(_line_feature(
            "sunrise", [center, project_point(center, sunrise_point.azimuth, 0, scale)]
        ))

    sunset_point = next((p for p in reversed(day_path) if p.altitude >= 0), None)
    if sunset_point is not None:
        features.append(_line_feature(
            "sunset", [center, project_point(center, sunset_point.azimuth, 0, scale)]
        ))

    features.append({
        "type": "Feature",
        "properties": {
            "layer": "sun",
            "visibility": visibility.value,
            "azimuth": position.azimuth,
            "altitude": position.altitude,
        },
        "geometry": mapping(Point(project_point(center, position.azimuth, position.altitude, scale))),
    })

    if facing is not None:
        arrow_altitude = OVERLAY_PARAMS["direction_arrow_altitude_deg"]
        features.append(_line_feature(
            "direction", [center, project_point(center, facing, arrow_altitude, scale)]
        ))

    return features


def shadow_features(shadows: Iterable[ShadowPolygon]) -> List[Feature]:
    """One polygon feature per shadow."""
    return [
        {
            "type": "Feature",
            "properties": {"buildingId": s.building_id, "shadowLength": s.shadow_length},
            "geometry": mapping(Polygon(s.ring)),
        }
        for s in shadows
    ]
