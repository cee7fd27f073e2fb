"""
Shadow projection module.
Projects building footprints away from the sun to approximate cast shadows.
"""

import math
import logging
from typing import Iterable, List, Tuple

from pyproj.exceptions import GeodError

from . import geodesy
from .config import SHADOW_PARAMS
from .errors import GeometricDegenerateError
from .models import BuildingFeature, ShadowPolygon, SunPosition

logger = logging.getLogger(__name__)


class ShadowCaster:
    """Calculates shadow footprints for buildings."""

    def __init__(self, max_shadow_length_m: float = SHADOW_PARAMS["max_shadow_length_m"]):
        self.max_shadow_length_m = max_shadow_length_m

    def shadow_length(self, height: float, altitude: float) -> float:
        """Shadow length = height / tan(altitude)."""
        return height / math.tan(math.radians(altitude))

    def project_shadow(self, building: BuildingFeature, sun_position: SunPosition) -> ShadowPolygon:
        """
        Translate a building footprint along the shadow bearing.

        The footprint is moved by the full shadow length rather than swept,
        which approximates the shadow tip.

        Raises:
            GeometricDegenerateError: If the footprint cannot be translated
        """
        length = self.shadow_length(building.height, sun_position.altitude)
        shadow_bearing = (sun_position.azimuth + 180) % 360
        try:
            ring = geodesy.translate_ring(building.ring, shadow_bearing, length)
        except (GeodError, ValueError) as e:
            raise GeometricDegenerateError(building.id, "shadow translation", e) from e
        return ShadowPolygon(building_id=building.id, shadow_length=length, ring=ring)

    def cast(self, sun_position: SunPosition,
             buildings: Iterable[BuildingFeature]) -> Tuple[ShadowPolygon, ...]:
        """
        Calculate shadow polygons for all buildings.

        Args:
            sun_position: Sun azimuth/altitude
            buildings: Building features

        Returns:
            Shadow polygons; empty when the sun is down
        """
        if sun_position.altitude <= 0:
            return ()

        shadows: List[ShadowPolygon] = []
        for building in buildings:
            if building.height <= 0:
                continue
            length = self.shadow_length(building.height, sun_position.altitude)
            if length <= 0 or length > self.max_shadow_length_m:
                continue
            try:
                shadows.append(self.project_shadow(building, sun_position))
            except GeometricDegenerateError as e:
                logger.debug(str(e))
        return tuple(shadows)


_default_caster = ShadowCaster()


def cast_shadows(sun_position: SunPosition,
                 buildings: Iterable[BuildingFeature]) -> Tuple[ShadowPolygon, ...]:
    """Shadow polygons for a sun position using the default 2000 m cap."""
    return _default_caster.cast(sun_position, buildings)
