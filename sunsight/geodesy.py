"""
Bearing and distance helpers on the WGS84 ellipsoid.
Coordinates are (lon, lat) pairs, matching GeoJSON ring order.
"""

from typing import Tuple

from pyproj import Geod

from .models import Coordinate, Ring


WGS84 = Geod(ellps="WGS84")


def bearing_to_compass(bearing: float) -> float:
    """Convert a signed bearing (e.g. -180..180) to compass degrees [0, 360)."""
    return ((bearing % 360) + 360) % 360


def angular_difference(a: float, b: float) -> float:
    """Minimum rotation between two compass bearings, in [0, 180]."""
    diff = abs(a - b) % 360
    return 360 - diff if diff > 180 else diff


def bearing(origin: Coordinate, target: Coordinate) -> float:
    """Compass bearing from origin to target."""
    forward_az, _, _ = WGS84.inv(origin[0], origin[1], target[0], target[1])
    return bearing_to_compass(forward_az)


def distance_m(origin: Coordinate, target: Coordinate) -> float:
    """Geodesic distance in meters."""
    _, _, dist = WGS84.inv(origin[0], origin[1], target[0], target[1])
    return dist


def destination(origin: Coordinate, azimuth: float, meters: float) -> Tuple[float, float]:
    """Point reached by travelling `meters` from origin along `azimuth`."""
    lon, lat, _ = WGS84.fwd(origin[0], origin[1], azimuth, meters)
    return (lon, lat)


def translate_ring(ring: Ring, azimuth: float, meters: float) -> Ring:
    """Move every vertex of a ring the same distance along the same bearing."""
    lons = [c[0] for c in ring]
    lats = [c[1] for c in ring]
    count = len(ring)
    out_lons, out_lats, _ = WGS84.fwd(lons, lats, [azimuth] * count, [meters] * count)
    translated = tuple(zip(out_lons, out_lats))
    # keep closure exact despite floating point
    return translated[:-1] + (translated[0],)
