"""
Sun position and daily sun times module.
Calculates sun azimuth/altitude, named daily instants (sunrise, twilight,
golden hour) and the sampled day path for a location.
"""

import math
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

import numpy as np

from .config import EPHEMERIS_PARAMS
from .models import ArcPoint, DayType, Location, SunPosition, SunTimes

logger = logging.getLogger(__name__)

RAD = math.pi / 180
DAY_SECONDS = 86400.0
J1970 = 2440588
J2000 = 2451545
J0 = 0.0009
OBLIQUITY = RAD * EPHEMERIS_PARAMS["obliquity_deg"]

# (altitude, morning field, evening field)
SUN_EVENTS = [
    (EPHEMERIS_PARAMS["sunrise_altitude_deg"], "sunrise", "sunset"),
    (EPHEMERIS_PARAMS["civil_altitude_deg"], "civil_dawn", "civil_dusk"),
    (EPHEMERIS_PARAMS["nautical_altitude_deg"], "nautical_dawn", "nautical_dusk"),
    (EPHEMERIS_PARAMS["astronomical_altitude_deg"], "astronomical_dawn", "astronomical_dusk"),
    (EPHEMERIS_PARAMS["golden_hour_altitude_deg"], "golden_hour_end", "golden_hour_start"),
]


def _as_aware(instant: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def _to_julian(instant: datetime) -> float:
    return _as_aware(instant).timestamp() / DAY_SECONDS - 0.5 + J1970


def _from_julian(julian: float, tz) -> datetime:
    seconds = (julian + 0.5 - J1970) * DAY_SECONDS
    return datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone(tz)


def _to_days(instant: datetime) -> float:
    return _to_julian(instant) - J2000


# The coordinate helpers below accept floats or numpy arrays.

def _right_ascension(lon, lat):
    return np.arctan2(np.sin(lon) * np.cos(OBLIQUITY) - np.tan(lat) * np.sin(OBLIQUITY), np.cos(lon))


def _declination(lon, lat):
    return np.arcsin(np.sin(lat) * np.cos(OBLIQUITY) + np.cos(lat) * np.sin(OBLIQUITY) * np.sin(lon))


def _azimuth(hour_angle, phi, dec):
    # south-referenced, positive westward
    return np.arctan2(np.sin(hour_angle), np.cos(hour_angle) * np.sin(phi) - np.tan(dec) * np.cos(phi))


def _altitude(hour_angle, phi, dec):
    return np.arcsin(np.sin(phi) * np.sin(dec) + np.cos(phi) * np.cos(dec) * np.cos(hour_angle))


def _sidereal_time(days, lw):
    return RAD * (280.16 + 360.9856235 * days) - lw


def _solar_mean_anomaly(days):
    return RAD * (357.5291 + 0.98560028 * days)


def _ecliptic_longitude(mean_anomaly):
    center = RAD * (
        1.9148 * np.sin(mean_anomaly)
        + 0.02 * np.sin(2 * mean_anomaly)
        + 0.0003 * np.sin(3 * mean_anomaly)
    )
    perihelion = RAD * 102.9372
    return mean_anomaly + center + perihelion + math.pi


def _sun_coords(days):
    ecliptic_lon = _ecliptic_longitude(_solar_mean_anomaly(days))
    return _declination(ecliptic_lon, 0), _right_ascension(ecliptic_lon, 0)


def _horizontal(days, latitude: float, longitude: float):
    """Compass azimuth and altitude in degrees for day number(s) since J2000."""
    lw = RAD * -longitude
    phi = RAD * latitude
    dec, ra = _sun_coords(days)
    hour_angle = _sidereal_time(days, lw) - ra
    raw_azimuth = np.degrees(_azimuth(hour_angle, phi, dec))
    # astronomers measure azimuth from south; expose compass convention
    azimuth = np.mod(raw_azimuth + 180, 360)
    altitude = np.degrees(_altitude(hour_angle, phi, dec))
    return azimuth, altitude


def _julian_cycle(days: float, lw: float) -> int:
    return round(days - J0 - lw / (2 * math.pi))


def _approx_transit(hour_angle: float, lw: float, cycle: int) -> float:
    return J0 + (hour_angle + lw) / (2 * math.pi) + cycle


def _solar_transit_j(ds: float, mean_anomaly: float, ecliptic_lon: float) -> float:
    return J2000 + ds + 0.0053 * math.sin(mean_anomaly) - 0.0069 * math.sin(2 * ecliptic_lon)


def _hour_angle(h: float, phi: float, dec: float) -> Optional[float]:
    """Hour angle at which the sun reaches altitude h, or None if it never does."""
    cos_w = (math.sin(h) - math.sin(phi) * math.sin(dec)) / (math.cos(phi) * math.cos(dec))
    if cos_w < -1 or cos_w > 1:
        return None
    return math.acos(cos_w)


class SunCalculator:
    """Calculates sun positions and daily sun times for one location."""

    def __init__(self, location: Location):
        """
        Initialize sun calculator.

        Args:
            location: Observer location (validated on construction)
        """
        self.location = location
        self.latitude = location.latitude
        self.longitude = location.longitude

    def calculate_sun_position(self, instant: datetime) -> SunPosition:
        """
        Calculate sun position for an instant.

        Args:
            instant: Datetime; naive values are taken as UTC

        Returns:
            SunPosition with compass azimuth and altitude in degrees
        """
        azimuth, altitude = _horizontal(_to_days(instant), self.latitude, self.longitude)
        return SunPosition(azimuth=float(azimuth), altitude=float(altitude))

    def calculate_sun_times(self, instant: datetime) -> SunTimes:
        """
        Calculate the named sun times for the day around an instant.

        When the sun never crosses the sunrise altitude (polar day or polar
        night) sunrise and sunset are None and the day length is 1440 or 0
        minutes respectively.

        Args:
            instant: Datetime; returned times use its timezone

        Returns:
            SunTimes for that day
        """
        tz = _as_aware(instant).tzinfo
        lw = RAD * -self.longitude
        phi = RAD * self.latitude

        days = _to_days(instant)
        cycle = _julian_cycle(days, lw)
        ds = _approx_transit(0, lw, cycle)
        mean_anomaly = float(_solar_mean_anomaly(ds))
        ecliptic_lon = float(_ecliptic_longitude(mean_anomaly))
        dec = float(_declination(ecliptic_lon, 0))
        j_noon = _solar_transit_j(ds, mean_anomaly, ecliptic_lon)

        events: Dict[str, Optional[datetime]] = {}
        for altitude_deg, morning, evening in SUN_EVENTS:
            w = _hour_angle(altitude_deg * RAD, phi, dec)
            if w is None:
                events[morning] = events[evening] = None
                continue
            j_set = _solar_transit_j(_approx_transit(w, lw, cycle), mean_anomaly, ecliptic_lon)
            j_rise = j_noon - (j_set - j_noon)
            events[morning] = _from_julian(j_rise, tz)
            events[evening] = _from_julian(j_set, tz)

        sunrise, sunset = events["sunrise"], events["sunset"]
        if sunrise is not None and sunset is not None:
            day_type = DayType.NORMAL
            day_length = max(0.0, (sunset - sunrise).total_seconds() / 60.0)
        else:
            sin_noon = math.sin(phi) * math.sin(dec) + math.cos(phi) * math.cos(dec)
            noon_altitude = math.degrees(math.asin(max(-1.0, min(1.0, sin_noon))))
            if noon_altitude > EPHEMERIS_PARAMS["sunrise_altitude_deg"]:
                day_type, day_length = DayType.POLAR_DAY, 24 * 60.0
            else:
                day_type, day_length = DayType.POLAR_NIGHT, 0.0
            logger.debug(f"No sunrise at {self.latitude}, {self.longitude}: {day_type.value}")

        return SunTimes(
            solar_noon=_from_julian(j_noon, tz),
            nadir=_from_julian(j_noon - 0.5, tz),
            day_length=day_length,
            day_type=day_type,
            **events,
        )

    def calculate_day_path(self, instant: datetime) -> Tuple[ArcPoint, ...]:
        """
        Sample the sun's path over the instant's local calendar day.

        Samples run from local midnight at a fixed step in absolute time,
        so the path depends only on location and day. On an ordinary day
        the last sample is the following local midnight; on a DST change
        day it lands an hour off (01:00 after a 23-hour day, 23:00 after
        a 25-hour one).

        Args:
            instant: Any datetime within the day of interest

        Returns:
            Tuple of ArcPoints in time order
        """
        local = _as_aware(instant)
        tz = local.tzinfo
        midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
        start_utc = midnight.astimezone(timezone.utc)

        step_minutes = EPHEMERIS_PARAMS["arc_step_minutes"]
        offsets = np.arange(EPHEMERIS_PARAMS["arc_samples_per_day"]) * step_minutes
        days = _to_days(start_utc) + offsets / (24 * 60)
        azimuths, altitudes = _horizontal(days, self.latitude, self.longitude)

        return tuple(
            ArcPoint(
                azimuth=float(az),
                altitude=float(alt),
                time=(start_utc + timedelta(minutes=int(offset))).astimezone(tz),
            )
            for az, alt, offset in zip(azimuths, altitudes, offsets)
        )


def get_sun_position(lat: float, lng: float, instant: datetime) -> SunPosition:
    """Sun azimuth/altitude at an instant."""
    return SunCalculator(Location(lat, lng)).calculate_sun_position(instant)


def get_sun_times(lat: float, lng: float, instant: datetime) -> SunTimes:
    """Named sun times for the day around an instant."""
    return SunCalculator(Location(lat, lng)).calculate_sun_times(instant)


def get_day_path(lat: float, lng: float, instant: datetime) -> Tuple[ArcPoint, ...]:
    """145-sample day path for the instant's local calendar day."""
    return SunCalculator(Location(lat, lng)).calculate_day_path(instant)
