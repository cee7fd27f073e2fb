"""
Configuration file for the sunsight project.
Contains tunable constants for the ephemeris, building model, line-of-sight
engine, shadow caster and overlay geometry.
"""

import os
import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)

# Ephemeris parameters
EPHEMERIS_PARAMS = {
    "arc_step_minutes": 10,        # day path cadence
    "arc_samples_per_day": 145,    # midnight to midnight, both inclusive
    "obliquity_deg": 23.4397,      # obliquity of the ecliptic
    "sunrise_altitude_deg": -0.833,
    "civil_altitude_deg": -6.0,
    "nautical_altitude_deg": -12.0,
    "astronomical_altitude_deg": -18.0,
    "golden_hour_altitude_deg": 6.0,
}

# Building model parameters.
# Heights derived from level counts assume 3 meters per storey. This is a
# simplifying assumption for OSM data where only building:levels is tagged;
# it also sets the default height of untagged buildings (one storey).
METERS_PER_LEVEL = 3.0

BUILDING_PARAMS = {
    "meters_per_level": METERS_PER_LEVEL,
    "default_height_m": METERS_PER_LEVEL,
    "default_levels": 1,
    "min_ring_points": 4,
    "simplify_tolerance_deg": 0.00001,  # ~1 m
}

# Line-of-sight parameters
BLOCKAGE_PARAMS = {
    "ray_length_m": 500.0,                 # buildings beyond this cannot plausibly occlude
    "bearing_tolerance_deg": 30.0,         # coarse candidate pruning
    "min_intersection_distance_m": 1.0,    # ignore the observer's own wall
    "default_field_of_view_deg": 180.0,
}

# Shadow parameters
SHADOW_PARAMS = {
    "max_shadow_length_m": 2000.0,  # longer shadows are low-sun noise
}

# Overlay (rendering surface) parameters
OVERLAY_PARAMS = {
    "arc_scale_deg": 0.002,                # radius of the sky-dome projection at the horizon
    "below_horizon_floor_deg": -10.0,
    "direction_arrow_altitude_deg": 60.0,
}


def get_log_level() -> int:
    """Get the log level from the SUNSIGHT_LOG_LEVEL environment variable."""
    name = os.getenv("SUNSIGHT_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        logger.warning(f"Unknown SUNSIGHT_LOG_LEVEL '{name}', using WARNING")
        return logging.WARNING
    return level


def _positive(section: str, params: Dict[str, Any], key: str) -> bool:
    value = params.get(key)
    if not isinstance(value, (int, float)) or value <= 0:
        logger.warning(f"{section}['{key}'] must be a positive number, got {value!r}")
        return False
    return True


def validate_config() -> bool:
    """Validate that all configured parameters are usable."""
    checks = [
        _positive("EPHEMERIS_PARAMS", EPHEMERIS_PARAMS, "arc_step_minutes"),
        _positive("BUILDING_PARAMS", BUILDING_PARAMS, "meters_per_level"),
        _positive("BUILDING_PARAMS", BUILDING_PARAMS, "default_height_m"),
        _positive("BLOCKAGE_PARAMS", BLOCKAGE_PARAMS, "ray_length_m"),
        _positive("BLOCKAGE_PARAMS", BLOCKAGE_PARAMS, "bearing_tolerance_deg"),
        _positive("SHADOW_PARAMS", SHADOW_PARAMS, "max_shadow_length_m"),
        _positive("OVERLAY_PARAMS", OVERLAY_PARAMS, "arc_scale_deg"),
    ]

    steps_per_day = 24 * 60 / EPHEMERIS_PARAMS["arc_step_minutes"]
    if steps_per_day + 1 != EPHEMERIS_PARAMS["arc_samples_per_day"]:
        logger.warning(
            f"EPHEMERIS_PARAMS: {EPHEMERIS_PARAMS['arc_samples_per_day']} samples "
            f"does not match a {EPHEMERIS_PARAMS['arc_step_minutes']}-minute step"
        )
        checks.append(False)

    fov = BLOCKAGE_PARAMS["default_field_of_view_deg"]
    if not 0 < fov <= 360:
        logger.warning(f"BLOCKAGE_PARAMS: field of view {fov} outside (0, 360]")
        checks.append(False)

    return all(checks)
