"""
Geo Math - great-circle distance and walking time.

Pure functions, no I/O. Inputs are assumed finite; callers validate
coordinates before they get here.
"""

from __future__ import annotations

import math

from restroom_search.config import WALKING_SPEED_KMH

EARTH_RADIUS_METERS = 6_371_000.0


def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in meters between two WGS84 points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Clamp against float drift for antipodal points
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def walk_minutes(distance: float, speed_kmh: float = WALKING_SPEED_KMH) -> int:
    """Walking time in whole minutes, rounded half up (0 for very short distances)."""
    meters_per_minute = speed_kmh * 1000 / 60
    return int(math.floor(distance / meters_per_minute + 0.5))


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    """True for a finite latitude in [-90, 90] and longitude in [-180, 180]."""
    try:
        lat = float(latitude)
        lng = float(longitude)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0
