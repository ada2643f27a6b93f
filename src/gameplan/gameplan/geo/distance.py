"""Great-circle distance between two coordinates (haversine formula)."""

from __future__ import annotations

from math import asin, cos, radians, sin, sqrt

from .model import GeoLocation

EARTH_RADIUS_M = 6371000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in meters between two points given in degrees.

    NaN inputs propagate as NaN; callers guard.
    """
    lat1_rad, lon1_rad, lat2_rad, lon2_rad = map(radians, (float(lat1), float(lon1), float(lat2), float(lon2)))

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = sin(dlat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(dlon / 2) ** 2
    # Clamp rounding noise so asin never sees a value above 1.
    c = 2 * asin(sqrt(min(a, 1.0)))
    return EARTH_RADIUS_M * c


def distance(point_a: GeoLocation, point_b: GeoLocation) -> float:
    return haversine_m(point_a.latitude, point_a.longitude, point_b.latitude, point_b.longitude)
