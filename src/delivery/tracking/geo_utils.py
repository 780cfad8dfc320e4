# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects, no imports from other project modules except the point type.

import math

from .models import GeoPoint


EARTH_RADIUS_KM = 6371.0


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """
    Great-circle (haversine) distance between two points in kilometres.

    NaN coordinates propagate as NaN; callers validate their inputs.

    Args:
        a, b: Points in decimal degrees.

    Returns:
        Distance in kilometres.
    """
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bearing_degrees(origin: GeoPoint, target: GeoPoint) -> float:
    """
    Initial bearing from origin to target in degrees, range [-180, 180].

    Drives a marker rotation, so any non-finite input or result gives 0.0
    instead of NaN.

    Args:
        origin: Start point in decimal degrees.
        target: End point in decimal degrees.

    Returns:
        Bearing in degrees, 0 = north, positive clockwise.
    """
    coords = (origin.latitude, origin.longitude, target.latitude, target.longitude)
    if not all(math.isfinite(c) for c in coords):
        return 0.0

    rlat1, rlon1 = math.radians(origin.latitude), math.radians(origin.longitude)
    rlat2, rlon2 = math.radians(target.latitude), math.radians(target.longitude)
    d_lon = rlon2 - rlon1
    y = math.sin(d_lon) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(d_lon)
    bearing = math.degrees(math.atan2(y, x))
    return bearing if math.isfinite(bearing) else 0.0
