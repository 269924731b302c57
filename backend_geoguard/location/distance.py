"""Great-circle distance between coordinates (haversine, meters)."""

from __future__ import annotations

import math

from backend_geoguard.location.models import Coordinate

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in meters between two points given in decimal degrees."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push a just past 1 for near-antipodal points
    a = min(a, 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance(a: Coordinate, b: Coordinate) -> float:
    """
    Distance in meters between two coordinates.

    Endpoints are put in a canonical order first so distance(a, b) and
    distance(b, a) are bit-for-bit equal.
    """
    if (b.latitude, b.longitude) < (a.latitude, a.longitude):
        a, b = b, a
    return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)
