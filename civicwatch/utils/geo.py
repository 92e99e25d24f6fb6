"""
Geographic helpers: great-circle distance and coordinate centroids.
"""

import math
from typing import Iterable, Tuple


EARTH_RADIUS_METERS = 6371000


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters using Haversine formula."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def latitude_span_degrees(meters: float) -> float:
    """Degrees of latitude covering the given north-south distance."""
    return math.degrees(meters / EARTH_RADIUS_METERS)


def centroid(points: Iterable[Tuple[float, float]]) -> Tuple[float, float]:
    """Arithmetic mean of (lat, lon) pairs."""
    points = list(points)
    if not points:
        return (0.0, 0.0)

    total_lat = sum(lat for lat, _ in points)
    total_lon = sum(lon for _, lon in points)
    count = len(points)

    return (total_lat / count, total_lon / count)
