"""
Sentinel-G - Geospatial Utilities
Common geospatial calculations used for zone resolution and report placement.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """
    Location of an incident or zone vertex.

    Carries both the local-grid projection (x, y on the 0-100 schematic map)
    and the geodetic coordinates used for real-world lookups.
    """
    x: float
    y: float
    lat: float
    lng: float

    def to_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lng)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "lat": self.lat, "lng": self.lng}


def haversine_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        lat1, lon1: First point coordinates in decimal degrees
        lat2, lon2: Second point coordinates in decimal degrees

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def point_in_polygon(
    point: Tuple[float, float],
    polygon: Sequence[Tuple[float, float]]
) -> bool:
    """
    Check if a point is inside a polygon using ray casting algorithm.

    Args:
        point: (latitude, longitude) tuple
        polygon: List of (latitude, longitude) tuples forming the polygon

    Returns:
        True if point is inside polygon
    """
    x, y = point
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    xinters = x
    p1x, p1y = polygon[0]
    for i in range(1, n + 1):
        p2x, p2y = polygon[i % n]
        if y > min(p1y, p2y):
            if y <= max(p1y, p2y):
                if x <= max(p1x, p2x):
                    if p1y != p2y:
                        xinters = (y - p1y) * (p2x - p1x) / (p2y - p1y) + p1x
                    if p1x == p2x or x <= xinters:
                        inside = not inside
        p1x, p1y = p2x, p2y

    return inside


def calculate_centroid(
    points: List[Tuple[float, float]]
) -> Tuple[float, float]:
    """
    Calculate the centroid (center of mass) of a set of points.

    Args:
        points: List of (latitude, longitude) tuples

    Returns:
        Tuple of (latitude, longitude) of the centroid
    """
    if not points:
        return (0.0, 0.0)

    lat_sum = sum(p[0] for p in points)
    lon_sum = sum(p[1] for p in points)
    n = len(points)

    return (lat_sum / n, lon_sum / n)
