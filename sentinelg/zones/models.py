"""
Satellite zone data model
Geographic polygons carrying satellite and weather context for verification.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple

from sentinelg.core.geo_utils import GeoPoint, calculate_centroid, point_in_polygon


class CloudStatus(str, Enum):
    """Imagery usability over a zone."""
    CLEAR = "CLEAR"
    PARTIAL_CLOUD = "PARTIAL_CLOUD"
    HEAVY_CLOUD = "HEAVY_CLOUD"


@dataclass
class Zone:
    """
    A monitored geographic zone.

    The boundary is fixed. Cloud status and inundation change only on a
    satellite refresh; precipitation changes only on a weather refresh.
    """
    id: str
    name: str
    boundary: Tuple[GeoPoint, ...]
    status: CloudStatus = CloudStatus.PARTIAL_CLOUD
    inundation_level: float = 0.0
    precipitation: float = 0.0
    last_pass: str = "Never"

    def __post_init__(self):
        self.boundary = tuple(self.boundary)
        if len(self.boundary) < 3:
            raise ValueError(f"Zone {self.id} needs at least 3 boundary points")
        self.status = CloudStatus(self.status)
        self.inundation_level = min(1.0, max(0.0, float(self.inundation_level)))
        self.precipitation = max(0.0, float(self.precipitation))

    @property
    def vertices(self) -> List[Tuple[float, float]]:
        """Boundary as (lat, lng) tuples."""
        return [p.to_tuple() for p in self.boundary]

    @property
    def centroid(self) -> Tuple[float, float]:
        return calculate_centroid(self.vertices)

    @property
    def weather_point(self) -> GeoPoint:
        """Point sampled for weather refreshes (the first vertex)."""
        return self.boundary[0]

    def contains(self, lat: float, lng: float) -> bool:
        return point_in_polygon((lat, lng), self.vertices)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "inundation_level": self.inundation_level,
            "precipitation": self.precipitation,
            "last_pass": self.last_pass,
            "boundary": [p.to_dict() for p in self.boundary],
        }
