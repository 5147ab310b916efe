"""
Zone registry
Fixed set of zones seeded at startup, with point-to-zone resolution.
"""

import logging
from typing import Dict, Iterator, List, Optional

from sentinelg.core.constants import ZONE_REGISTRY
from sentinelg.core.exceptions import NotFoundError
from sentinelg.core.geo_utils import GeoPoint, haversine_distance
from sentinelg.zones.models import Zone

logger = logging.getLogger(__name__)


class ZoneRegistry:
    """
    Holds the session's zones in registration order.

    Zones are never added or removed after construction; refreshes mutate
    them in place through the fusion functions.
    """

    def __init__(self, zones: List[Zone]):
        if not zones:
            raise ValueError("ZoneRegistry needs at least one zone")
        self._zones: Dict[str, Zone] = {}
        for zone in zones:
            if zone.id in self._zones:
                raise ValueError(f"Duplicate zone id: {zone.id}")
            self._zones[zone.id] = zone

    @classmethod
    def from_seed(cls, seed: Optional[List[Dict]] = None) -> "ZoneRegistry":
        """Build the registry from seed records (default: ZONE_REGISTRY)."""
        zones = []
        for record in seed if seed is not None else ZONE_REGISTRY:
            zones.append(Zone(
                id=record["id"],
                name=record["name"],
                status=record["status"],
                inundation_level=record["inundation_level"],
                last_pass=record.get("last_pass", "Never"),
                precipitation=record.get("precipitation", 0.0),
                boundary=tuple(GeoPoint(*vertex) for vertex in record["boundary"]),
            ))
        return cls(zones)

    def __len__(self) -> int:
        return len(self._zones)

    def __iter__(self) -> Iterator[Zone]:
        return iter(self._zones.values())

    def all(self) -> List[Zone]:
        return list(self._zones.values())

    def get(self, zone_id: str) -> Zone:
        zone = self._zones.get(zone_id)
        if zone is None:
            raise NotFoundError("Zone", zone_id)
        return zone

    @property
    def active_zone(self) -> Zone:
        """Zone targeted by the satellite scan (the first registered)."""
        return next(iter(self._zones.values()))

    def resolve(self, lat: float, lng: float, max_distance_km: float) -> Zone:
        """
        Find the zone that corroborates a location.

        Uses polygon containment first, then the nearest zone centroid
        within max_distance_km.

        Raises:
            NotFoundError: if no zone is close enough
        """
        for zone in self._zones.values():
            if zone.contains(lat, lng):
                return zone

        nearest = None
        nearest_distance = float("inf")
        for zone in self._zones.values():
            c_lat, c_lng = zone.centroid
            distance = haversine_distance(lat, lng, c_lat, c_lng)
            if distance < nearest_distance:
                nearest, nearest_distance = zone, distance

        if nearest is not None and nearest_distance <= max_distance_km:
            logger.debug(
                f"Location ({lat}, {lng}) outside all zones; "
                f"using nearest {nearest.id} at {nearest_distance:.1f} km"
            )
            return nearest

        raise NotFoundError("Zone", f"near ({lat}, {lng})")
