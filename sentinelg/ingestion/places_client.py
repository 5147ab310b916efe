"""
Sentinel-G - Places Client
Finds nearby critical resources (hospitals, police, pharmacies, shelters)
through the OpenStreetMap Overpass API.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from sentinelg.core.config import settings
from sentinelg.core.exceptions import SignalUnavailableError

logger = logging.getLogger(__name__)


class PlaceType(str, Enum):
    """Resource categories surfaced on the map."""
    HOSPITAL = "hospital"
    POLICE = "police"
    PHARMACY = "pharmacy"
    SHELTER = "shelter"
    UNKNOWN = "unknown"


@dataclass
class Place:
    """A critical resource from OpenStreetMap."""
    osm_id: int
    name: str
    place_type: PlaceType
    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "osm_id": self.osm_id,
            "name": self.name,
            "place_type": self.place_type.value,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


def classify_tags(tags: Dict[str, str]) -> PlaceType:
    """Map OSM tags to a PlaceType."""
    amenity = tags.get("amenity")
    if amenity == "hospital":
        return PlaceType.HOSPITAL
    if amenity == "police":
        return PlaceType.POLICE
    if amenity == "pharmacy":
        return PlaceType.PHARMACY
    if tags.get("social_facility") == "shelter":
        return PlaceType.SHELTER
    return PlaceType.UNKNOWN


class PlacesClient:
    """
    Async client for the Overpass API.
    """

    def __init__(
        self,
        overpass_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the places client.

        Args:
            overpass_url: Overpass interpreter endpoint (default from settings)
            timeout: Request timeout in seconds
            client: Pre-built HTTP client
        """
        self.overpass_url = overpass_url or settings.overpass_api_url
        self.timeout = timeout or settings.http_timeout_seconds
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": "Sentinel-G/1.0"}
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def build_query(latitude: float, longitude: float, radius_m: int) -> str:
        around = f"around:{radius_m},{latitude},{longitude}"
        return f"""
        [out:json][timeout:10];
        (
          node["amenity"="hospital"]({around});
          node["amenity"="police"]({around});
          node["amenity"="pharmacy"]({around});
          node["social_facility"="shelter"]({around});
        );
        out body;
        """

    async def fetch_places(
        self,
        latitude: float,
        longitude: float,
        radius_m: int
    ) -> List[Place]:
        """
        Query Overpass for resources around a point.

        Raises:
            SignalUnavailableError: on transport, HTTP or payload errors
        """
        query = self.build_query(latitude, longitude, radius_m)

        try:
            response = await self._get_client().post(
                self.overpass_url,
                data={"data": query}
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SignalUnavailableError("places", str(e)) from e

        if not isinstance(data, dict) or not isinstance(data.get("elements", []), list):
            raise SignalUnavailableError("places", "malformed Overpass response")

        places = []
        for element in data.get("elements", []):
            if not isinstance(element, dict):
                continue
            if "lat" not in element or "lon" not in element:
                continue
            tags = element.get("tags")
            if not isinstance(tags, dict):
                tags = {}
            place_type = classify_tags(tags)

            places.append(Place(
                osm_id=element.get("id", 0),
                name=tags.get("name") or tags.get("amenity") or "Resource",
                place_type=place_type,
                latitude=element["lat"],
                longitude=element["lon"],
            ))

        return places

    async def get_nearby_places(
        self,
        latitude: float,
        longitude: float,
        radius_m: Optional[int] = None
    ) -> List[Place]:
        """
        Nearby critical resources, or an empty list when Overpass fails.
        """
        radius = radius_m or settings.places_radius_m
        try:
            return await self.fetch_places(latitude, longitude, radius)
        except SignalUnavailableError as e:
            logger.warning(f"Places lookup failed at ({latitude}, {longitude}): {e}")
            return []
