"""
Sentinel-G - Weather Client
Fetches real-time precipitation from the Open-Meteo API (free, no authentication required).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from sentinelg.core.config import settings
from sentinelg.core.exceptions import SignalUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class CurrentConditions:
    """Current weather conditions at a location."""
    latitude: float
    longitude: float
    timestamp: datetime
    precipitation_mm: float = 0.0
    temperature_celsius: Optional[float] = None
    wind_speed_kmh: Optional[float] = None
    cloud_cover_percent: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.timestamp.isoformat(),
            "precipitation_mm": self.precipitation_mm,
            "temperature_celsius": self.temperature_celsius,
            "wind_speed_kmh": self.wind_speed_kmh,
            "cloud_cover_percent": self.cloud_cover_percent,
        }


class WeatherClient:
    """
    Async client for the Open-Meteo forecast API.
    Documentation: https://open-meteo.com/en/docs
    """

    CURRENT_VARIABLES = [
        "precipitation",
        "temperature_2m",
        "wind_speed_10m",
        "cloud_cover",
    ]

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the weather client.

        Args:
            base_url: Forecast endpoint (default from settings)
            timeout: Request timeout in seconds
            client: Pre-built HTTP client (tests inject a MockTransport here)
        """
        self.base_url = base_url or settings.weather_api_url
        self.timeout = timeout or settings.http_timeout_seconds
        self._client = client

    async def __aenter__(self):
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_current_conditions(
        self,
        latitude: float,
        longitude: float
    ) -> CurrentConditions:
        """
        Get current conditions for a location.

        Args:
            latitude: Location latitude (-90 to 90)
            longitude: Location longitude (-180 to 180)

        Returns:
            CurrentConditions for the location

        Raises:
            SignalUnavailableError: on transport, HTTP or payload errors
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join(self.CURRENT_VARIABLES),
        }

        try:
            response = await self._get_client().get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SignalUnavailableError("weather", str(e)) from e

        if not isinstance(data, dict):
            raise SignalUnavailableError("weather", f"expected a JSON object, got {type(data).__name__}")
        current = data.get("current") or {}
        if not isinstance(current, dict):
            raise SignalUnavailableError("weather", "malformed current block")
        try:
            precipitation = float(current.get("precipitation") or 0)
        except (TypeError, ValueError) as e:
            raise SignalUnavailableError("weather", f"bad precipitation: {e}") from e

        timestamp = datetime.now(timezone.utc)
        if current.get("time"):
            try:
                timestamp = datetime.fromisoformat(current["time"])
            except (TypeError, ValueError):
                pass

        return CurrentConditions(
            latitude=data.get("latitude", latitude),
            longitude=data.get("longitude", longitude),
            timestamp=timestamp,
            precipitation_mm=max(0.0, precipitation),
            temperature_celsius=current.get("temperature_2m"),
            wind_speed_kmh=current.get("wind_speed_10m"),
            cloud_cover_percent=current.get("cloud_cover"),
        )

    async def get_precipitation(self, latitude: float, longitude: float) -> float:
        """
        Current precipitation in mm, or 0 when the API is unavailable.

        Args:
            latitude: Location latitude
            longitude: Location longitude

        Returns:
            Non-negative precipitation in millimetres
        """
        try:
            conditions = await self.get_current_conditions(latitude, longitude)
        except SignalUnavailableError as e:
            logger.warning(f"Weather API error at ({latitude}, {longitude}): {e}")
            return 0.0
        return conditions.precipitation_mm
