"""
Sentinel-G - Ingestion Module
Signal validation, AI agents and external data clients.
"""

from sentinelg.ingestion.signals import (
    LogisticsPlan,
    SatelliteSignal,
    SyntheticReport,
    VerificationResult,
    VisionSignal,
    parse_logistics_plan,
    parse_satellite,
    parse_synthetic_report,
    parse_verification,
    parse_vision,
)
from sentinelg.ingestion.agents import (
    LogisticsPlanner,
    ModelClient,
    ReportGenerator,
    SatelliteAgent,
    VerificationAgent,
    VisionAgent,
)
from sentinelg.ingestion.weather_client import CurrentConditions, WeatherClient
from sentinelg.ingestion.places_client import Place, PlacesClient, PlaceType
from sentinelg.ingestion.social_listener import SocialListener

__all__ = [
    # Signals
    "LogisticsPlan",
    "SatelliteSignal",
    "SyntheticReport",
    "VerificationResult",
    "VisionSignal",
    "parse_logistics_plan",
    "parse_satellite",
    "parse_synthetic_report",
    "parse_verification",
    "parse_vision",
    # Agents
    "LogisticsPlanner",
    "ModelClient",
    "ReportGenerator",
    "SatelliteAgent",
    "VerificationAgent",
    "VisionAgent",
    # Clients
    "CurrentConditions",
    "WeatherClient",
    "Place",
    "PlacesClient",
    "PlaceType",
    "SocialListener",
]
