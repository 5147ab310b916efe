"""
Pytest configuration and fixtures
"""
import json
import pytest
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sentinelg.core.geo_utils import GeoPoint
from sentinelg.incidents.models import Incident
from sentinelg.incidents.store import IncidentStore
from sentinelg.zones.models import CloudStatus, Zone
from sentinelg.zones.registry import ZoneRegistry


NOW = datetime(2026, 7, 1, 12, 0, tzinfo=timezone.utc)

SILCHAR_BOUNDARY = (
    GeoPoint(10, 10, 24.85, 92.75),
    GeoPoint(50, 10, 24.85, 92.85),
    GeoPoint(50, 50, 24.80, 92.85),
    GeoPoint(10, 50, 24.80, 92.75),
)


class FakeModelClient:
    """ModelClient double returning a canned response or raising."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_json(self, prompt, image_url=None, schema=None):
        self.calls.append({"prompt": prompt, "image_url": image_url, "schema": schema})
        if self.error is not None:
            raise self.error
        if isinstance(self.response, dict):
            return json.dumps(self.response)
        return self.response


def make_incident(
    incident_id="inc-1",
    category="FLOOD",
    text="Water rising near the market",
    minutes_ago=10,
    media_url=None,
    location=(20, 20, 24.83, 92.77),
    **kwargs
):
    """Build an incident located in Silchar North by default."""
    return Incident(
        id=incident_id,
        origin=kwargs.pop("origin", "TWITTER"),
        text=text,
        location=GeoPoint(*location),
        category=category,
        location_name=kwargs.pop("location_name", "Silchar"),
        media_url=media_url,
        created_at=kwargs.pop("created_at", NOW - timedelta(minutes=minutes_ago)),
        **kwargs
    )


def make_zone(status=CloudStatus.CLEAR, inundation=0.8, precipitation=0.0, zone_id="Z1"):
    return Zone(
        id=zone_id,
        name="Silchar North",
        boundary=SILCHAR_BOUNDARY,
        status=status,
        inundation_level=inundation,
        precipitation=precipitation,
    )


@pytest.fixture
def now():
    """Fixed reference time."""
    return NOW


@pytest.fixture
def store():
    """Empty incident store."""
    return IncidentStore()


@pytest.fixture
def clear_zone():
    """Clear-sky zone with high inundation."""
    return make_zone(CloudStatus.CLEAR, 0.8)


@pytest.fixture
def cloudy_zone():
    """Heavy-cloud zone with high inundation and no rain."""
    return make_zone(CloudStatus.HEAVY_CLOUD, 0.8)


@pytest.fixture
def registry():
    """Seeded zone registry."""
    return ZoneRegistry.from_seed()


@pytest.fixture
def vision_payload():
    """Well-formed vision agent response."""
    return {
        "depth": 1.2,
        "severity": "HIGH",
        "description": "Water reaches car door handles",
    }
