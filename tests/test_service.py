"""
Tests for the dashboard service
"""
import asyncio
import random
import pytest

from sentinelg.consensus.engine import ConsensusEngine
from sentinelg.core.exceptions import NotFoundError
from sentinelg.core.geo_utils import GeoPoint
from sentinelg.dashboard.service import DashboardService
from sentinelg.incidents.models import IncidentCategory, ReportOrigin, VerificationStatus
from sentinelg.incidents.store import IncidentStore
from sentinelg.ingestion.agents import LogisticsPlanner, ReportGenerator, SatelliteAgent
from sentinelg.ingestion.signals import SyntheticReport, VerificationResult, VisionSignal
from sentinelg.zones.models import CloudStatus

from conftest import FakeModelClient, NOW


class FakeWeather:
    """Weather double returning fixed precipitation per latitude."""

    def __init__(self, readings=None, delay=0.0):
        self.readings = readings or {}
        self.delay = delay
        self.calls = []

    async def get_precipitation(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.readings.get(latitude, 0.0)

    async def close(self):
        pass


class GatedReasoner:
    """Reasoner that answers only once its gate opens."""

    def __init__(self):
        self.gate = asyncio.Event()

    async def assess(self, incident, zone, vision=None):
        await self.gate.wait()
        return VerificationResult(confidence=90, reasoning="Matches imagery", verified=True)


class FakePlaces:
    """Places double recording lookups."""

    def __init__(self):
        self.calls = []

    async def get_nearby_places(self, latitude, longitude, radius_m=None):
        self.calls.append((latitude, longitude, radius_m))
        return []

    async def close(self):
        pass


def build_service(satellite_response=None, weather=None, planner_client=None):
    service = DashboardService(
        weather=weather or FakeWeather(),
        satellite_agent=SatelliteAgent(FakeModelClient(response=satellite_response)),
        places=FakePlaces(),
        planner=LogisticsPlanner(planner_client),
    )
    service.seed(now=NOW)
    return service


class TestIngestion:
    """Test suite for report ingestion."""

    def setup_method(self):
        """Setup test fixtures."""
        self.service = build_service()

    def test_seed_reports(self):
        """Test seeding loads the startup reports newest first."""
        assert [i.id for i in self.service.store.all()] == ["r1", "r2", "r3"]

    def test_seed_is_idempotent(self):
        """Test reseeding skips existing ids."""
        assert self.service.seed(now=NOW) == 0
        assert len(self.service.store) == 3

    def test_ingest_report(self):
        """Test a direct report lands unverified at the front."""
        incident = self.service.ingest_report(
            text="  Landslide blocked NH-6  ",
            category=IncidentCategory.LANDSLIDE,
            location=GeoPoint(30, 30, 24.82, 92.80),
            location_name="NH-6",
        )

        assert incident.status == VerificationStatus.UNVERIFIED
        assert incident.origin == ReportOrigin.DIRECT
        assert incident.text == "Landslide blocked NH-6"
        assert self.service.store.all()[0].id == incident.id

    def test_ingest_empty_text(self):
        """Test empty reports are rejected."""
        with pytest.raises(ValueError):
            self.service.ingest_report("   ", IncidentCategory.FLOOD, GeoPoint(0, 0, 24.8, 92.8))

    def test_ingest_synthetic_report(self):
        """Test synthetic reports are placed near the active zone."""
        report = SyntheticReport(text="Boats needed", source="WHATSAPP", location_name="Silchar", category="FLOOD")

        incident = self.service.ingest_synthetic_report(report, rng=random.Random(7))

        assert incident.id.startswith("gen-")
        assert incident.origin == ReportOrigin.WHATSAPP
        assert abs(incident.location.lat - 24.825) <= 0.025
        assert abs(incident.location.lng - 92.80) <= 0.025
        assert 0 <= incident.location.x <= 100
        assert self.service.resolve_zone(incident).id == "Z1"

    def test_ingest_unusable_synthetic_report(self):
        """Test textless synthetic reports are dropped."""
        assert self.service.ingest_synthetic_report(SyntheticReport()) is None
        assert len(self.service.store) == 3


class TestVerification:
    """Test suite for verification through the service."""

    def setup_method(self):
        """Setup test fixtures."""
        self.service = build_service()

    @pytest.mark.asyncio
    async def test_verify_resolves_zone(self):
        """Test r1 in heavy-cloud Silchar North escalates to a drone."""
        result = await self.service.verify_incident("r1")

        assert result.status == VerificationStatus.NEEDS_DRONE

    @pytest.mark.asyncio
    async def test_verify_with_vision(self):
        """Test a supplied vision signal resolves the heavy-cloud zone."""
        vision = VisionSignal(depth=1.2, severity="CRITICAL", description="Ward flooded")

        result = await self.service.verify_incident("r1", vision)

        assert result.status.is_verdict
        assert result.estimated_depth == 1.2

    @pytest.mark.asyncio
    async def test_verify_nearest_zone(self):
        """Test r2 outside every polygon uses the nearest zone."""
        result = await self.service.verify_incident("r2")

        assert result.status.is_verdict

    @pytest.mark.asyncio
    async def test_verify_unknown(self):
        """Test unknown incidents raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await self.service.verify_incident("missing")

    @pytest.mark.asyncio
    async def test_verify_no_zone(self):
        """Test a report far from every zone raises NotFoundError."""
        incident = self.service.ingest_report(
            "Flooding in Guwahati", IncidentCategory.FLOOD, GeoPoint(0, 0, 26.14, 91.73)
        )

        with pytest.raises(NotFoundError):
            await self.service.verify_incident(incident.id)

        assert self.service.store.get(incident.id).status == VerificationStatus.UNVERIFIED

    def test_votes(self):
        """Test votes go through the engine."""
        self.service.record_vote("r3", "alice", "up")
        result = self.service.record_vote("r3", "bob", "up")

        assert result.status == VerificationStatus.VERIFIED_TRUE


    @pytest.mark.asyncio
    async def test_verify_after_close_discarded(self):
        """Test a verdict arriving after close() is not applied."""
        store = IncidentStore()
        reasoner = GatedReasoner()
        service = DashboardService(
            store=store,
            engine=ConsensusEngine(store, reasoner=reasoner),
            weather=FakeWeather(),
            places=FakePlaces(),
        )
        service.seed(now=NOW)

        verification = asyncio.create_task(service.verify_incident("r2"))
        await asyncio.sleep(0)
        assert store.get("r2").status == VerificationStatus.VERIFYING

        await service.close()
        reasoner.gate.set()
        result = await verification

        assert result.status == VerificationStatus.UNVERIFIED
        assert result.confidence_score is None
        assert store.get("r2").ai_analysis is None


class TestZoneRefresh:
    """Test suite for zone refreshes."""

    @pytest.mark.asyncio
    async def test_refresh(self):
        """Test the active zone gets satellite data and every zone gets weather."""
        weather = FakeWeather(readings={24.85: 6.0, 24.88: 1.0, 24.75: 0.0})
        service = build_service(
            satellite_response={"inundationLevel": 1.3, "status": "CLEAR"},
            weather=weather,
        )

        zones = await service.refresh_zones("https://sat/1.png")

        active = zones[0]
        assert active.inundation_level == 1.0
        assert active.status == CloudStatus.CLEAR
        assert active.last_pass == "Just now"
        assert [z.precipitation for z in zones] == [6.0, 1.0, 0.0]
        assert zones[1].last_pass == "1 hour ago"
        assert zones[1].status == CloudStatus.CLEAR
        assert len(weather.calls) == 3

    @pytest.mark.asyncio
    async def test_refresh_satellite_failure(self):
        """Test a failed satellite analysis applies the neutral fallback."""
        service = build_service(satellite_response="garbage")

        zones = await service.refresh_zones()

        assert zones[0].inundation_level == 0.5
        assert zones[0].status == CloudStatus.PARTIAL_CLOUD

    @pytest.mark.asyncio
    async def test_refresh_null_inundation(self):
        """Test a null inundation level from the model applies the fallback."""
        service = build_service(satellite_response='{"inundationLevel": null}')

        zones = await service.refresh_zones()

        assert zones[0].inundation_level == 0.5
        assert zones[0].status == CloudStatus.PARTIAL_CLOUD

    @pytest.mark.asyncio
    async def test_refresh_after_close_discarded(self):
        """Test results arriving after close() are not applied."""
        weather = FakeWeather(readings={24.85: 9.0}, delay=0.05)
        service = build_service(
            satellite_response={"inundationLevel": 0.1, "status": "CLEAR"},
            weather=weather,
        )

        refresh = asyncio.create_task(service.refresh_zones())
        await asyncio.sleep(0)
        await service.close()
        zones = await refresh

        assert zones[0].inundation_level == 0.8
        assert zones[0].status == CloudStatus.HEAVY_CLOUD
        assert zones[0].precipitation == 0.0


class TestViews:
    """Test suite for read-side operations."""

    def setup_method(self):
        """Setup test fixtures."""
        self.service = build_service()

    def test_visible_incidents(self):
        """Test the window filter applies to the store."""
        result = [i.id for i in self.service.visible_incidents(window_hours=1, now=NOW)]

        assert result == ["r1", "r2", "r3"]

    def test_visible_verified_only(self):
        """Test verified-only filtering."""
        assert list(self.service.visible_incidents(verified_only=True, now=NOW)) == []

    @pytest.mark.asyncio
    async def test_nearby_resources(self):
        """Test resource lookups use the configured radius."""
        await self.service.nearby_resources(24.83, 92.77)

        assert self.service.places.calls == [(24.83, 92.77, 5000)]

    @pytest.mark.asyncio
    async def test_logistics_plan_uses_verified(self):
        """Test planning covers verified incidents."""
        client = FakeModelClient(response={"routes": ["A"], "resources": [], "estimatedTime": "1h", "reasoning": "r"})
        service = build_service(planner_client=client)
        service.record_vote("r2", "a", "up")
        service.record_vote("r2", "b", "up")

        plan = await service.logistics_plan()

        assert plan.routes == ["A"]
        assert "Sonai Road" in client.calls[0]["prompt"]
        assert "Inflatable Boats (3)" in client.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_logistics_plan_selected_fallback(self):
        """Test the selected incident is planned for when nothing is verified."""
        client = FakeModelClient(response={"routes": ["B"]})
        service = build_service(planner_client=client)

        await service.logistics_plan(["Boats"], incident_id="r3")

        assert "Karimganj Town" in client.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_logistics_offline(self):
        """Test an offline planner returns the manual fallback."""
        plan = await self.service.logistics_plan()

        assert plan.available is False

    def test_statistics(self):
        """Test statistics include zones."""
        stats = self.service.statistics()

        assert stats["total_incidents"] == 3
        assert set(stats["zones"]) == {"Z1", "Z2", "Z3"}

    @pytest.mark.asyncio
    async def test_synthetic_after_close_dropped(self):
        """Test the listener sink ignores reports after close()."""
        await self.service.close()
        report = SyntheticReport(text="late", category="FLOOD")

        assert self.service.ingest_synthetic_report(report) is None
        assert self.service.is_closed


class TestCreate:
    """Test suite for the default factory."""

    def test_create_seeds(self):
        """Test the factory seeds reports and wires agents."""
        service = DashboardService.create()

        assert len(service.store) == 3
        assert isinstance(service.report_generator, ReportGenerator)
        assert service.engine.vision_agent is not None

    def test_create_shares_store_with_engine(self):
        """Test the factory wires one store through service and engine."""
        service = DashboardService.create()

        assert service.store is service.engine.store
        incident = service.record_vote("r1", "voter-a", "up")
        assert incident.vote_tally == 1

    def test_engine_with_foreign_store_rejected(self):
        """Test an engine bound to another store is refused."""
        with pytest.raises(ValueError):
            DashboardService(store=IncidentStore(), engine=ConsensusEngine(IncidentStore()))

    def test_create_unseeded(self):
        """Test seeding can be skipped."""
        assert len(DashboardService.create(seed=False).store) == 0
