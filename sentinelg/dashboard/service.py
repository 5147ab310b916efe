"""
Sentinel-G - Dashboard Service
Wires the incident store, zones, consensus engine and signal adapters
behind the operations the dashboard (and the HTTP API) call.
"""

import asyncio
import logging
import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Collection, Dict, List, Optional

from sentinelg.core.config import settings
from sentinelg.core.constants import DEFAULT_RESOURCES, SEED_REPORTS
from sentinelg.core.geo_utils import GeoPoint
from sentinelg.consensus.engine import ConsensusEngine
from sentinelg.consensus.policy import ConsensusPolicy
from sentinelg.incidents.models import (
    Incident,
    IncidentCategory,
    ReportOrigin,
    VerificationStatus,
    VoteDirection,
)
from sentinelg.incidents.store import IncidentStore
from sentinelg.incidents.visibility import VisibleIncidents, visible
from sentinelg.ingestion.agents import (
    LogisticsPlanner,
    ModelClient,
    ReportGenerator,
    SatelliteAgent,
    VisionAgent,
)
from sentinelg.ingestion.places_client import Place, PlacesClient
from sentinelg.ingestion.signals import LogisticsPlan, SyntheticReport, VisionSignal
from sentinelg.ingestion.social_listener import SocialListener
from sentinelg.ingestion.weather_client import WeatherClient
from sentinelg.zones.fusion import apply_inundation_update, apply_precipitation_update
from sentinelg.zones.models import Zone
from sentinelg.zones.registry import ZoneRegistry

logger = logging.getLogger(__name__)

# Placeholder scene sent to the satellite agent for the active-zone scan
DEFAULT_SATELLITE_IMAGE = "https://picsum.photos/600/600?grayscale&blur=2"

# Spread of synthetic report locations around the active zone
JITTER_GRID = 20.0
JITTER_DEGREES = 0.05


def new_incident_id(prefix: str = "r") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


class DashboardService:
    """
    Session-scoped facade over the verification engine.

    Owns one IncidentStore and one ZoneRegistry for the lifetime of the
    session. Adapter results that arrive after close() are discarded.
    """

    def __init__(
        self,
        store: Optional[IncidentStore] = None,
        zones: Optional[ZoneRegistry] = None,
        engine: Optional[ConsensusEngine] = None,
        weather: Optional[WeatherClient] = None,
        satellite_agent: Optional[SatelliteAgent] = None,
        report_generator: Optional[ReportGenerator] = None,
        places: Optional[PlacesClient] = None,
        planner: Optional[LogisticsPlanner] = None,
    ):
        self.store = store if store is not None else IncidentStore()
        self.zones = zones if zones is not None else ZoneRegistry.from_seed()
        self.engine = engine if engine is not None else ConsensusEngine(
            self.store, policy=ConsensusPolicy.from_settings()
        )
        if self.engine.store is not self.store:
            raise ValueError("engine must share the service incident store")
        self.weather = weather if weather is not None else WeatherClient()
        self.satellite_agent = satellite_agent if satellite_agent is not None else SatelliteAgent()
        self.report_generator = report_generator if report_generator is not None else ReportGenerator()
        self.places = places if places is not None else PlacesClient()
        self.planner = planner if planner is not None else LogisticsPlanner()

        self.listener = SocialListener(self.report_generator, self.ingest_synthetic_report)
        self._closed = False

        logger.info(f"DashboardService initialized with {len(self.zones)} zones")

    @classmethod
    def create(
        cls,
        model_client: Optional[ModelClient] = None,
        seed: bool = True
    ) -> "DashboardService":
        """
        Build a service with default adapters sharing one model client.

        Args:
            model_client: Generative model for the AI agents (None: agents use fallbacks)
            seed: Load the startup reports
        """
        store = IncidentStore()
        engine = ConsensusEngine(
            store,
            policy=ConsensusPolicy.from_settings(),
            vision_agent=VisionAgent(model_client),
        )
        service = cls(
            store=store,
            engine=engine,
            satellite_agent=SatelliteAgent(model_client),
            report_generator=ReportGenerator(model_client),
            planner=LogisticsPlanner(model_client),
        )
        if seed:
            service.seed()
        return service

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Tear down the session: stop ingestion and release HTTP clients."""
        self._closed = True
        await self.listener.stop()
        await self.weather.close()
        await self.places.close()
        logger.info("DashboardService closed")

    # =========================================================================
    # Ingestion
    # =========================================================================

    def seed(self, records: Optional[List[Dict[str, Any]]] = None, now: Optional[datetime] = None) -> int:
        """Load startup reports. Returns the number of incidents added."""
        now = now or datetime.now(timezone.utc)
        added = 0
        records = records if records is not None else SEED_REPORTS
        # oldest first so the store ends up newest first
        for record in sorted(records, key=lambda r: r.get("minutes_ago", 0), reverse=True):
            if record["id"] in self.store:
                continue
            self.store.append(Incident(
                id=record["id"],
                origin=record["origin"],
                text=record["text"],
                media_url=record.get("media_url"),
                created_at=now - timedelta(minutes=record.get("minutes_ago", 0)),
                location=GeoPoint(*record["location"]),
                location_name=record.get("location_name", "Unknown"),
                category=record["category"],
            ))
            added += 1
        logger.info(f"Seeded {added} reports")
        return added

    def ingest_report(
        self,
        text: str,
        category: IncidentCategory,
        location: GeoPoint,
        origin: ReportOrigin = ReportOrigin.DIRECT,
        media_url: Optional[str] = None,
        location_name: str = "Unknown",
        incident_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Incident:
        """
        Add a new report as an UNVERIFIED incident.

        Raises:
            ValueError: on empty text
            DuplicateIdError: if incident_id is already used
        """
        if not text or not text.strip():
            raise ValueError("Report text is required")

        incident = Incident(
            id=incident_id or new_incident_id(),
            origin=origin,
            text=text.strip(),
            location=location,
            category=category,
            location_name=location_name or "Unknown",
            media_url=media_url,
            created_at=created_at or datetime.now(timezone.utc),
        )
        return self.store.append(incident)

    def ingest_synthetic_report(
        self,
        report: SyntheticReport,
        rng: Optional[random.Random] = None
    ) -> Optional[Incident]:
        """
        Ingest a generated social-media report near the active zone.

        Returns:
            The new incident, or None if the report has no text or the
            session is closed
        """
        if self._closed or not report.is_usable:
            return None

        rng = rng or random
        zone = self.zones.active_zone
        c_lat, c_lng = zone.centroid
        c_x = sum(p.x for p in zone.boundary) / len(zone.boundary)
        c_y = sum(p.y for p in zone.boundary) / len(zone.boundary)

        location = GeoPoint(
            x=min(100.0, max(0.0, c_x + (rng.random() - 0.5) * JITTER_GRID)),
            y=min(100.0, max(0.0, c_y + (rng.random() - 0.5) * JITTER_GRID)),
            lat=c_lat + (rng.random() - 0.5) * JITTER_DEGREES,
            lng=c_lng + (rng.random() - 0.5) * JITTER_DEGREES,
        )
        return self.ingest_report(
            text=report.text,
            category=report.category,
            location=location,
            origin=report.source,
            location_name=report.location_name,
            incident_id=new_incident_id("gen"),
        )

    def start_listener(self) -> None:
        self.listener.start()

    async def stop_listener(self) -> None:
        await self.listener.stop()

    # =========================================================================
    # Verification and votes
    # =========================================================================

    def resolve_zone(self, incident: Incident) -> Zone:
        """Zone corroborating an incident's location."""
        return self.zones.resolve(
            incident.location.lat,
            incident.location.lng,
            settings.zone_match_radius_km,
        )

    async def verify_incident(
        self,
        incident_id: str,
        vision_signal: Optional[VisionSignal] = None
    ) -> Incident:
        """
        Verify an incident against its zone.

        A pass still in flight when the service closes leaves the
        incident as it was.

        Raises:
            NotFoundError: unknown incident, or no zone near its location
            AlreadyInProgressError, InvalidTransitionError: from the engine
        """
        incident = self.store.get(incident_id)
        zone = self.resolve_zone(incident)
        return await self.engine.run_verification(
            incident_id, zone, vision_signal, discard=lambda: self._closed
        )

    def record_vote(self, incident_id: str, voter_id: str, direction: VoteDirection) -> Incident:
        return self.engine.record_vote(incident_id, voter_id, direction)

    # =========================================================================
    # Zones
    # =========================================================================

    async def refresh_zones(self, image_url: str = DEFAULT_SATELLITE_IMAGE) -> List[Zone]:
        """
        Refresh satellite data for the active zone and weather for every zone.

        The satellite analysis and all weather fetches run concurrently;
        each adapter absorbs its own failures.

        Returns:
            All zones after the refresh
        """
        active = self.zones.active_zone
        zones = self.zones.all()

        satellite, *precipitation = await asyncio.gather(
            self.satellite_agent.analyze(image_url, active.name),
            *(
                self.weather.get_precipitation(z.weather_point.lat, z.weather_point.lng)
                for z in zones
            ),
        )

        if self._closed:
            logger.info("Zone refresh finished after close; results discarded")
            return zones

        apply_inundation_update(active, satellite.inundation_level, satellite.status)
        for zone, mm in zip(zones, precipitation):
            apply_precipitation_update(zone, mm)

        logger.info(
            f"Zones refreshed: {active.id} {satellite.status.value} "
            f"{active.inundation_level:.2f}, precipitation "
            f"{[round(z.precipitation, 1) for z in zones]}"
        )
        return zones

    # =========================================================================
    # Views
    # =========================================================================

    def visible_incidents(
        self,
        window_hours: Optional[float] = None,
        categories: Optional[Collection[IncidentCategory]] = None,
        verified_only: bool = False,
        now: Optional[datetime] = None,
    ) -> VisibleIncidents:
        return visible(
            self.store.all(),
            now=now,
            window_hours=window_hours or settings.default_window_hours,
            categories=categories,
            verified_only=verified_only,
        )

    async def nearby_resources(self, latitude: float, longitude: float) -> List[Place]:
        return await self.places.get_nearby_places(latitude, longitude, settings.places_radius_m)

    async def logistics_plan(
        self,
        resources: Optional[List[str]] = None,
        incident_id: Optional[str] = None
    ) -> LogisticsPlan:
        """
        Plan rescue logistics for verified incidents.

        Falls back to the selected incident when nothing is verified yet.

        Raises:
            NotFoundError: unknown incident_id
        """
        incidents = [
            i for i in self.store.all() if i.status == VerificationStatus.VERIFIED_TRUE
        ]
        if not incidents and incident_id is not None:
            incidents = [self.store.get(incident_id)]
        return await self.planner.plan(incidents, resources or list(DEFAULT_RESOURCES))

    def statistics(self) -> Dict[str, Any]:
        stats = self.store.get_statistics()
        stats["zones"] = {
            zone.id: {
                "status": zone.status.value,
                "inundation_level": zone.inundation_level,
                "precipitation": zone.precipitation,
            }
            for zone in self.zones
        }
        return stats
