"""
Sentinel-G - REST API

FastAPI application exposing incident verification, crowd votes,
zone refreshes and logistics planning.

Run with: uvicorn sentinelg.api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from sentinelg.core.config import settings
from sentinelg.core.constants import MAX_WINDOW_HOURS, MIN_WINDOW_HOURS
from sentinelg.core.exceptions import NotFoundError, SentinelError
from sentinelg.core.geo_utils import GeoPoint
from sentinelg.core.logging import setup_logging
from sentinelg.dashboard.service import DEFAULT_SATELLITE_IMAGE, DashboardService
from sentinelg.incidents.models import IncidentCategory, ReportOrigin

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    incidents: int
    zones: int


class LocationModel(BaseModel):
    """Incident location (schematic grid + geodetic)."""
    x: float
    y: float
    lat: float
    lng: float


class IncidentCreateRequest(BaseModel):
    """Request to submit a ground report."""
    text: str = Field(..., min_length=1, max_length=2000)
    category: IncidentCategory
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    x: float = Field(default=50.0, ge=0, le=100)
    y: float = Field(default=50.0, ge=0, le=100)
    origin: ReportOrigin = ReportOrigin.DIRECT
    media_url: Optional[str] = None
    location_name: str = "Unknown"


class IncidentResponse(BaseModel):
    """Incident with its current verification state."""
    id: str
    origin: str
    text: str
    media_url: Optional[str]
    created_at: str
    location: LocationModel
    location_name: str
    category: str
    status: str
    confidence_score: Optional[int]
    ai_analysis: Optional[str]
    estimated_depth: Optional[float]
    severity: Optional[str]
    vote_tally: int
    corroboration_count: int


class IncidentListResponse(BaseModel):
    """Visible incidents, newest first."""
    count: int
    window_hours: int
    incidents: List[IncidentResponse]


class VoteRequest(BaseModel):
    """Crowd vote on an incident."""
    voter_id: str = Field(..., min_length=1, max_length=128)
    direction: str = Field(..., description="up/down (confirm/dismiss accepted)")


class ZoneResponse(BaseModel):
    """Satellite zone state."""
    id: str
    name: str
    status: str
    inundation_level: float
    precipitation: float
    last_pass: str
    boundary: List[LocationModel]


class ZoneRefreshRequest(BaseModel):
    """Request to rescan the active zone."""
    image_url: str = DEFAULT_SATELLITE_IMAGE


class PlaceResponse(BaseModel):
    """Critical resource near a location."""
    osm_id: int
    name: str
    place_type: str
    latitude: float
    longitude: float


class LogisticsRequest(BaseModel):
    """Request for a rescue plan."""
    resources: Optional[List[str]] = None
    incident_id: Optional[str] = None


class LogisticsResponse(BaseModel):
    """Prioritised rescue plan."""
    routes: List[str]
    resources: List[str]
    estimated_time: str
    reasoning: str
    available: bool


# ============================================================================
# Dependencies
# ============================================================================

def get_service(request: Request) -> DashboardService:
    return request.app.state.service


router = APIRouter()


# ============================================================================
# System Routes
# ============================================================================

@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(service: DashboardService = Depends(get_service)):
    """Check API health status."""
    return HealthResponse(
        status="closed" if service.is_closed else "healthy",
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        incidents=len(service.store),
        zones=len(service.zones),
    )


@router.get("/api/v1/stats", tags=["System"])
async def get_stats(service: DashboardService = Depends(get_service)):
    """Incident and zone statistics."""
    return service.statistics()


# ============================================================================
# Incident Routes
# ============================================================================

@router.get("/api/v1/incidents", response_model=IncidentListResponse, tags=["Incidents"])
async def list_incidents(
    window_hours: int = Query(default=MAX_WINDOW_HOURS, ge=MIN_WINDOW_HOURS, le=MAX_WINDOW_HOURS),
    category: Optional[List[IncidentCategory]] = Query(default=None),
    verified_only: bool = False,
    service: DashboardService = Depends(get_service),
):
    """List incidents visible in the time window."""
    incidents = [
        i.to_dict() for i in service.visible_incidents(
            window_hours=window_hours,
            categories=category,
            verified_only=verified_only,
        )
    ]
    return IncidentListResponse(
        count=len(incidents),
        window_hours=window_hours,
        incidents=incidents,
    )


@router.post("/api/v1/incidents", response_model=IncidentResponse, status_code=201, tags=["Incidents"])
async def create_incident(
    request: IncidentCreateRequest,
    service: DashboardService = Depends(get_service),
):
    """Submit a new ground report."""
    try:
        incident = service.ingest_report(
            text=request.text,
            category=request.category,
            location=GeoPoint(
                x=request.x, y=request.y,
                lat=request.latitude, lng=request.longitude,
            ),
            origin=request.origin,
            media_url=request.media_url,
            location_name=request.location_name,
        )
    except SentinelError:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return incident.to_dict()


@router.get("/api/v1/incidents/{incident_id}", response_model=IncidentResponse, tags=["Incidents"])
async def get_incident(incident_id: str, service: DashboardService = Depends(get_service)):
    """Get incident details."""
    return service.store.get(incident_id).to_dict()


@router.post("/api/v1/incidents/{incident_id}/verify", response_model=IncidentResponse, tags=["Incidents"])
async def verify_incident(incident_id: str, service: DashboardService = Depends(get_service)):
    """Run a verification pass against the incident's zone."""
    incident = await service.verify_incident(incident_id)
    return incident.to_dict()


@router.post("/api/v1/incidents/{incident_id}/votes", response_model=IncidentResponse, tags=["Incidents"])
async def vote_incident(
    incident_id: str,
    request: VoteRequest,
    service: DashboardService = Depends(get_service),
):
    """Record a crowd vote (one per voter)."""
    try:
        incident = service.record_vote(incident_id, request.voter_id, request.direction)
    except SentinelError:
        raise
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return incident.to_dict()


# ============================================================================
# Zone Routes
# ============================================================================

@router.get("/api/v1/zones", response_model=List[ZoneResponse], tags=["Zones"])
async def list_zones(service: DashboardService = Depends(get_service)):
    """Current zone state."""
    return [zone.to_dict() for zone in service.zones]


@router.post("/api/v1/zones/refresh", response_model=List[ZoneResponse], tags=["Zones"])
async def refresh_zones(
    request: Optional[ZoneRefreshRequest] = None,
    service: DashboardService = Depends(get_service),
):
    """Rescan the active zone and refresh precipitation for all zones."""
    image_url = request.image_url if request else DEFAULT_SATELLITE_IMAGE
    zones = await service.refresh_zones(image_url)
    return [zone.to_dict() for zone in zones]


# ============================================================================
# Resources & Logistics
# ============================================================================

@router.get("/api/v1/places", response_model=List[PlaceResponse], tags=["Logistics"])
async def nearby_places(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    service: DashboardService = Depends(get_service),
):
    """Hospitals, police, pharmacies and shelters near a location."""
    places = await service.nearby_resources(latitude, longitude)
    return [place.to_dict() for place in places]


@router.post("/api/v1/logistics", response_model=LogisticsResponse, tags=["Logistics"])
async def plan_logistics(
    request: Optional[LogisticsRequest] = None,
    service: DashboardService = Depends(get_service),
):
    """Prioritised rescue plan for verified incidents."""
    request = request or LogisticsRequest()
    plan = await service.logistics_plan(request.resources, request.incident_id)
    return LogisticsResponse(
        routes=plan.routes,
        resources=plan.resources,
        estimated_time=plan.estimated_time,
        reasoning=plan.reasoning,
        available=plan.available,
    )


# ============================================================================
# Application
# ============================================================================

async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def conflict_handler(request: Request, exc: SentinelError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


def create_app(service: Optional[DashboardService] = None) -> FastAPI:
    """
    Build the API around a dashboard service.

    Args:
        service: Session service (default: DashboardService.create() with seed reports)
    """
    service = service if service is not None else DashboardService.create()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await service.close()

    app = FastAPI(
        title="Sentinel-G",
        description="Disaster-response incident verification combining ground reports, satellite, weather and crowd votes",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(SentinelError, conflict_handler)
    app.include_router(router)

    return app


setup_logging(settings.log_level)

app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
