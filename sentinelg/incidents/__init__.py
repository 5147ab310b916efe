"""
Sentinel-G - Incidents Module
Incident records, the session store and the visibility filter.
"""

from sentinelg.incidents.models import (
    Incident,
    IncidentCategory,
    ReportOrigin,
    VerificationStatus,
    VoteDirection,
    can_transition,
)
from sentinelg.incidents.store import IncidentStore
from sentinelg.incidents.visibility import VisibleIncidents, visible

__all__ = [
    # Models
    "Incident",
    "IncidentCategory",
    "ReportOrigin",
    "VerificationStatus",
    "VoteDirection",
    "can_transition",
    # Store
    "IncidentStore",
    # Visibility
    "VisibleIncidents",
    "visible",
]
