"""
Incident data model
Ground reports and their evolving verification state.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from sentinelg.core.geo_utils import GeoPoint


class ReportOrigin(str, Enum):
    """Channel a report was ingested from."""
    TWITTER = "TWITTER"
    TELEGRAM = "TELEGRAM"
    WHATSAPP = "WHATSAPP"
    DIRECT = "DIRECT"


class IncidentCategory(str, Enum):
    """Closed set of hazard categories."""
    FLOOD = "FLOOD"
    LANDSLIDE = "LANDSLIDE"
    MEDICAL = "MEDICAL"
    FOOD_SHORTAGE = "FOOD_SHORTAGE"
    INFRASTRUCTURE = "INFRASTRUCTURE"


class VerificationStatus(str, Enum):
    """Verification state of an incident."""
    UNVERIFIED = "UNVERIFIED"
    VERIFYING = "VERIFYING"
    VERIFIED_TRUE = "VERIFIED_TRUE"
    VERIFIED_FALSE = "VERIFIED_FALSE"
    NEEDS_DRONE = "NEEDS_DRONE"

    @property
    def is_verdict(self) -> bool:
        """True for states that carry a confidence score."""
        return self in (VerificationStatus.VERIFIED_TRUE, VerificationStatus.VERIFIED_FALSE)


class VoteDirection(str, Enum):
    """Crowd vote on an incident."""
    UP = "up"
    DOWN = "down"

    @classmethod
    def _missing_(cls, value):
        aliases = {"confirm": cls.UP, "dismiss": cls.DOWN}
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in aliases:
                return aliases[lowered]
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    @property
    def weight(self) -> int:
        return 1 if self is VoteDirection.UP else -1


# Allowed verification-state moves. Re-verification guards (new signals for
# NEEDS_DRONE, crowd promotion of VERIFIED_FALSE) are enforced by the engine.
TRANSITIONS: Dict[VerificationStatus, FrozenSet[VerificationStatus]] = {
    VerificationStatus.UNVERIFIED: frozenset({
        VerificationStatus.VERIFYING,
        VerificationStatus.VERIFIED_TRUE,
    }),
    VerificationStatus.VERIFYING: frozenset({
        VerificationStatus.VERIFIED_TRUE,
        VerificationStatus.VERIFIED_FALSE,
        VerificationStatus.NEEDS_DRONE,
        # cancelled pass rolls back to where it started
        VerificationStatus.UNVERIFIED,
    }),
    VerificationStatus.NEEDS_DRONE: frozenset({
        VerificationStatus.VERIFYING,
        VerificationStatus.VERIFIED_TRUE,
    }),
    VerificationStatus.VERIFIED_FALSE: frozenset({
        VerificationStatus.VERIFIED_TRUE,
    }),
    VerificationStatus.VERIFIED_TRUE: frozenset(),
}


def can_transition(current: VerificationStatus, target: VerificationStatus) -> bool:
    """Check whether the state machine permits current -> target."""
    return target in TRANSITIONS[current]


# Fields fixed at ingestion
IMMUTABLE_FIELDS = (
    "id",
    "origin",
    "text",
    "media_url",
    "created_at",
    "location",
    "location_name",
    "category",
)


@dataclass
class Incident:
    """
    A reported hazard occurrence.

    Identity, narrative, media, location and category are fixed at
    ingestion; verdict, confidence, analysis and votes evolve through the
    consensus engine.
    """
    id: str
    origin: ReportOrigin
    text: str
    location: GeoPoint
    category: IncidentCategory
    location_name: str = "Unknown"
    media_url: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Verification
    status: VerificationStatus = VerificationStatus.UNVERIFIED
    confidence_score: Optional[int] = None
    ai_analysis: Optional[str] = None
    estimated_depth: Optional[float] = None
    severity: Optional[str] = None

    # Crowd consensus
    vote_tally: int = 0
    corroboration_count: int = 1
    voters: Dict[str, VoteDirection] = field(default_factory=dict)

    def __post_init__(self):
        self.origin = ReportOrigin(self.origin)
        self.category = IncidentCategory(self.category)
        self.status = VerificationStatus(self.status)
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)
        if self.corroboration_count < 1:
            raise ValueError("corroboration_count must be at least 1")
        if self.estimated_depth is not None and self.estimated_depth < 0:
            raise ValueError("estimated_depth must be non-negative")

    def has_voted(self, voter_id: str) -> bool:
        return voter_id in self.voters

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "origin": self.origin.value,
            "text": self.text,
            "media_url": self.media_url,
            "created_at": self.created_at.isoformat(),
            "location": self.location.to_dict(),
            "location_name": self.location_name,
            "category": self.category.value,
            "status": self.status.value,
            "confidence_score": self.confidence_score,
            "ai_analysis": self.ai_analysis,
            "estimated_depth": self.estimated_depth,
            "severity": self.severity,
            "vote_tally": self.vote_tally,
            "corroboration_count": self.corroboration_count,
        }
