"""
Consensus policy
Deterministic confidence scoring from zone context, vision and narrative.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sentinelg.core.config import Settings, settings as default_settings
from sentinelg.core.constants import (
    CATEGORY_RELEVANCE,
    DEPTH_BONUS,
    HAZARD_KEYWORDS,
    INUNDATION_SCALE,
    KEYWORD_BONUS,
    OPTICAL_WEIGHT,
    PRECIPITATION_MAX_BONUS,
    PRECIPITATION_SATURATION_MM,
    PRECIPITATION_SENSITIVE,
    SEVERITY_BONUS,
)
from sentinelg.incidents.models import Incident
from sentinelg.ingestion.signals import VerificationResult, VisionSignal
from sentinelg.zones.models import CloudStatus, Zone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConsensusPolicy:
    """Tunable thresholds of the consensus engine."""
    auto_verify_threshold: int = 3
    neutral_confidence: int = 50
    verify_confidence_threshold: int = 60
    crowd_verified_confidence: int = 75
    heavy_cloud_discount: int = 15
    radar_precipitation_mm: float = 2.0
    precipitation_cloud_offset: float = 0.5

    def __post_init__(self):
        if self.auto_verify_threshold < 2:
            raise ValueError("auto_verify_threshold must be at least 2")
        for name in ("neutral_confidence", "verify_confidence_threshold", "crowd_verified_confidence"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be within 0-100, got {value}")

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "ConsensusPolicy":
        config = config or default_settings
        return cls(
            auto_verify_threshold=config.auto_verify_threshold,
            neutral_confidence=config.neutral_confidence,
            verify_confidence_threshold=config.verify_confidence_threshold,
            crowd_verified_confidence=config.crowd_verified_confidence,
            heavy_cloud_discount=config.heavy_cloud_discount,
            radar_precipitation_mm=config.radar_precipitation_mm,
            precipitation_cloud_offset=config.precipitation_cloud_offset,
        )


class DeterministicReasoner:
    """
    Rule-based replacement for the generative verification agent.

    Confidence starts neutral and each corroborating factor adds or removes
    points:
    - satellite inundation, weighted by category relevance and by how much
      the imagery can be trusted under the current cloud cover
    - precipitation for rain-driven hazards
    - vision severity and depth
    - hazard keywords in the narrative
    """

    def __init__(self, policy: Optional[ConsensusPolicy] = None):
        self.policy = policy or ConsensusPolicy()

    async def assess(
        self,
        incident: Incident,
        zone: Zone,
        vision: Optional[VisionSignal] = None
    ) -> VerificationResult:
        """
        Score an incident against its zone.

        Args:
            incident: Incident under verification
            zone: Zone used as ground-truth proxy
            vision: Optional vision analysis of the report media

        Returns:
            VerificationResult with confidence, reasoning and verdict
        """
        confidence, notes = self.score(incident, zone, vision)
        verified = confidence >= self.policy.verify_confidence_threshold
        notes.append(
            f"Confidence {confidence}/100: "
            + ("report corroborated." if verified else "insufficient corroboration.")
        )
        return VerificationResult(confidence=confidence, reasoning=" ".join(notes), verified=verified)

    def score(
        self,
        incident: Incident,
        zone: Zone,
        vision: Optional[VisionSignal] = None
    ) -> Tuple[int, List[str]]:
        """Return the clamped confidence and the reasoning notes behind it."""
        policy = self.policy
        category = incident.category.value
        points = float(policy.neutral_confidence)
        notes: List[str] = []

        # Satellite
        relevance = CATEGORY_RELEVANCE.get(category, 0.5)
        inundation_delta = (zone.inundation_level - 0.5) * INUNDATION_SCALE * relevance
        weight = OPTICAL_WEIGHT.get(zone.status.value, 0.0)

        if zone.status == CloudStatus.HEAVY_CLOUD:
            if zone.precipitation >= policy.radar_precipitation_mm:
                weight = policy.precipitation_cloud_offset
                notes.append(
                    f"Heavy cloud over {zone.name}; radar-equivalent rainfall "
                    f"({zone.precipitation} mm) supports the inundation reading."
                )
            else:
                points -= policy.heavy_cloud_discount
                notes.append(
                    f"Heavy cloud over {zone.name} with no radar corroboration; "
                    "confidence discounted."
                )
        else:
            notes.append(
                f"{zone.status.value.replace('_', ' ').title()} imagery shows "
                f"{zone.inundation_level * 100:.0f}% inundation in {zone.name}."
            )
        points += inundation_delta * weight

        # Weather
        if category in PRECIPITATION_SENSITIVE and zone.precipitation > 0:
            ratio = min(1.0, zone.precipitation / PRECIPITATION_SATURATION_MM)
            points += PRECIPITATION_MAX_BONUS * ratio

        # Vision
        if vision is not None and vision.available:
            points += SEVERITY_BONUS.get(vision.severity, 0)
            if vision.depth > 0:
                points += DEPTH_BONUS
            notes.append(f"Vision evidence: {vision.depth} m depth, {vision.severity} severity.")
        elif vision is not None:
            notes.append("Vision signal unavailable.")

        # Narrative
        text = incident.text.lower()
        matched = [k for k in HAZARD_KEYWORDS if k in text]
        if matched:
            points += KEYWORD_BONUS

        confidence = int(round(min(100.0, max(0.0, points))))
        logger.debug(
            f"Scored incident {incident.id} in zone {zone.id}: {confidence} "
            f"(keywords: {matched})"
        )
        return confidence, notes
