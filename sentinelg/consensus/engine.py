"""
Consensus engine
Turns an incident plus corroborating signals into a verdict, and applies
crowd votes with auto-verification.
"""

import asyncio
import logging
from typing import Callable, Optional, Protocol, Union

from sentinelg.core.exceptions import (
    AlreadyInProgressError,
    DuplicateVoteError,
    InvalidTransitionError,
)
from sentinelg.incidents.models import (
    Incident,
    VerificationStatus,
    VoteDirection,
    can_transition,
)
from sentinelg.incidents.store import IncidentStore
from sentinelg.ingestion.agents import VisionAgent
from sentinelg.ingestion.signals import VerificationResult, VisionSignal
from sentinelg.consensus.policy import ConsensusPolicy, DeterministicReasoner
from sentinelg.zones.models import CloudStatus, Zone

logger = logging.getLogger(__name__)

NO_VISUAL_DATA = "No visual data available."
VISION_UNAVAILABLE = "Vision analysis unavailable."
CROWD_CONSENSUS_NOTE = "Verified by crowd consensus ({count} independent confirmations)."


class Reasoner(Protocol):
    """Anything that can score an incident against its zone."""

    async def assess(
        self,
        incident: Incident,
        zone: Zone,
        vision: Optional[VisionSignal] = None
    ) -> VerificationResult:
        ...


def auto_verify_check(incident: Incident, threshold: int = 3) -> bool:
    """
    Check whether crowd corroboration promotes an incident.

    Pure function of the corroboration count.

    Args:
        incident: Incident to check
        threshold: Corroborations needed for promotion

    Returns:
        True if the incident should be (or already is) verified-true
    """
    return incident.corroboration_count >= threshold


def describe_vision(vision: Optional[VisionSignal]) -> str:
    """Vision half of the analysis text."""
    if vision is None:
        return NO_VISUAL_DATA
    if not vision.available:
        return VISION_UNAVAILABLE
    return f"{vision.description} (Severity: {vision.severity})"


class ConsensusEngine:
    """
    Computes verification verdicts and crowd consensus.

    All writes go through IncidentStore.update(), so each mutation is
    atomic per incident. A verification pass holds the incident in
    VERIFYING while its signals are in flight, which rejects a second
    concurrent pass for the same incident.
    """

    def __init__(
        self,
        store: IncidentStore,
        reasoner: Optional[Reasoner] = None,
        policy: Optional[ConsensusPolicy] = None,
        vision_agent: Optional[VisionAgent] = None
    ):
        """
        Initialize the engine.

        Args:
            store: Incident store (the only shared mutable state)
            reasoner: Verification reasoner (default: DeterministicReasoner)
            policy: Thresholds (default: ConsensusPolicy())
            vision_agent: Used to analyze report media when no vision signal is supplied
        """
        self.store = store
        self.policy = policy or ConsensusPolicy()
        self.reasoner = reasoner or DeterministicReasoner(self.policy)
        self.vision_agent = vision_agent

        logger.info(
            f"ConsensusEngine initialized (auto-verify at "
            f"{self.policy.auto_verify_threshold} corroborations)"
        )

    # =========================================================================
    # Verification
    # =========================================================================

    async def run_verification(
        self,
        incident_id: str,
        zone: Zone,
        vision_signal: Optional[VisionSignal] = None,
        discard: Optional[Callable[[], bool]] = None
    ) -> Incident:
        """
        Run one verification pass.

        Args:
            incident_id: Incident to verify
            zone: Zone used as ground-truth proxy
            vision_signal: Optional vision analysis of the report media
            discard: Checked when signals arrive; if it returns True the
                results are dropped and the incident restored

        Returns:
            Snapshot of the incident after the pass

        Raises:
            NotFoundError: unknown incident
            AlreadyInProgressError: a pass is already running for this incident
            InvalidTransitionError: the incident is terminal, or needs a drone
                and neither a vision signal nor clearer skies are available
        """
        prior: dict = {}

        def begin(incident: Incident) -> None:
            status = incident.status
            if status == VerificationStatus.VERIFYING:
                raise AlreadyInProgressError(incident.id)
            if not can_transition(status, VerificationStatus.VERIFYING):
                raise InvalidTransitionError(
                    incident.id, status.value, VerificationStatus.VERIFYING.value,
                    "verdict already reached",
                )
            if status == VerificationStatus.NEEDS_DRONE:
                has_new_vision = vision_signal is not None and vision_signal.available
                if zone.status == CloudStatus.HEAVY_CLOUD and not has_new_vision:
                    raise InvalidTransitionError(
                        incident.id, status.value, VerificationStatus.VERIFYING.value,
                        "no new signal since drone escalation",
                    )
            prior["status"] = status
            incident.status = VerificationStatus.VERIFYING

        incident = self.store.update(incident_id, begin)
        logger.info(f"Verification started for {incident_id} against zone {zone.id}")

        try:
            vision = vision_signal
            if vision is None and incident.media_url and self.vision_agent is not None:
                vision = await self._fetch_vision(incident)

            if discard is not None and discard():
                return self._discard(incident_id, prior["status"])

            has_vision = vision is not None and vision.available
            if zone.status == CloudStatus.HEAVY_CLOUD and not has_vision:
                return self._escalate(incident_id, zone, vision)

            result = await self._reason(incident, zone, vision)
            if discard is not None and discard():
                return self._discard(incident_id, prior["status"])
        except BaseException:
            # cancelled or failed mid-flight
            self._rollback(incident_id, prior["status"])
            raise

        return self._finish(incident_id, vision, result)

    async def _fetch_vision(self, incident: Incident) -> VisionSignal:
        try:
            return await self.vision_agent.analyze(incident.media_url, incident.text)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Vision adapter failed for {incident.id}: {e}")
            return VisionSignal.fallback()

    async def _reason(
        self,
        incident: Incident,
        zone: Zone,
        vision: Optional[VisionSignal]
    ) -> VerificationResult:
        try:
            return await self.reasoner.assess(incident, zone, vision)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Reasoner failed for {incident.id}, using neutral fallback: {e}")
            return VerificationResult.fallback()

    def _escalate(self, incident_id: str, zone: Zone, vision: Optional[VisionSignal]) -> Incident:
        def mutate(incident: Incident) -> None:
            if incident.status != VerificationStatus.VERIFYING:
                return
            incident.status = VerificationStatus.NEEDS_DRONE
            incident.ai_analysis = (
                f"{describe_vision(vision)} Heavy cloud over {zone.name}; "
                "drone reconnaissance required."
            )

        updated = self.store.update(incident_id, mutate)
        logger.info(f"Incident {incident_id} escalated: {updated.status.value}")
        return updated

    def _rollback(self, incident_id: str, status: VerificationStatus) -> None:
        def mutate(incident: Incident) -> None:
            if incident.status == VerificationStatus.VERIFYING:
                incident.status = status

        self.store.update(incident_id, mutate)
        logger.info(f"Verification of {incident_id} interrupted, restored {status.value}")

    def _discard(self, incident_id: str, status: VerificationStatus) -> Incident:
        self._rollback(incident_id, status)
        logger.info(f"Late signals for {incident_id} discarded")
        return self.store.get(incident_id)

    def _finish(
        self,
        incident_id: str,
        vision: Optional[VisionSignal],
        result: VerificationResult
    ) -> Incident:
        def mutate(incident: Incident) -> None:
            if vision is not None and vision.available:
                incident.estimated_depth = vision.depth
                incident.severity = vision.severity

            if incident.status != VerificationStatus.VERIFYING:
                # promoted by the crowd while the pass was in flight
                return

            incident.status = (
                VerificationStatus.VERIFIED_TRUE if result.verified
                else VerificationStatus.VERIFIED_FALSE
            )
            incident.confidence_score = result.confidence
            incident.ai_analysis = f"{describe_vision(vision)} {result.reasoning}".strip()

            if result.verified:
                incident.corroboration_count += 1
            self._promote(incident)

        updated = self.store.update(incident_id, mutate)
        logger.info(
            f"Verification finished for {incident_id}: {updated.status.value} "
            f"(confidence {updated.confidence_score})"
        )
        return updated

    # =========================================================================
    # Crowd consensus
    # =========================================================================

    def record_vote(
        self,
        incident_id: str,
        voter_id: str,
        direction: Union[VoteDirection, str]
    ) -> Incident:
        """
        Record one crowd vote.

        Args:
            incident_id: Incident voted on
            voter_id: Identity of the voter (one vote per incident, first vote sticks)
            direction: up/down (confirm/dismiss accepted)

        Returns:
            Snapshot of the incident after the vote

        Raises:
            NotFoundError: unknown incident
            DuplicateVoteError: the voter already voted (tally unchanged)
            ValueError: unknown direction
        """
        direction = VoteDirection(direction)
        if not voter_id:
            raise ValueError("voter_id is required")

        def mutate(incident: Incident) -> None:
            if incident.has_voted(voter_id):
                raise DuplicateVoteError(incident.id, voter_id)
            incident.voters[voter_id] = direction
            incident.vote_tally += direction.weight
            if direction == VoteDirection.UP:
                incident.corroboration_count += 1
            self._promote(incident)

        updated = self.store.update(incident_id, mutate)
        logger.info(
            f"Vote {direction.value} on {incident_id} by {voter_id}: "
            f"tally {updated.vote_tally}, corroborations {updated.corroboration_count}"
        )
        return updated

    def auto_verify(self, incident_id: str) -> Incident:
        """Apply auto-verification to a stored incident."""
        return self.store.update(incident_id, self._promote)

    def _promote(self, incident: Incident) -> None:
        if incident.status == VerificationStatus.VERIFIED_TRUE:
            return
        if not auto_verify_check(incident, self.policy.auto_verify_threshold):
            return

        previous = incident.status
        incident.status = VerificationStatus.VERIFIED_TRUE
        incident.confidence_score = max(
            incident.confidence_score or 0, self.policy.crowd_verified_confidence
        )
        if not incident.ai_analysis:
            incident.ai_analysis = CROWD_CONSENSUS_NOTE.format(count=incident.corroboration_count)

        logger.info(
            f"Incident {incident.id} auto-verified from {previous.value} "
            f"after {incident.corroboration_count} corroborations"
        )
