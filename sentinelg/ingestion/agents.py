"""
Sentinel-G - AI Agents
Prompt builders around an injected generative-model client.

Every agent converts a missing client, a transport failure or a malformed
response into its payload's documented fallback, so a failing model never
blocks incident processing.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from sentinelg.core.exceptions import SignalUnavailableError
from sentinelg.incidents.models import Incident
from sentinelg.ingestion.signals import (
    LogisticsPlan,
    SatelliteSignal,
    SyntheticReport,
    VerificationResult,
    VisionSignal,
    load_json_payload,
)
from sentinelg.zones.models import CloudStatus, Zone

logger = logging.getLogger(__name__)


@runtime_checkable
class ModelClient(Protocol):
    """Generative model that answers a prompt with JSON text."""

    async def generate_json(
        self,
        prompt: str,
        image_url: Optional[str] = None,
        schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        ...


class BaseAgent:
    """Shared request/validate/fallback cycle for model-backed agents."""

    name = "agent"

    def __init__(self, client: Optional[ModelClient] = None):
        self.client = client

    async def _request(
        self,
        prompt: str,
        image_url: Optional[str] = None,
        schema: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Call the model and decode its JSON object.

        Raises:
            SignalUnavailableError: on a missing client, call failure or bad JSON
        """
        if self.client is None:
            raise SignalUnavailableError(self.name, "no model client configured")

        try:
            raw = await self.client.generate_json(prompt, image_url=image_url, schema=schema)
        except SignalUnavailableError:
            raise
        except Exception as e:
            raise SignalUnavailableError(self.name, str(e)) from e

        try:
            return load_json_payload(raw)
        except ValueError as e:
            raise SignalUnavailableError(self.name, f"malformed response: {e}") from e

    async def _run(self, model, prompt: str, image_url: Optional[str] = None):
        """Request a payload for `model`, falling back on any failure."""
        schema = model.model_json_schema(by_alias=True)
        try:
            data = await self._request(prompt, image_url=image_url, schema=schema)
            return model.model_validate(data)
        except SignalUnavailableError as e:
            logger.warning(f"{self.name} failed, using fallback: {e}")
        except (ValueError, TypeError) as e:
            logger.warning(f"{self.name} returned an invalid {model.__name__}: {e}")
        return model.fallback()


class VisionAgent(BaseAgent):
    """Estimates flood depth and severity from user-submitted media."""

    name = "vision"

    def build_prompt(self, report_text: str) -> str:
        return (
            "You are the Sentinel-G Vision Agent.\n"
            f'Analyze this flood scene relative to the user report: "{report_text}".\n'
            "1. Estimate flood water depth in meters from reference objects "
            "(car wheels, door handles, fences) and their submerged portions.\n"
            "2. Assess severity (LOW, MEDIUM, HIGH, CRITICAL).\n"
            "3. Provide a concise technical description of the visual evidence."
        )

    async def analyze(self, image_url: str, report_text: str) -> VisionSignal:
        """
        Analyze report media.

        Args:
            image_url: Media attached to the report
            report_text: Narrative the image should corroborate

        Returns:
            VisionSignal, or VisionSignal.fallback() on failure
        """
        if not image_url:
            logger.info("Vision analysis skipped: report has no media")
            return VisionSignal.fallback()
        return await self._run(VisionSignal, self.build_prompt(report_text), image_url)


class SatelliteAgent(BaseAgent):
    """Reads inundation and cloud cover from satellite imagery."""

    name = "satellite"

    def build_prompt(self, zone_name: str) -> str:
        return (
            "You are the Sentinel-G Satellite Analyst.\n"
            f"Analyze this Sentinel-1/optical satellite imagery for zone: {zone_name}.\n"
            "1. Estimate the fraction of land covered by water (inundationLevel 0.0 to 1.0).\n"
            "2. Detect cloud cover status (CLEAR, PARTIAL_CLOUD, HEAVY_CLOUD).\n"
            "3. Ignore permanent water bodies, focus on flood inundation."
        )

    async def analyze(self, image_url: str, zone_name: str) -> SatelliteSignal:
        return await self._run(SatelliteSignal, self.build_prompt(zone_name), image_url)


class VerificationAgent(BaseAgent):
    """
    Model-backed reasoner.

    Interchangeable with DeterministicReasoner: both expose
    assess(incident, zone, vision) -> VerificationResult.
    """

    name = "verification"

    def build_prompt(
        self,
        incident: Incident,
        zone: Zone,
        vision: Optional[VisionSignal] = None
    ) -> str:
        radar = "Yes" if zone.status == CloudStatus.HEAVY_CLOUD else "N/A"
        lines = [
            "Ground Report:",
            f'- Text: "{incident.text}"',
            f"- Location: {incident.location_name}",
            f"- Type: {incident.category.value}",
            "",
            f"Satellite Data for Zone ({zone.name}):",
            f"- Cloud Cover: {zone.status.value}",
            f"- Detected Inundation Level: {zone.inundation_level * 100:.0f}%",
            f"- Radar Data (Sentinel-1): Penetrated clouds? {radar}",
            f"- Real-time Precipitation: {zone.precipitation} mm",
        ]
        if vision is not None and vision.available:
            lines.append(
                f"- Vision Analysis: depth {vision.depth} m, severity {vision.severity}"
            )
        lines += [
            "",
            "You are the Sentinel-G Verification Agent.",
            "Determine the truthfulness of the ground report by correlating it with satellite data.",
            "If satellite shows high inundation, confidence increases.",
            "If clouds are heavy, rely on radar data or lower confidence if radar is ambiguous.",
            "Return a confidence score (0-100), reasoning and a verified flag.",
        ]
        return "\n".join(lines)

    async def assess(
        self,
        incident: Incident,
        zone: Zone,
        vision: Optional[VisionSignal] = None
    ) -> VerificationResult:
        return await self._run(VerificationResult, self.build_prompt(incident, zone, vision))


class ReportGenerator(BaseAgent):
    """Produces synthetic social-media reports for the live feed."""

    name = "report_generator"

    PROMPT = (
        "Generate a single realistic disaster report for the Assam Floods.\n"
        "Sources: TWITTER, TELEGRAM, WHATSAPP.\n"
        "Content: a plea for help, a report of infrastructure damage, or a status update.\n"
        "Locations: Silchar, Karimganj, Hailakandi, Sonai.\n"
        "Type: FLOOD, LANDSLIDE, MEDICAL, FOOD_SHORTAGE or INFRASTRUCTURE.\n"
        "Output JSON only."
    )

    async def generate(self) -> SyntheticReport:
        return await self._run(SyntheticReport, self.PROMPT)


class LogisticsPlanner(BaseAgent):
    """Drafts a prioritised rescue plan for verified incidents."""

    name = "logistics"

    def build_prompt(self, incidents: Iterable[Incident], resources: List[str]) -> str:
        summary = []
        for incident in incidents:
            depth = incident.estimated_depth if incident.estimated_depth is not None else "Unknown"
            severity = (incident.severity or "HIGH").title()
            summary.append(
                f"- {incident.category.value} at {incident.location_name} "
                f"(Severity: {severity}, Depth: {depth}m)"
            )

        return (
            "You are the Logistics Command.\n"
            "Incidents:\n"
            + ("\n".join(summary) or "- none reported") + "\n\n"
            f"Available Resources: {', '.join(resources)}\n\n"
            "Task: Create a prioritized rescue plan.\n"
            "Deep water requires boats. Medical needs take priority.\n"
            "If infrastructure is damaged, route around it."
        )

    async def plan(self, incidents: Iterable[Incident], resources: List[str]) -> LogisticsPlan:
        """
        Plan rescue routes.

        Args:
            incidents: Incidents to route resources to
            resources: Available teams and equipment

        Returns:
            LogisticsPlan, or LogisticsPlan.fallback() on failure
        """
        incidents = list(incidents)
        if not incidents:
            logger.info("Logistics requested with no incidents")
        return await self._run(LogisticsPlan, self.build_prompt(incidents, resources))
