"""
Signal payloads
Validating boundary between loosely-typed agent JSON and the engine.

Every parse_* function accepts raw JSON text (optionally wrapped in a
markdown code fence) or an already-decoded dict, and fails closed to the
payload's documented fallback instead of raising.
"""

import json
import logging
import math
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sentinelg.incidents.models import IncidentCategory, ReportOrigin
from sentinelg.zones.models import CloudStatus

logger = logging.getLogger(__name__)

SEVERITY_LEVELS = ("LOW", "MEDIUM", "HIGH", "CRITICAL")
UNKNOWN_SEVERITY = "UNKNOWN"

NEUTRAL_CONFIDENCE = 50
VERIFICATION_UNAVAILABLE = "AI Verification unavailable."

RawPayload = Union[str, bytes, Dict[str, Any], None]
SignalT = TypeVar("SignalT", bound="Signal")


def _as_number(value: Any, field: str) -> float:
    """Coerce a numeric field, rejecting null, containers and NaN."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"{field} is not numeric: {value!r}")
    number = float(value)
    if math.isnan(number):
        raise ValueError(f"{field} is NaN")
    return number


class Signal(BaseModel):
    """Base for agent payloads: aliases accepted, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    available: bool = Field(default=True, exclude=True)

    @classmethod
    def fallback(cls: Type[SignalT]) -> SignalT:
        raise NotImplementedError


class VisionSignal(Signal):
    """Depth and severity estimated from user-submitted media."""

    depth: float
    severity: str = UNKNOWN_SEVERITY
    description: str = ""

    @field_validator("depth", mode="before")
    @classmethod
    def _non_negative_depth(cls, value: Any) -> float:
        depth = _as_number(value, "depth")
        return depth if depth > 0 else 0.0

    @field_validator("severity", mode="before")
    @classmethod
    def _known_severity(cls, value: Any) -> str:
        label = str(value or "").strip().upper()
        return label if label in SEVERITY_LEVELS else UNKNOWN_SEVERITY

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @classmethod
    def fallback(cls) -> "VisionSignal":
        return cls(
            depth=0,
            severity=UNKNOWN_SEVERITY,
            description="Analysis failed due to network or model error.",
            available=False,
        )


class SatelliteSignal(Signal):
    """Inundation and cloud status read from satellite imagery."""

    inundation_level: float = Field(alias="inundationLevel")
    status: CloudStatus = CloudStatus.PARTIAL_CLOUD

    @field_validator("inundation_level", mode="before")
    @classmethod
    def _numeric_level(cls, value: Any) -> float:
        # Range is enforced by zone fusion (clamped, not rejected)
        return _as_number(value, "inundation level")

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, value: Any) -> CloudStatus:
        label = str(value or "").strip().upper()
        try:
            return CloudStatus(label)
        except ValueError:
            return CloudStatus.PARTIAL_CLOUD

    @classmethod
    def fallback(cls) -> "SatelliteSignal":
        return cls(inundation_level=0.5, status=CloudStatus.PARTIAL_CLOUD, available=False)


class VerificationResult(Signal):
    """Outcome of one reasoning pass."""

    confidence: int
    reasoning: str = ""
    verified: bool = False

    @field_validator("confidence", mode="before")
    @classmethod
    def _bounded_confidence(cls, value: Any) -> int:
        return int(round(min(100.0, max(0.0, _as_number(value, "confidence")))))

    @field_validator("reasoning", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("verified", mode="before")
    @classmethod
    def _strict_bool(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        raise ValueError(f"not a boolean: {value!r}")

    @classmethod
    def fallback(cls) -> "VerificationResult":
        return cls(
            confidence=NEUTRAL_CONFIDENCE,
            reasoning=VERIFICATION_UNAVAILABLE,
            verified=False,
            available=False,
        )


class SyntheticReport(Signal):
    """Social-media style report produced by the report generator."""

    text: Optional[str] = None
    source: ReportOrigin = ReportOrigin.TWITTER
    location_name: str = Field(default="Unknown", alias="locationName")
    category: IncidentCategory = Field(default=IncidentCategory.INFRASTRUCTURE, alias="type")

    @field_validator("text", mode="before")
    @classmethod
    def _non_blank(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("source", mode="before")
    @classmethod
    def _known_source(cls, value: Any) -> ReportOrigin:
        try:
            return ReportOrigin(str(value or "").strip().upper())
        except ValueError:
            return ReportOrigin.TWITTER

    @field_validator("location_name", mode="before")
    @classmethod
    def _location(cls, value: Any) -> str:
        return str(value).strip() if value else "Unknown"

    @field_validator("category", mode="before")
    @classmethod
    def _known_category(cls, value: Any) -> IncidentCategory:
        try:
            return IncidentCategory(str(value or "").strip().upper())
        except ValueError:
            return IncidentCategory.INFRASTRUCTURE

    @property
    def is_usable(self) -> bool:
        return self.text is not None

    @classmethod
    def fallback(cls) -> "SyntheticReport":
        return cls(available=False)


class LogisticsPlan(Signal):
    """Prioritised rescue plan for verified incidents."""

    routes: List[str] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)
    estimated_time: str = Field(default="Unknown", alias="estimatedTime")
    reasoning: str = ""

    @classmethod
    def fallback(cls) -> "LogisticsPlan":
        return cls(
            routes=["Manual planning required"],
            resources=["Check availability manually"],
            estimated_time="Unknown",
            reasoning="AI Planning service offline.",
            available=False,
        )


def load_json_payload(raw: RawPayload) -> Dict[str, Any]:
    """
    Decode an agent response into a dict.

    Raises:
        ValueError: if the payload is empty, not JSON, or not an object
    """
    if raw is None:
        raise ValueError("empty payload")
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")

    text = raw.replace("```json", "").replace("```", "").strip()
    if not text:
        raise ValueError("empty payload")

    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def parse_signal(model: Type[SignalT], raw: RawPayload) -> SignalT:
    """Validate a raw payload into `model`, or return its fallback."""
    try:
        return model.model_validate(load_json_payload(raw))
    except (ValueError, TypeError, ValidationError) as e:
        logger.warning(f"Malformed {model.__name__} payload, using fallback: {e}")
        return model.fallback()


def parse_vision(raw: RawPayload) -> VisionSignal:
    return parse_signal(VisionSignal, raw)


def parse_satellite(raw: RawPayload) -> SatelliteSignal:
    return parse_signal(SatelliteSignal, raw)


def parse_verification(raw: RawPayload) -> VerificationResult:
    return parse_signal(VerificationResult, raw)


def parse_synthetic_report(raw: RawPayload) -> SyntheticReport:
    return parse_signal(SyntheticReport, raw)


def parse_logistics_plan(raw: RawPayload) -> LogisticsPlan:
    return parse_signal(LogisticsPlan, raw)
