"""
Tests for the signal validation boundary
"""
import pytest

from sentinelg.incidents.models import IncidentCategory, ReportOrigin
from sentinelg.ingestion.signals import (
    LogisticsPlan,
    SatelliteSignal,
    VerificationResult,
    VisionSignal,
    load_json_payload,
    parse_logistics_plan,
    parse_satellite,
    parse_synthetic_report,
    parse_verification,
    parse_vision,
)
from sentinelg.zones.models import CloudStatus


class TestLoadJsonPayload:
    """Test suite for raw payload decoding."""

    def test_plain_json(self):
        """Test plain JSON text."""
        assert load_json_payload('{"a": 1}') == {"a": 1}

    def test_markdown_fence(self):
        """Test markdown code fences are stripped."""
        assert load_json_payload('```json\n{"a": 1}\n```') == {"a": 1}

    def test_bytes_and_dict(self):
        """Test bytes and dict inputs."""
        assert load_json_payload(b'{"a": 1}') == {"a": 1}
        assert load_json_payload({"a": 1}) == {"a": 1}

    @pytest.mark.parametrize("raw", [None, "", "   ", "[1, 2]", "not json"])
    def test_rejects_bad_payloads(self, raw):
        """Test empty, non-object and invalid payloads raise ValueError."""
        with pytest.raises(ValueError):
            load_json_payload(raw)


class TestVisionSignal:
    """Test suite for vision payloads."""

    def test_valid(self, vision_payload):
        """Test a well-formed payload."""
        signal = parse_vision(vision_payload)

        assert signal.available is True
        assert signal.depth == 1.2
        assert signal.severity == "HIGH"

    def test_severity_normalized(self):
        """Test severity is upper-cased and unknown labels collapse to UNKNOWN."""
        assert parse_vision({"depth": 1, "severity": "critical"}).severity == "CRITICAL"
        assert parse_vision({"depth": 1, "severity": "apocalyptic"}).severity == "UNKNOWN"

    def test_negative_depth(self):
        """Test negative depth is floored at zero."""
        assert parse_vision({"depth": -2, "severity": "LOW"}).depth == 0.0

    def test_malformed_falls_back(self):
        """Test missing depth yields the documented fallback."""
        signal = parse_vision({"severity": "HIGH"})

        assert signal.available is False
        assert signal.depth == 0
        assert signal.severity == "UNKNOWN"
        assert signal.description.startswith("Analysis failed")

    def test_non_numeric_depth_falls_back(self):
        """Test a non-numeric depth yields the fallback."""
        assert parse_vision('{"depth": "deep", "severity": "HIGH"}').available is False

    def test_container_depth_falls_back(self):
        """Test null or list depth yields the fallback."""
        assert parse_vision({"depth": None, "severity": "HIGH"}).available is False
        assert parse_vision({"depth": [1], "severity": "HIGH"}).available is False
        assert parse_vision({"depth": {"m": 1}, "severity": "HIGH"}).available is False

    def test_extra_fields_ignored(self):
        """Test unknown keys are dropped."""
        signal = parse_vision({"depth": 1, "severity": "LOW", "mood": "grim"})

        assert not hasattr(signal, "mood")


class TestSatelliteSignal:
    """Test suite for satellite payloads."""

    def test_alias(self):
        """Test the camelCase wire name is accepted."""
        signal = parse_satellite('{"inundationLevel": 0.7, "status": "HEAVY_CLOUD"}')

        assert signal.inundation_level == 0.7
        assert signal.status == CloudStatus.HEAVY_CLOUD

    def test_out_of_range_kept_for_fusion(self):
        """Test out-of-range levels pass through so fusion can clamp them."""
        assert parse_satellite({"inundationLevel": 1.4, "status": "CLEAR"}).inundation_level == 1.4

    def test_unknown_status(self):
        """Test unknown status falls back to PARTIAL_CLOUD."""
        assert parse_satellite({"inundationLevel": 0.2, "status": "FOGGY"}).status == CloudStatus.PARTIAL_CLOUD

    def test_nan_falls_back(self):
        """Test NaN inundation yields the fallback."""
        signal = parse_satellite({"inundationLevel": float("nan"), "status": "CLEAR"})

        assert signal.available is False
        assert signal.inundation_level == 0.5

    def test_null_level_falls_back(self):
        """Test null or list inundation yields the fallback."""
        assert parse_satellite({"inundationLevel": None, "status": "CLEAR"}).available is False
        assert parse_satellite({"inundationLevel": [0.4], "status": "CLEAR"}).available is False

    def test_fallback(self):
        """Test the documented fallback."""
        signal = SatelliteSignal.fallback()

        assert signal.inundation_level == 0.5
        assert signal.status == CloudStatus.PARTIAL_CLOUD


class TestVerificationResult:
    """Test suite for verification payloads."""

    def test_valid(self):
        """Test a well-formed payload."""
        result = parse_verification({"confidence": 87.6, "reasoning": "ok", "verified": True})

        assert result.confidence == 88
        assert result.verified is True

    def test_confidence_clamped(self):
        """Test confidence is clamped to 0-100."""
        assert parse_verification({"confidence": 140, "verified": True}).confidence == 100
        assert parse_verification({"confidence": -5, "verified": False}).confidence == 0

    def test_string_boolean(self):
        """Test "true"/"false" strings are accepted."""
        assert parse_verification({"confidence": 70, "verified": "true"}).verified is True

    def test_ambiguous_boolean_falls_back(self):
        """Test a non-boolean verdict fails closed."""
        result = parse_verification({"confidence": 90, "verified": "maybe"})

        assert result.available is False
        assert result.confidence == 50
        assert result.verified is False

    def test_null_confidence_falls_back(self):
        """Test a null or list confidence fails closed."""
        for confidence in (None, [90], {"value": 90}):
            result = parse_verification({"confidence": confidence, "verified": True})

            assert result.available is False
            assert result.verified is False

    def test_fallback(self):
        """Test the documented fallback."""
        result = VerificationResult.fallback()

        assert result.confidence == 50
        assert result.reasoning == "AI Verification unavailable."
        assert result.verified is False

    def test_available_not_serialized(self):
        """Test the availability flag stays out of dumps."""
        assert "available" not in VerificationResult.fallback().model_dump()


class TestSyntheticReport:
    """Test suite for synthetic report payloads."""

    def test_valid(self):
        """Test a well-formed payload with wire names."""
        report = parse_synthetic_report({
            "text": "Bridge collapsed at Sonai",
            "source": "telegram",
            "locationName": "Sonai",
            "type": "INFRASTRUCTURE",
        })

        assert report.is_usable
        assert report.source == ReportOrigin.TELEGRAM
        assert report.location_name == "Sonai"
        assert report.category == IncidentCategory.INFRASTRUCTURE

    def test_defaults(self):
        """Test unknown source and type fall back to defaults."""
        report = parse_synthetic_report({"text": "Help", "source": "FAX", "type": "ALIENS"})

        assert report.source == ReportOrigin.TWITTER
        assert report.category == IncidentCategory.INFRASTRUCTURE
        assert report.location_name == "Unknown"

    def test_blank_text_unusable(self):
        """Test blank text marks the report unusable."""
        assert not parse_synthetic_report({"text": "   "}).is_usable
        assert not parse_synthetic_report("{}").is_usable

    def test_garbage_unusable(self):
        """Test garbage input yields an unusable fallback."""
        assert not parse_synthetic_report("oops").is_usable


class TestLogisticsPlan:
    """Test suite for logistics payloads."""

    def test_valid(self):
        """Test a well-formed payload."""
        plan = parse_logistics_plan({
            "routes": ["NH-37 to Silchar"],
            "resources": ["Boats"],
            "estimatedTime": "2h",
            "reasoning": "Boats first",
        })

        assert plan.estimated_time == "2h"
        assert plan.available is True

    def test_fallback(self):
        """Test the documented fallback."""
        plan = parse_logistics_plan("")

        assert plan.routes == ["Manual planning required"]
        assert plan.resources == ["Check availability manually"]
        assert plan.estimated_time == "Unknown"
        assert plan.reasoning == "AI Planning service offline."
        assert plan == LogisticsPlan.fallback()
