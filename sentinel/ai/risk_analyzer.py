"""
risk_analyzer.py — Telemetry → Gemini → RiskAssessment.

HOW AN ANALYSIS PASS WORKS
──────────────────────────
1. build_prompt() renders the reading as a "CURRENT SENSOR TELEMETRY" block.
   Missing coordinates are rendered as "Signal Lost / Unknown".
2. The prompt goes out with SYSTEM_INSTRUCTION and RESPONSE_SCHEMA as a
   structured-output request (application/json).
3. parse_assessment() decodes the reply and validates it into a
   RiskAssessment. Empty text, broken JSON, a non-object document or any
   schema violation raises AnalysisError.
4. RiskAnalyzer.analyze() is the one place where failure becomes data:
   every AnalysisError and every SDK exception (network, auth, quota,
   timeout) is logged with its cause and replaced by the fallback
   assessment. Nothing propagates past it.

There is no retry, no backoff and no caching. Two scans of the same reading
are two calls.

Swapping the model: anything with
    async generate_json(prompt, system_instruction, response_schema, response_key) -> str
can be passed as `generator`. Tests pass stubs.
"""

import json
import logging
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from sentinel.ai.gemini_client import gemini_client
from sentinel.models.assessment import (
    CROWD_DENSITIES,
    DANGER_TYPES,
    SOS_VALUES,
    RiskAssessment,
    fallback_assessment,
)
from sentinel.models.telemetry import TelemetryReading

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = """\
You are an advanced Real-Time Disaster Evacuation & Risk Guidance System. Your job is to analyze dynamic environmental data and provide the safest possible evacuation path, risk levels, and alerts.

Your responsibilities:
1. Read and analyze incoming data: weather, fire alerts, flood levels, map routes, GPS coordinates, and population density.
2. Classify the threat type and predict real-time danger probability (0–100 risk score).
3. Generate safe evacuation routes with step-by-step guidance.
4. Provide dynamic voice-style alerts for emergency conditions.
5. Detect crowd density and avoid congested routes.
6. Identify and recommend nearest safe zones.
7. Trigger SOS message suggestions if risk is extremely high.

Always respond in structured JSON. Never guess — always reason based on data provided.
If exact location data is missing, infer general safe strategies based on the environmental conditions described."""

_TELEMETRY_PROMPT = """\
CURRENT SENSOR TELEMETRY:
- GPS Location: {location}
- Temperature: {temperature}°C
- Wind Speed: {wind_speed} km/h
- Water Level: {water_level} meters (Normal: < 1m)
- Seismic Activity (Richter): {seismic_activity}
- Air Quality Index (AQI): {air_quality_index}
- Precipitation Rate: {precipitation} mm/h

Analyze this telemetry immediately. Identify threats. Calculate risk. Provide evacuation protocols."""

_NO_SIGNAL = "Signal Lost / Unknown"


def _enum(values: tuple[str, ...]) -> dict[str, Any]:
    return {"type": "STRING", "format": "enum", "enum": list(values)}


# Gemini OpenAPI-subset schema. Must stay in lockstep with RiskAssessment.
RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "risk_level": {"type": "INTEGER", "description": "0-100 risk score"},
        "danger_type": _enum(DANGER_TYPES),
        "risk_description": {"type": "STRING"},
        "safe_zones": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "distance_km": {"type": "NUMBER"},
                    "eta_min": {"type": "NUMBER"},
                },
                "required": ["name", "distance_km", "eta_min"],
            },
        },
        "recommended_route": {
            "type": "OBJECT",
            "properties": {
                "steps": {"type": "ARRAY", "items": {"type": "STRING"}},
                "total_distance_km": {"type": "NUMBER"},
                "eta_min": {"type": "NUMBER"},
            },
            "required": ["steps", "total_distance_km", "eta_min"],
        },
        "crowd_density": _enum(CROWD_DENSITIES),
        "alerts": {"type": "ARRAY", "items": {"type": "STRING"}},
        "sos_recommendation": _enum(SOS_VALUES),
    },
    "required": [
        "risk_level",
        "danger_type",
        "risk_description",
        "safe_zones",
        "recommended_route",
        "crowd_density",
        "alerts",
        "sos_recommendation",
    ],
}


class AnalysisError(Exception):
    """The one failure class of an analysis pass. `cause` is for logs only."""

    def __init__(self, cause: str) -> None:
        super().__init__(cause)
        self.cause = cause


class JsonGenerator(Protocol):
    async def generate_json(
        self,
        prompt: str,
        system_instruction: str,
        response_schema: dict[str, Any],
        response_key: str = "default",
    ) -> str: ...


class Analyzer(Protocol):
    """Anything the dashboard can ask for a risk assessment."""

    async def analyze(self, reading: TelemetryReading) -> RiskAssessment: ...


def _fmt(value: float) -> str:
    # 45.0 → "45", 4.5 → "4.5"
    return f"{value:g}"


def build_prompt(reading: TelemetryReading) -> str:
    """Render the reading as the per-call prompt."""
    if reading.has_location:
        location = f"{reading.latitude}, {reading.longitude}"
    else:
        location = _NO_SIGNAL

    return _TELEMETRY_PROMPT.format(
        location=location,
        temperature=_fmt(reading.temperature),
        wind_speed=_fmt(reading.wind_speed),
        water_level=_fmt(reading.water_level),
        seismic_activity=_fmt(reading.seismic_activity),
        air_quality_index=_fmt(reading.air_quality_index),
        precipitation=_fmt(reading.precipitation),
    )


def mock_key_for_reading(reading: TelemetryReading) -> str:
    """Pick the canned mock response matching the dominant hazard."""
    if reading.seismic_activity >= 5:
        return "risk_earthquake"
    if reading.water_level >= 2 or reading.precipitation >= 80:
        return "risk_flood"
    if reading.temperature >= 40 or reading.air_quality_index >= 300:
        return "risk_fire"
    return "risk_clear"


def _reject_constant(name: str) -> float:
    # json.loads accepts NaN / Infinity / -Infinity; standard JSON does not.
    raise AnalysisError(f"malformed JSON: non-standard constant {name}")


def parse_assessment(raw: Optional[str]) -> RiskAssessment:
    """
    Decode and validate a model reply.

    Raises:
        AnalysisError: empty reply, invalid JSON, non-object JSON or any
        schema violation. A partially valid document is still a failure.
    """
    if raw is None or not raw.strip():
        raise AnalysisError("empty response")

    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise AnalysisError(f"malformed JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise AnalysisError(f"expected a JSON object, got {type(data).__name__}")

    # Strict: "42" is not an integer and true is not a number.
    try:
        return RiskAssessment.model_validate_json(raw, strict=True)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in exc.errors())
        raise AnalysisError(f"schema violation ({fields})") from exc


class RiskAnalyzer:
    """Gemini-backed Analyzer. analyze() never raises."""

    def __init__(self, generator: Optional[JsonGenerator] = None) -> None:
        self.generator = generator or gemini_client

    async def analyze(self, reading: TelemetryReading) -> RiskAssessment:
        prompt = build_prompt(reading)
        try:
            raw = await self.generator.generate_json(
                prompt,
                system_instruction=SYSTEM_INSTRUCTION,
                response_schema=RESPONSE_SCHEMA,
                response_key=mock_key_for_reading(reading),
            )
            assessment = parse_assessment(raw)
        except AnalysisError as exc:
            logger.warning("Analysis failed: %s", exc.cause)
            return fallback_assessment()
        except Exception as exc:
            logger.error("Analysis failed: %s: %s", type(exc).__name__, exc)
            return fallback_assessment()

        logger.info(
            "Analysis complete: risk=%d type=%s sos=%s",
            assessment.risk_level, assessment.danger_type, assessment.sos_recommendation,
        )
        return assessment


# Module-level singleton
risk_analyzer = RiskAnalyzer()
