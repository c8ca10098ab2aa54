"""
GeminiClient — Async wrapper around Google Generative AI SDK.

Supports two runtime modes (set via AI_MOCK_MODE env var):
  - MOCK mode (default): returns deterministic canned responses.
    Use for tests and local dev without API keys.
  - REAL mode: makes actual Gemini API calls.
    Requires GEMINI_API_KEY to be set.

Structured output: generate_json() sends a system instruction plus a
response schema and asks for application/json, so the reply text is a
single JSON document (or an error).

Extension pattern: add new mock response keys to _MOCK_RESPONSES and pass
them as the response_key parameter of generate() or generate_json().
RiskAnalyzer selects its key through generate_json() (see
mock_key_for_reading in risk_analyzer.py).
"""

import logging
import os
from typing import Any, Optional

# Python 3.14 + protobuf native extension can fail when importing Gemini deps.
# Keep this as default-only so users can still override it explicitly.
os.environ.setdefault("PROTOCOL_BUFFERS_PYTHON_IMPLEMENTATION", "python")

import google.generativeai as genai

from sentinel.core.config import settings

logger = logging.getLogger(__name__)


# Canned responses for mock mode, one per hazard family.
# Keys map to the response_key argument of generate() and generate_json().
_MOCK_RESPONSES: dict[str, str] = {
    "default": (
        "[MOCK] This is a placeholder Gemini response. "
        "Set AI_MOCK_MODE=false and provide GEMINI_API_KEY for real responses."
    ),
    "risk_clear": (
        '{"risk_level": 8, "danger_type": "unknown", '
        '"risk_description": "[MOCK] All telemetry within normal ranges. No active hazard detected.", '
        '"safe_zones": [{"name": "Community Centre", "distance_km": 1.2, "eta_min": 15}], '
        '"recommended_route": {"steps": ["Maintain situational awareness.", '
        '"Keep emergency kit accessible."], "total_distance_km": 0, "eta_min": 0}, '
        '"crowd_density": "low", "alerts": [], "sos_recommendation": "no"}'
    ),
    "risk_fire": (
        '{"risk_level": 88, "danger_type": "fire", '
        '"risk_description": "[MOCK] Extreme heat, high wind and hazardous air quality '
        'indicate an active wildfire front moving downwind.", '
        '"safe_zones": ['
        '{"name": "Riverside Sports Ground", "distance_km": 3.4, "eta_min": 12}, '
        '{"name": "North Lake Evacuation Centre", "distance_km": 6.1, "eta_min": 20}], '
        '"recommended_route": {"steps": ['
        '"Leave immediately heading upwind (north-west).", '
        '"Follow Main Road to the river crossing.", '
        '"Proceed to Riverside Sports Ground assembly point."], '
        '"total_distance_km": 3.4, "eta_min": 12}, '
        '"crowd_density": "high", '
        '"alerts": ["Wildfire front approaching. Evacuate upwind now.", '
        '"Air quality hazardous. Cover nose and mouth."], '
        '"sos_recommendation": "yes"}'
    ),
    "risk_flood": (
        '{"risk_level": 79, "danger_type": "flood", '
        '"risk_description": "[MOCK] Water level is more than four times the normal '
        'threshold with sustained heavy rainfall. Flash flooding likely.", '
        '"safe_zones": ['
        '{"name": "Hilltop School", "distance_km": 2.8, "eta_min": 18}, '
        '{"name": "Civic Centre Level 3", "distance_km": 1.5, "eta_min": 10}], '
        '"recommended_route": {"steps": ['
        '"Move to higher ground immediately.", '
        '"Avoid underpasses and low bridges.", '
        '"Walk uphill along Station Road to Hilltop School."], '
        '"total_distance_km": 2.8, "eta_min": 18}, '
        '"crowd_density": "medium", '
        '"alerts": ["Flash flood warning. Do not enter flood water."], '
        '"sos_recommendation": "yes"}'
    ),
    "risk_earthquake": (
        '{"risk_level": 72, "danger_type": "earthquake", '
        '"risk_description": "[MOCK] Major seismic event detected. Aftershocks and '
        'structural collapse are likely.", '
        '"safe_zones": [{"name": "Central Park Open Field", "distance_km": 0.8, "eta_min": 9}], '
        '"recommended_route": {"steps": ['
        '"Drop, cover and hold on until shaking stops.", '
        '"Exit the building by the stairs, not the lift.", '
        '"Walk to Central Park Open Field away from facades."], '
        '"total_distance_km": 0.8, "eta_min": 9}, '
        '"crowd_density": "medium", '
        '"alerts": ["Aftershocks expected. Stay clear of damaged buildings."], '
        '"sos_recommendation": "no"}'
    ),
}


class GeminiClient:
    """
    Central Gemini interface for the dashboard backend.

    Single place for model selection, cost logging and mock injection.
    Don't instantiate per-request; use the module-level `gemini_client`
    singleton.
    """

    def __init__(self) -> None:
        self.mock_mode = settings.ai_mock_mode
        self.model_name = settings.gemini_model

        if not self.mock_mode:
            if not settings.gemini_api_key:
                logger.warning(
                    "GEMINI_API_KEY not set — falling back to mock mode. "
                    "Set AI_MOCK_MODE=true to silence this warning."
                )
                self.mock_mode = True
            else:
                genai.configure(api_key=settings.gemini_api_key)
                self._genai = genai

        if self.mock_mode:
            logger.info("GeminiClient initialised in MOCK mode")
        else:
            logger.info("GeminiClient initialised in REAL mode (model: %s)", self.model_name)

    async def generate(
        self,
        prompt: str,
        response_key: str = "default",
        system_instruction: Optional[str] = None,
        **generation_kwargs: Any,
    ) -> str:
        """
        Generate text from a Gemini model.

        Args:
            prompt:             The full prompt string.
            response_key:       Mock response key (ignored in real mode).
            system_instruction: Optional role directive for the model.
            **generation_kwargs: Passed through to GenerativeModel.generate_content_async().

        Returns:
            Generated text string (may be empty if the model returned no candidates).

        Raises:
            Exception: Propagates Gemini SDK errors in real mode.
        """
        if self.mock_mode:
            return _MOCK_RESPONSES.get(response_key, _MOCK_RESPONSES["default"])

        try:
            gemini_model = self._genai.GenerativeModel(
                self.model_name,
                system_instruction=system_instruction,
            )
            response = await gemini_model.generate_content_async(prompt, **generation_kwargs)
            return response.text
        except Exception as exc:
            logger.error("Gemini API error (model=%s): %s", self.model_name, exc)
            raise

    async def generate_json(
        self,
        prompt: str,
        system_instruction: str,
        response_schema: dict[str, Any],
        response_key: str = "default",
    ) -> str:
        """Structured-output call: the reply is constrained to `response_schema`."""
        generation_config = genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=response_schema,
        )
        return await self.generate(
            prompt,
            response_key=response_key,
            system_instruction=system_instruction,
            generation_config=generation_config,
        )


# Module-level singleton — import and use this everywhere
gemini_client = GeminiClient()
