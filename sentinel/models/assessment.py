"""
assessment.py — Pydantic models for the risk analysis result.

RiskAssessment mirrors the JSON schema the model is asked to fill in, field
for field. Validation here is what turns "the model replied" into "the model
replied with something we can display": any missing field, unknown enum
value or negative distance fails the whole document.

Two fixed values live here as well:
  INITIAL_ASSESSMENT  — "all clear" shown before the first scan
  FALLBACK_ASSESSMENT — "system error" substituted for every failed scan
They are deliberately different so an operator can tell "no call yet" from
"the call failed".
"""

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

DangerType = Literal["flood", "fire", "landslide", "cyclone", "earthquake", "unknown"]
CrowdDensity = Literal["low", "medium", "high"]
SosRecommendation = Literal["yes", "no"]

DANGER_TYPES: tuple[str, ...] = get_args(DangerType)
CROWD_DENSITIES: tuple[str, ...] = get_args(CrowdDensity)
SOS_VALUES: tuple[str, ...] = get_args(SosRecommendation)


class SafeZone(BaseModel):
    """A shelter or assembly point suggested by the model."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    name: str
    distance_km: float = Field(..., ge=0)
    eta_min: float = Field(..., ge=0)


class RecommendedRoute(BaseModel):
    """Step-by-step evacuation guidance."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    steps: list[str]
    total_distance_km: float = Field(..., ge=0)
    eta_min: float = Field(..., ge=0)


class RiskAssessment(BaseModel):
    """Structured output of one analysis pass."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    risk_level:         int = Field(..., ge=0, le=100)  # 0–100
    danger_type:        DangerType
    risk_description:   str
    safe_zones:         list[SafeZone]
    recommended_route:  RecommendedRoute
    crowd_density:      CrowdDensity
    alerts:             list[str]
    sos_recommendation: SosRecommendation


FALLBACK_ASSESSMENT = RiskAssessment(
    risk_level=0,
    danger_type="unknown",
    risk_description="System error. Unable to process telemetry.",
    safe_zones=[],
    recommended_route=RecommendedRoute(steps=[], total_distance_km=0, eta_min=0),
    crowd_density="low",
    alerts=["SYSTEM MALFUNCTION - SEEK SHELTER"],
    sos_recommendation="no",
)

INITIAL_ASSESSMENT = RiskAssessment(
    risk_level=10,
    danger_type="unknown",
    risk_description="Conditions normal. Monitoring active.",
    safe_zones=[],
    recommended_route=RecommendedRoute(
        steps=["Maintain situational awareness."], total_distance_km=0, eta_min=0
    ),
    crowd_density="low",
    alerts=[],
    sos_recommendation="no",
)


def fallback_assessment() -> RiskAssessment:
    """Fresh copy of the fallback so callers never share list instances."""
    return FALLBACK_ASSESSMENT.model_copy(deep=True)
