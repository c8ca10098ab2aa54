"""
presentation.py — Dashboard view model.

Pure functions from DashboardState to what the front-end draws. Nothing in
here talks to Gemini or mutates state; the dashboard route calls
build_view() on every request.

GAUGE THRESHOLDS
────────────────
  risk > 75 → CRITICAL (red)
  risk > 40 → WARNING  (orange)
  otherwise → STABLE   (green)
Strict inequalities: 40 is stable, 75 is warning.

SAFE-ZONE MARKERS
─────────────────
place_markers() spreads zones evenly around the radar centre with a random
radial jitter. It is decoration for the radar widget, not a map projection;
the positions mean nothing geographically.
"""

from __future__ import annotations

import math
import random
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from sentinel.models.assessment import RiskAssessment, SafeZone
from sentinel.models.telemetry import SENSOR_RANGES, SensorRange, TelemetryReading
from sentinel.services.dashboard_state import DashboardState

GREEN = "#10b981"
ORANGE = "#f97316"
RED = "#ef4444"

NO_ALERTS_PLACEHOLDER = "NO ACTIVE THREATS DETECTED"
NO_SIGNAL_LABEL = "SIGNAL LOST"

# Radar geometry in px from the centre.
_MARKER_MIN_RADIUS = 40.0
_MARKER_JITTER = 60.0


class GaugeView(BaseModel):
    score: int
    status: str   # "stable" | "warning" | "critical"
    color: str


class RouteStepView(BaseModel):
    index: int            # 1-based
    text: str
    show_connector: bool  # False on the final step


class RouteView(BaseModel):
    steps: list[RouteStepView]
    total_distance_km: float
    eta_min: float
    show_eta: bool


class MarkerView(BaseModel):
    name: str
    distance_km: float
    eta_min: float
    offset_x: float   # px from radar centre
    offset_y: float


class LocationView(BaseModel):
    available: bool
    label: str


class DashboardView(BaseModel):
    telemetry: TelemetryReading
    sensors: list[SensorRange]
    gauge: GaugeView
    danger_type: str
    risk_description: str
    crowd_density: str
    crowd_density_color: str
    sos_visible: bool
    alerts: list[str]
    alerts_placeholder: Optional[str]
    route: RouteView
    markers: list[MarkerView]
    location: LocationView
    scanning: bool
    audio_enabled: bool
    last_updated: datetime
    last_scan_label: str


def gauge_status(risk_level: int) -> str:
    if risk_level > 75:
        return "critical"
    if risk_level > 40:
        return "warning"
    return "stable"


_STATUS_COLORS = {"critical": RED, "warning": ORANGE, "stable": GREEN}
_CROWD_COLORS = {"high": RED, "medium": ORANGE, "low": GREEN}


def gauge_view(risk_level: int) -> GaugeView:
    status = gauge_status(risk_level)
    return GaugeView(score=risk_level, status=status, color=_STATUS_COLORS[status])


def crowd_density_color(density: str) -> str:
    return _CROWD_COLORS.get(density, GREEN)


def sos_visible(assessment: RiskAssessment) -> bool:
    return assessment.sos_recommendation == "yes"


def route_view(assessment: RiskAssessment) -> RouteView:
    route = assessment.recommended_route
    last = len(route.steps) - 1
    return RouteView(
        steps=[
            RouteStepView(index=i + 1, text=step, show_connector=i != last)
            for i, step in enumerate(route.steps)
        ],
        total_distance_km=route.total_distance_km,
        eta_min=route.eta_min,
        show_eta=route.eta_min > 0,
    )


def place_markers(zones: list[SafeZone], rng: Optional[random.Random] = None) -> list[MarkerView]:
    """Cosmetic radar positions for safe zones. See module docstring."""
    rng = rng or random.Random()
    count = len(zones) or 1
    markers = []
    for idx, zone in enumerate(zones):
        angle = (idx / count) * 2 * math.pi
        radius = _MARKER_MIN_RADIUS + rng.random() * _MARKER_JITTER
        markers.append(
            MarkerView(
                name=zone.name,
                distance_km=zone.distance_km,
                eta_min=zone.eta_min,
                offset_x=round(math.cos(angle) * radius, 1),
                offset_y=round(math.sin(angle) * radius, 1),
            )
        )
    return markers


def location_view(reading: TelemetryReading) -> LocationView:
    if not reading.has_location:
        return LocationView(available=False, label=NO_SIGNAL_LABEL)
    return LocationView(
        available=True,
        label=f"LAT: {reading.latitude:.4f} LNG: {reading.longitude:.4f}",
    )


def build_view(state: DashboardState, rng: Optional[random.Random] = None) -> DashboardView:
    a = state.assessment
    return DashboardView(
        telemetry=state.telemetry,
        sensors=list(SENSOR_RANGES.values()),
        gauge=gauge_view(a.risk_level),
        danger_type=a.danger_type,
        risk_description=a.risk_description,
        crowd_density=a.crowd_density,
        crowd_density_color=crowd_density_color(a.crowd_density),
        sos_visible=sos_visible(a),
        alerts=list(a.alerts),
        alerts_placeholder=None if a.alerts else NO_ALERTS_PLACEHOLDER,
        route=route_view(a),
        markers=place_markers(a.safe_zones, rng),
        location=location_view(state.telemetry),
        scanning=state.scanning,
        audio_enabled=state.audio_enabled,
        last_updated=state.last_updated,
        last_scan_label=state.last_updated.astimezone().strftime("%H:%M:%S"),
    )
