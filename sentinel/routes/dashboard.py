"""
dashboard.py — Operator dashboard routes.

Routes:
  GET   /api/v1/dashboard                    — full view model
  GET   /api/v1/dashboard/sensors            — slider ranges
  GET   /api/v1/dashboard/presets            — preset names + readings
  PATCH /api/v1/dashboard/telemetry          — move one slider (no scan)
  POST  /api/v1/dashboard/scan               — "SCAN NOW"
  POST  /api/v1/dashboard/presets/{preset}   — apply preset, then scan once
  PUT   /api/v1/dashboard/audio              — audio toggle

HOW THE DATA FLOWS
──────────────────
The DashboardController lives on app.state (created in main.lifespan). Each
mutating route runs one controller operation and answers with the freshly
built view, so the front-end never has to issue a second GET.

Telemetry edits are clamped to the slider range here, at the operator
surface; the model itself accepts any finite value.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from sentinel.core.rate_limit import ANALYSIS_RATE, limiter
from sentinel.models.presets import SimulationPreset, parse_preset, preset_reading
from sentinel.models.telemetry import (
    DEFAULT_TELEMETRY,
    SENSOR_RANGES,
    SensorRange,
    TelemetryReading,
    clamp_to_range,
    resolve_field_name,
)
from sentinel.services.dashboard_state import DashboardController
from sentinel.services.presentation import DashboardView, build_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


class TelemetryUpdate(BaseModel):
    """One slider movement."""

    model_config = ConfigDict(allow_inf_nan=False)

    field: str = Field(..., min_length=1, description="Sensor name, camelCase or snake_case")
    value: float


class AudioToggle(BaseModel):
    enabled: bool


class PresetInfo(BaseModel):
    name: SimulationPreset
    telemetry: TelemetryReading


def get_controller(request: Request) -> DashboardController:
    return request.app.state.dashboard


@router.get("", response_model=DashboardView)
async def get_dashboard(controller: DashboardController = Depends(get_controller)):
    return build_view(controller.state)


@router.get("/sensors", response_model=list[SensorRange])
async def list_sensors():
    return list(SENSOR_RANGES.values())


@router.get("/presets", response_model=list[PresetInfo])
async def list_presets():
    return [
        PresetInfo(name=p, telemetry=preset_reading(p, DEFAULT_TELEMETRY))
        for p in SimulationPreset
    ]


@router.patch("/telemetry", response_model=DashboardView)
async def update_telemetry(
    payload: TelemetryUpdate,
    controller: DashboardController = Depends(get_controller),
):
    """Set one sensor value. Does not trigger a scan."""
    try:
        name = resolve_field_name(payload.field)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    value = clamp_to_range(name, payload.value)
    if value != payload.value:
        logger.debug("Clamped %s from %s to %s", name, payload.value, value)
    return build_view(controller.update_field(name, value))


@router.post("/scan", response_model=DashboardView)
@limiter.limit(ANALYSIS_RATE)
async def scan_now(request: Request, controller: DashboardController = Depends(get_controller)):
    """Manual "SCAN NOW": analyse the current telemetry."""
    return build_view(await controller.scan())


@router.post("/presets/{preset}", response_model=DashboardView)
@limiter.limit(ANALYSIS_RATE)
async def apply_preset(
    request: Request,
    preset: str,
    controller: DashboardController = Depends(get_controller),
):
    """Overwrite telemetry with a named scenario (GPS kept) and scan once."""
    try:
        chosen = parse_preset(preset)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return build_view(await controller.apply_preset(chosen))


@router.put("/audio", response_model=DashboardView)
async def toggle_audio(
    payload: AudioToggle,
    controller: DashboardController = Depends(get_controller),
):
    return build_view(controller.set_audio(payload.enabled))
