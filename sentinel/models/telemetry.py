"""
telemetry.py — Pydantic model for the simulated sensor readings.

A TelemetryReading is the only input to an analysis pass. The model holds
values; it does not police slider ranges. The operator surface clamps with
clamp_to_range() before assigning, exactly like an <input type="range">.

JSON uses the dashboard's camelCase names (windSpeed, airQualityIndex, ...)
but snake_case is accepted too, so Python callers can write
TelemetryReading(wind_speed=80).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class SensorRange(BaseModel):
    """Slider bounds for one telemetry field."""

    field: str
    label: str
    unit: str
    min: float
    max: float
    step: float


# Order matches the telemetry panel in the dashboard.
SENSOR_RANGES: dict[str, SensorRange] = {
    r.field: r
    for r in (
        SensorRange(field="temperature",       label="TEMP",    unit="°C",   min=-30, max=100, step=1),
        SensorRange(field="wind_speed",        label="WIND",    unit="km/h", min=0,   max=250, step=1),
        SensorRange(field="water_level",       label="WATER",   unit="m",    min=0,   max=20,  step=0.1),
        SensorRange(field="seismic_activity",  label="SEISMIC", unit="R",    min=0,   max=10,  step=0.1),
        SensorRange(field="air_quality_index", label="AQI",     unit="",     min=0,   max=500, step=1),
        SensorRange(field="precipitation",     label="RAIN",    unit="mm/h", min=0,   max=200, step=1),
    )
}


def resolve_field_name(name: str) -> str:
    """Map a camelCase or snake_case sensor name to the model attribute."""
    if name in SENSOR_RANGES:
        return name
    for field in SENSOR_RANGES:
        if to_camel(field) == name:
            return field
    raise ValueError(f"Unknown telemetry field: {name!r}")


def clamp_to_range(name: str, value: float) -> float:
    """Snap a value into its slider range (the model itself never rejects)."""
    bounds = SENSOR_RANGES[resolve_field_name(name)]
    return max(bounds.min, min(bounds.max, value))


class TelemetryReading(BaseModel):
    """Current simulated sensor values. Coordinates are optional as a pair."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        frozen=True,
    )

    temperature:       float = 22.0   # °C, signed
    wind_speed:        float = 10.0   # km/h
    water_level:       float = 0.5    # metres
    seismic_activity:  float = 0.0    # Richter
    air_quality_index: float = 40.0   # AQI
    precipitation:     float = 0.0    # mm/h

    latitude:  Optional[float] = Field(default=None)   # decimal degrees
    longitude: Optional[float] = Field(default=None)

    @model_validator(mode="after")
    def _coordinates_come_in_pairs(self) -> "TelemetryReading":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must both be set or both be absent")
        return self

    @property
    def has_location(self) -> bool:
        return self.latitude is not None

    def with_field(self, name: str, value: float) -> "TelemetryReading":
        """Return a copy with one sensor field replaced. No range check."""
        field = resolve_field_name(name)
        return self.model_validate({**self.model_dump(), field: value})

    def with_location(self, latitude: Optional[float], longitude: Optional[float]) -> "TelemetryReading":
        return self.model_validate({**self.model_dump(), "latitude": latitude, "longitude": longitude})


DEFAULT_TELEMETRY = TelemetryReading()
