"""
presets.py — Named simulation scenarios.

Each preset rebuilds the whole reading from the defaults and then applies
its overrides, so switching FLOOD → WILDFIRE does not leave 4.5 m of water
behind. Coordinates always survive a preset.
"""

from enum import Enum

from sentinel.models.telemetry import DEFAULT_TELEMETRY, TelemetryReading


class SimulationPreset(str, Enum):
    CLEAR = "CLEAR"
    WILDFIRE = "WILDFIRE"
    FLOOD = "FLOOD"
    EARTHQUAKE = "EARTHQUAKE"


PRESET_OVERRIDES: dict[SimulationPreset, dict[str, float]] = {
    SimulationPreset.CLEAR: {},
    SimulationPreset.WILDFIRE: {
        "temperature": 45,
        "wind_speed": 80,
        "air_quality_index": 450,
        "precipitation": 0,
    },
    SimulationPreset.FLOOD: {
        "precipitation": 120,
        "water_level": 4.5,
        "wind_speed": 60,
    },
    SimulationPreset.EARTHQUAKE: {
        "seismic_activity": 7.2,
        "wind_speed": 5,
    },
}


def parse_preset(name: str) -> SimulationPreset:
    """Case-insensitive lookup; raises ValueError for unknown names."""
    try:
        return SimulationPreset(name.strip().upper())
    except ValueError:
        valid = ", ".join(p.value for p in SimulationPreset)
        raise ValueError(f"Unknown preset {name!r} (expected one of: {valid})") from None


def preset_reading(preset: SimulationPreset, current: TelemetryReading) -> TelemetryReading:
    """Full telemetry for `preset`, keeping the coordinates from `current`."""
    data = DEFAULT_TELEMETRY.model_dump()
    data.update(PRESET_OVERRIDES[preset])
    data["latitude"] = current.latitude
    data["longitude"] = current.longitude
    return TelemetryReading.model_validate(data)
