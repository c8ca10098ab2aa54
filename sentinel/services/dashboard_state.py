"""
dashboard_state.py — Dashboard state and the transitions between states.

STATE
─────
DashboardState is frozen. Every change produces a new value through one of
the pure transition functions below; DashboardController is the only thing
that holds "the current one" and it is owned by the app (app.state), not by
a module global.

    idle ──begin_scan──▶ scanning ──complete_scan──▶ idle

WHAT TRIGGERS A SCAN
────────────────────
  - "scan now"          → DashboardController.scan()
  - applying a preset   → DashboardController.apply_preset() (one scan)
  - editing one field   → nothing. The operator must press "scan now".

OVERLAPPING SCANS
─────────────────
Latest request wins. begin_scan() hands out increasing tickets and
complete_scan() ignores any ticket older than the newest one started, so a
slow early call can never overwrite a newer result. `scanning` stays True
until the newest call returns. Calls are not cancelled on the wire.

AUDIO ALERT
───────────
After a result is stored: audio on AND alerts non-empty AND risk > 60 →
speak "Warning. {first alert}. Risk level {n}." The audio flag is read at
completion time, so muting during a scan silences its result.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from sentinel.ai.risk_analyzer import Analyzer
from sentinel.models.assessment import INITIAL_ASSESSMENT, RiskAssessment, fallback_assessment
from sentinel.models.presets import SimulationPreset, preset_reading
from sentinel.models.telemetry import DEFAULT_TELEMETRY, TelemetryReading
from sentinel.services.speech import LogSpeaker, Speaker, speak_quietly

logger = logging.getLogger(__name__)

AUDIO_RISK_THRESHOLD = 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DashboardState(BaseModel):
    model_config = ConfigDict(frozen=True)

    telemetry: TelemetryReading = DEFAULT_TELEMETRY
    assessment: RiskAssessment = INITIAL_ASSESSMENT
    scanning: bool = False
    last_updated: datetime
    audio_enabled: bool = False
    scans_started: int = 0     # newest ticket handed out
    scans_completed: int = 0   # results actually stored


# ── Pure transitions ──────────────────────────────────────────────────────────

def initial_state(audio_enabled: bool = False, now: Optional[datetime] = None) -> DashboardState:
    return DashboardState(last_updated=now or _utcnow(), audio_enabled=audio_enabled)


def update_telemetry_field(state: DashboardState, name: str, value: float) -> DashboardState:
    return state.model_copy(update={"telemetry": state.telemetry.with_field(name, value)})


def replace_telemetry(state: DashboardState, reading: TelemetryReading) -> DashboardState:
    return state.model_copy(update={"telemetry": reading})


def set_location(
    state: DashboardState, latitude: Optional[float], longitude: Optional[float]
) -> DashboardState:
    return state.model_copy(update={"telemetry": state.telemetry.with_location(latitude, longitude)})


def set_audio(state: DashboardState, enabled: bool) -> DashboardState:
    return state.model_copy(update={"audio_enabled": enabled})


def begin_scan(state: DashboardState) -> tuple[DashboardState, int]:
    """idle/scanning → scanning. Returns the new state and this scan's ticket."""
    ticket = state.scans_started + 1
    return state.model_copy(update={"scanning": True, "scans_started": ticket}), ticket


def complete_scan(
    state: DashboardState, ticket: int, assessment: RiskAssessment, at: datetime
) -> DashboardState:
    """
    scanning → idle with `assessment` stored wholesale.

    Returns `state` itself (same object) when `ticket` has been superseded.
    """
    if ticket < state.scans_started:
        return state
    return state.model_copy(
        update={
            "assessment": assessment,
            "last_updated": at,
            "scanning": False,
            "scans_completed": state.scans_completed + 1,
        }
    )


def should_announce(state: DashboardState) -> bool:
    a = state.assessment
    return state.audio_enabled and bool(a.alerts) and a.risk_level > AUDIO_RISK_THRESHOLD


def announcement_text(assessment: RiskAssessment) -> str:
    return f"Warning. {assessment.alerts[0]}. Risk level {assessment.risk_level}."


# ── Controller ────────────────────────────────────────────────────────────────

class DashboardController:
    """Holds the current DashboardState and runs scans against an Analyzer."""

    def __init__(
        self,
        analyzer: Analyzer,
        speaker: Optional[Speaker] = None,
        audio_enabled: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.analyzer = analyzer
        self.speaker = speaker or LogSpeaker()
        self._clock = clock
        self._state = initial_state(audio_enabled=audio_enabled, now=clock())

    @property
    def state(self) -> DashboardState:
        return self._state

    def update_field(self, name: str, value: float) -> DashboardState:
        self._state = update_telemetry_field(self._state, name, value)
        return self._state

    def set_audio(self, enabled: bool) -> DashboardState:
        self._state = set_audio(self._state, enabled)
        return self._state

    def set_location(self, latitude: Optional[float], longitude: Optional[float]) -> DashboardState:
        self._state = set_location(self._state, latitude, longitude)
        return self._state

    async def scan(self) -> DashboardState:
        """Analyse the current telemetry and store the result."""
        self._state, ticket = begin_scan(self._state)
        reading = self._state.telemetry
        logger.debug("Scan #%d started", ticket)

        try:
            result = await self.analyzer.analyze(reading)
        except Exception:
            # Analyzers are supposed to absorb failures; an injected one might not.
            logger.exception("Analyzer raised during scan #%d", ticket)
            result = fallback_assessment()

        updated = complete_scan(self._state, ticket, result, self._clock())
        if updated is self._state:
            logger.info("Scan #%d superseded by #%d — result discarded", ticket, self._state.scans_started)
            return self._state

        self._state = updated
        if should_announce(updated):
            speak_quietly(self.speaker, announcement_text(updated.assessment))
        return self._state

    async def apply_preset(self, preset: SimulationPreset) -> DashboardState:
        """Overwrite telemetry with `preset` (coordinates kept), then scan once."""
        reading = preset_reading(preset, self._state.telemetry)
        self._state = replace_telemetry(self._state, reading)
        logger.info("Preset %s applied", preset.value)
        return await self.scan()
