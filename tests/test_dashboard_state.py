"""
test_dashboard_state.py — State transitions, scan triggering and audio alerts.

The controller is wired to StubAnalyzer / RecordingSpeaker from conftest.
"""

import asyncio
from datetime import timedelta

from sentinel.models.assessment import FALLBACK_ASSESSMENT, INITIAL_ASSESSMENT
from sentinel.models.presets import SimulationPreset
from sentinel.models.telemetry import DEFAULT_TELEMETRY
from sentinel.services.dashboard_state import (
    DashboardController,
    announcement_text,
    begin_scan,
    complete_scan,
    initial_state,
    should_announce,
)

from conftest import StubAnalyzer, make_assessment


# ── Pure transitions ──────────────────────────────────────────────────────────

class TestTransitions:

    def test_initial_state(self):
        s = initial_state()
        assert s.telemetry == DEFAULT_TELEMETRY
        assert s.assessment == INITIAL_ASSESSMENT
        assert s.scanning is False
        assert s.audio_enabled is False

    def test_begin_scan_issues_increasing_tickets(self):
        s, t1 = begin_scan(initial_state())
        s, t2 = begin_scan(s)
        assert (t1, t2) == (1, 2)
        assert s.scanning is True

    def test_complete_scan_replaces_assessment_wholesale(self):
        s, ticket = begin_scan(initial_state())
        result = make_assessment(alerts=[])
        done = complete_scan(s, ticket, result, s.last_updated + timedelta(seconds=3))
        assert done.assessment == result
        assert done.scanning is False
        assert done.last_updated == s.last_updated + timedelta(seconds=3)
        assert done.scans_completed == 1

    def test_stale_ticket_returns_same_state(self):
        s, old = begin_scan(initial_state())
        s, _ = begin_scan(s)
        assert complete_scan(s, old, make_assessment(), s.last_updated) is s

    def test_transitions_do_not_mutate_input(self):
        s = initial_state()
        begin_scan(s)
        assert s.scanning is False


# ── Controller ────────────────────────────────────────────────────────────────

class TestController:

    def test_editing_a_field_does_not_scan(self, controller, stub_analyzer):
        controller.update_field("windSpeed", 200)
        assert controller.state.telemetry.wind_speed == 200
        assert stub_analyzer.calls == []

    async def test_scan_uses_current_telemetry(self, controller, stub_analyzer):
        controller.update_field("temperature", 38)
        await controller.scan()
        assert len(stub_analyzer.calls) == 1
        assert stub_analyzer.calls[0].temperature == 38

    async def test_scan_stores_result_and_timestamp(self, controller, stub_analyzer, clock):
        clock.now += timedelta(minutes=5)
        state = await controller.scan()
        assert state.assessment == stub_analyzer.result
        assert state.last_updated == clock.now
        assert state.scanning is False

    async def test_wildfire_preset_triggers_exactly_one_scan(self, controller, stub_analyzer):
        controller.set_location(51.5, -0.12)
        await controller.apply_preset(SimulationPreset.WILDFIRE)

        assert len(stub_analyzer.calls) == 1
        reading = stub_analyzer.calls[0]
        assert reading.temperature == 45
        assert reading.wind_speed == 80
        assert reading.air_quality_index == 450
        assert reading.precipitation == 0
        assert reading.water_level == 0.5
        assert (reading.latitude, reading.longitude) == (51.5, -0.12)
        assert controller.state.telemetry == reading

    async def test_flood_preset_triggers_one_scan(self, controller, stub_analyzer):
        await controller.apply_preset(SimulationPreset.FLOOD)
        assert len(stub_analyzer.calls) == 1
        reading = stub_analyzer.calls[0]
        assert (reading.precipitation, reading.water_level, reading.wind_speed) == (120, 4.5, 60)

    async def test_raising_analyzer_still_lands_on_fallback(self, speaker, clock):
        class Broken:
            async def analyze(self, reading):
                raise RuntimeError("boom")

        c = DashboardController(Broken(), speaker=speaker, clock=clock)
        state = await c.scan()
        assert state.assessment == FALLBACK_ASSESSMENT
        assert state.scanning is False


# ── Overlapping scans ─────────────────────────────────────────────────────────

class GatedAnalyzer:
    """Each call waits on its own event so tests control completion order."""

    def __init__(self):
        self.gates = []
        self.results = []

    async def analyze(self, reading):
        gate = asyncio.Event()
        idx = len(self.gates)
        self.gates.append(gate)
        await gate.wait()
        return self.results[idx]


class TestOverlappingScans:

    async def test_latest_request_wins(self, speaker, clock):
        analyzer = GatedAnalyzer()
        analyzer.results = [make_assessment(risk_level=11), make_assessment(risk_level=22)]
        c = DashboardController(analyzer, speaker=speaker, clock=clock)

        first = asyncio.create_task(c.scan())
        await asyncio.sleep(0)
        second = asyncio.create_task(c.scan())
        await asyncio.sleep(0)
        assert c.state.scanning is True

        # Newer call finishes first, older one straggles in afterwards.
        analyzer.gates[1].set()
        await second
        assert c.state.assessment.risk_level == 22
        assert c.state.scanning is False

        analyzer.gates[0].set()
        await first
        assert c.state.assessment.risk_level == 22
        assert c.state.scans_completed == 1

    async def test_older_result_does_not_end_scanning(self, speaker, clock):
        analyzer = GatedAnalyzer()
        analyzer.results = [make_assessment(risk_level=11), make_assessment(risk_level=22)]
        c = DashboardController(analyzer, speaker=speaker, clock=clock)

        first = asyncio.create_task(c.scan())
        await asyncio.sleep(0)
        second = asyncio.create_task(c.scan())
        await asyncio.sleep(0)

        analyzer.gates[0].set()
        await first
        assert c.state.scanning is True
        assert c.state.assessment == INITIAL_ASSESSMENT

        analyzer.gates[1].set()
        await second
        assert c.state.assessment.risk_level == 22


# ── Audio alert ───────────────────────────────────────────────────────────────

class TestAudioAlert:

    def _controller(self, result, speaker, clock, audio=True):
        return DashboardController(StubAnalyzer(result), speaker=speaker, audio_enabled=audio, clock=clock)

    async def test_speaks_first_alert_with_risk_level(self, speaker, clock):
        result = make_assessment(risk_level=88, alerts=["Evacuate now.", "Second alert"])
        await self._controller(result, speaker, clock).scan()
        assert speaker.utterances == ["Warning. Evacuate now.. Risk level 88."]

    async def test_threshold_is_strictly_above_60(self, speaker, clock):
        await self._controller(make_assessment(risk_level=60), speaker, clock).scan()
        assert speaker.utterances == []
        await self._controller(make_assessment(risk_level=61), speaker, clock).scan()
        assert len(speaker.utterances) == 1

    async def test_no_alerts_no_speech(self, speaker, clock):
        await self._controller(make_assessment(risk_level=95, alerts=[]), speaker, clock).scan()
        assert speaker.utterances == []

    async def test_audio_off_suppresses_everything(self, speaker, clock):
        result = make_assessment(risk_level=100, alerts=["Run."])
        c = self._controller(result, speaker, clock, audio=False)
        await c.scan()
        await c.apply_preset(SimulationPreset.WILDFIRE)
        assert speaker.utterances == []

    async def test_toggle_audio_on_then_off(self, speaker, clock):
        c = self._controller(make_assessment(risk_level=90), speaker, clock, audio=False)
        c.set_audio(True)
        await c.scan()
        c.set_audio(False)
        await c.scan()
        assert len(speaker.utterances) == 1

    async def test_fallback_never_speaks(self, speaker, clock):
        await self._controller(FALLBACK_ASSESSMENT, speaker, clock).scan()
        assert speaker.utterances == []

    async def test_speaker_failure_is_swallowed(self, clock):
        class Mute:
            def speak(self, utterance):
                raise OSError("no audio device")

        c = DashboardController(
            StubAnalyzer(make_assessment(risk_level=90)), speaker=Mute(), audio_enabled=True, clock=clock
        )
        state = await c.scan()
        assert state.assessment.risk_level == 90

    def test_should_announce_and_text(self):
        s = initial_state(audio_enabled=True).model_copy(
            update={"assessment": make_assessment(risk_level=70, alerts=["Flood."])}
        )
        assert should_announce(s) is True
        assert announcement_text(s.assessment) == "Warning. Flood.. Risk level 70."
