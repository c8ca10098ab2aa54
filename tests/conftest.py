"""
pytest configuration and shared fixtures for the SENTINEL API tests.

Key concern: tests must not require a Gemini API key or network access.
We achieve this by:
  1. Forcing AI_MOCK_MODE=true so GeminiClient returns canned responses.
  2. Building the DashboardController ourselves and hanging it on
     app.state — httpx's ASGITransport does not run the lifespan, so the
     geolocation lookup never happens.
  3. Resetting the slowapi in-memory counters before each test.

Stubs for the two collaborators live here too: StubAnalyzer (records every
reading it is asked about) and RecordingSpeaker (records every utterance).
"""

import os
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("AI_MOCK_MODE", "true")
os.environ.setdefault("ENVIRONMENT", "test")

from sentinel.models.assessment import RecommendedRoute, RiskAssessment, SafeZone  # noqa: E402


def make_assessment(**overrides) -> RiskAssessment:
    """A valid, unremarkable assessment; override any field."""
    data = dict(
        risk_level=50,
        danger_type="flood",
        risk_description="Rising water.",
        safe_zones=[SafeZone(name="Hilltop School", distance_km=2.5, eta_min=15)],
        recommended_route=RecommendedRoute(
            steps=["Head uphill.", "Follow Station Road.", "Enter the school hall."],
            total_distance_km=2.5,
            eta_min=15,
        ),
        crowd_density="medium",
        alerts=["Flood warning in effect."],
        sos_recommendation="no",
    )
    data.update(overrides)
    return RiskAssessment(**data)


class StubAnalyzer:
    """Deterministic Analyzer: returns `result` and records each reading."""

    def __init__(self, result: RiskAssessment | None = None) -> None:
        self.result = result or make_assessment()
        self.calls = []

    async def analyze(self, reading):
        self.calls.append(reading)
        return self.result


class RecordingSpeaker:
    def __init__(self) -> None:
        self.utterances: list[str] = []

    def speak(self, utterance: str) -> None:
        self.utterances.append(utterance)


class FixedClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def stub_analyzer():
    return StubAnalyzer()


@pytest.fixture()
def speaker():
    return RecordingSpeaker()


@pytest.fixture()
def clock():
    return FixedClock()


@pytest.fixture()
def controller(stub_analyzer, speaker, clock):
    from sentinel.services.dashboard_state import DashboardController

    return DashboardController(stub_analyzer, speaker=speaker, clock=clock)


@pytest.fixture()
async def client(controller):
    """
    HTTPX async test client wired to the FastAPI app.

    Usage:
        async def test_something(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    from sentinel.core.rate_limit import limiter
    from sentinel.main import app

    try:
        limiter._limiter.storage.reset()
    except Exception:
        pass  # Some storage backends don't support reset — safe to ignore.

    app.state.dashboard = controller
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
