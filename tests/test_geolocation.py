"""
test_geolocation.py — One-shot location lookup and its graceful degradation.

HTTP is served by httpx.MockTransport; nothing leaves the process.
"""

from unittest.mock import patch

import httpx
import pytest

from sentinel.services.geolocation import GeolocationAdapter
from sentinel.services.speech import LogSpeaker, speak_quietly

_RealAsyncClient = httpx.AsyncClient


def _serve(handler):
    """Patch the adapter's AsyncClient so requests hit `handler`."""
    return patch(
        "sentinel.services.geolocation.httpx.AsyncClient",
        lambda **kw: _RealAsyncClient(transport=httpx.MockTransport(handler), **kw),
    )


def _adapter(url="https://geo.test/json", lat=None, lng=None) -> GeolocationAdapter:
    adapter = GeolocationAdapter()
    adapter.url = url
    adapter.default_latitude = lat
    adapter.default_longitude = lng
    return adapter


class TestGeolocationAdapter:

    async def test_configured_coordinates_win(self):
        def handler(request):
            raise AssertionError("no HTTP call expected")

        with _serve(handler):
            assert await _adapter(lat=48.85, lng=2.35).locate() == (48.85, 2.35)

    async def test_no_source_returns_none(self):
        assert await _adapter(url="").locate() is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"latitude": 52.52, "longitude": 13.405},
            {"lat": 52.52, "lon": 13.405},
            {"lat": "52.52", "lng": "13.405"},
        ],
    )
    async def test_lookup_parses_common_shapes(self, payload):
        with _serve(lambda request: httpx.Response(200, json=payload)):
            assert await _adapter().locate() == (52.52, 13.405)

    async def test_http_error_returns_none(self):
        with _serve(lambda request: httpx.Response(503, text="unavailable")):
            assert await _adapter().locate() is None

    async def test_network_error_returns_none(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with _serve(handler):
            assert await _adapter().locate() is None

    async def test_payload_without_coordinates_returns_none(self):
        with _serve(lambda request: httpx.Response(200, json={"city": "Nowhere"})):
            assert await _adapter().locate() is None

    async def test_non_numeric_coordinates_return_none(self):
        with _serve(lambda request: httpx.Response(200, json={"latitude": "north", "longitude": 1})):
            assert await _adapter().locate() is None


class TestSpeech:

    def test_log_speaker_logs_utterance(self, caplog):
        with caplog.at_level("WARNING", logger="sentinel.services.speech"):
            LogSpeaker().speak("Warning. Flood.. Risk level 80.")
        assert "Risk level 80" in caplog.text

    def test_speak_quietly_swallows_errors(self):
        class Broken:
            def speak(self, utterance):
                raise RuntimeError("tts engine missing")

        speak_quietly(Broken(), "hello")  # must not raise
