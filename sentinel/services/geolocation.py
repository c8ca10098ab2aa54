"""
geolocation.py — One-shot location lookup at startup.

Resolution order:
  1. DEFAULT_LATITUDE / DEFAULT_LONGITUDE from settings (both required)
  2. GEOLOCATION_URL — an IP-geolocation endpoint returning JSON with
     latitude/longitude (or lat/lon) keys, e.g. https://ipapi.co/json/
  3. Nothing — the dashboard runs with "signal lost" coordinates

Graceful degradation: every failure is logged and returns None. There is
no retry; the lookup runs once per process.
"""

import logging
import math
from typing import Any, Optional

import httpx

from sentinel.core.config import settings

logger = logging.getLogger(__name__)

Coordinates = tuple[float, float]


def _extract_coordinates(data: dict[str, Any]) -> Optional[Coordinates]:
    for lat_key, lng_key in (("latitude", "longitude"), ("lat", "lon"), ("lat", "lng")):
        if lat_key in data and lng_key in data:
            try:
                lat, lng = float(data[lat_key]), float(data[lng_key])
            except (TypeError, ValueError):
                return None
            if not (math.isfinite(lat) and math.isfinite(lng)):
                return None
            return lat, lng
    return None


class GeolocationAdapter:
    """Thin async wrapper around an IP-geolocation REST endpoint."""

    def __init__(self) -> None:
        self.url = settings.geolocation_url
        self.default_latitude = settings.default_latitude
        self.default_longitude = settings.default_longitude

    async def locate(self) -> Optional[Coordinates]:
        """
        Returns:
            (latitude, longitude) or None if no source is configured or the
            lookup failed.
        """
        if self.default_latitude is not None and self.default_longitude is not None:
            return self.default_latitude, self.default_longitude

        if not self.url:
            logger.info("No geolocation source configured — coordinates unavailable")
            return None

        async with httpx.AsyncClient(timeout=5.0) as client:
            try:
                response = await client.get(self.url)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    "Geolocation lookup error: %s — %s",
                    exc.response.status_code,
                    exc.response.text[:200],
                )
                return None
            except Exception as exc:
                logger.warning("Geolocation lookup failed: %s", exc)
                return None

        coords = _extract_coordinates(data) if isinstance(data, dict) else None
        if coords is None:
            logger.warning("Geolocation response had no usable coordinates")
        return coords


# Module-level singleton
geolocation_adapter = GeolocationAdapter()
