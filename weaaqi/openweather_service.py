"""
OpenWeather service module for the weaaqi dashboard.

This module contains the OpenWeatherService class which supplies Readings for
the configured location. Supports two modes:
- "mock": Deterministic sample payloads (offline, always available)
- "live": Current weather and air pollution from the OpenWeather API
  (requires an API key)
"""

import logging
import os
from datetime import datetime
from typing import Any, Optional

import requests
from dotenv import load_dotenv

from .config import DATA_MODES, DEFAULT_LATITUDE, DEFAULT_LONGITUDE
from .errors import DataFetchError
from .reading import Reading

logger = logging.getLogger(__name__)

WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
AIR_POLLUTION_URL = "https://api.openweathermap.org/data/2.5/air_pollution"

# Sample payloads used in mock mode and as the live-mode fallback. They match
# the provider's response shape and describe a mild, hazy afternoon.
MOCK_WEATHER_PAYLOAD = {
    "weather": [{"id": 721, "description": "haze", "icon": "50d"}],
    "main": {"temp": 26.0, "feels_like": 26.0, "humidity": 48},
    "wind": {"speed": 2.8},
}
MOCK_AIR_POLLUTION_PAYLOAD = {
    "list": [{"components": {"pm2_5": 150.0}}],
}


class OpenWeatherService:
    """
    Provider of weather and air quality readings.

    Mode is selected via the constructor or the WEAAQI_DATA_MODE environment
    variable. If mode is "live" but no API key is available, the service
    falls back to mock behavior. In live mode a failed fetch also falls back
    to the mock sample unless strict is set.
    """

    def __init__(
        self,
        mode: Optional[str] = None,
        api_key: Optional[str] = None,
        latitude: float = DEFAULT_LATITUDE,
        longitude: float = DEFAULT_LONGITUDE,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        strict: bool = False,
    ):
        """
        Initialize the service with a mode and location.

        Args:
            mode: Optional mode override ("mock" or "live"). If None, reads
                  WEAAQI_DATA_MODE. Defaults to "mock" if unset or invalid.
            api_key: OpenWeather key. If None, reads OPENWEATHER_API_KEY,
                     then WEATHER_API_KEY.
            latitude: Location latitude
            longitude: Location longitude
            timeout: Per-request timeout in seconds
            session: Optional requests session (connection reuse, testing)
            strict: If True, live-mode fetch failures raise instead of
                    falling back to mock data
        """
        load_dotenv()

        env_mode = os.getenv("WEAAQI_DATA_MODE", "").lower()
        requested = mode.lower() if mode else env_mode
        self.mode = requested if requested in DATA_MODES else "mock"

        self.api_key = api_key or os.getenv("OPENWEATHER_API_KEY") or os.getenv("WEATHER_API_KEY")
        self.latitude = latitude
        self.longitude = longitude
        self.timeout = timeout
        self.strict = strict
        self._session = session or requests.Session()

        if self.mode == "live" and not self.api_key:
            logger.warning("Live mode requested but OPENWEATHER_API_KEY is not set, falling back to mock mode")
            self.mode = "mock"

    def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        query = {"lat": self.latitude, "lon": self.longitude, "appid": self.api_key, **params}
        try:
            response = self._session.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise DataFetchError(f"OpenWeather request to {url} failed: {e}") from e
        except ValueError as e:
            raise DataFetchError(f"OpenWeather returned invalid JSON from {url}") from e

    def fetch_weather(self) -> dict[str, Any]:
        """
        Fetches current weather in metric units.

        Returns:
            Raw response body

        Raises:
            DataFetchError: On HTTP errors, timeouts or a body without "main"
        """
        if self.mode == "mock":
            return MOCK_WEATHER_PAYLOAD
        payload = self._get_json(WEATHER_URL, {"units": "metric"})
        if not isinstance(payload, dict) or not payload.get("main"):
            raise DataFetchError("Invalid weather data received")
        return payload

    def fetch_air_quality(self) -> dict[str, Any]:
        """
        Fetches current air pollution components.

        Returns:
            Raw response body

        Raises:
            DataFetchError: On HTTP errors, timeouts or a body without list[0]
        """
        if self.mode == "mock":
            return MOCK_AIR_POLLUTION_PAYLOAD
        payload = self._get_json(AIR_POLLUTION_URL, {})
        if not isinstance(payload, dict) or not payload.get("list"):
            raise DataFetchError("Invalid AQI data received")
        return payload

    def get_reading(self, now: Optional[datetime] = None) -> Reading:
        """
        Gets a Reading for the configured location.

        In live mode, provider failures are logged and the mock sample is
        returned so the display keeps rendering; with strict=True the
        DataFetchError propagates instead.

        Args:
            now: Optional timestamp to attach to the reading

        Returns:
            Reading adapted from the provider payloads

        Raises:
            DataFetchError: In strict live mode, if either request fails
        """
        try:
            weather = self.fetch_weather()
            air_quality = self.fetch_air_quality()
        except DataFetchError as e:
            if self.strict:
                raise
            logger.error("Error fetching weather data, using sample data instead: %s", e)
            weather, air_quality = MOCK_WEATHER_PAYLOAD, MOCK_AIR_POLLUTION_PAYLOAD

        return Reading.from_openweather(weather, air_quality, timestamp=now)
