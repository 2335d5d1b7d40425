"""
Reading module for the weaaqi dashboard.

This module defines the Reading dataclass, one snapshot of weather and air
quality measurements for the configured location, together with the adapter
that builds a Reading from the OpenWeather response shape. Validation follows
a fail-fast policy: a Reading that reaches the resolvers must be finite and
have a non-negative PM2.5 concentration.
"""

import math
import numbers
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .errors import InvalidReadingError
from .units import kmh_from_ms

# OpenWeather "clear sky", used when the provider omits the condition code
DEFAULT_CONDITION_CODE = 800


@dataclass(frozen=True)
class Reading:
    """
    Represents one weather and air quality snapshot.

    Required fields are temperature, humidity, wind speed, condition code and
    PM2.5. Feels-like temperature and the provider's description are only
    used for display.

    Attributes:
        temperature_c: Ambient temperature in Celsius
        humidity_pct: Relative humidity, normally 0-100
        wind_speed_kmh: Wind speed in km/h (must be >= 0)
        condition_code: Provider weather condition identifier
        pm25: Fine particulate concentration in ug/m3 (must be >= 0)
        feels_like_c: Apparent temperature, defaults to temperature_c
        description: Provider condition text
        timestamp: Optional time the data was captured
    """

    temperature_c: float
    humidity_pct: float
    wind_speed_kmh: float
    condition_code: int
    pm25: float
    feels_like_c: Optional[float] = None
    description: str = "UNKNOWN"
    timestamp: Optional[datetime] = None

    @property
    def apparent_temperature_c(self) -> float:
        """Feels-like temperature, falling back to the measured temperature."""
        if self.feels_like_c is None:
            return self.temperature_c
        return self.feels_like_c

    def validate(self) -> tuple[bool, Optional[str]]:
        """
        Validates the reading against the domain the resolvers assume.

        Checks:
        - condition_code must be an integer
        - temperature, humidity, wind, pm25 and feels-like must be finite
        - pm25 must be non-negative
        - wind_speed_kmh must be non-negative

        Humidity outside 0-100 is accepted; such readings simply do not
        match humidity-bounded rules.

        Returns:
            A tuple containing:
            - bool: True if all validations pass, False otherwise
            - Optional[str]: None if valid, or a descriptive error message if invalid
        """
        if isinstance(self.condition_code, bool) or not isinstance(self.condition_code, numbers.Integral):
            return (False, "condition_code must be an integer")

        numeric_fields = {
            "temperature_c": self.temperature_c,
            "humidity_pct": self.humidity_pct,
            "wind_speed_kmh": self.wind_speed_kmh,
            "pm25": self.pm25,
        }
        if self.feels_like_c is not None:
            numeric_fields["feels_like_c"] = self.feels_like_c

        for name, value in numeric_fields.items():
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                return (False, f"{name} must be a number")
            if not math.isfinite(value):
                return (False, f"{name} must be finite")

        if self.pm25 < 0:
            return (False, "pm25 must be >= 0")

        if self.wind_speed_kmh < 0:
            return (False, "wind_speed_kmh must be >= 0")

        return (True, None)

    def ensure_valid(self) -> "Reading":
        """
        Raises InvalidReadingError if the reading fails validation.

        Returns:
            The reading itself, so calls can be chained
        """
        valid, reason = self.validate()
        if not valid:
            raise InvalidReadingError(f"Invalid reading: {reason}")
        return self

    def to_dict(self) -> dict[str, object]:
        """Converts the reading to a JSON-serializable dictionary."""
        return {
            "temperature_c": self.temperature_c,
            "feels_like_c": self.feels_like_c,
            "humidity_pct": self.humidity_pct,
            "wind_speed_kmh": self.wind_speed_kmh,
            "condition_code": self.condition_code,
            "description": self.description,
            "pm25": self.pm25,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    @classmethod
    def from_openweather(
        cls,
        weather: dict[str, Any],
        air_quality: dict[str, Any],
        timestamp: Optional[datetime] = None,
    ) -> "Reading":
        """
        Builds a Reading from OpenWeather current-weather and air-pollution payloads.

        Missing or null fields fall back to the dashboard defaults: 0 for
        temperature, humidity, wind and PM2.5, the measured temperature for
        feels-like, clear sky (800) for the condition code and "UNKNOWN" for
        the description. Wind arrives in m/s and is converted to km/h.

        Args:
            weather: Body of /data/2.5/weather (metric units)
            air_quality: Body of /data/2.5/air_pollution
            timestamp: Optional capture time to attach

        Returns:
            Reading built from the two payloads
        """
        main = weather.get("main") or {}
        wind = weather.get("wind") or {}
        conditions = weather.get("weather") or [{}]
        condition = conditions[0] or {}

        samples = air_quality.get("list") or [{}]
        components = (samples[0] or {}).get("components") or {}

        temperature = main.get("temp") or 0
        feels_like = main.get("feels_like")
        if feels_like is None:
            feels_like = temperature

        description = condition.get("description")

        return cls(
            temperature_c=temperature,
            humidity_pct=main.get("humidity") or 0,
            wind_speed_kmh=kmh_from_ms(wind.get("speed") or 0),
            condition_code=condition.get("id") or DEFAULT_CONDITION_CODE,
            pm25=components.get("pm2_5") or 0,
            feels_like_c=feels_like,
            description=description.upper() if description else "UNKNOWN",
            timestamp=timestamp,
        )
