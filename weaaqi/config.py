"""
Configuration loading for the weaaqi dashboard.

Settings come from the environment (optionally populated from a .env file via
python-dotenv) and are collected into an immutable DashboardConfig that is
passed to the orchestrator at construction. Nothing in the package reads the
environment after that point.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

from dotenv import load_dotenv

from .action_rules import DEFAULT_RULE_TABLES, RuleTables, load_rule_tables
from .errors import ConfigError
from .presentation import (
    DEFAULT_LOCATION_LABEL,
    DEFAULT_QUOTE,
    DEFAULT_TIMEZONE,
    TEXT_CASES,
    PresentationOptions,
)
from .units import get_zone

T = TypeVar("T")

DATA_MODES = ("mock", "live")

# Hanoi, Vietnam
DEFAULT_LATITUDE = 21.0285
DEFAULT_LONGITUDE = 105.8542

# Matches the 15-minute regeneration cadence of the display
DEFAULT_REFRESH_INTERVAL_SECONDS = 15 * 60


@dataclass(frozen=True)
class DashboardConfig:
    """
    Immutable settings for one dashboard instance.

    Attributes:
        latitude: Location latitude sent to the provider
        longitude: Location longitude sent to the provider
        location_label: Location line on the display
        quote: Footer quote on the display
        timezone: IANA zone for the date and update time
        refresh_interval_seconds: Minimum time between provider fetches
        data_mode: "mock" (offline sample data) or "live" (OpenWeather)
        api_key: OpenWeather API key, required for live mode
        rules_path: Optional YAML file replacing the built-in rule tables
        action_word_limit: Optional word limit for action texts
        text_case: Case policy for labels and actions
        log_level: Logging level name
        output_dir: Directory the generator writes to
    """

    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE
    location_label: str = DEFAULT_LOCATION_LABEL
    quote: str = DEFAULT_QUOTE
    timezone: str = DEFAULT_TIMEZONE
    refresh_interval_seconds: int = DEFAULT_REFRESH_INTERVAL_SECONDS
    data_mode: str = "mock"
    api_key: Optional[str] = None
    rules_path: Optional[Path] = None
    action_word_limit: Optional[int] = None
    text_case: str = "upper"
    log_level: str = "INFO"
    output_dir: Path = Path("dist")

    def presentation_options(self) -> PresentationOptions:
        """Display policy derived from this configuration."""
        return PresentationOptions(
            text_case=self.text_case,
            action_word_limit=self.action_word_limit,
            location_label=self.location_label,
            quote=self.quote,
            timezone=self.timezone,
        )

    def rule_tables(self) -> RuleTables:
        """Rule tables from rules_path, or the built-in tables if unset."""
        if self.rules_path is None:
            return DEFAULT_RULE_TABLES
        return load_rule_tables(self.rules_path)


def _env(name: str, parse: Callable[[str], T], default: T) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name}={raw!r} is not valid: {e}") from e


def _choice(options: tuple) -> Callable[[str], str]:
    def parse(value: str) -> str:
        value = value.lower()
        if value not in options:
            raise ValueError(f"expected one of {options}")
        return value
    return parse


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise ValueError("must be >= 1")
    return number


def _timezone(value: str) -> str:
    get_zone(value)
    return value


def load_config(env_file: Optional[Union[str, Path]] = None) -> DashboardConfig:
    """
    Builds a DashboardConfig from environment variables.

    A .env file is loaded first (the given env_file, or the nearest .env
    found by python-dotenv); variables already set in the environment win.

    Recognised variables: WEAAQI_LAT, WEAAQI_LON, WEAAQI_LOCATION,
    WEAAQI_QUOTE, WEAAQI_TIMEZONE, WEAAQI_REFRESH_SECONDS, WEAAQI_DATA_MODE,
    WEAAQI_RULES_PATH, WEAAQI_ACTION_WORDS, WEAAQI_TEXT_CASE,
    WEAAQI_LOG_LEVEL, WEAAQI_OUTPUT_DIR, and OPENWEATHER_API_KEY (or the
    older WEATHER_API_KEY) for the provider key.

    Args:
        env_file: Optional path to a .env file

    Returns:
        DashboardConfig

    Raises:
        ConfigError: If a variable is present but cannot be parsed
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    api_key = os.getenv("OPENWEATHER_API_KEY") or os.getenv("WEATHER_API_KEY") or None
    rules_path = _env("WEAAQI_RULES_PATH", Path, None)

    return DashboardConfig(
        latitude=_env("WEAAQI_LAT", float, DEFAULT_LATITUDE),
        longitude=_env("WEAAQI_LON", float, DEFAULT_LONGITUDE),
        location_label=_env("WEAAQI_LOCATION", str, DEFAULT_LOCATION_LABEL),
        quote=_env("WEAAQI_QUOTE", str, DEFAULT_QUOTE),
        timezone=_env("WEAAQI_TIMEZONE", _timezone, DEFAULT_TIMEZONE),
        refresh_interval_seconds=_env("WEAAQI_REFRESH_SECONDS", _positive_int, DEFAULT_REFRESH_INTERVAL_SECONDS),
        data_mode=_env("WEAAQI_DATA_MODE", _choice(DATA_MODES), "mock"),
        api_key=api_key,
        rules_path=rules_path,
        action_word_limit=_env("WEAAQI_ACTION_WORDS", _positive_int, None),
        text_case=_env("WEAAQI_TEXT_CASE", _choice(TEXT_CASES), "upper"),
        log_level=_env("WEAAQI_LOG_LEVEL", str.upper, "INFO"),
        output_dir=_env("WEAAQI_OUTPUT_DIR", Path, Path("dist")),
    )
