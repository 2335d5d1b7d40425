"""
Action rule tables for the weaaqi dashboard.

This module is the single source of truth for the two ordered rule tables
that drive the recommendations:

- WEATHER_ACTIONS maps temperature, humidity and provider condition code to a
  condition label, an action and an icon key. Order matters: the first
  matching rule wins, so condition-code rules (thunderstorm, snow) must sit
  above the generic temperature bands they overlap.
- AQI_ACTIONS maps a PM2.5 concentration to a severity tier. Tiers are
  ascending by their inclusive upper bound and the last one is unbounded.

Both tables can also be loaded from a YAML file with load_rule_tables(); a
loaded table is validated against the same invariants as the built-in one.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import yaml

from .errors import RuleTableError

# Heat override: hydration advice replaces the AQI action at or above this
# temperature, unless the tier's upper bound exceeds the PM2.5 limit below.
HEAT_OVERRIDE_MIN_TEMP_C = 30
HEAT_OVERRIDE_MAX_TIER_PM25 = 100
HEAT_OVERRIDE_ACTION = "Drink water"
HEAT_OVERRIDE_ICON_KEY = "water"


@dataclass(frozen=True)
class WeatherActionRule:
    """
    One row of the weather action table.

    All bounds are inclusive and None means unbounded. A rule with
    condition_codes set to None accepts any condition code.

    Attributes:
        action: Recommended action text
        condition: Human label for the matched weather situation
        icon_key: Symbolic icon reference resolved by the renderer
        temp_min: Lowest matching temperature in Celsius
        temp_max: Highest matching temperature in Celsius
        humidity_min: Lowest matching relative humidity
        humidity_max: Highest matching relative humidity
        condition_codes: Provider condition codes this rule is restricted to
    """

    action: str
    condition: str
    icon_key: str
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    humidity_min: Optional[float] = None
    humidity_max: Optional[float] = None
    condition_codes: Optional[frozenset] = field(default=None)

    def matches(self, temperature_c: float, humidity_pct: float, condition_code: int) -> bool:
        """Returns True when every bound and the condition-code restriction hold."""
        if self.temp_min is not None and temperature_c < self.temp_min:
            return False
        if self.temp_max is not None and temperature_c > self.temp_max:
            return False
        if self.humidity_min is not None and humidity_pct < self.humidity_min:
            return False
        if self.humidity_max is not None and humidity_pct > self.humidity_max:
            return False
        if self.condition_codes is not None and condition_code not in self.condition_codes:
            return False
        return True

    def is_catch_all(self) -> bool:
        """True when the rule has no effective bound and no code restriction."""
        return (
            _is_unbounded_below(self.temp_min)
            and _is_unbounded_above(self.temp_max)
            and _is_unbounded_below(self.humidity_min)
            and _is_unbounded_above(self.humidity_max)
            and self.condition_codes is None
        )


@dataclass(frozen=True)
class AqiActionRule:
    """
    One severity tier of the PM2.5 table.

    Attributes:
        max: Inclusive upper bound of the tier (math.inf for the last tier)
        status: Severity label, e.g. "GOOD" or "HAZARDOUS"
        action: Recommended action text for this severity
        icon_key: Symbolic icon reference resolved by the renderer
        color: Display color as a hex string
    """

    max: float
    status: str
    action: str
    icon_key: str
    color: str


@dataclass(frozen=True)
class RuleTables:
    """Both ordered rule tables, passed around as one configuration value."""

    weather_actions: tuple
    aqi_actions: tuple


def _is_unbounded_below(value: Optional[float]) -> bool:
    return value is None or value == -math.inf


def _is_unbounded_above(value: Optional[float]) -> bool:
    return value is None or value == math.inf


def _codes(*codes: int) -> frozenset:
    return frozenset(codes)


SNOW_CODES = _codes(511, 600, 601, 602, 611, 612, 613, 615, 616, 620, 621, 622)
CLEAR_OR_CLOUDY_CODES = _codes(800, 801, 802, 803, 804)
THUNDERSTORM_CODES = _codes(200, 201, 202, 210, 211, 212, 221, 230, 231, 232)
HEAVY_RAIN_CODES = _codes(502, 503, 504, 522)
RAIN_DRIZZLE_CODES = _codes(300, 301, 302, 310, 311, 312, 313, 314, 321, 500, 501, 520, 521, 531)
LOW_VISIBILITY_CODES = _codes(701, 711, 721, 741)
SUNNY_CODES = _codes(800, 801)


WEATHER_ACTIONS = (
    WeatherActionRule("Stay warm", "Severe Winter", "cold", temp_max=5, humidity_min=0, condition_codes=SNOW_CODES),
    WeatherActionRule("Stay warm", "Freezing Cold", "cold", temp_max=5, humidity_min=0, condition_codes=CLEAR_OR_CLOUDY_CODES),
    WeatherActionRule("Warm tea", "Cold", "tea", temp_max=10, humidity_min=0),
    WeatherActionRule("Wear layers", "Chilly & Damp", "warm", temp_max=15, humidity_min=70),
    WeatherActionRule("Stay hydrated", "Very Hot", "sunglasses", temp_min=35, humidity_min=50),
    WeatherActionRule("Drink water", "Extreme Humidity", "sunglasses", temp_min=30, humidity_min=75),
    WeatherActionRule("Stay cool", "Very Hot", "sunglasses", temp_min=30, humidity_min=50),
    WeatherActionRule("Hydrate well", "Hot & Dry", "sunglasses", temp_min=30, humidity_max=40),
    WeatherActionRule("Take shelter", "Thunderstorm", "umbrella", condition_codes=THUNDERSTORM_CODES),
    WeatherActionRule("Heavy rain", "Heavy Rain", "umbrella", condition_codes=HEAVY_RAIN_CODES),
    WeatherActionRule("Bring umbrella", "Rain/Drizzle", "umbrella", condition_codes=RAIN_DRIZZLE_CODES),
    WeatherActionRule("Wear mask", "Mist/Fog/Haze", "haze", condition_codes=LOW_VISIBILITY_CODES),
    WeatherActionRule("Great day", "Sunny", "sunglasses", temp_min=25, temp_max=35, humidity_max=40, condition_codes=SUNNY_CODES),
    WeatherActionRule("Enjoy outdoors", "Pleasant & Dry", "sunny", temp_min=15, temp_max=30, humidity_max=40),
    WeatherActionRule("Light walk", "Warm & Humid", "sunny", temp_min=15, temp_max=30, humidity_min=70),
    WeatherActionRule("Perfect weather", "Ideal Comfort", "sunny", temp_min=15, temp_max=30, humidity_min=41, humidity_max=69),
    WeatherActionRule("Check UV", "Clear/Cloudy", "sunny", condition_codes=CLEAR_OR_CLOUDY_CODES),
    WeatherActionRule("Enjoy day", "Comfortable", "sunny"),
)

AQI_ACTIONS = (
    AqiActionRule(12, "GOOD", "Fresh air", "smile", "#00e400"),
    AqiActionRule(35.4, "MODERATE", "Limit exposure", "breeze", "#ffff00"),
    AqiActionRule(55.4, "UNHEALTHY (SG)", "Mask up", "mask", "#ff7e00"),
    AqiActionRule(150.4, "UNHEALTHY", "Wear mask", "mask", "#ff0000"),
    AqiActionRule(250.4, "VERY UNHEALTHY", "Stay indoors", "home", "#8f3f97"),
    AqiActionRule(math.inf, "HAZARDOUS", "Avoid outdoors", "mask", "#7e0023"),
)

DEFAULT_RULE_TABLES = RuleTables(weather_actions=WEATHER_ACTIONS, aqi_actions=AQI_ACTIONS)


def validate_weather_actions(rules: Iterable[WeatherActionRule]) -> None:
    """
    Checks that the weather table is non-empty and ends in a catch-all.

    Raises:
        RuleTableError: If the invariant does not hold
    """
    rules = tuple(rules)
    if not rules:
        raise RuleTableError("weather action table is empty")
    if not rules[-1].is_catch_all():
        raise RuleTableError(
            f"last weather rule ({rules[-1].condition!r}) must be an unbounded catch-all"
        )


def validate_aqi_actions(tiers: Iterable[AqiActionRule]) -> None:
    """
    Checks that AQI tiers partition [0, inf) in strictly increasing order.

    Raises:
        RuleTableError: If the tiers are empty, unordered, start below zero
            or do not end with an unbounded tier
    """
    tiers = tuple(tiers)
    if not tiers:
        raise RuleTableError("AQI tier table is empty")
    if tiers[0].max < 0:
        raise RuleTableError("first AQI tier must have a non-negative upper bound")
    for lower, upper in zip(tiers, tiers[1:]):
        if not upper.max > lower.max:
            raise RuleTableError(
                f"AQI tiers must be strictly increasing: {lower.status!r} ({lower.max}) "
                f"is not below {upper.status!r} ({upper.max})"
            )
    if tiers[-1].max != math.inf:
        raise RuleTableError(f"last AQI tier ({tiers[-1].status!r}) must be unbounded")


def validate_rule_tables(tables: RuleTables) -> RuleTables:
    """Validates both tables and returns them unchanged."""
    validate_weather_actions(tables.weather_actions)
    validate_aqi_actions(tables.aqi_actions)
    return tables


def _optional_number(entry: dict[str, Any], key: str) -> Optional[float]:
    value = entry.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RuleTableError(f"{key} must be a number, got {value!r}")
    return value


def _required_text(entry: dict[str, Any], key: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value:
        raise RuleTableError(f"rule is missing required text field {key!r}: {entry!r}")
    return value


def _weather_rule_from_dict(entry: dict[str, Any]) -> WeatherActionRule:
    if not isinstance(entry, dict):
        raise RuleTableError(f"weather rule must be a mapping, got {entry!r}")
    codes = entry.get("condition_codes")
    if codes is not None:
        if not isinstance(codes, list) or not all(
            isinstance(code, int) and not isinstance(code, bool) for code in codes
        ):
            raise RuleTableError(f"condition_codes must be a list of integers, got {codes!r}")
        codes = frozenset(codes)
    return WeatherActionRule(
        action=_required_text(entry, "action"),
        condition=_required_text(entry, "condition"),
        icon_key=_required_text(entry, "icon_key"),
        temp_min=_optional_number(entry, "temp_min"),
        temp_max=_optional_number(entry, "temp_max"),
        humidity_min=_optional_number(entry, "humidity_min"),
        humidity_max=_optional_number(entry, "humidity_max"),
        condition_codes=codes,
    )


def _aqi_rule_from_dict(entry: dict[str, Any]) -> AqiActionRule:
    if not isinstance(entry, dict):
        raise RuleTableError(f"AQI tier must be a mapping, got {entry!r}")
    upper = _optional_number(entry, "max")
    if upper is None:
        raise RuleTableError(f"AQI tier is missing 'max': {entry!r}")
    return AqiActionRule(
        max=upper,
        status=_required_text(entry, "status"),
        action=_required_text(entry, "action"),
        icon_key=_required_text(entry, "icon_key"),
        color=_required_text(entry, "color"),
    )


def load_rule_tables(path: Union[str, Path]) -> RuleTables:
    """
    Loads both rule tables from a YAML file.

    The file holds two lists, weather_actions and aqi_actions, whose order is
    kept exactly as written. Either list may be omitted, in which case the
    built-in table is used for it. The final AQI tier uses YAML's .inf.

    Args:
        path: Path to the YAML file

    Returns:
        Validated RuleTables

    Raises:
        FileNotFoundError: If the file does not exist
        RuleTableError: If an entry is malformed or an invariant is broken
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rule table file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        document = yaml.safe_load(f) or {}

    if not isinstance(document, dict):
        raise RuleTableError(f"{path} must contain a mapping at the top level")

    weather_entries = document.get("weather_actions")
    aqi_entries = document.get("aqi_actions")

    weather_actions = (
        tuple(_weather_rule_from_dict(entry) for entry in weather_entries)
        if weather_entries is not None
        else WEATHER_ACTIONS
    )
    aqi_actions = (
        tuple(_aqi_rule_from_dict(entry) for entry in aqi_entries)
        if aqi_entries is not None
        else AQI_ACTIONS
    )

    return validate_rule_tables(RuleTables(weather_actions=weather_actions, aqi_actions=aqi_actions))
