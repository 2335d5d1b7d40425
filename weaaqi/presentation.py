"""
Presentation module for the weaaqi dashboard.

This module turns a Reading into the flat set of display strings a renderer
consumes: rounded measurements, the chosen weather condition and action, the
AQI tier with its (possibly heat-adjusted) action, one color, icon keys and a
date/time pair. The clock is injected by the caller, so the same Reading and
the same moment always give the same output.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from .action_rules import AqiActionRule, WeatherActionRule
from .air_quality_router import AirQualityRouter
from .reading import Reading
from .units import format_date, format_time, get_zone, round_half_away
from .weather_router import WeatherRouter

TEXT_CASES = ("upper", "title", "original")

DEFAULT_LOCATION_LABEL = "HANOI, VIETNAM"
DEFAULT_QUOTE = '"A quiet sea never made a skilled sailor."'
DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"


@dataclass(frozen=True)
class PresentationOptions:
    """
    Display policy for the presentation values.

    Attributes:
        text_case: "upper" (default), "title" or "original" casing for the
            condition label and both action texts
        action_word_limit: Keep only the first N words of each action text,
            e.g. 2 for compact displays. None keeps the full text.
        location_label: Location line shown next to the date
        quote: Footer quote
        timezone: IANA zone used for the date and update time
    """

    text_case: str = "upper"
    action_word_limit: Optional[int] = None
    location_label: str = DEFAULT_LOCATION_LABEL
    quote: str = DEFAULT_QUOTE
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self):
        if self.text_case not in TEXT_CASES:
            raise ValueError(f"text_case must be one of {TEXT_CASES}, got {self.text_case!r}")
        if self.action_word_limit is not None and self.action_word_limit < 1:
            raise ValueError("action_word_limit must be >= 1 or None")
        get_zone(self.timezone)

    def apply_case(self, text: str) -> str:
        if self.text_case == "upper":
            return text.upper()
        if self.text_case == "title":
            return text.title()
        return text

    def format_action(self, text: str) -> str:
        """Applies the word limit and then the case policy to an action text."""
        if self.action_word_limit is not None:
            text = " ".join(text.split()[: self.action_word_limit])
        return self.apply_case(text)


@dataclass(frozen=True)
class PresentationValues:
    """
    Display-ready values for one render cycle.

    Every field except heat_override is a string the renderer can place
    directly. Icon keys are symbolic; mapping them to glyphs is the
    renderer's job.
    """

    date: str
    update_time: str
    location: str
    temperature: str
    feels_like: str
    humidity: str
    wind: str
    condition: str
    weather_action: str
    weather_icon_key: str
    aqi: str
    aqi_status: str
    aqi_action: str
    aqi_icon_key: str
    aqi_color: str
    quote: str
    heat_override: bool = False

    def to_dict(self) -> dict[str, object]:
        """Converts the values to a flat, JSON-serializable dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class Classification:
    """
    Outcome of classifying one reading.

    Attributes:
        temperature: Rounded temperature the rules were matched on
        pm25: Rounded PM2.5 the tiers were matched on
        weather_rule: Matched weather action rule
        base_tier: AQI tier before the heat override
        aqi_tier: AQI tier after the heat override
    """

    temperature: int
    pm25: int
    weather_rule: WeatherActionRule
    base_tier: AqiActionRule
    aqi_tier: AqiActionRule

    @property
    def heat_override(self) -> bool:
        return self.aqi_tier is not self.base_tier


def classify_reading(
    reading: Reading,
    weather_router: Optional[WeatherRouter] = None,
    air_router: Optional[AirQualityRouter] = None,
) -> Classification:
    """
    Resolves the weather rule and AQI tier for a reading.

    Temperature and PM2.5 are rounded (half away from zero) before they are
    classified, so the recommendation always agrees with the numbers on the
    display. The heat override is evaluated after the base AQI tier is known,
    using the same rounded temperature as the weather rule. Humidity is
    matched as measured.

    Args:
        reading: Reading to classify; invalid readings raise
        weather_router: Router to use, defaults to the built-in table
        air_router: Router to use, defaults to the built-in tiers

    Returns:
        Classification holding the matched rule and tiers

    Raises:
        InvalidReadingError: If the reading fails validation
    """
    reading.ensure_valid()
    weather_router = weather_router or WeatherRouter()
    air_router = air_router or AirQualityRouter()

    temperature = round_half_away(reading.temperature_c)
    pm25 = round_half_away(reading.pm25)

    base_tier = air_router.resolve_aqi_action(pm25)
    return Classification(
        temperature=temperature,
        pm25=pm25,
        weather_rule=weather_router.resolve_weather_action(temperature, reading.humidity_pct, reading.condition_code),
        base_tier=base_tier,
        aqi_tier=air_router.adjust_for_heat(base_tier, temperature),
    )


def build_presentation(
    reading: Reading,
    now: datetime,
    options: Optional[PresentationOptions] = None,
    weather_router: Optional[WeatherRouter] = None,
    air_router: Optional[AirQualityRouter] = None,
    classification: Optional[Classification] = None,
) -> PresentationValues:
    """
    Builds the presentation values for a reading.

    Args:
        reading: Validated or unvalidated reading; invalid readings raise
        now: Moment used for the date and update time
        options: Display policy, defaults to PresentationOptions()
        weather_router: Router to use, defaults to the built-in table
        air_router: Router to use, defaults to the built-in tiers
        classification: Result of classify_reading for this reading, if the
            caller already has it; the routers are then not consulted

    Returns:
        PresentationValues for the reading

    Raises:
        InvalidReadingError: If the reading fails validation
    """
    if classification is None:
        classification = classify_reading(reading, weather_router, air_router)
    else:
        reading.ensure_valid()
    options = options or PresentationOptions()

    weather_rule = classification.weather_rule
    aqi_tier = classification.aqi_tier

    return PresentationValues(
        date=format_date(now, options.timezone),
        update_time=format_time(now, options.timezone),
        location=options.location_label,
        temperature=str(classification.temperature),
        feels_like=str(round_half_away(reading.apparent_temperature_c)),
        humidity=str(round_half_away(reading.humidity_pct)),
        wind=str(round_half_away(reading.wind_speed_kmh)),
        condition=options.apply_case(weather_rule.condition),
        weather_action=options.format_action(weather_rule.action),
        weather_icon_key=weather_rule.icon_key,
        aqi=str(classification.pm25),
        aqi_status=aqi_tier.status,
        aqi_action=options.format_action(aqi_tier.action),
        aqi_icon_key=aqi_tier.icon_key,
        aqi_color=aqi_tier.color,
        quote=options.quote,
        heat_override=classification.heat_override,
    )
