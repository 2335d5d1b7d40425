"""
Tests for the presentation value builder.

Tests cover:
- End-to-end scenarios: comfortable day, hot and polluted day, snow
- Rounding policy: values are rounded before classification
- Display policy: case and word-limit options
- Determinism: identical input and clock give identical output
- Classification: matched rule and tiers shared with the builder
- Error scenarios: invalid readings fail fast
"""

from datetime import datetime, timezone

import pytest

from weaaqi.action_rules import AQI_ACTIONS, WEATHER_ACTIONS, load_rule_tables
from weaaqi.air_quality_router import AirQualityRouter
from weaaqi.errors import InvalidReadingError
from weaaqi.presentation import PresentationOptions, PresentationValues, build_presentation, classify_reading
from weaaqi.reading import Reading
from weaaqi.weather_router import WeatherRouter


class TestBuildPresentationScenarios:
    """End-to-end scenarios through both resolvers."""

    def test_comfortable_day(self, comfortable_reading, fixed_now):
        """Scenario: 26 C, 48%, clear, PM2.5 15 → Ideal Comfort / MODERATE."""
        values = build_presentation(comfortable_reading, fixed_now)

        assert values.condition == "IDEAL COMFORT"
        assert values.weather_action == "PERFECT WEATHER"
        assert values.weather_icon_key == "sunny"
        assert values.aqi == "15"
        assert values.aqi_status == "MODERATE"
        assert values.aqi_action == "LIMIT EXPOSURE"
        assert values.aqi_icon_key == "breeze"
        assert values.aqi_color == "#ffff00"
        assert values.heat_override is False

    def test_hot_and_polluted_day(self, fixed_now):
        """Scenario: 32 C, PM2.5 40 → UNHEALTHY (SG) with hydration advice."""
        reading = Reading(temperature_c=32, humidity_pct=60, wind_speed_kmh=8, condition_code=801, pm25=40)
        values = build_presentation(reading, fixed_now)

        assert values.condition == "VERY HOT"
        assert values.weather_action == "STAY COOL"
        assert values.aqi_status == "UNHEALTHY (SG)"
        assert values.aqi_action == "DRINK WATER"
        assert values.aqi_icon_key == "water"
        assert values.aqi_color == "#ff7e00"
        assert values.heat_override is True

    def test_snow_outranks_cold_band(self, fixed_now):
        """Scenario: 2 C snow → Severe Winter, not the generic Cold band."""
        reading = Reading(temperature_c=2, humidity_pct=80, wind_speed_kmh=14, condition_code=601, pm25=5)
        values = build_presentation(reading, fixed_now)

        assert values.condition == "SEVERE WINTER"
        assert values.weather_action == "STAY WARM"
        assert values.weather_icon_key == "cold"
        assert values.aqi_status == "GOOD"
        assert values.aqi_action == "FRESH AIR"

    def test_hazardous_air_keeps_advice_when_hot(self, fixed_now):
        """Scenario: 35 C with PM2.5 300 keeps the hazardous advice."""
        reading = Reading(temperature_c=35, humidity_pct=30, wind_speed_kmh=5, condition_code=800, pm25=300)
        values = build_presentation(reading, fixed_now)

        assert values.aqi_status == "HAZARDOUS"
        assert values.aqi_action == "AVOID OUTDOORS"
        assert values.heat_override is False

    # ==================== Display Fields ====================

    def test_display_strings(self, comfortable_reading, fixed_now):
        """Measurements, date, time, location and quote are formatted."""
        values = build_presentation(comfortable_reading, fixed_now)

        assert values.temperature == "26"
        assert values.feels_like == "26"
        assert values.humidity == "48"
        assert values.wind == "10"
        assert values.date == "NOV 24, 2025"
        assert values.update_time == "14:30"
        assert values.location == "HANOI, VIETNAM"
        assert values.quote == '"A quiet sea never made a skilled sailor."'

    def test_feels_like_reported_separately(self, fixed_now):
        """Feels-like temperature is shown when provided."""
        reading = Reading(
            temperature_c=31.2, humidity_pct=70, wind_speed_kmh=9.4,
            condition_code=500, pm25=42.3, feels_like_c=35.6,
        )
        values = build_presentation(reading, fixed_now)
        assert values.temperature == "31"
        assert values.feels_like == "36"
        assert values.wind == "9"
        assert values.aqi == "42"

    def test_to_dict_is_flat(self, comfortable_reading, fixed_now):
        """to_dict exposes every field with plain values."""
        data = build_presentation(comfortable_reading, fixed_now).to_dict()
        assert data["aqi_status"] == "MODERATE"
        assert data["heat_override"] is False
        assert set(data) == set(PresentationValues.__dataclass_fields__)


class TestRoundingPolicy:
    """Rounded values drive classification so display and advice agree."""

    def test_temperature_rounded_up_triggers_heat_override(self, fixed_now):
        """29.5 C displays as 30 and is treated as 30 for the override."""
        reading = Reading(temperature_c=29.5, humidity_pct=60, wind_speed_kmh=5, condition_code=801, pm25=40)
        values = build_presentation(reading, fixed_now)
        assert values.temperature == "30"
        assert values.condition == "VERY HOT"
        assert values.heat_override is True

    def test_temperature_rounded_down_no_override(self, fixed_now):
        """29.4 C displays as 29 and does not trigger the override."""
        reading = Reading(temperature_c=29.4, humidity_pct=60, wind_speed_kmh=5, condition_code=801, pm25=40)
        values = build_presentation(reading, fixed_now)
        assert values.temperature == "29"
        assert values.heat_override is False
        assert values.aqi_action == "MASK UP"

    def test_pm25_rounded_before_classification(self, fixed_now):
        """PM2.5 12.4 is GOOD and 12.5 becomes 13, which is MODERATE."""
        base = dict(temperature_c=20, humidity_pct=50, wind_speed_kmh=5, condition_code=800)
        assert build_presentation(Reading(pm25=12.4, **base), fixed_now).aqi_status == "GOOD"
        assert build_presentation(Reading(pm25=12.5, **base), fixed_now).aqi_status == "MODERATE"

    def test_negative_half_rounds_away_from_zero(self, fixed_now):
        """-2.5 C displays as -3."""
        reading = Reading(temperature_c=-2.5, humidity_pct=50, wind_speed_kmh=0, condition_code=600, pm25=3)
        assert build_presentation(reading, fixed_now).temperature == "-3"


class TestPresentationOptions:
    """Display policy options."""

    def test_two_word_limit(self, fixed_now, epaper_rules_path):
        """Word limit keeps the first two words of long actions."""
        tables = load_rule_tables(epaper_rules_path)
        reading = Reading(temperature_c=26, humidity_pct=48, wind_speed_kmh=10, condition_code=800, pm25=5)
        values = build_presentation(
            reading,
            fixed_now,
            options=PresentationOptions(action_word_limit=2),
            weather_router=WeatherRouter(tables.weather_actions),
            air_router=AirQualityRouter(tables.aqi_actions),
        )
        assert values.weather_action == "PERFECT WEATHER!"
        assert values.aqi_action == "ENJOY THE"
        assert values.condition == "IDEAL COMFORT"

    def test_full_text_by_default(self, fixed_now, epaper_rules_path):
        """Without a word limit the long action is kept whole."""
        tables = load_rule_tables(epaper_rules_path)
        reading = Reading(temperature_c=26, humidity_pct=48, wind_speed_kmh=10, condition_code=800, pm25=5)
        values = build_presentation(
            reading,
            fixed_now,
            weather_router=WeatherRouter(tables.weather_actions),
            air_router=AirQualityRouter(tables.aqi_actions),
        )
        assert values.weather_action == "PERFECT WEATHER! ENJOY!"
        assert values.aqi_color == "#ffc800"

    def test_title_case(self, comfortable_reading, fixed_now):
        """Title case applies to condition and actions, not to the AQI status."""
        values = build_presentation(comfortable_reading, fixed_now, options=PresentationOptions(text_case="title"))
        assert values.condition == "Ideal Comfort"
        assert values.weather_action == "Perfect Weather"
        assert values.aqi_status == "MODERATE"

    def test_original_case(self, comfortable_reading, fixed_now):
        """Original case leaves table text untouched."""
        values = build_presentation(comfortable_reading, fixed_now, options=PresentationOptions(text_case="original"))
        assert values.weather_action == "Perfect weather"
        assert values.aqi_action == "Limit exposure"

    def test_location_quote_and_timezone(self, comfortable_reading, fixed_now):
        """Location, quote and time zone come from the options."""
        options = PresentationOptions(location_label="HANOI, VN", quote="Stay curious.", timezone="UTC")
        values = build_presentation(comfortable_reading, fixed_now, options=options)
        assert values.location == "HANOI, VN"
        assert values.quote == "Stay curious."
        assert values.update_time == "07:30"

    def test_invalid_case_rejected(self):
        """Error scenario: Unknown case policy raises."""
        with pytest.raises(ValueError):
            PresentationOptions(text_case="lower")

    def test_invalid_word_limit_rejected(self):
        """Error scenario: A zero word limit raises."""
        with pytest.raises(ValueError):
            PresentationOptions(action_word_limit=0)

    def test_unknown_timezone_rejected(self):
        """Error scenario: A zone missing from the database raises at construction."""
        with pytest.raises(ValueError, match="Mars/Olympus"):
            PresentationOptions(timezone="Mars/Olympus")


class TestDeterminismAndErrors:
    """Idempotence and fail-fast validation."""

    def test_identical_input_identical_output(self, comfortable_reading, fixed_now):
        """Same reading and clock twice → equal values."""
        first = build_presentation(comfortable_reading, fixed_now)
        second = build_presentation(comfortable_reading, fixed_now)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_clock_only_changes_date_fields(self, comfortable_reading, fixed_now):
        """A different clock changes only the date and time strings."""
        later = datetime(2025, 11, 24, 9, 5, tzinfo=timezone.utc)
        first = build_presentation(comfortable_reading, fixed_now).to_dict()
        second = build_presentation(comfortable_reading, later).to_dict()
        changed = {key for key in first if first[key] != second[key]}
        assert changed == {"update_time"}

    def test_negative_pm25_rejected(self, fixed_now):
        """Error scenario: Negative PM2.5 raises InvalidReadingError."""
        reading = Reading(temperature_c=20, humidity_pct=50, wind_speed_kmh=5, condition_code=800, pm25=-1)
        with pytest.raises(InvalidReadingError, match="pm25"):
            build_presentation(reading, fixed_now)

    def test_nan_temperature_rejected(self, fixed_now):
        """Error scenario: NaN temperature raises InvalidReadingError."""
        reading = Reading(temperature_c=float("nan"), humidity_pct=50, wind_speed_kmh=5, condition_code=800, pm25=5)
        with pytest.raises(InvalidReadingError, match="temperature_c"):
            build_presentation(reading, fixed_now)


class TestClassifyReading:
    """The single classification step shared by the builder and its callers."""

    def test_matched_rule_and_tiers(self, comfortable_reading):
        classification = classify_reading(comfortable_reading)

        assert classification.temperature == 26
        assert classification.pm25 == 15
        assert classification.weather_rule is WEATHER_ACTIONS[15]
        assert classification.base_tier is classification.aqi_tier
        assert classification.heat_override is False

    def test_heat_override_keeps_base_tier(self):
        """The base tier is the table entry; the adjusted tier is a copy."""
        reading = Reading(temperature_c=29.5, humidity_pct=60, wind_speed_kmh=5, condition_code=801, pm25=40)
        classification = classify_reading(reading)

        assert classification.temperature == 30
        assert classification.base_tier in AQI_ACTIONS
        assert classification.base_tier.action == "Mask up"
        assert classification.aqi_tier.action == "Drink water"
        assert classification.heat_override is True

    def test_builder_uses_given_classification(self, comfortable_reading, fixed_now):
        """A precomputed classification drives the values without re-resolving."""
        hot = classify_reading(
            Reading(temperature_c=32, humidity_pct=60, wind_speed_kmh=8, condition_code=801, pm25=40)
        )
        values = build_presentation(comfortable_reading, fixed_now, classification=hot)

        assert values.condition == "VERY HOT"
        assert values.temperature == "32"
        assert values.aqi == "40"
        assert values.humidity == "48"
        assert values.heat_override is True

    def test_builder_and_classification_agree(self, fixed_now):
        """Displayed numbers are the numbers the rules were matched on."""
        reading = Reading(temperature_c=12.5, humidity_pct=72.4, wind_speed_kmh=3, condition_code=804, pm25=35.45)
        classification = classify_reading(reading)
        values = build_presentation(reading, fixed_now)

        assert values.temperature == str(classification.temperature) == "13"
        assert values.aqi == str(classification.pm25) == "35"
        assert values.condition == classification.weather_rule.condition.upper()
        assert values.aqi_status == classification.base_tier.status == "MODERATE"

    def test_invalid_reading_with_classification(self, comfortable_reading, fixed_now):
        """Error scenario: A precomputed classification does not skip validation."""
        classification = classify_reading(comfortable_reading)
        bad = Reading(temperature_c=20, humidity_pct=50, wind_speed_kmh=5, condition_code=800, pm25=-1)
        with pytest.raises(InvalidReadingError):
            build_presentation(bad, fixed_now, classification=classification)
