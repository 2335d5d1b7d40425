"""
Unit conversion and formatting helpers for the weaaqi dashboard.

All numbers shown on the display go through round_half_away so that the
temperature, wind and PM2.5 values agree with the values used for rule
matching. Date and time strings are rendered in the display time zone.
"""

import math
from datetime import datetime, timezone, tzinfo
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

MS_TO_KMH = 3.6

MONTH_ABBREVIATIONS = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)


def kmh_from_ms(speed_ms: float) -> float:
    """Converts a wind speed from metres per second to kilometres per hour."""
    return speed_ms * MS_TO_KMH


def round_half_away(value: float) -> int:
    """
    Rounds to the nearest integer, sending halves away from zero.

    Python's built-in round() uses banker's rounding (2.5 -> 2), which would
    make 29.5 degrees display as 30 in one place and classify as 29 in
    another. This helper is the single rounding policy for the project.

    Args:
        value: Finite number to round

    Returns:
        Nearest integer; 2.5 -> 3 and -2.5 -> -3
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def get_zone(name: str) -> ZoneInfo:
    """
    Looks up an IANA time zone by name.

    Raises:
        ValueError: If the name is malformed or not in the zone database
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ValueError(f"unknown time zone {name!r}") from e


def _localize(moment: datetime, tz: Union[str, tzinfo]) -> datetime:
    zone = get_zone(tz) if isinstance(tz, str) else tz
    if moment.tzinfo is None:
        # Naive datetimes are treated as UTC
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(zone)


def format_date(moment: datetime, tz: Union[str, tzinfo] = "UTC") -> str:
    """
    Formats a moment as an upper-case short date, e.g. "OCT 19, 2026".

    Args:
        moment: The instant to format (naive values are read as UTC)
        tz: IANA zone name or tzinfo used for the calendar date

    Returns:
        Date string with abbreviated month, unpadded day and 4-digit year
    """
    local = _localize(moment, tz)
    return f"{MONTH_ABBREVIATIONS[local.month - 1]} {local.day}, {local.year}"


def format_time(moment: datetime, tz: Union[str, tzinfo] = "UTC") -> str:
    """Formats a moment as 24-hour "HH:MM" in the given zone."""
    local = _localize(moment, tz)
    return f"{local.hour:02d}:{local.minute:02d}"
