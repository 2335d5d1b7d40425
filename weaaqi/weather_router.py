"""
Weather router module for the weaaqi dashboard.

This module contains the WeatherRouter class which selects the weather action
rule for a reading. It scans the ordered rule table from the top and returns
the first rule whose temperature, humidity and condition-code constraints all
hold, so a specific rule placed early (thunderstorm, snow) outranks a generic
temperature band placed later.
"""

import logging
from typing import Iterable, Optional

from .action_rules import WEATHER_ACTIONS, WeatherActionRule, validate_weather_actions

logger = logging.getLogger(__name__)


class WeatherRouter:
    """
    Router for weather-based action recommendations.

    Holds an ordered, immutable table of WeatherActionRule entries whose last
    entry is a catch-all, so resolve_weather_action is a total function over
    finite temperatures, any humidity and any condition code.
    """

    def __init__(self, rules: Optional[Iterable[WeatherActionRule]] = None):
        """
        Initialize the router with a rule table.

        Args:
            rules: Ordered weather rules. Defaults to WEATHER_ACTIONS.

        Raises:
            RuleTableError: If the table is empty or lacks a final catch-all
        """
        self.rules = tuple(rules) if rules is not None else WEATHER_ACTIONS
        validate_weather_actions(self.rules)

    def resolve_weather_action(
        self,
        temperature_c: float,
        humidity_pct: float,
        condition_code: int,
    ) -> WeatherActionRule:
        """
        Selects the weather action rule for the given conditions.

        First match wins. Unknown condition codes and out-of-range humidity
        are valid input; they simply skip the rules that restrict them and
        end up at a later rule or the catch-all.

        Args:
            temperature_c: Temperature in Celsius
            humidity_pct: Relative humidity
            condition_code: Provider weather condition code

        Returns:
            The first matching WeatherActionRule
        """
        for rule in self.rules:
            if rule.matches(temperature_c, humidity_pct, condition_code):
                logger.debug(
                    "Weather rule %r matched (temp=%s, humidity=%s, code=%s)",
                    rule.condition, temperature_c, humidity_pct, condition_code,
                )
                return rule

        # Unreachable with a validated table
        return self.rules[-1]
