"""
Air quality router module for the weaaqi dashboard.

This module contains the AirQualityRouter class which classifies a PM2.5
concentration into a severity tier and applies the heat override: on hot
days hydration advice replaces the advice of tiers bounded at 100 ug/m3 or
below, while the more severe tiers keep their own action.
"""

import dataclasses
import logging
import math
import numbers
from typing import Iterable, Optional

from .action_rules import (
    AQI_ACTIONS,
    HEAT_OVERRIDE_ACTION,
    HEAT_OVERRIDE_ICON_KEY,
    HEAT_OVERRIDE_MAX_TIER_PM25,
    HEAT_OVERRIDE_MIN_TEMP_C,
    AqiActionRule,
    validate_aqi_actions,
)
from .errors import InvalidReadingError

logger = logging.getLogger(__name__)


class AirQualityRouter:
    """
    Classifier for PM2.5 severity tiers with a heat adjustment step.

    Tiers are ascending by inclusive upper bound and the last tier is
    unbounded, so every non-negative concentration resolves to exactly one
    tier. Negative or non-finite concentrations are rejected rather than
    clamped.
    """

    def __init__(self, tiers: Optional[Iterable[AqiActionRule]] = None):
        """
        Initialize the router with a tier table.

        Args:
            tiers: Ordered AQI tiers. Defaults to AQI_ACTIONS.

        Raises:
            RuleTableError: If the tiers do not partition [0, inf)
        """
        self.tiers = tuple(tiers) if tiers is not None else AQI_ACTIONS
        validate_aqi_actions(self.tiers)

    def resolve_aqi_action(self, pm25: float) -> AqiActionRule:
        """
        Selects the severity tier for a PM2.5 concentration.

        Args:
            pm25: Concentration in ug/m3 (must be finite and >= 0)

        Returns:
            The first tier whose max is >= pm25

        Raises:
            InvalidReadingError: If pm25 is negative or not finite
        """
        if isinstance(pm25, bool) or not isinstance(pm25, numbers.Real) or math.isnan(pm25):
            raise InvalidReadingError(f"pm25 must be a number, got {pm25!r}")
        if pm25 < 0:
            raise InvalidReadingError(f"pm25 must be >= 0, got {pm25}")
        if math.isinf(pm25):
            raise InvalidReadingError("pm25 must be finite")

        for tier in self.tiers:
            if pm25 <= tier.max:
                return tier

        # Unreachable with a validated table
        return self.tiers[-1]

    @staticmethod
    def is_heat_override(tier: AqiActionRule, temperature_c: float) -> bool:
        """
        Determines whether hydration advice should replace the tier's action.

        Returns:
            True if temperature_c >= 30 and the tier's max is <= 100
        """
        return temperature_c >= HEAT_OVERRIDE_MIN_TEMP_C and tier.max <= HEAT_OVERRIDE_MAX_TIER_PM25

    def adjust_for_heat(self, tier: AqiActionRule, temperature_c: float) -> AqiActionRule:
        """
        Applies the heat override to a resolved tier.

        The override swaps only the action text and icon key; status, color
        and bounds stay those of the tier so the severity display is never
        softened.

        Args:
            tier: Tier returned by resolve_aqi_action
            temperature_c: Temperature used for the decision

        Returns:
            A copy with hydration advice if the override applies, otherwise
            the tier itself
        """
        if not self.is_heat_override(tier, temperature_c):
            return tier

        logger.debug("Heat override applied to tier %r at %s C", tier.status, temperature_c)
        return dataclasses.replace(tier, action=HEAT_OVERRIDE_ACTION, icon_key=HEAT_OVERRIDE_ICON_KEY)
