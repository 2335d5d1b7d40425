"""
Dashboard system module for the weaaqi dashboard.

This module contains the DashboardSystem class, the orchestrator that
connects the data service to the decision engine. It fetches a reading,
resolves the weather and air quality recommendations, builds the
presentation values and keeps a human-readable log of each refresh.

Refreshes are throttled to the configured interval (15 minutes by default):
repeated calls inside the window return the last computed result without
contacting the provider again. Only the most recent result is retained.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .air_quality_router import AirQualityRouter
from .config import DashboardConfig
from .log_entry import LogEntry
from .openweather_service import OpenWeatherService
from .presentation import Classification, PresentationValues, build_presentation, classify_reading
from .reading import Reading
from .weather_router import WeatherRouter

logger = logging.getLogger(__name__)


class DashboardSystem:
    """
    Orchestrator for one dashboard location.

    Owns the routers built from the configured rule tables and the display
    options, both derived once from the DashboardConfig given at
    construction.
    """

    LOG_DIR = Path("logs")
    LOG_FILE = LOG_DIR / "dashboard_log.log"

    def __init__(self, config: Optional[DashboardConfig] = None):
        """
        Initialize the system from a configuration value.

        Args:
            config: Dashboard settings, defaults to DashboardConfig()

        Raises:
            RuleTableError: If the configured rule tables are invalid
            FileNotFoundError: If config.rules_path does not exist
        """
        self.config = config or DashboardConfig()
        tables = self.config.rule_tables()
        self.weather_router = WeatherRouter(tables.weather_actions)
        self.air_router = AirQualityRouter(tables.aqi_actions)
        self.options = self.config.presentation_options()

        self._last_computation_time: Optional[datetime] = None
        self._last_result: Optional[tuple[PresentationValues, LogEntry]] = None

    def clear_cache(self) -> None:
        """Clear the refresh cache to force the next refresh to fetch."""
        self._last_computation_time = None
        self._last_result = None

    def _ensure_log_file_exists(self) -> None:
        """Create the log directory and header if needed."""
        self.LOG_DIR.mkdir(parents=True, exist_ok=True)

        if not self.LOG_FILE.exists():
            with open(self.LOG_FILE, "w", encoding="utf-8") as f:
                f.write("# Weather & AQI Dashboard Log\n")
                f.write("# Format: [TIMESTAMP] TEMP | CONDITION | ACTION | AQI | STATUS | AQI ACTION | REUSED\n")
                f.write("# " + "=" * 80 + "\n\n")

    def _log_refresh(self, log_entry: LogEntry, result_reused: bool = False) -> None:
        """
        Append one refresh to the persistent log file.

        Args:
            log_entry: The log entry describing the refresh
            result_reused: True if the result came from the refresh window
        """
        values = log_entry.presentation
        heat = " (heat)" if values.heat_override else ""
        reused_str = "[REUSED]" if result_reused else "[NEW]"

        try:
            self._ensure_log_file_exists()
            with open(self.LOG_FILE, "a", encoding="utf-8") as f:
                timestamp_str = log_entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
                f.write(
                    f"[{timestamp_str}] {values.temperature:>3s} C | "
                    f"{values.condition:20s} | "
                    f"{values.weather_action:16s} | "
                    f"PM2.5 {values.aqi:>4s} | "
                    f"{values.aqi_status:15s} | "
                    f"{values.aqi_action}{heat} | "
                    f"{reused_str}\n"
                )
        except OSError as e:
            logger.warning("Could not write dashboard log %s: %s", self.LOG_FILE, e)

    def classify(self, reading: Reading) -> Classification:
        """
        Classifies a reading with this system's rule tables.

        Raises:
            InvalidReadingError: If the reading fails validation
        """
        return classify_reading(reading, self.weather_router, self.air_router)

    def evaluate(self, reading: Reading, now: datetime, data_mode: str = "manual") -> tuple[PresentationValues, LogEntry]:
        """
        Evaluates a reading without throttling.

        Args:
            reading: The reading to evaluate
            now: Moment used for the display date and time
            data_mode: Label recorded in the log entry details

        Returns:
            A tuple containing:
            - PresentationValues: Values for the renderer
            - LogEntry: Complete log record of the evaluation

        Raises:
            InvalidReadingError: If the reading fails validation
        """
        classification = self.classify(reading)
        values = build_presentation(reading, now, options=self.options, classification=classification)
        weather_rule = classification.weather_rule
        base_tier = classification.base_tier

        log_entry = LogEntry(
            timestamp=now,
            reading=reading,
            presentation=values,
            details={
                "weather_condition": weather_rule.condition,
                "weather_action": weather_rule.action,
                "aqi_status": base_tier.status,
                "aqi_base_action": base_tier.action,
                "heat_override": str(values.heat_override),
                "data_mode": data_mode,
            },
        )
        return (values, log_entry)

    def refresh(
        self,
        data_service: OpenWeatherService,
        now: Optional[datetime] = None,
        enable_persistent_logging: bool = False,
    ) -> tuple[PresentationValues, LogEntry]:
        """
        Fetches a reading and computes the presentation values.

        If called within refresh_interval_seconds of the last refresh, the
        cached result is returned and the provider is not contacted.

        Args:
            data_service: Source of readings
            now: Current time; defaults to the wall clock (UTC)
            enable_persistent_logging: If True, append the refresh to the log file

        Returns:
            A tuple containing:
            - PresentationValues: Values for the renderer
            - LogEntry: Complete log record of the refresh
        """
        now = now or datetime.now(timezone.utc)

        if (self._last_computation_time is not None and
                self._last_result is not None and
                (now - self._last_computation_time).total_seconds() < self.config.refresh_interval_seconds):
            logger.debug("Refresh within %ss window, reusing last result", self.config.refresh_interval_seconds)
            if enable_persistent_logging:
                self._log_refresh(self._last_result[1], result_reused=True)
            return self._last_result

        reading = data_service.get_reading(now)
        values, log_entry = self.evaluate(reading, now, data_mode=data_service.mode)
        logger.info(
            "Refreshed: %s C %s / PM2.5 %s %s -> %s | %s",
            values.temperature, values.condition, values.aqi, values.aqi_status,
            values.weather_action, values.aqi_action,
        )

        self._last_computation_time = now
        self._last_result = (values, log_entry)

        if enable_persistent_logging:
            self._log_refresh(log_entry, result_reused=False)

        return (values, log_entry)
