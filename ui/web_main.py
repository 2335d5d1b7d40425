"""
Web UI module for the weaaqi dashboard.

This module provides a Streamlit-based preview of the dashboard decision
engine. Supports three modes: Manual input (testing), Simulation case (demo
scenarios), and Live mode (provider data with periodic refresh). It shows the
values handed to the renderer and the rule tables with the matched rows
highlighted; it does not reproduce the 800x480 display layout.
"""

import sys
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Dict, List

# Add project root to Python path to enable imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pandas as pd
import streamlit as st
from streamlit_autorefresh import st_autorefresh

from weaaqi.config import load_config
from weaaqi.dashboard_system import DashboardSystem
from weaaqi.errors import ConfigError, DataFetchError, InvalidReadingError, RuleTableError
from weaaqi.log_setup import setup_logging
from weaaqi.openweather_service import OpenWeatherService
from weaaqi.reading import Reading


SCENARIOS: Dict[str, Dict[str, Any]] = {
    "Ideal comfort": {"temp": 26.0, "humidity": 48, "wind": 10.0, "code": 800, "pm25": 15.0},
    "Hot & polluted": {"temp": 32.0, "humidity": 60, "wind": 8.0, "code": 801, "pm25": 40.0},
    "Snow": {"temp": 2.0, "humidity": 80, "wind": 14.0, "code": 601, "pm25": 5.0},
    "Thunderstorm": {"temp": 28.0, "humidity": 85, "wind": 30.0, "code": 211, "pm25": 20.0},
    "Hazardous haze": {"temp": 18.0, "humidity": 65, "wind": 3.0, "code": 721, "pm25": 300.0},
}


# Initialize session state for the live log and the system instance
if "live_mode_log" not in st.session_state:
    st.session_state.live_mode_log: List[Dict[str, Any]] = []

if "dashboard_system" not in st.session_state:
    try:
        st.session_state.dashboard_config = load_config()
        setup_logging(st.session_state.dashboard_config.log_level)
        st.session_state.dashboard_system = DashboardSystem(st.session_state.dashboard_config)
    except (ConfigError, RuleTableError, FileNotFoundError) as e:
        st.error(f"Configuration error: {e}")
        st.stop()


def weather_rules_frame(system: DashboardSystem, matched_rule: Any) -> pd.DataFrame:
    """Builds a DataFrame of the weather table, flagging the matched rule."""
    rows = []
    for position, rule in enumerate(system.weather_router.rules, start=1):
        rows.append({
            "#": position,
            "Condition": rule.condition,
            "Action": rule.action,
            "Temp": f"{rule.temp_min if rule.temp_min is not None else '-'} .. {rule.temp_max if rule.temp_max is not None else '-'}",
            "Humidity": f"{rule.humidity_min if rule.humidity_min is not None else '-'} .. {rule.humidity_max if rule.humidity_max is not None else '-'}",
            "Codes": ", ".join(str(code) for code in sorted(rule.condition_codes)) if rule.condition_codes else "any",
            "Icon": rule.icon_key,
            "Matched": rule is matched_rule,
        })
    return pd.DataFrame(rows)


def aqi_tiers_frame(system: DashboardSystem, matched_tier: Any) -> pd.DataFrame:
    """Builds a DataFrame of the AQI tiers, flagging the matched tier."""
    return pd.DataFrame([
        {
            "Max PM2.5": tier.max,
            "Status": tier.status,
            "Action": tier.action,
            "Icon": tier.icon_key,
            "Color": tier.color,
            "Matched": tier is matched_tier,
        }
        for tier in system.air_router.tiers
    ])


def highlight_matched(row: pd.Series) -> List[str]:
    style = "background-color: #ffc800; color: #000000" if row["Matched"] else ""
    return [style] * len(row)


def main() -> None:
    """
    Main function that runs the Streamlit web interface.

    Sets up the page layout, handles the three modes, evaluates the reading
    through the DashboardSystem and displays the presentation values.
    """
    st.set_page_config(page_title="Weather & AQI Dashboard", layout="wide")
    st.title("Weather & AQI Dashboard")

    system: DashboardSystem = st.session_state.dashboard_system
    config = st.session_state.dashboard_config

    mode = st.sidebar.selectbox(
        "Mode",
        ["Manual input", "Simulation case", "Live mode"],
        help="Choose mode: Manual input (testing), Simulation case (demo), or Live mode (provider data)"
    )

    if st.sidebar.button("Clear Cache", help="Clear the refresh cache to force a new fetch"):
        system.clear_cache()
        st.sidebar.success("Cache cleared")

    if mode == "Live mode":
        st_autorefresh(interval=config.refresh_interval_seconds * 1000, limit=None, key="live_refresh")
        st.sidebar.info(f"🔄 Live mode active: Updates every {config.refresh_interval_seconds // 60} minutes")

    left_col, right_col = st.columns(2)
    now = datetime.now(timezone.utc)

    with left_col:
        st.header("Readings")

        if mode == "Manual input":
            reading = Reading(
                temperature_c=st.slider("Temperature (°C)", min_value=-50.0, max_value=60.0, value=26.0, step=0.1),
                humidity_pct=st.slider("Humidity (%)", min_value=0, max_value=100, value=48),
                wind_speed_kmh=st.slider("Wind (km/h)", min_value=0.0, max_value=150.0, value=10.0, step=0.5),
                condition_code=int(st.number_input("Condition code", min_value=200, max_value=804, value=800, step=1)),
                pm25=st.slider("PM2.5 (µg/m³)", min_value=0.0, max_value=500.0, value=15.0, step=0.1),
            )
            try:
                values, log_entry = system.evaluate(reading, now)
            except InvalidReadingError as e:
                st.error(str(e))
                return
        elif mode == "Simulation case":
            scenario = st.selectbox("Select scenario", list(SCENARIOS))
            selected = SCENARIOS[scenario]
            reading = Reading(
                temperature_c=selected["temp"],
                humidity_pct=selected["humidity"],
                wind_speed_kmh=selected["wind"],
                condition_code=selected["code"],
                pm25=selected["pm25"],
            )
            st.caption("Scenario values:")
            st.text(f"Temperature: {reading.temperature_c} °C")
            st.text(f"Humidity: {reading.humidity_pct} %")
            st.text(f"Wind: {reading.wind_speed_kmh} km/h")
            st.text(f"Condition code: {reading.condition_code}")
            st.text(f"PM2.5: {reading.pm25} µg/m³")
            values, log_entry = system.evaluate(reading, now)
        else:  # Live mode
            service = OpenWeatherService(
                mode=config.data_mode,
                api_key=config.api_key,
                latitude=config.latitude,
                longitude=config.longitude,
            )
            if service.mode == "mock":
                st.info("📡 Live mode is using sample data (set OPENWEATHER_API_KEY and WEAAQI_DATA_MODE=live for provider data).")
            try:
                values, log_entry = system.refresh(service, now=now, enable_persistent_logging=True)
            except (InvalidReadingError, DataFetchError) as e:
                st.error(str(e))
                return
            reading = log_entry.reading

            st.subheader("Current Readings")
            st.write(f"**Temperature:** {reading.temperature_c} °C (feels like {reading.apparent_temperature_c} °C)")
            st.write(f"**Humidity:** {reading.humidity_pct} %")
            st.write(f"**Wind:** {reading.wind_speed_kmh:.1f} km/h")
            st.write(f"**Condition:** {reading.description} ({reading.condition_code})")
            st.write(f"**PM2.5:** {reading.pm25} µg/m³")

            if (not st.session_state.live_mode_log or
                    st.session_state.live_mode_log[-1]["timestamp"] != log_entry.timestamp):
                st.session_state.live_mode_log.append({
                    "timestamp": log_entry.timestamp,
                    "temperature": values.temperature,
                    "condition": values.condition,
                    "aqi": values.aqi,
                    "status": values.aqi_status,
                })
                # Keep only last 20 entries
                if len(st.session_state.live_mode_log) > 20:
                    st.session_state.live_mode_log.pop(0)

    with right_col:
        st.header("Display Values")
        st.caption(f"{values.date} | {values.location} · updated {values.update_time}")

        temp_col, feels_col, humidity_col, wind_col = st.columns(4)
        temp_col.metric("🌡️ Temp (°C)", values.temperature)
        feels_col.metric("Feels like", values.feels_like)
        humidity_col.metric("💧 Humidity (%)", values.humidity)
        wind_col.metric("🌬️ Wind (km/h)", values.wind)

        st.subheader(values.condition)
        st.write(f"**{values.weather_action}** · icon `{values.weather_icon_key}`")

        st.markdown(
            f"<div style='padding:0.5rem 1rem;border-radius:6px;background:{values.aqi_color};color:#000'>"
            f"PM2.5 <b>{values.aqi}</b> · {values.aqi_status}</div>",
            unsafe_allow_html=True,
        )
        st.write(f"**{values.aqi_action}** · icon `{values.aqi_icon_key}`")

        if values.heat_override:
            st.warning("Heat override active: hydration advice replaces the AQI action.")

        st.caption(values.quote)

        with st.expander("🧠 Matched rules", expanded=False):
            classification = system.classify(reading)
            st.write(f"- Temperature used for matching: {classification.temperature} °C")
            st.write(f"- PM2.5 used for matching: {classification.pm25}")
            st.dataframe(
                weather_rules_frame(system, classification.weather_rule).style.apply(highlight_matched, axis=1),
                use_container_width=True,
            )
            st.dataframe(
                aqi_tiers_frame(system, classification.base_tier).style.apply(highlight_matched, axis=1),
                use_container_width=True,
            )

        if mode == "Live mode" and st.session_state.live_mode_log:
            st.divider()
            st.subheader("Recent Refreshes (Live Mode)")
            table = pd.DataFrame([
                {
                    "Timestamp": entry["timestamp"].strftime("%H:%M:%S"),
                    "Temp (°C)": entry["temperature"],
                    "Condition": entry["condition"],
                    "PM2.5": entry["aqi"],
                    "Status": entry["status"],
                }
                for entry in reversed(st.session_state.live_mode_log[-10:])
            ])
            st.dataframe(table, use_container_width=True, height=300)

        with st.expander("View detailed log entry"):
            st.json(log_entry.to_dict())


if __name__ == "__main__":
    main()
