"""
Pytest configuration for weaaqi dashboard tests.

Registers custom markers and provides shared fixtures.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from weaaqi.reading import Reading

PROJECT_ROOT = Path(__file__).parent.parent


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def fixed_now():
    """A fixed, timezone-aware clock value (14:30 in Hanoi)."""
    return datetime(2025, 11, 24, 7, 30, tzinfo=timezone.utc)


@pytest.fixture
def comfortable_reading():
    """Mild clear-sky reading with moderate PM2.5."""
    return Reading(
        temperature_c=26,
        humidity_pct=48,
        wind_speed_kmh=10,
        condition_code=800,
        pm25=15,
    )


@pytest.fixture
def epaper_rules_path():
    """Path to the bundled long-form rule tables."""
    return PROJECT_ROOT / "config" / "rules-epaper.yaml"
