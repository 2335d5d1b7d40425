"""
Weather & AQI dashboard decision engine.

This package maps weather and air quality readings to a condition label, an
action recommendation and a visual treatment, and produces the flat display
values consumed by the dashboard renderer.
"""

from .air_quality_router import AirQualityRouter
from .presentation import PresentationOptions, PresentationValues, build_presentation
from .reading import Reading
from .weather_router import WeatherRouter

__all__ = [
    'AirQualityRouter',
    'PresentationOptions',
    'PresentationValues',
    'Reading',
    'WeatherRouter',
    'build_presentation',
]
