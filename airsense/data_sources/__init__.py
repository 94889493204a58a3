"""Data source factories for plugging live or mocked measurement backends."""

from .base import (
    CallableLiveDataSource,
    GeoLocation,
    LiveDataSource,
    PollutantReading,
    WeatherReading,
)
from .factory import build_data_source
from .open_meteo_client import fetch_weather, geocode_city
from .openaq_client import fetch_pollutants

__all__ = [
    "build_data_source",
    "LiveDataSource",
    "CallableLiveDataSource",
    "GeoLocation",
    "WeatherReading",
    "PollutantReading",
    "geocode_city",
    "fetch_weather",
    "fetch_pollutants",
]
