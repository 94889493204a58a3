"""Interfaces and helpers for live air-quality/weather data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol


@dataclass(frozen=True)
class GeoLocation:
    """Best geocoding match for a city name."""
    latitude: float
    longitude: float
    name: str


@dataclass(frozen=True)
class WeatherReading:
    """Current weather values; any field may be missing upstream."""
    temp: Optional[float]
    wind_speed: Optional[float]
    humidity: Optional[float]


@dataclass(frozen=True)
class PollutantReading:
    """Latest particulate readings for a city."""
    pm25: Optional[float]
    pm10: Optional[float]


class LiveDataSource(Protocol):
    """Interface for anything that can provide live readings for a city."""

    def geocode(self, city: str) -> Optional[GeoLocation]:
        """Resolve a city name to coordinates, or None when nothing matches."""
        ...

    def fetch_weather(self, latitude: float, longitude: float) -> WeatherReading:
        """Return the current weather at the coordinates."""
        ...

    def fetch_pollutants(self, city: str) -> Optional[PollutantReading]:
        """Return the latest PM readings for a city, or None when unavailable."""
        ...


@dataclass
class CallableLiveDataSource(LiveDataSource):
    """Wrap three callables so they can be swapped for different backends."""

    geocoder: Callable[[str], Optional[GeoLocation]]
    weather: Callable[[float, float], WeatherReading]
    pollutants: Callable[[str], Optional[PollutantReading]]

    def geocode(self, city: str) -> Optional[GeoLocation]:
        """Delegate to the configured geocoding callable."""
        return self.geocoder(city)

    def fetch_weather(self, latitude: float, longitude: float) -> WeatherReading:
        """Delegate to the configured weather callable."""
        return self.weather(latitude, longitude)

    def fetch_pollutants(self, city: str) -> Optional[PollutantReading]:
        """Delegate to the configured pollutant callable."""
        return self.pollutants(city)
