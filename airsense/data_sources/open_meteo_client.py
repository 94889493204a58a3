"""Helpers for geocoding cities and fetching current weather from Open-Meteo."""
from __future__ import annotations

from typing import Optional

import requests

from airsense.data_sources.base import GeoLocation, WeatherReading
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag='open_meteo_client')

session = requests.Session()

OPEN_METEO_GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_TIMEOUT_SECONDS = 5.0

EXPECTED_WEATHER_UNITS = {
    "temperature_2m": "°C",
    "wind_speed_10m": "km/h",
    "relative_humidity_2m": "%",
}


def _warn_on_unexpected_units(units: dict, *, context: str):
    """Log a warning if Open-Meteo returns units other than the metric ones we request."""
    if not units:
        return
    for field, expected in EXPECTED_WEATHER_UNITS.items():
        actual = units.get(field)
        if actual and actual != expected:
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"context": context, "field": field, "unit": actual, "expected": expected},
            )


def geocode_city(
    city: str,
    *,
    url: str = OPEN_METEO_GEOCODING_URL,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Optional[GeoLocation]:
    """Resolve a city name to the best Open-Meteo geocoding match, or None."""
    params = {"name": city, "count": 1}

    resp = session.get(url, params=params, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()

    results = data.get("results") or []
    if not results:
        logger.info(f"No geocoding match for '{city}'")
        return None

    item = results[0]
    return GeoLocation(
        latitude=item["latitude"],
        longitude=item["longitude"],
        name=item.get("name", city),
    )


def fetch_weather(
    latitude: float,
    longitude: float,
    *,
    url: str = OPEN_METEO_WEATHER_URL,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> WeatherReading:
    """Fetch current temperature (°C), wind speed (km/h) and humidity (%)."""
    current_vars = ["temperature_2m", "wind_speed_10m", "relative_humidity_2m"]

    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current": ",".join(current_vars),
    }

    resp = session.get(url, params=params, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()

    current = data.get("current") or {}
    _warn_on_unexpected_units(data.get("current_units") or {}, context="weather_current")

    return WeatherReading(
        temp=current.get("temperature_2m", None),
        wind_speed=current.get("wind_speed_10m", None),
        humidity=current.get("relative_humidity_2m", None),
    )
