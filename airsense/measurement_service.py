"""Produce Measurement snapshots from the mock generator or a live data source."""
from __future__ import annotations

import random
from typing import Callable, Optional, TypeVar

from airsense.assessment_engine import round_half_up
from airsense.data_sources import LiveDataSource, PollutantReading, WeatherReading
from airsense.domain import Measurement
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="measurement_service")

T = TypeVar("T")

BASE_POLLUTANTS = {"pm25": 80.0, "pm10": 120.0, "no2": 35.0, "o3": 30.0, "so2": 10.0, "co": 0.7}
HIGH_POLLUTION_CITY_KEYWORD = "delhi"
HIGH_POLLUTION_CITY_FACTOR = 1.4
JITTER_LOW = 0.85
JITTER_SPAN = 0.3
UNKNOWN_CITY = "Unknown"


def _normalize_city(city: Optional[str]) -> str:
    """Blank or missing city names become "Unknown"."""
    if not city or not city.strip():
        return UNKNOWN_CITY
    return city.strip()


def city_factor(city: Optional[str]) -> float:
    """Baseline multiplier for a city; Delhi-area names run 40% dirtier."""
    if city and HIGH_POLLUTION_CITY_KEYWORD in city.lower():
        return HIGH_POLLUTION_CITY_FACTOR
    return 1.0


def generate_mock_measurement(city: Optional[str], rng: random.Random | None = None) -> Measurement:
    """
    Build a plausible snapshot around a fixed pollutant baseline.

    Each pollutant gets its own uniform jitter in [0.85, 1.15); weather values
    are drawn uniformly around typical daytime values. Pass a seeded `rng` for
    reproducible output.
    """
    rng = rng or random.Random()
    factor = city_factor(city)

    def jittered(name: str) -> float:
        return BASE_POLLUTANTS[name] * factor * (rng.random() * JITTER_SPAN + JITTER_LOW)

    return Measurement(
        city=_normalize_city(city),
        pm25=round_half_up(jittered("pm25")),
        pm10=round_half_up(jittered("pm10")),
        no2=round_half_up(jittered("no2")),
        o3=round_half_up(jittered("o3")),
        so2=round_half_up(jittered("so2")),
        co=round_half_up(jittered("co") * 100) / 100,
        temp=round_half_up(24 + rng.random() * 5),
        wind_speed=round_half_up(3 + rng.random() * 15),
        humidity=round_half_up(40 + rng.random() * 30),
    )


def _guarded(label: str, fn: Callable[..., T], *args) -> Optional[T]:
    """Run one external call; any failure is logged and reported as None."""
    try:
        return fn(*args)
    except Exception as exc:
        logger.warning(f"Live {label} lookup failed; using mock values", extra={"error": str(exc)})
        return None


def _live_or(value: Optional[float], fallback: int) -> int:
    """Prefer a live reading (rounded) over the mock value."""
    if value is None:
        return fallback
    return round_half_up(value)


def _positive(value: Optional[float]) -> Optional[float]:
    """Non-positive PM readings are sensor gaps."""
    if value is None or value <= 0:
        return None
    return value


def build_live_measurement(
    city: Optional[str],
    data_source: LiveDataSource,
    rng: random.Random | None = None,
) -> Measurement:
    """
    Merge live readings over a mock snapshot, field by field.

    temp/wind/humidity come from the weather lookup and pm25/pm10 from the
    pollutant lookup; the other gases always stay mocked. Any failed or empty
    lookup silently keeps the mock values.
    """
    mock = generate_mock_measurement(city, rng=rng)
    name = _normalize_city(city)
    if name == UNKNOWN_CITY:
        return mock

    geo = _guarded("geocode", data_source.geocode, name)
    if geo is None:
        logger.info(f"No coordinates for '{name}'; serving mock measurement")
        return mock

    weather: Optional[WeatherReading] = _guarded(
        "weather", data_source.fetch_weather, geo.latitude, geo.longitude
    )
    pollutants: Optional[PollutantReading] = _guarded("pollutant", data_source.fetch_pollutants, name)

    updates = {}
    if weather is not None:
        updates["temp"] = _live_or(weather.temp, mock.temp)
        updates["wind_speed"] = max(0, _live_or(weather.wind_speed, mock.wind_speed))
        updates["humidity"] = max(0, _live_or(weather.humidity, mock.humidity))
    if pollutants is not None:
        updates["pm25"] = _live_or(_positive(pollutants.pm25), mock.pm25)
        updates["pm10"] = _live_or(_positive(pollutants.pm10), mock.pm10)

    logger.debug(f"Live fields for '{name}': {sorted(updates)}")
    return Measurement(**{**mock.model_dump(), **updates})


def get_measurement(
    city: Optional[str],
    data_source: LiveDataSource | None = None,
    rng: random.Random | None = None,
) -> Measurement:
    """Return a live-backed measurement when a source is configured, else a mock one."""
    if data_source is None:
        return generate_mock_measurement(city, rng=rng)
    return build_live_measurement(city, data_source, rng=rng)
