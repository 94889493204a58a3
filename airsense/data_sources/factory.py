"""Factory helpers for choosing a measurement data source at startup."""

from __future__ import annotations

from functools import partial
from typing import Optional

from airsense import config
from airsense.data_sources.base import CallableLiveDataSource, LiveDataSource
from airsense.data_sources.open_meteo_client import fetch_weather, geocode_city
from airsense.data_sources.openaq_client import fetch_pollutants
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "mock"


def build_data_source(settings: config.Settings | None = None) -> Optional[LiveDataSource]:
    """
    Instantiate the configured data source.

    ``mock`` returns None, meaning every measurement comes from the generator;
    ``live`` returns a source backed by Open-Meteo and OpenAQ.
    """
    settings = settings or config.settings
    source = (settings.data_source or DEFAULT_SOURCE_NAME).lower()

    if source == "mock":
        logger.info("Using mock measurement generator")
        return None

    if source == "live":
        timeout = settings.http_timeout_seconds
        logger.info(f"Using live Open-Meteo/OpenAQ data source (timeout={timeout}s)")
        return CallableLiveDataSource(
            geocoder=partial(geocode_city, url=settings.geocoding_url, timeout=timeout),
            weather=partial(fetch_weather, url=settings.weather_url, timeout=timeout),
            pollutants=partial(
                fetch_pollutants,
                url=settings.openaq_url,
                api_key=settings.openaq_api_key,
                timeout=timeout,
            ),
        )

    raise ValueError(f"Unknown data source '{source}'")
