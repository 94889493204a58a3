"""Fetch the latest particulate readings for a city from OpenAQ."""
from __future__ import annotations

from typing import Any, Optional

import requests

from airsense.data_sources.base import PollutantReading
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag='openaq_client')

session = requests.Session()

OPENAQ_LATEST_URL = "https://api.openaq.org/v2/latest"
DEFAULT_TIMEOUT_SECONDS = 5.0


def _parameter_value(result: dict, parameter: str) -> Optional[float]:
    """
    Look up one parameter in an OpenAQ result.

    Older payloads list readings under ``measurements``, newer ones under
    ``parameters``; entries name the pollutant via ``parameter`` or
    ``parameterId``.
    """
    for key in ("measurements", "parameters"):
        for entry in result.get(key) or []:
            if (entry.get("parameter") or entry.get("parameterId")) == parameter:
                return entry.get("value")
    return None


def _positive_or_none(value: Any) -> Optional[float]:
    """OpenAQ reports missing sensors as 0 or null; treat both as absent."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def fetch_pollutants(
    city: str,
    *,
    url: str = OPENAQ_LATEST_URL,
    api_key: str | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Optional[PollutantReading]:
    """Return the newest PM2.5/PM10 values for `city`, or None when neither is reported."""
    params = {
        "limit": 1,
        "page": 1,
        "offset": 0,
        "sort": "desc",
        "radius": 1000,
        "city": city,
        "order_by": "datetime",
    }
    headers = {"X-API-Key": api_key} if api_key else None

    resp = session.get(url, params=params, headers=headers, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()

    results = data.get("results") or []
    if not results:
        logger.info(f"OpenAQ returned no results for '{city}'")
        return None

    pm25 = _positive_or_none(_parameter_value(results[0], "pm25"))
    pm10 = _positive_or_none(_parameter_value(results[0], "pm10"))
    if pm25 is None and pm10 is None:
        return None
    return PollutantReading(pm25=pm25, pm10=pm10)
