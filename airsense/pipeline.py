"""
Request-level orchestration: one measurement, one assessment, one payload.

Each call builds a fresh Measurement and derives every dependent record from
it, so nothing computed here outlives the request.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any, List, Optional

from .assessment_engine import (
    build_forecast,
    classify_ventilation,
    compute_risk_score,
    rank_routes,
    select_activity_window,
)
from .chat_dispatcher import build_reply
from .data_sources import LiveDataSource
from .domain import (
    SYMPTOM_FACTORS,
    ActivityWindow,
    ChatContextPayload,
    ChatResponsePayload,
    DashboardPayload,
    ForecastSlot,
    Measurement,
    RiskResult,
    RouteOption,
    UserProfile,
    VentilationAdvice,
    Wellbeing,
)
from .measurement_service import get_measurement
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="pipeline")


@dataclass(frozen=True)
class Assessment:
    """Intermediate bundle shared by the dashboard and chat payloads."""
    measurement: Measurement
    forecast: List[ForecastSlot]
    vent_advice: VentilationAdvice
    risk: RiskResult
    window: ActivityWindow
    routes: List[RouteOption]


def normalize_symptom_factor(value: Any) -> float:
    """Coerce a client-supplied factor; anything non-numeric, infinite or not positive means 1.0."""
    if value is None or isinstance(value, bool):
        return 1.0
    try:
        factor = float(value)
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(factor) or factor <= 0:
        return 1.0
    return factor


def symptom_factor_for(wellbeing: Wellbeing | str) -> float:
    """Translate a symptom-tracker answer into its risk multiplier."""
    return SYMPTOM_FACTORS[Wellbeing(wellbeing)]


def assess(
    profile: UserProfile,
    *,
    city: Optional[str] = None,
    symptom_factor: Any = 1.0,
    data_source: LiveDataSource | None = None,
    rng: random.Random | None = None,
) -> Assessment:
    """Run the full pipeline for one profile/city."""
    effective_city = (city or "").strip() or profile.city
    factor = normalize_symptom_factor(symptom_factor)

    measurement = get_measurement(effective_city, data_source=data_source, rng=rng)
    forecast = build_forecast(measurement)
    risk = compute_risk_score(measurement, profile, factor)
    logger.debug(f"Assessed {measurement.city}: pm25={measurement.pm25} risk={risk.score} ({risk.level.value})")

    return Assessment(
        measurement=measurement,
        forecast=forecast,
        vent_advice=classify_ventilation(measurement),
        risk=risk,
        window=select_activity_window(forecast),
        routes=rank_routes(measurement, profile),
    )


def build_dashboard(
    profile: UserProfile,
    *,
    city: Optional[str] = None,
    symptom_factor: Any = 1.0,
    data_source: LiveDataSource | None = None,
    rng: random.Random | None = None,
) -> DashboardPayload:
    """Assemble the composite dashboard record."""
    result = assess(profile, city=city, symptom_factor=symptom_factor, data_source=data_source, rng=rng)
    return DashboardPayload(
        profile=profile,
        aqi=result.measurement,
        forecast=result.forecast,
        risk=result.risk,
        activity_window=result.window,
        routes=result.routes,
        vent_advice=result.vent_advice,
    )


def build_chat_response(
    message: str,
    profile: UserProfile,
    *,
    city: Optional[str] = None,
    symptom_factor: Any = 1.0,
    data_source: LiveDataSource | None = None,
    map_replies: bool = True,
    rng: random.Random | None = None,
) -> ChatResponsePayload:
    """Answer a chat message and return the reply with the context it used."""
    result = assess(profile, city=city, symptom_factor=symptom_factor, data_source=data_source, rng=rng)
    reply = build_reply(
        message,
        result.risk,
        result.window,
        result.routes,
        result.vent_advice,
        result.measurement,
        map_replies=map_replies,
    )
    return ChatResponsePayload(
        reply=reply,
        context=ChatContextPayload(
            risk=result.risk,
            activity_window=result.window,
            aqi=result.measurement,
            vent_advice=result.vent_advice,
        ),
    )
