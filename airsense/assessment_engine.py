"""Deterministic assessment logic.

Turns a Measurement + UserProfile into the derived records the dashboard and
the chatbot use: ventilation advice, the personalized risk score, the
synthetic same-day forecast with its best activity window, and the ranked
commute routes. Every function here is pure; nothing is cached.
"""

from __future__ import annotations

import math
from typing import Any, List, Sequence

from airsense.domain import (
    ActivityWindow,
    ForecastSlot,
    Measurement,
    RiskLevel,
    RiskResult,
    RouteId,
    RouteOption,
    Sensitivity,
    UserProfile,
    VentilationAdvice,
    VentilationStatus,
)

SENSITIVITY_FACTORS = {
    Sensitivity.HIGH: 1.4,
    Sensitivity.MEDIUM: 1.1,
}
CONDITION_FACTOR = 1.3
RISK_SCALE_PM25 = 250.0

# (lower bound, level, advice), highest band first
RISK_BANDS = (
    (80.0, RiskLevel.VERY_HIGH, "Avoid outdoor activity. Pollutants may trigger symptoms."),
    (60.0, RiskLevel.HIGH, "Limit outdoor exertion. Keep medication handy."),
    (30.0, RiskLevel.MODERATE, "Sensitive users should be a bit cautious."),
    (0.0, RiskLevel.LOW, "Air quality is acceptable for most people."),
)

FORECAST_HOURS = (6, 9, 12, 15, 18, 21)
FORECAST_MULTIPLIERS = (0.7, 0.8, 1.0, 1.2, 1.3, 0.9)
ACTIVITY_WINDOW_REASON = "Lowest predicted particulate matter in the next few hours."

# id, label, minutes, exposure multiplier, description, color
ROUTE_CATALOG = (
    (RouteId.FASTEST, "Fastest Route", 30, 1.2, "High traffic density (Main Highway)", "#ef4444"),
    (RouteId.HEALTHIEST, "Green Route", 42, 0.65, "Low traffic, park adjacencies", "#10b981"),
    (RouteId.BALANCED, "Balanced Route", 35, 0.9, "Residential streets", "#3b82f6"),
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def _clamp_score(score: float) -> float:
    """Clamp a score to the 0-100 range; NaN counts as no exposure."""
    if math.isnan(score):
        return 0.0
    return max(0.0, min(100.0, score))


def classify_ventilation(measurement: Measurement) -> VentilationAdvice:
    """Map wind speed + PM2.5 to a ventilation advisory (poor > good > moderate)."""
    if measurement.wind_speed < 5 and measurement.pm25 > 80:
        return VentilationAdvice(
            status=VentilationStatus.POOR,
            description="Stagnant air is trapping pollutants near the ground.",
        )
    if measurement.wind_speed > 15:
        return VentilationAdvice(
            status=VentilationStatus.GOOD,
            description="Breezy conditions are helping disperse pollutants.",
        )
    return VentilationAdvice(
        status=VentilationStatus.MODERATE,
        description="Standard airflow. Pollution levels are stable.",
    )


def sensitivity_factor(sensitivity: Any) -> float:
    """Return the exposure multiplier for a sensitivity; unknown values count as low."""
    if isinstance(sensitivity, str):
        try:
            sensitivity = Sensitivity(sensitivity.strip().lower())
        except ValueError:
            return 1.0
    if not isinstance(sensitivity, Sensitivity):
        return 1.0
    return SENSITIVITY_FACTORS.get(sensitivity, 1.0)


def _risk_band(score: float) -> tuple[RiskLevel, str]:
    """Pick the level/advice pair for a clamped score."""
    for lower, level, advice in RISK_BANDS:
        if score >= lower:
            return level, advice
    return RISK_BANDS[-1][1], RISK_BANDS[-1][2]


def compute_risk_score(
    measurement: Measurement,
    profile: UserProfile,
    symptom_factor: float = 1.0,
) -> RiskResult:
    """
    Personalized 0-100 risk score.

    PM2.5 is scaled by the profile's sensitivity, a flat factor when any health
    condition is declared, and the self-reported symptom factor; 250 ug/m3 of
    adjusted exposure maps to 100. The band is chosen from the clamped score
    before rounding, so 29.8 reports Low with a displayed score of 30.
    """
    condition_factor = CONDITION_FACTOR if profile.conditions else 1.0
    adjusted = measurement.pm25 * sensitivity_factor(profile.sensitivity) * condition_factor * symptom_factor

    score = _clamp_score(adjusted / RISK_SCALE_PM25 * 100.0)
    level, advice = _risk_band(score)

    return RiskResult(
        score=round_half_up(score),
        level=level,
        advice=advice,
        feedback_used=symptom_factor > 1.0,
    )


def build_forecast(measurement: Measurement) -> List[ForecastSlot]:
    """Derive the fixed six-slot forecast from the current snapshot."""
    slots: List[ForecastSlot] = []
    for idx, (hour, factor) in enumerate(zip(FORECAST_HOURS, FORECAST_MULTIPLIERS)):
        slots.append(
            ForecastSlot(
                hour=hour,
                pm25=round_half_up(measurement.pm25 * factor),
                pm10=round_half_up(measurement.pm10 * factor),
                temp=measurement.temp + (-2 if idx > 2 else 2),
            )
        )
    return slots


def select_activity_window(slots: Sequence[ForecastSlot]) -> ActivityWindow:
    """Pick the slot with the lowest PM2.5; ties keep the earliest hour."""
    if not slots:
        raise ValueError("select_activity_window requires at least one forecast slot")

    best = slots[0]
    for slot in slots:
        if slot.pm25 < best.pm25:
            best = slot

    return ActivityWindow(
        window_label=f"{best.hour}:00 - {best.hour + 2}:00",
        reason=ACTIVITY_WINDOW_REASON,
        pm25=best.pm25,
        all_slots=list(slots),
    )


def rank_routes(measurement: Measurement, profile: UserProfile) -> List[RouteOption]:
    """Return the three catalog routes, always fastest, healthiest, balanced."""
    base = measurement.pm25 * sensitivity_factor(profile.sensitivity)
    return [
        RouteOption(
            id=route_id,
            label=label,
            duration_minutes=minutes,
            exposure_index=round_half_up(base * multiplier),
            description=description,
            color=color,
        )
        for route_id, label, minutes, multiplier, description, color in ROUTE_CATALOG
    ]
