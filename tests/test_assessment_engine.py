import math

import pytest

from airsense.assessment_engine import (
    build_forecast,
    classify_ventilation,
    compute_risk_score,
    rank_routes,
    round_half_up,
    select_activity_window,
    sensitivity_factor,
)
from airsense.domain import (
    ForecastSlot,
    Measurement,
    RiskLevel,
    RouteId,
    Sensitivity,
    UserProfile,
    VentilationStatus,
)


def make_measurement(**overrides):
    base = {
        "city": "Kolkata",
        "pm25": 100,
        "pm10": 120,
        "no2": 35,
        "o3": 30,
        "so2": 10,
        "co": 0.7,
        "temp": 25,
        "wind_speed": 10,
        "humidity": 55,
    }
    base.update(overrides)
    return Measurement(**base)


def profile(sensitivity="low", conditions=None):
    return UserProfile(name="Asha", city="Kolkata", sensitivity=sensitivity, conditions=conditions or [])


def test_round_half_up_rounds_halves_away_from_even():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(1.49) == 1
    assert round_half_up(0.0) == 0


# ---- ventilation ---------------------------------------------------------------

def test_stagnant_polluted_air_is_poor_ventilation():
    advice = classify_ventilation(make_measurement(wind_speed=4, pm25=81))
    assert advice.status == VentilationStatus.POOR
    assert "Stagnant air" in advice.description


@pytest.mark.parametrize(
    "wind_speed, pm25, expected",
    [
        (4, 80, VentilationStatus.MODERATE),
        (5, 200, VentilationStatus.MODERATE),
        (15, 50, VentilationStatus.MODERATE),
        (16, 200, VentilationStatus.GOOD),
        (0, 300, VentilationStatus.POOR),
    ],
)
def test_ventilation_boundaries(wind_speed, pm25, expected):
    assert classify_ventilation(make_measurement(wind_speed=wind_speed, pm25=pm25)).status == expected


# ---- risk ----------------------------------------------------------------------

def test_sensitivity_factors():
    assert sensitivity_factor(Sensitivity.HIGH) == 1.4
    assert sensitivity_factor("medium") == 1.1
    assert sensitivity_factor(Sensitivity.LOW) == 1.0
    assert sensitivity_factor(None) == 1.0
    assert sensitivity_factor("extreme") == 1.0
    assert sensitivity_factor(["high"]) == 1.0


def test_risk_score_medium_profile():
    risk = compute_risk_score(make_measurement(pm25=100), profile("medium"))
    assert risk.score == 44
    assert risk.level == RiskLevel.MODERATE
    assert risk.advice == "Sensitive users should be a bit cautious."
    assert risk.feedback_used is False


def test_conditions_raise_the_score():
    risk = compute_risk_score(make_measurement(pm25=100), profile("low", ["asthma"]))
    assert risk.score == 52


def test_score_is_clamped_for_extreme_inputs():
    risk = compute_risk_score(make_measurement(pm25=1000), profile("high", ["copd"]), 1.5)
    assert risk.score == 100
    assert risk.level == RiskLevel.VERY_HIGH
    assert risk.feedback_used is True


def test_zero_exposure_is_low():
    risk = compute_risk_score(make_measurement(pm25=0), profile("high", ["asthma"]), 1.5)
    assert risk.score == 0
    assert risk.level == RiskLevel.LOW


def test_undefined_exposure_is_not_reported_as_very_high():
    # 0 * inf is NaN
    risk = compute_risk_score(make_measurement(pm25=0), profile("low"), math.inf)
    assert risk.score == 0
    assert risk.level == RiskLevel.LOW


@pytest.mark.parametrize(
    "pm25, level",
    [(75, RiskLevel.MODERATE), (150, RiskLevel.HIGH), (200, RiskLevel.VERY_HIGH), (70, RiskLevel.LOW)],
)
def test_level_thresholds(pm25, level):
    assert compute_risk_score(make_measurement(pm25=pm25), profile("low")).level == level


def test_level_uses_unrounded_score():
    risk = compute_risk_score(make_measurement(pm25=74), profile("low"))
    assert risk.score == 30
    assert risk.level == RiskLevel.LOW


def test_symptom_feedback_flag():
    m = make_measurement(pm25=60)
    assert compute_risk_score(m, profile("low"), 1.25).feedback_used is True
    assert compute_risk_score(m, profile("low"), 1.0).feedback_used is False


# ---- forecast & window ---------------------------------------------------------

def test_forecast_uses_fixed_hours_and_multipliers():
    slots = build_forecast(make_measurement(pm25=100, pm10=120, temp=25))
    assert [s.hour for s in slots] == [6, 9, 12, 15, 18, 21]
    assert [s.pm25 for s in slots] == [70, 80, 100, 120, 130, 90]
    assert [s.pm10 for s in slots] == [84, 96, 120, 144, 156, 108]
    assert [s.temp for s in slots] == [27, 27, 27, 23, 23, 23]


def test_activity_window_picks_lowest_pm25():
    slots = build_forecast(make_measurement(pm25=100))
    window = select_activity_window(slots)
    assert window.window_label == "6:00 - 8:00"
    assert window.pm25 == 70
    assert window.pm25 == min(s.pm25 for s in window.all_slots)
    assert len(window.all_slots) == 6
    assert window.reason == "Lowest predicted particulate matter in the next few hours."


def test_activity_window_ties_keep_earliest_hour():
    slots = [
        ForecastSlot(hour=6, pm25=50, pm10=60, temp=20),
        ForecastSlot(hour=9, pm25=40, pm10=60, temp=20),
        ForecastSlot(hour=12, pm25=40, pm10=60, temp=20),
    ]
    window = select_activity_window(slots)
    assert window.window_label == "9:00 - 11:00"
    assert window.pm25 == 40


def test_activity_window_requires_slots():
    with pytest.raises(ValueError):
        select_activity_window([])


# ---- routes --------------------------------------------------------------------

def test_routes_fixed_order_and_values():
    routes = rank_routes(make_measurement(pm25=100), profile("low"))
    assert [r.id for r in routes] == [RouteId.FASTEST, RouteId.HEALTHIEST, RouteId.BALANCED]
    assert [r.exposure_index for r in routes] == [120, 65, 90]
    assert [r.duration_minutes for r in routes] == [30, 42, 35]
    assert routes[1].label == "Green Route"


@pytest.mark.parametrize("sensitivity", ["low", "medium", "high"])
def test_healthiest_always_has_least_exposure(sensitivity):
    for pm25 in range(4, 400, 7):
        fastest, healthiest, balanced = rank_routes(make_measurement(pm25=pm25), profile(sensitivity))
        assert healthiest.exposure_index < balanced.exposure_index < fastest.exposure_index


def test_pure_functions_are_idempotent():
    m = make_measurement(pm25=93, wind_speed=3)
    p = profile("high", ["asthma"])
    assert classify_ventilation(m) == classify_ventilation(m)
    assert compute_risk_score(m, p, 1.25) == compute_risk_score(m, p, 1.25)
    assert rank_routes(m, p) == rank_routes(m, p)
