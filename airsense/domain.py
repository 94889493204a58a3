"""Domain vocabulary and schemas for the deterministic AirSense+ pipeline.

This module defines the records that flow between the measurement generator,
the assessment engine, the chat dispatcher and the HTTP layer: enums, value
objects and the composite payloads returned to clients. Records serialize
with camelCase aliases (``windSpeed``, ``feedbackUsed``) so the JSON contract
matches what the dashboard expects. No scoring logic lives here.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class _StrictBaseModel(BaseModel):
    """Immutable record that rejects unknown fields and speaks camelCase."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Sensitivity(str, Enum):
    """Self-declared sensitivity to air pollution."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Wellbeing(str, Enum):
    """Self-reported symptom level from the symptom tracker."""
    GREAT = "great"
    MILD = "mild"
    BREATHLESS = "breathless"


SYMPTOM_FACTORS = {
    Wellbeing.GREAT: 1.0,
    Wellbeing.MILD: 1.25,
    Wellbeing.BREATHLESS: 1.5,
}


class RiskLevel(str, Enum):
    """Risk band derived from the personalized score."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"


class VentilationStatus(str, Enum):
    """Three-state outdoor ventilation advisory."""
    POOR = "Poor Ventilation"
    GOOD = "Good Ventilation"
    MODERATE = "Moderate Ventilation"


class RouteId(str, Enum):
    """Fixed catalog of commute variants."""
    FASTEST = "fastest"
    HEALTHIEST = "healthiest"
    BALANCED = "balanced"


class ReplyType(str, Enum):
    """How the client should render a chat reply."""
    TEXT = "text"
    MAP = "map"


class Measurement(_StrictBaseModel):
    """Snapshot of pollutant and weather readings for a city."""
    city: str
    pm25: int = Field(ge=0)
    pm10: int = Field(ge=0)
    no2: int = Field(ge=0)
    o3: int = Field(ge=0)
    so2: int = Field(ge=0)
    co: float = Field(ge=0)
    temp: int
    wind_speed: int = Field(ge=0)
    humidity: int = Field(ge=0)


class UserProfile(BaseModel):
    """Caller-owned profile; malformed fields degrade to safe defaults."""

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str = "User"
    city: str = "Unknown"
    sensitivity: Sensitivity = Sensitivity.MEDIUM
    conditions: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "User"
        return v.strip()

    @field_validator("city", mode="before")
    @classmethod
    def _default_city(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "Unknown"
        return v.strip()

    @field_validator("sensitivity", mode="before")
    @classmethod
    def _coerce_sensitivity(cls, v: Any) -> Sensitivity:
        if isinstance(v, Sensitivity):
            return v
        if isinstance(v, str):
            try:
                return Sensitivity(v.strip().lower())
            except ValueError:
                pass
        return Sensitivity.MEDIUM

    @field_validator("conditions", mode="before")
    @classmethod
    def _coerce_conditions(cls, v: Any) -> List[str]:
        if not isinstance(v, (list, tuple, set, frozenset)):
            return []
        tags: List[str] = []
        for item in v:
            if not isinstance(item, str):
                continue
            tag = item.strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


class RiskResult(_StrictBaseModel):
    """Personalized 0-100 risk score with its band and advice."""
    score: int = Field(ge=0, le=100)
    level: RiskLevel
    advice: str
    feedback_used: bool


class VentilationAdvice(_StrictBaseModel):
    """Ventilation advisory shown next to the measurement."""
    status: VentilationStatus
    description: str


class ForecastSlot(_StrictBaseModel):
    """One slot of the synthetic same-day forecast."""
    hour: int
    pm25: int
    pm10: int
    temp: int


class ActivityWindow(_StrictBaseModel):
    """Lowest-exposure slot of the forecast, plus the forecast itself."""
    window_label: str
    reason: str
    pm25: int
    all_slots: List[ForecastSlot]


class RouteOption(_StrictBaseModel):
    """A commute variant with its computed exposure index."""
    id: RouteId
    label: str
    duration_minutes: int
    exposure_index: int
    description: str
    color: str


class ChatReply(_StrictBaseModel):
    """Single chat reply; only map replies carry route data."""
    type: ReplyType = ReplyType.TEXT
    text: str
    data: Optional[List[RouteOption]] = None

    @model_validator(mode="after")
    def _data_only_on_map(self) -> "ChatReply":
        if self.data is not None and self.type != ReplyType.MAP:
            raise ValueError("only map replies may carry route data")
        return self


class DashboardPayload(_StrictBaseModel):
    """Everything the dashboard renders for one request."""
    profile: UserProfile
    aqi: Measurement
    forecast: List[ForecastSlot]
    risk: RiskResult
    activity_window: ActivityWindow
    routes: List[RouteOption]
    vent_advice: VentilationAdvice


class ChatContextPayload(_StrictBaseModel):
    """Assessment values a chat reply was computed from."""
    risk: RiskResult
    activity_window: ActivityWindow
    aqi: Measurement
    vent_advice: VentilationAdvice


class ChatResponsePayload(_StrictBaseModel):
    """Chat reply plus the context it was derived from."""
    reply: ChatReply
    context: ChatContextPayload
