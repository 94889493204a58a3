"""Rule-based chat replies for the "Dr. AirSense" assistant.

Replies are chosen from ``CHAT_RULES``, an ordered table of (matches, respond)
pairs evaluated first-match-wins. The order is part of the behavior: route
queries beat symptom keywords, symptoms beat weather, weather beats the
knowledge base, and so on down to the fallback, which always matches. Each
rule can be exercised on its own through its ``matches``/``respond`` pair.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from airsense.domain import (
    ActivityWindow,
    ChatReply,
    Measurement,
    ReplyType,
    RiskResult,
    RouteId,
    RouteOption,
    VentilationAdvice,
)
from airsense.knowledge_base import find_entry, render_answer
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="chat_dispatcher")

ROUTE_PATTERN = re.compile(r"(?:from\s+)?([a-z]+)\s+to\s+([a-z]+)", re.IGNORECASE)
IN_CITY_PATTERN = re.compile(r"in\s+([a-z]+)", re.IGNORECASE)
LOCAL_TRIP_WORDS = ("office", "home")
NH19_CITIES = {"Kolkata", "Delhi"}


@dataclass(frozen=True)
class ReplyContext:
    """Everything a rule may read: the raw message with its lowercased `text`, plus the current assessment."""
    message: str
    text: str
    risk: RiskResult
    window: ActivityWindow
    routes: Sequence[RouteOption]
    vent_advice: VentilationAdvice
    measurement: Measurement
    map_replies: bool = True


@dataclass(frozen=True)
class ChatRule:
    """One row of the dispatch table."""
    name: str
    matches: Callable[[ReplyContext], bool]
    respond: Callable[[ReplyContext], ChatReply]


def _contains_any(text: str, words: Sequence[str]) -> bool:
    return any(word in text for word in words)


def _keywords(*words: str) -> Callable[[ReplyContext], bool]:
    """Predicate that fires when any of `words` is a substring of the message."""
    return lambda ctx: _contains_any(ctx.text, words)


def _text(body: str) -> ChatReply:
    return ChatReply(type=ReplyType.TEXT, text=body)


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


# -- route query ----------------------------------------------------------------

def _route_cities(text: str) -> Optional[Tuple[str, str]]:
    """Return (from, to) when the text reads like an intercity trip."""
    if _contains_any(text, LOCAL_TRIP_WORDS):
        return None
    match = ROUTE_PATTERN.search(text)
    if not match:
        return None
    return _capitalize(match.group(1)), _capitalize(match.group(2))


def _respond_route_query(ctx: ReplyContext) -> ChatReply:
    origin, destination = _route_cities(ctx.text)
    if {origin, destination} == NH19_CITIES:
        return _text(
            f"For the best route from {origin} to {destination} considering road conditions and air quality "
            f"zones, I recommend: \n\n{origin} ➝ Dhanbad ➝ Gaya ➝ Varanasi ➝ Prayagraj (Allahabad) ➝ Kanpur "
            f"➝ Agra ➝ {destination}.\n\nThis route (NH19) avoids the heavy industrial congestion of the "
            f"alternative highways."
        )
    return _text(
        f"Traveling from {origin} to {destination}? The optimal route is via the National Highway network. "
        f"Ensure you check AQI levels at major stopovers before starting."
    )


# -- symptoms -------------------------------------------------------------------

def _matches_fever(ctx: ReplyContext) -> bool:
    return "fever" in ctx.text or ("temperature" in ctx.text and "high" in ctx.text)


def _respond_fever(ctx: ReplyContext) -> ChatReply:
    return _text(
        "Dr. AirSense: If you have a fever, stay hydrated and rest. For mild fever, you can use a cool "
        "compress. Paracetamol is commonly used, but please consult a real doctor if it exceeds 102°F or "
        "persists for more than 3 days."
    )


def _respond_cough_cold(ctx: ReplyContext) -> ChatReply:
    return _text(
        f"Dr. AirSense: For a cough or cold, try steam inhalation and warm ginger-honey tea. Avoid cold "
        f"water. Since the air quality is {ctx.risk.level.value}, wear a mask if you must go outside to "
        f"prevent aggravating your throat."
    )


def _respond_headache(ctx: ReplyContext) -> ChatReply:
    return _text(
        f"Dr. AirSense: Headaches can often be triggered by pollution or dehydration. Drink plenty of water "
        f"and rest in a dark, quiet room. If the AQI is high ({ctx.measurement.pm25}), ensure your indoor "
        f"air is purified."
    )


def _respond_asthma(ctx: ReplyContext) -> ChatReply:
    return _text(
        f"Dr. AirSense: Please keep your rescue inhaler handy. With a risk score of {ctx.risk.score}, avoid "
        f"outdoor exertion. If you experience wheezing, move to a cleaner environment immediately."
    )


# -- weather --------------------------------------------------------------------

def _respond_weather(ctx: ReplyContext) -> ChatReply:
    m = ctx.measurement
    other_city = IN_CITY_PATTERN.search(ctx.text)
    if m.city.lower() in ctx.text or other_city is None:
        return _text(
            f"Current weather in {m.city}: {m.temp}°C, humidity {m.humidity}%. "
            f"Wind speed is {m.wind_speed} km/h."
        )
    return _text(
        f"Weather in {other_city.group(1)}: It is likely around {m.temp - 2}°C with moderate cloud cover."
    )


# -- knowledge base -------------------------------------------------------------

def _respond_knowledge_base(ctx: ReplyContext) -> ChatReply:
    entry = find_entry(ctx.text)
    return _text(render_answer(entry, ctx.risk, ctx.window))


# -- commute / map --------------------------------------------------------------

def _respond_route_map(ctx: ReplyContext) -> ChatReply:
    if not ctx.map_replies:
        return _text(
            f"For your commute, minimize exposure: choose less-trafficked streets, avoid peak hours, and wear "
            f"a well-fitting mask (N95/FFP2) when {ctx.risk.level.value.lower()} risk is present. Best "
            f"outdoor window today: {ctx.window.window_label}."
        )
    healthiest = next((r for r in ctx.routes if r.id == RouteId.HEALTHIEST), None)
    label = healthiest.label if healthiest else "Green Route"
    return ChatReply(
        type=ReplyType.MAP,
        text=(
            f"For your local commute, I've calculated a health-aware route. The \"{label}\" reduces your "
            f"pollution exposure by ~40% compared to the main highway."
        ),
        data=list(ctx.routes),
    )


# -- misc -----------------------------------------------------------------------

def _respond_ventilation(ctx: ReplyContext) -> ChatReply:
    return _text(f"Dr. AirSense Advice: {ctx.vent_advice.status.value}. {ctx.vent_advice.description}")


def _respond_exercise(ctx: ReplyContext) -> ChatReply:
    return _text(
        f"Your personalized risk is {ctx.risk.score} ({ctx.risk.level.value}). Best time to exercise: "
        f"{ctx.window.window_label} when PM2.5 is lowest ({ctx.window.pm25} µg/m³)."
    )


def _respond_greeting(ctx: ReplyContext) -> ChatReply:
    return _text(
        "Hello! I am Dr. AirSense, your personal health and environment assistant. I can help with medical "
        "advice, weather updates, detailed travel routes, or air quality analysis. How can I help you today?"
    )


def _respond_fallback(ctx: ReplyContext) -> ChatReply:
    return _text(
        f"I'm focused on health and environment. For \"{ctx.message}\", here's a general approach:\n"
        f"1) Clarify if this is about health, environment, or safety.\n"
        f"2) Check credible sources (WHO/CDC/local advisories).\n"
        f"3) Consider your personal risk (current score {ctx.risk.score} – {ctx.risk.level.value}).\n"
        f"4) If urgent symptoms occur, seek medical care.\n"
        f"You can also ask: \"what is PM2.5\", \"best mask\", \"improve indoor air\", or \"best time to run\"."
    )


CHAT_RULES: Tuple[ChatRule, ...] = (
    ChatRule("route_query", lambda ctx: _route_cities(ctx.text) is not None, _respond_route_query),
    ChatRule("fever", _matches_fever, _respond_fever),
    ChatRule("cough_cold", _keywords("cough", "cold", "throat"), _respond_cough_cold),
    ChatRule("headache", _keywords("headache"), _respond_headache),
    ChatRule("asthma", _keywords("asthma", "breathing"), _respond_asthma),
    ChatRule("weather", _keywords("weather", "rain", "sunny"), _respond_weather),
    ChatRule("knowledge_base", lambda ctx: find_entry(ctx.text) is not None, _respond_knowledge_base),
    ChatRule("route_map", _keywords("route", "map", "commute", "office"), _respond_route_map),
    ChatRule("ventilation", _keywords("ventilation", "window", "air"), _respond_ventilation),
    ChatRule("exercise", _keywords("run", "jog", "exercise"), _respond_exercise),
    ChatRule("greeting", _keywords("hello", "hi", "hey"), _respond_greeting),
    ChatRule("fallback", lambda ctx: True, _respond_fallback),
)


def select_rule(ctx: ReplyContext, rules: Sequence[ChatRule] = CHAT_RULES) -> ChatRule:
    """Return the first rule whose predicate accepts the context."""
    for rule in rules:
        if rule.matches(ctx):
            return rule
    return CHAT_RULES[-1]


def build_reply(
    message: str,
    risk: RiskResult,
    window: ActivityWindow,
    routes: Sequence[RouteOption],
    vent_advice: VentilationAdvice,
    measurement: Measurement,
    *,
    map_replies: bool = True,
) -> ChatReply:
    """
    Pick and render a reply for a free-text message.

    ``map_replies=False`` is the text-only mode used when no map can be shown:
    commute questions then get exposure guidance instead of a route map.
    """
    message = message or ""
    ctx = ReplyContext(
        message=message,
        text=message.lower(),
        risk=risk,
        window=window,
        routes=tuple(routes),
        vent_advice=vent_advice,
        measurement=measurement,
        map_replies=map_replies,
    )
    rule = select_rule(ctx)
    logger.debug(f"Chat rule '{rule.name}' selected")
    return rule.respond(ctx)
