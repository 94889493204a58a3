import pytest

from airsense.domain import ActivityWindow, ForecastSlot, RiskLevel, RiskResult
from airsense.knowledge_base import KNOWLEDGE_BASE, KnowledgeEntry, find_entry, render_answer


def _risk(score=61, level=RiskLevel.HIGH):
    return RiskResult(score=score, level=level, advice="Limit outdoor exposure.", feedback_used=False)


def _window(label="18:00 - 20:00", pm25=42):
    slot = ForecastSlot(hour=18, pm25=pm25, pm10=50, temp=22)
    return ActivityWindow(window_label=label, reason="Lowest predicted particulate matter in the next few hours.",
                          pm25=pm25, all_slots=[slot])


def test_entry_ids_are_unique():
    ids = [entry.id for entry in KNOWLEDGE_BASE]
    assert len(ids) == len(set(ids))


@pytest.mark.parametrize(
    "text, entry_id",
    [
        ("What is PM2.5?", "what_is_pm25"),
        ("explain the air quality index", "what_is_aqi"),
        ("Do N95 masks work", "masks"),
        ("best hepa purifier", "indoor_air"),
        ("any tips", "reduce_exposure"),
        ("can I go to the gym", "exercise_policy"),
        ("my kid is coughing", "children_care"),
        ("pollen season", "pollen_allergy"),
        ("danger signs", "emergency_red_flags"),
        ("dry air at night", "humidifiers"),
    ],
)
def test_find_entry_by_keyword(text, entry_id):
    assert find_entry(text).id == entry_id


def test_first_matching_entry_wins():
    # "mask" and "tips" both match; masks is listed first
    assert find_entry("mask tips").id == "masks"


def test_short_keywords_match_inside_words():
    assert find_entry("where can I go").id == "emergency_red_flags"


def test_no_match_returns_none():
    assert find_entry("xyz") is None
    assert find_entry("") is None
    assert find_entry(None) is None


def test_custom_entries():
    entries = (KnowledgeEntry(id="tea", keywords=("chai",), answer="Have some chai."),)
    assert find_entry("CHAI please", entries).answer == "Have some chai."
    assert find_entry("pm2.5", entries) is None


def test_render_answer_fills_placeholders():
    entry = next(e for e in KNOWLEDGE_BASE if e.id == "exercise_policy")
    text = render_answer(entry, _risk(), _window())
    assert "Your risk is 61 (High)" in text
    assert "Best outdoor window: 18:00 - 20:00 (PM2.5 ~42µg/m³)" in text
    assert "{{" not in text


def test_render_answer_leaves_plain_answers_untouched():
    entry = next(e for e in KNOWLEDGE_BASE if e.id == "masks")
    assert render_answer(entry, _risk(), _window()) == entry.answer
