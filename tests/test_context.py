from __future__ import annotations

import pytest

from innrvo.content.context import (
    ContextExtractor,
    bucket_age,
    extract_age_group,
    extract_context,
    extract_depth,
    extract_duration,
    extract_goal,
)
from innrvo.content.types import HypnosisDepth, StoryAgeGroup


class TestDuration:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("a 10 minute meditation", 10),
            ("something for 20 mins", 20),
            ("a 1 hour journey", 60),
            ("just a quick one", 5),
            ("a long session please", 30),
            ("a meditation", None),
        ],
    )
    def test_extract_duration(self, text: str, expected: int | None) -> None:
        assert extract_duration(text) == expected

    def test_minutes_beat_fuzzy_words(self) -> None:
        assert extract_duration("a short 12 minute break") == 12

    def test_zero_is_ignored(self) -> None:
        assert extract_duration("0 minutes of calm") is None


class TestAgeGroup:
    @pytest.mark.parametrize(
        ("age", "expected"),
        [
            (1, StoryAgeGroup.TODDLER),
            (3, StoryAgeGroup.TODDLER),
            (4, StoryAgeGroup.TODDLER),
            (5, StoryAgeGroup.YOUNG_CHILD),
            (7, StoryAgeGroup.YOUNG_CHILD),
            (10, StoryAgeGroup.YOUNG_CHILD),
        ],
    )
    def test_bucket_age(self, age: int, expected: StoryAgeGroup) -> None:
        assert bucket_age(age) is expected

    def test_numeric_age_wins_over_words(self) -> None:
        assert extract_age_group("my 7 year old kid") is StoryAgeGroup.YOUNG_CHILD
        assert extract_age_group("my 3-year-old child") is StoryAgeGroup.TODDLER

    def test_age_words(self) -> None:
        assert extract_age_group("for the baby") is StoryAgeGroup.TODDLER
        assert extract_age_group("for the kids") is StoryAgeGroup.YOUNG_CHILD
        assert extract_age_group("for me") is None


class TestDepth:
    def test_therapeutic_beats_light(self) -> None:
        assert extract_depth("a gentle but therapeutic session") is HypnosisDepth.THERAPEUTIC

    def test_light(self) -> None:
        assert extract_depth("light hypnosis") is HypnosisDepth.LIGHT

    def test_standard(self) -> None:
        assert extract_depth("hypnotize me") is HypnosisDepth.STANDARD

    def test_none(self) -> None:
        assert extract_depth("a walking meditation") is None


class TestGoal:
    def test_goal_without_trailing_duration(self) -> None:
        text = "Can you create a power affirmation about confidence for 5 minutes"
        assert extract_goal(text) == "confidence"

    def test_goal_stops_at_punctuation(self) -> None:
        assert extract_goal("A meditation to help with anxiety, please") == "anxiety"

    def test_want_phrasing(self) -> None:
        assert extract_goal("i want to feel calmer") == "feel calmer"

    def test_goal_is_bounded(self) -> None:
        goal = extract_goal("a meditation for " + "x" * 300)
        assert goal is not None
        assert len(goal) == 100

    def test_no_goal(self) -> None:
        assert extract_goal("body scan") is None


def test_extract_context_combines_fields() -> None:
    ctx = extract_context("a 10 minute story for my 3 year old")
    assert ctx.duration_minutes == 10
    assert ctx.age_group is StoryAgeGroup.TODDLER


class TestContextExtractor:
    def test_extracts_settings_goals_and_duration(self) -> None:
        ctx = ContextExtractor().extract("I want to feel calm at the beach, maybe 10 minutes")
        assert "beach" in ctx.settings
        assert ctx.duration == "10 minutes"

    def test_settings_match_whole_words(self) -> None:
        ctx = ContextExtractor().extract("I feel seasick")
        assert "sea" not in ctx.settings

    def test_goal_from_last_three_user_messages(self) -> None:
        messages = [
            {"role": "user", "content": "one"},
            {"role": "assistant", "content": "ignored"},
            {"role": "user", "content": "two"},
            {"role": "user", "content": "three"},
            {"role": "user", "content": "four"},
        ]
        assert ContextExtractor().extract_goal_from_messages(messages) == "two three four"

    def test_history_goal_skips_option_replies(self) -> None:
        messages = [
            {"role": "user", "content": "help me sleep"},
            {"role": "assistant", "content": "Would you prefer: (1) ... or (2) ...?"},
            {"role": "user", "content": " 2. "},
        ]
        assert ContextExtractor().extract_goal_from_messages(messages) == "help me sleep"

    def test_history_goal_is_bounded(self) -> None:
        messages = [{"role": "user", "content": "y" * 500}]
        assert len(ContextExtractor().extract_goal_from_messages(messages)) == 200

    @pytest.mark.parametrize(
        ("duration", "expected"),
        [("10-15 minutes", 10), ("5 minutes", 5), ("soon", None), (None, None)],
    )
    def test_parse_duration_minutes(self, duration: str | None, expected: int | None) -> None:
        assert ContextExtractor.parse_duration_minutes(duration) == expected
