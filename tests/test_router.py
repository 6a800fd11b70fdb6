from __future__ import annotations

import pytest

from innrvo.content import ContentDetector, ContentRouter, SessionState
from innrvo.content.router import DEFAULT_GOAL, confirmation_message
from innrvo.content.types import (
    ContentCategory,
    ContentDetectionResult,
    ContentGenerationParams,
    HypnosisDepth,
    StoryAgeGroup,
)


class TestRoute:
    def test_detected_fields_flow_into_params(self, detector: ContentDetector) -> None:
        result = detector.detect("Can you create a power affirmation about confidence for 5 minutes")
        routed = ContentRouter().route(result)
        assert routed.params.category is ContentCategory.AFFIRMATION
        assert routed.params.sub_type == "power"
        assert routed.params.duration_minutes == 5
        assert routed.params.goal == "confidence"
        assert routed.confirmation == "I'll create power affirmations for you."

    def test_recommended_duration_and_default_goal(self) -> None:
        result = ContentDetectionResult(ContentCategory.GUIDED_JOURNEY, "astral", 95)
        routed = ContentRouter().route(result)
        assert routed.params.duration_minutes == 30
        assert routed.params.goal == DEFAULT_GOAL

    def test_overrides_win(self, detector: ContentDetector) -> None:
        result = detector.detect("a 20 minute body scan for tension")
        routed = ContentRouter().route(
            result,
            duration_minutes=7,
            goal="shoulder pain",
            emotional_state="stressed",
            audio_tags=["[pause]"],
            teacher_preference="Thich Nhat Hanh",
        )
        params = routed.params
        assert params.duration_minutes == 7
        assert params.goal == "shoulder pain"
        assert params.emotional_state == "stressed"
        assert params.audio_tags == ("[pause]",)
        assert params.teacher_preference == "Thich Nhat Hanh"
        assert params.meditation_type == "body_scan"

    def test_hypnosis_and_story_fields(self) -> None:
        router = ContentRouter()
        hypnosis = router.route(ContentDetectionResult(ContentCategory.SELF_HYPNOSIS, "standard", 95))
        assert hypnosis.params.hypnosis_depth is HypnosisDepth.STANDARD

        story = router.route(ContentDetectionResult(ContentCategory.STORY, "toddler", 95))
        assert story.params.target_age_group is StoryAgeGroup.TODDLER
        assert story.params.duration_minutes == 8

    def test_refuses_unresolved_results(self, detector: ContentDetector) -> None:
        with pytest.raises(ValueError):
            ContentRouter().route(detector.detect("help me sleep"))

    def test_records_selection_in_session(self, session: SessionState) -> None:
        ContentRouter().route(ContentDetectionResult(ContentCategory.MEDITATION, "gratitude", 95), session=session)
        assert session.selected_content_category is ContentCategory.MEDITATION
        assert session.selected_content_sub_type == "gratitude"


@pytest.mark.parametrize(
    ("category", "sub_type", "expected"),
    [
        (ContentCategory.MEDITATION, "body_scan", "I'll create a body scan meditation for you."),
        (ContentCategory.SELF_HYPNOSIS, "therapeutic", "I'll create a therapeutic self-hypnosis session for you."),
        (ContentCategory.STORY, "young_child", "I'll create a bedtime story perfect for a young child."),
        (ContentCategory.STORY, "toddler", "I'll create a bedtime story perfect for a toddler."),
    ],
)
def test_confirmation_messages(category: ContentCategory, sub_type: str, expected: str) -> None:
    params = ContentGenerationParams(category, sub_type, 10, "rest")
    assert confirmation_message(params) == expected


def test_journey_confirmation_uses_journey_name() -> None:
    params = ContentGenerationParams(ContentCategory.GUIDED_JOURNEY, "past_life", 30, "curiosity")
    message = confirmation_message(params)
    assert message.startswith("I'll create a ")
    assert message.endswith(" journey for you.")
