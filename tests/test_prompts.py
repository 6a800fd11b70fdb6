from __future__ import annotations

import pytest

from innrvo.content.catalog import HYPNOSIS_SAFETY_FRAMING
from innrvo.content.prompts import build_content_prompt, build_extend_prompt
from innrvo.content.types import (
    ContentCategory,
    ContentGenerationParams,
    HypnosisDepth,
    StoryAgeGroup,
)


def _params(category: ContentCategory, sub_type: str, minutes: int = 10, **kwargs: object) -> ContentGenerationParams:
    return ContentGenerationParams(category, sub_type, minutes, "calm before my exam", **kwargs)  # type: ignore[arg-type]


class TestBuildContentPrompt:
    def test_meditation_prompt(self) -> None:
        built = build_content_prompt(_params(ContentCategory.MEDITATION, "breathwork", meditation_type="breathwork"))
        assert built.temperature == 0.7
        assert built.max_tokens == 2160
        assert built.budget.target_words == 1200
        assert "1080-1320 words" in built.prompt
        assert "calm before my exam" in built.prompt

    def test_short_content_gets_minimum_tokens(self) -> None:
        built = build_content_prompt(_params(ContentCategory.AFFIRMATION, "power", 5))
        assert built.max_tokens == 1200
        assert "405-495 words" in built.prompt
        assert "about 14 statements" in built.prompt

    @pytest.mark.parametrize("depth", list(HypnosisDepth))
    def test_hypnosis_prompt_always_carries_safety_framing(self, depth: HypnosisDepth) -> None:
        built = build_content_prompt(_params(ContentCategory.SELF_HYPNOSIS, depth.value, 20, hypnosis_depth=depth))
        assert built.temperature == 0.5
        for text in (
            HYPNOSIS_SAFETY_FRAMING.opening_disclaimer,
            HYPNOSIS_SAFETY_FRAMING.consent_statement,
            HYPNOSIS_SAFETY_FRAMING.emergency_exit,
            HYPNOSIS_SAFETY_FRAMING.emergence_protocol,
        ):
            assert text in built.prompt

    def test_hypnosis_prompt_lists_phases(self) -> None:
        built = build_content_prompt(_params(ContentCategory.SELF_HYPNOSIS, "standard", 20))
        assert "POST-HYPNOTIC ANCHORING" in built.prompt
        assert built.max_tokens == 3240

    def test_journey_prompt(self) -> None:
        built = build_content_prompt(
            _params(ContentCategory.GUIDED_JOURNEY, "shamanic", 30, custom_instructions="include drumming")
        )
        assert "SHAMANIC" in built.prompt
        assert "include drumming" in built.prompt
        assert built.temperature == 0.8

    def test_story_prompts_differ_by_age(self) -> None:
        toddler = build_content_prompt(
            _params(ContentCategory.STORY, "toddler", 8, target_age_group=StoryAgeGroup.TODDLER)
        )
        young = build_content_prompt(_params(ContentCategory.STORY, "young_child", 8))
        assert "270-300 words" in toddler.prompt
        assert "A comforting bedtime ritual" in toddler.prompt
        assert "A short magical adventure" in young.prompt
        assert "parent to read aloud" in young.prompt

    def test_audio_tags_are_mentioned(self) -> None:
        built = build_content_prompt(_params(ContentCategory.MEDITATION, "presence", audio_tags=("[pause]", "[bell]")))
        assert "[pause], [bell]" in built.prompt

    def test_optional_sections_are_dropped(self) -> None:
        built = build_content_prompt(_params(ContentCategory.MEDITATION, "presence"))
        assert "None" not in built.prompt
        assert "AUDIO CUES" not in built.prompt


def test_extend_prompt() -> None:
    prompt = build_extend_prompt("Breathe in... [pause]", ContentCategory.GUIDED_JOURNEY, 900)
    assert "guided journey" in prompt
    assert "900 words" in prompt
    assert '"Breathe in... [pause]"' in prompt
