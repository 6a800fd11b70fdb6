"""Turns a resolved detection into generation parameters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .catalog import get_category_info, get_journey_info
from .session import SessionState
from .types import (
    ContentCategory,
    ContentDetectionResult,
    ContentGenerationParams,
    HypnosisDepth,
    StoryAgeGroup,
)

logger = logging.getLogger(__name__)

DEFAULT_GOAL = "general well-being"

_AGE_LABELS = {
    StoryAgeGroup.TODDLER: "toddler",
    StoryAgeGroup.YOUNG_CHILD: "young child",
}


@dataclass(frozen=True)
class RoutedContent:
    params: ContentGenerationParams
    confirmation: str


def confirmation_message(params: ContentGenerationParams) -> str:
    """Short sentence telling the user what is about to be generated."""
    label = params.sub_type.replace("_", " ")
    if params.category is ContentCategory.MEDITATION:
        return f"I'll create a {label} meditation for you."
    if params.category is ContentCategory.AFFIRMATION:
        return f"I'll create {label} affirmations for you."
    if params.category is ContentCategory.SELF_HYPNOSIS:
        depth = (params.hypnosis_depth or HypnosisDepth(params.sub_type)).value
        return f"I'll create a {depth} self-hypnosis session for you."
    if params.category is ContentCategory.GUIDED_JOURNEY:
        info = get_journey_info(params.sub_type)
        return f"I'll create a {info.name if info else label} journey for you."
    age = params.target_age_group or StoryAgeGroup(params.sub_type)
    return f"I'll create a bedtime story perfect for a {_AGE_LABELS[age]}."


class ContentRouter:
    """Merges category defaults, detection fields and caller overrides."""

    def route(
        self,
        result: ContentDetectionResult,
        *,
        duration_minutes: int | None = None,
        goal: str | None = None,
        emotional_state: str | None = None,
        audio_tags: Sequence[str] = (),
        teacher_preference: str | None = None,
        custom_instructions: str | None = None,
        session: SessionState | None = None,
    ) -> RoutedContent:
        """Build generation parameters for a resolved result.

        Raises:
            ValueError: If the result still needs disambiguation.
        """
        if result.needs_disambiguation:
            raise ValueError("cannot route a result that still needs disambiguation")

        category = result.category
        info = get_category_info(category)
        duration = duration_minutes or result.duration_minutes or info.default_duration.recommended

        depth = None
        age_group = None
        if category is ContentCategory.SELF_HYPNOSIS:
            depth = result.depth or HypnosisDepth(result.sub_type)
        elif category is ContentCategory.STORY:
            age_group = result.age_group or StoryAgeGroup(result.sub_type)

        params = ContentGenerationParams(
            category=category,
            sub_type=result.sub_type,
            duration_minutes=duration,
            goal=goal or result.extracted_goal or DEFAULT_GOAL,
            meditation_type=result.meditation_type,
            hypnosis_depth=depth,
            target_age_group=age_group,
            emotional_state=emotional_state,
            teacher_preference=teacher_preference,
            custom_instructions=custom_instructions,
            audio_tags=tuple(audio_tags),
        )
        if session is not None:
            session.record_selection(category, result.sub_type)

        logger.debug("Routed %s:%s for %d minutes", category.value, result.sub_type, duration)
        return RoutedContent(params, confirmation_message(params))
