"""Word budgets for generated scripts.

Everything here is deterministic arithmetic. A requested duration becomes a
target word count at the category's narration pace, with a +/-10% band the
generator is asked to stay within. Phase breakdowns are advisory and end up
as instructions in the prompt text.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .catalog import (
    DurationRange,
    get_affirmation_info,
    get_hypnosis_depth_info,
    get_story_age_group_info,
    words_per_second,
)
from .types import ContentCategory, HypnosisDepth, StoryAgeGroup

BAND = 0.10

MEDITATION_MINUTES = DurationRange(1, 15, 45)
AFFIRMATION_MINUTES = DurationRange(3, 10, 20)
JOURNEY_MINUTES = DurationRange(15, 30, 60)

# (phase, share of the target words)
MEDITATION_PHASES: tuple[tuple[str, float], ...] = (
    ("Opening", 0.10),
    ("Grounding", 0.15),
    ("Core", 0.50),
    ("Integration", 0.15),
    ("Closing", 0.10),
)


@dataclass(frozen=True)
class Phase:
    name: str
    words: int


@dataclass(frozen=True)
class WordBudget:
    category: ContentCategory
    minutes: float
    target_words: int
    min_words: int
    max_words: int
    phases: tuple[Phase, ...] = field(default_factory=tuple)
    statements: int | None = None

    @property
    def word_range(self) -> str:
        return f"{self.min_words}-{self.max_words}"


def _band(target: int) -> tuple[int, int]:
    return round(target * (1 - BAND)), round(target * (1 + BAND))


def _target(category: ContentCategory, minutes: float, sub_type: str | None = None) -> int:
    return round(minutes * 60 * words_per_second(category, sub_type))


def _budget(category: ContentCategory, minutes: float, target: int, **extra: object) -> WordBudget:
    low, high = _band(target)
    return WordBudget(category, minutes, target, low, high, **extra)  # type: ignore[arg-type]


def meditation_budget(duration_minutes: float) -> WordBudget:
    minutes = MEDITATION_MINUTES.clamp(duration_minutes)
    target = _target(ContentCategory.MEDITATION, minutes)
    phases = tuple(Phase(name, round(target * share)) for name, share in MEDITATION_PHASES)
    return _budget(ContentCategory.MEDITATION, minutes, target, phases=phases)


def affirmation_budget(sub_type: str, duration_minutes: float) -> WordBudget:
    minutes = AFFIRMATION_MINUTES.clamp(duration_minutes)
    info = get_affirmation_info(sub_type)
    statements = None
    if info is not None:
        low, high = info.statement_count
        # Statements scale with the requested length, not the clamped one.
        statements = round((low + high) / 2 * (duration_minutes / 10))
    target = _target(ContentCategory.AFFIRMATION, minutes, sub_type)
    return _budget(ContentCategory.AFFIRMATION, minutes, target, statements=statements)


def hypnosis_budget(depth: HypnosisDepth | str, duration_minutes: float) -> WordBudget:
    info = get_hypnosis_depth_info(depth)
    if info is None:
        raise ValueError(f"unknown hypnosis depth: {depth!r}")
    minutes = info.duration.clamp(duration_minutes)
    target = _target(ContentCategory.SELF_HYPNOSIS, minutes)
    per_phase = round(target / len(info.phases))
    phases = tuple(Phase(name, per_phase) for name in info.phases)
    return _budget(ContentCategory.SELF_HYPNOSIS, minutes, target, phases=phases)


def journey_budget(duration_minutes: float) -> WordBudget:
    minutes = JOURNEY_MINUTES.clamp(duration_minutes)
    return _budget(ContentCategory.GUIDED_JOURNEY, minutes, _target(ContentCategory.GUIDED_JOURNEY, minutes))


def story_budget(age_group: StoryAgeGroup | str, duration_minutes: float) -> WordBudget:
    """Story length is bounded by the age group's word limits, not by time."""
    info = get_story_age_group_info(age_group)
    if info is None:
        raise ValueError(f"unknown story age group: {age_group!r}")
    limit_min, limit_max = info.word_count
    target = min(limit_max, max(limit_min, _target(ContentCategory.STORY, duration_minutes)))
    low, high = _band(target)
    return WordBudget(
        ContentCategory.STORY,
        duration_minutes,
        target,
        max(limit_min, low),
        min(limit_max, high),
    )


def calculate_word_budget(
    category: ContentCategory | str, sub_type: str, duration_minutes: float
) -> WordBudget:
    """Word budget for a category/sub-type at the requested duration.

    Args:
        category: Content category.
        sub_type: Sub-type id within the category.
        duration_minutes: Requested length. Clamped to the category's bounds
            except for stories, where it only nudges the word count.

    Returns:
        The budget with its +/-10% band and any phase breakdown.
    """
    category = ContentCategory(category)
    if category is ContentCategory.MEDITATION:
        return meditation_budget(duration_minutes)
    if category is ContentCategory.AFFIRMATION:
        return affirmation_budget(sub_type, duration_minutes)
    if category is ContentCategory.SELF_HYPNOSIS:
        return hypnosis_budget(sub_type, duration_minutes)
    if category is ContentCategory.GUIDED_JOURNEY:
        return journey_budget(duration_minutes)
    return story_budget(sub_type, duration_minutes)
