"""Core value types for content intent detection.

Everything here is an immutable value except the enums, which are closed
vocabularies shared by the detector, router and prompt builder.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class ContentCategory(str, Enum):
    """Top-level kind of content a user can ask for."""

    MEDITATION = "meditation"
    AFFIRMATION = "affirmation"
    SELF_HYPNOSIS = "self_hypnosis"
    GUIDED_JOURNEY = "guided_journey"
    STORY = "story"


class ContentAudience(str, Enum):
    """Who the generated script is narrated for."""

    ADULT = "adult"
    PARENT_TO_CHILD = "parent_to_child"  # Third person, read aloud by a parent
    TODDLER = "toddler"
    YOUNG_CHILD = "young_child"


class AffirmationSubType(str, Enum):
    POWER = "power"
    GUIDED = "guided"
    SLEEP = "sleep"
    MIRROR_WORK = "mirror_work"


class HypnosisDepth(str, Enum):
    LIGHT = "light"
    STANDARD = "standard"
    THERAPEUTIC = "therapeutic"


class JourneySubType(str, Enum):
    INNER_JOURNEY = "inner_journey"
    PAST_LIFE = "past_life"
    SPIRIT_GUIDE = "spirit_guide"
    SHAMANIC = "shamanic"
    ASTRAL = "astral"
    AKASHIC = "akashic"
    QUANTUM_FIELD = "quantum_field"


class StoryAgeGroup(str, Enum):
    TODDLER = "toddler"  # 2-4 years
    YOUNG_CHILD = "young_child"  # 5-8 years


MEDITATION_SUB_TYPES: tuple[str, ...] = (
    "guided_visualization",
    "breathwork",
    "body_scan",
    "loving_kindness",
    "sleep_story",
    "walking_meditation",
    "shadow_work",
    "gratitude",
    "manifestation",
    "presence",
    "inquiry",
    "surrender",
)

# Declared order matters: the first entry is the default sub-type of a category.
SUB_TYPES: dict[ContentCategory, tuple[str, ...]] = {
    ContentCategory.MEDITATION: MEDITATION_SUB_TYPES,
    ContentCategory.AFFIRMATION: tuple(s.value for s in AffirmationSubType),
    ContentCategory.SELF_HYPNOSIS: tuple(s.value for s in HypnosisDepth),
    ContentCategory.GUIDED_JOURNEY: tuple(s.value for s in JourneySubType),
    ContentCategory.STORY: tuple(s.value for s in StoryAgeGroup),
}


def is_valid_sub_type(category: ContentCategory | str, sub_type: str) -> bool:
    """Check whether ``sub_type`` belongs to ``category``."""
    try:
        return sub_type in SUB_TYPES[ContentCategory(category)]
    except ValueError:
        return False


# Confidence thresholds (0-100 scale).
EXPLICIT_CONFIDENCE_FLOOR = 85
SEMANTIC_CONFIDENCE_CAP = 80
DISAMBIGUATION_THRESHOLD = 60
CLARIFY_THRESHOLD = 70


@dataclass(frozen=True)
class Interpretation:
    """One ranked candidate reading of an utterance."""

    category: ContentCategory
    sub_type: str
    confidence: int

    def same_target(self, other: Interpretation) -> bool:
        return self.category == other.category and self.sub_type == other.sub_type


@dataclass(frozen=True)
class ContentDetectionResult:
    """Outcome of classifying one user utterance.

    Produced fresh for every turn and never mutated; derived results are built
    with ``dataclasses.replace``.
    """

    category: ContentCategory
    sub_type: str
    confidence: int
    audience: ContentAudience = ContentAudience.ADULT
    depth: HypnosisDepth | None = None
    age_group: StoryAgeGroup | None = None
    duration_minutes: int | None = None
    extracted_goal: str | None = None
    meditation_type: str | None = None
    needs_disambiguation: bool = False
    disambiguation_question: str | None = None
    alternative_interpretations: tuple[Interpretation, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence out of range: {self.confidence}")
        if not is_valid_sub_type(self.category, self.sub_type):
            raise ValueError(f"{self.sub_type!r} is not a sub-type of {self.category.value}")
        if self.needs_disambiguation:
            if not self.disambiguation_question:
                raise ValueError("disambiguation requires a question")
            if self.confidence >= EXPLICIT_CONFIDENCE_FLOOR:
                raise ValueError("high-confidence results cannot need disambiguation")

    @property
    def primary(self) -> Interpretation:
        return Interpretation(self.category, self.sub_type, self.confidence)

    def candidates(self) -> list[Interpretation]:
        """Primary followed by alternatives, in the order a question numbers them.

        Alternatives that restate the primary are dropped so "2" always means
        the second distinct option.
        """
        options = [self.primary]
        for alt in self.alternative_interpretations:
            if not any(alt.same_target(o) for o in options):
                options.append(alt)
        return options

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["category"] = self.category.value
        data["audience"] = self.audience.value
        data["depth"] = self.depth.value if self.depth else None
        data["age_group"] = self.age_group.value if self.age_group else None
        data["alternative_interpretations"] = [
            {"category": a.category.value, "sub_type": a.sub_type, "confidence": a.confidence}
            for a in self.alternative_interpretations
        ]
        return data


@dataclass(frozen=True)
class ContentGenerationParams:
    """Everything the prompt builder needs to produce a generation prompt."""

    category: ContentCategory
    sub_type: str
    duration_minutes: int
    goal: str
    meditation_type: str | None = None
    hypnosis_depth: HypnosisDepth | None = None
    target_age_group: StoryAgeGroup | None = None
    emotional_state: str | None = None
    teacher_preference: str | None = None
    custom_instructions: str | None = None
    audio_tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not is_valid_sub_type(self.category, self.sub_type):
            raise ValueError(f"{self.sub_type!r} is not a sub-type of {self.category.value}")
        if self.duration_minutes <= 0:
            raise ValueError("duration_minutes must be positive")
