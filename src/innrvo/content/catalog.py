"""Static metadata tables for the five content categories.

Pacing, default durations, sub-type details and the hypnosis safety framing
live here. The tables are read-only; lookups go through the ``get_*`` helpers.
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import (
    SUB_TYPES,
    AffirmationSubType,
    ContentCategory,
    HypnosisDepth,
    JourneySubType,
    StoryAgeGroup,
)


@dataclass(frozen=True)
class DurationRange:
    min: int
    recommended: int
    max: int

    def clamp(self, minutes: float) -> float:
        return max(self.min, min(self.max, minutes))


@dataclass(frozen=True)
class ContentCategoryInfo:
    id: ContentCategory
    name: str
    description: str
    default_duration: DurationRange
    words_per_second: float
    requires_safety_framing: bool
    sub_types: tuple[str, ...]


@dataclass(frozen=True)
class AffirmationInfo:
    id: AffirmationSubType
    name: str
    description: str
    structure: str
    words_per_second: float
    statement_count: tuple[int, int]
    format: str  # "first_person" or "second_person"
    energy: str  # "high", "medium" or "fading"
    teachers: tuple[str, ...]


@dataclass(frozen=True)
class HypnosisDepthInfo:
    id: HypnosisDepth
    name: str
    description: str
    phases: tuple[str, ...]
    induction_style: str
    duration: DurationRange
    teachers: tuple[str, ...]


@dataclass(frozen=True)
class JourneyInfo:
    id: JourneySubType
    name: str
    description: str
    key_elements: tuple[str, ...]
    technical_depth: str  # accessible < intermediate < advanced < expert
    tradition: str | None
    teachers: tuple[str, ...]


@dataclass(frozen=True)
class StoryAgeGroupInfo:
    id: StoryAgeGroup
    name: str
    age_range: str
    description: str
    vocabulary_level: str
    max_syllables: int
    avoid_words: tuple[str, ...]
    word_count: tuple[int, int]
    sentence_length: tuple[int, int]  # (average, maximum) words
    paragraphs: tuple[int, int]
    themes: tuple[str, ...]
    characters: tuple[str, ...]
    requirements: tuple[str, ...]


@dataclass(frozen=True)
class MeditationTypeInfo:
    id: str
    name: str
    description: str
    benefits: tuple[str, ...]


@dataclass(frozen=True)
class SafetyFraming:
    opening_disclaimer: str
    consent_statement: str
    emergency_exit: str
    emergence_protocol: str


# =============================================================================
# Categories
# =============================================================================

CONTENT_CATEGORIES: dict[ContentCategory, ContentCategoryInfo] = {
    ContentCategory.MEDITATION: ContentCategoryInfo(
        id=ContentCategory.MEDITATION,
        name="Meditation",
        description="Guided mindfulness and relaxation practices for inner peace and growth.",
        default_duration=DurationRange(5, 15, 45),
        words_per_second=2.0,
        requires_safety_framing=False,
        sub_types=SUB_TYPES[ContentCategory.MEDITATION],
    ),
    ContentCategory.AFFIRMATION: ContentCategoryInfo(
        id=ContentCategory.AFFIRMATION,
        name="Affirmations",
        description="Positive statements that reinforce new beliefs.",
        default_duration=DurationRange(3, 10, 20),
        words_per_second=1.5,
        requires_safety_framing=False,
        sub_types=SUB_TYPES[ContentCategory.AFFIRMATION],
    ),
    ContentCategory.SELF_HYPNOSIS: ContentCategoryInfo(
        id=ContentCategory.SELF_HYPNOSIS,
        name="Self-Hypnosis",
        description="Structured hypnotic sessions for subconscious change.",
        default_duration=DurationRange(10, 20, 45),
        words_per_second=1.5,
        requires_safety_framing=True,
        sub_types=SUB_TYPES[ContentCategory.SELF_HYPNOSIS],
    ),
    ContentCategory.GUIDED_JOURNEY: ContentCategoryInfo(
        id=ContentCategory.GUIDED_JOURNEY,
        name="Guided Journey",
        description="Deep spiritual and esoteric explorations.",
        default_duration=DurationRange(15, 30, 60),
        words_per_second=1.8,
        requires_safety_framing=False,
        sub_types=SUB_TYPES[ContentCategory.GUIDED_JOURNEY],
    ),
    ContentCategory.STORY: ContentCategoryInfo(
        id=ContentCategory.STORY,
        name="Children's Story",
        description="Age-appropriate bedtime stories for a parent to read aloud.",
        default_duration=DurationRange(3, 8, 15),
        words_per_second=1.2,  # parent reading pace
        requires_safety_framing=False,
        sub_types=SUB_TYPES[ContentCategory.STORY],
    ),
}


# =============================================================================
# Sub-type tables
# =============================================================================

AFFIRMATION_SUBTYPES: dict[AffirmationSubType, AffirmationInfo] = {
    AffirmationSubType.POWER: AffirmationInfo(
        id=AffirmationSubType.POWER,
        name="Power Affirmations",
        description='High-energy "I AM" statements delivered with conviction.',
        structure="Short, punchy statements with brief pauses, building intensity.",
        words_per_second=1.5,
        statement_count=(15, 40),
        format="first_person",
        energy="high",
        teachers=("Bob Proctor", "Wayne Dyer", "Joe Dispenza"),
    ),
    AffirmationSubType.GUIDED: AffirmationInfo(
        id=AffirmationSubType.GUIDED,
        name="Guided Affirmations",
        description="Narrative-led affirmations with explanation and emotional context.",
        structure="Affirmation, short explanation, feeling anchor, next affirmation.",
        words_per_second=2.0,
        statement_count=(8, 20),
        format="first_person",
        energy="medium",
        teachers=("Deepak Chopra", "Wayne Dyer", "Marianne Williamson"),
    ),
    AffirmationSubType.SLEEP: AffirmationInfo(
        id=AffirmationSubType.SLEEP,
        name="Sleep Affirmations",
        description="Gentle, fading affirmations for the edge of sleep.",
        structure="Statements grow softer and slower with longer pauses.",
        words_per_second=1.0,
        statement_count=(20, 60),
        format="first_person",
        energy="fading",
        teachers=("Joe Dispenza", "Bruce Lipton"),
    ),
    AffirmationSubType.MIRROR_WORK: AffirmationInfo(
        id=AffirmationSubType.MIRROR_WORK,
        name="Mirror Work",
        description="Second-person affirmations spoken as if into a mirror.",
        structure='"You are..." statements centred on self-love.',
        words_per_second=1.5,
        statement_count=(10, 25),
        format="second_person",
        energy="medium",
        teachers=("Louise Hay", "Marianne Williamson"),
    ),
}

HYPNOSIS_DEPTHS: dict[HypnosisDepth, HypnosisDepthInfo] = {
    HypnosisDepth.LIGHT: HypnosisDepthInfo(
        id=HypnosisDepth.LIGHT,
        name="Light Relaxation Hypnosis",
        description="Gentle relaxation with light suggestion work, suited to beginners.",
        phases=("Brief relaxation", "Light suggestions", "Gentle return"),
        induction_style="Progressive relaxation, counting down from 10",
        duration=DurationRange(5, 10, 15),
        teachers=("Milton Erickson",),
    ),
    HypnosisDepth.STANDARD: HypnosisDepthInfo(
        id=HypnosisDepth.STANDARD,
        name="Standard Hypnosis",
        description="Full session with induction, deepening and emergence.",
        phases=("Induction", "Deepening", "Suggestions", "Post-hypnotic anchoring", "Emergence"),
        induction_style="Eye fixation or progressive relaxation, staircase deepening",
        duration=DurationRange(15, 25, 35),
        teachers=("Milton Erickson", "Dave Elman"),
    ),
    HypnosisDepth.THERAPEUTIC: HypnosisDepthInfo(
        id=HypnosisDepth.THERAPEUTIC,
        name="Therapeutic Deep Trance",
        description="Extended session for deep subconscious work.",
        phases=(
            "Extended induction",
            "Deep deepening",
            "Therapeutic suggestions",
            "Inner work",
            "Integration",
            "Careful emergence",
        ),
        induction_style="Elman-style rapid induction or Ericksonian metaphor",
        duration=DurationRange(25, 40, 60),
        teachers=("Milton Erickson", "Dave Elman", "Richard Bandler"),
    ),
}

JOURNEY_SUBTYPES: dict[JourneySubType, JourneyInfo] = {
    JourneySubType.INNER_JOURNEY: JourneyInfo(
        id=JourneySubType.INNER_JOURNEY,
        name="Inner Landscape Journey",
        description="Exploring the inner world and meeting aspects of self.",
        key_elements=("Inner sanctuary", "Symbolic landscape", "Meeting inner self", "Receiving insight"),
        technical_depth="accessible",
        tradition=None,
        teachers=("Carl Jung", "Richard Schwartz", "Joe Dispenza"),
    ),
    JourneySubType.PAST_LIFE: JourneyInfo(
        id=JourneySubType.PAST_LIFE,
        name="Past Life Regression",
        description="Visiting past life memories to understand current patterns.",
        key_elements=(
            "Corridor of time",
            "Life selection",
            "Key scenes",
            "Death and between-lives",
            "Integration",
        ),
        technical_depth="intermediate",
        tradition="Regression therapy",
        teachers=("Brian Weiss", "Michael Newton", "Dolores Cannon"),
    ),
    JourneySubType.SPIRIT_GUIDE: JourneyInfo(
        id=JourneySubType.SPIRIT_GUIDE,
        name="Spirit Guide Connection",
        description="Meeting and communicating with guides or the higher self.",
        key_elements=(
            "Sacred space creation",
            "Guide invitation",
            "Communication",
            "Gift/message",
            "Ongoing connection",
        ),
        technical_depth="intermediate",
        tradition=None,
        teachers=("Sonia Choquette", "Robert Moss", "Doreen Virtue"),
    ),
    JourneySubType.SHAMANIC: JourneyInfo(
        id=JourneySubType.SHAMANIC,
        name="Shamanic Journey",
        description="Journeying to the lower, middle or upper worlds.",
        key_elements=(
            "Power animal retrieval",
            "World axis travel",
            "Spirit encounters",
            "Soul retrieval elements",
        ),
        technical_depth="advanced",
        tradition="Core shamanism",
        teachers=("Sandra Ingerman", "Michael Harner", "Alberto Villoldo"),
    ),
    JourneySubType.ASTRAL: JourneyInfo(
        id=JourneySubType.ASTRAL,
        name="Astral Projection",
        description="Guided out-of-body exploration of the astral planes.",
        key_elements=("Vibration state", "Separation techniques", "Astral navigation", "Return protocols"),
        technical_depth="expert",
        tradition="Western esotericism",
        teachers=("Robert Monroe", "William Buhlman", "Robert Bruce"),
    ),
    JourneySubType.AKASHIC: JourneyInfo(
        id=JourneySubType.AKASHIC,
        name="Akashic Records Access",
        description="Visiting the hall of records for soul history.",
        key_elements=("Portal opening", "Library visualization", "Record retrieval", "Integration"),
        technical_depth="advanced",
        tradition="Theosophy / New Age",
        teachers=("Edgar Cayce", "Linda Howe", "Ernesto Ortiz"),
    ),
    JourneySubType.QUANTUM_FIELD: JourneyInfo(
        id=JourneySubType.QUANTUM_FIELD,
        name="Quantum Field Exploration",
        description="Entering the unified field of possibility.",
        key_elements=("Heart coherence", "Field access", "Possibility wave collapse", "Reality selection"),
        technical_depth="advanced",
        tradition="Modern consciousness science",
        teachers=("Joe Dispenza", "Gregg Braden", "Lynne McTaggart"),
    ),
}

STORY_AGE_GROUPS: dict[StoryAgeGroup, StoryAgeGroupInfo] = {
    StoryAgeGroup.TODDLER: StoryAgeGroupInfo(
        id=StoryAgeGroup.TODDLER,
        name="Toddler Story",
        age_range="2-4 years",
        description="Simple, soothing stories with repetition and familiar characters.",
        vocabulary_level="simple",
        max_syllables=2,
        avoid_words=("scary", "monster", "dark", "alone", "lost", "afraid"),
        word_count=(150, 300),
        sentence_length=(6, 10),
        paragraphs=(3, 6),
        themes=(
            "bedtime routines",
            "cozy feelings",
            "friendship",
            "family love",
            "nature walks",
            "animal friends",
            "gentle adventures",
            "dreams",
        ),
        characters=(
            "bunny",
            "bear",
            "owl",
            "mouse",
            "kitten",
            "puppy",
            "duckling",
            "squirrel",
            "butterfly",
            "stars",
            "moon",
        ),
        requirements=(
            "Repetitive phrases for comfort",
            "Predictable, gentle plot",
            "Always ends with cozy sleep",
            "No conflict or scary elements",
            "Third-person for parent to read aloud",
        ),
    ),
    StoryAgeGroup.YOUNG_CHILD: StoryAgeGroupInfo(
        id=StoryAgeGroup.YOUNG_CHILD,
        name="Young Child Story",
        age_range="5-8 years",
        description="Richer narratives with adventure, magic and gentle lessons.",
        vocabulary_level="moderate",
        max_syllables=3,
        avoid_words=("terrifying", "death", "blood", "violent"),
        word_count=(400, 900),
        sentence_length=(10, 18),
        paragraphs=(6, 12),
        themes=(
            "courage",
            "kindness",
            "curiosity",
            "magic",
            "adventure",
            "friendship",
            "problem-solving",
            "believing in yourself",
            "nature wonder",
            "fantasy worlds",
            "gentle quests",
        ),
        characters=(
            "brave children",
            "wise animals",
            "friendly dragons",
            "helpful fairies",
            "talking trees",
            "star guardians",
            "dream guides",
            "magical creatures",
        ),
        requirements=(
            "Clear beginning, middle, end",
            "Simple conflict that resolves positively",
            "Gentle moral or lesson (not preachy)",
            "Imaginative but not frightening",
            "Always ends with safety and rest",
            "Third-person for parent to read aloud",
        ),
    ),
}

MEDITATION_TYPES: dict[str, MeditationTypeInfo] = {
    info.id: info
    for info in (
        MeditationTypeInfo(
            "guided_visualization",
            "Guided Visualization",
            "Immersive mental imagery for relaxation and change.",
            ("Stress relief", "Goal manifestation", "Creativity boost", "Emotional healing"),
        ),
        MeditationTypeInfo(
            "breathwork",
            "Breathwork",
            "Conscious breathing to regulate the nervous system.",
            ("Nervous system regulation", "Emotional release", "Energy boost", "Mental clarity"),
        ),
        MeditationTypeInfo(
            "body_scan",
            "Body Scan / Progressive Relaxation",
            "Systematic attention through the body to release tension.",
            ("Deep relaxation", "Body awareness", "Tension release", "Better sleep"),
        ),
        MeditationTypeInfo(
            "loving_kindness",
            "Loving-Kindness (Metta)",
            "Cultivating compassion for yourself and others.",
            ("Self-compassion", "Relationship healing", "Emotional warmth", "Reduced anger"),
        ),
        MeditationTypeInfo(
            "sleep_story",
            "Sleep Story",
            "Gentle narrative that quiets the mind toward sleep.",
            ("Better sleep", "Reduced insomnia", "Relaxation", "Dream enhancement"),
        ),
        MeditationTypeInfo(
            "affirmations",
            "Affirmations",
            "Positive statements that reshape limiting beliefs.",
            ("Confidence boost", "Belief transformation", "Self-love", "Motivation"),
        ),
        MeditationTypeInfo(
            "walking_meditation",
            "Walking Meditation",
            "Mindful movement with awareness in each step.",
            ("Grounding", "Present moment awareness", "Energy flow"),
        ),
        MeditationTypeInfo(
            "shadow_work",
            "Shadow Work / Inner Child Healing",
            "Meeting and integrating hidden parts of the self.",
            ("Emotional healing", "Self-integration", "Pattern breaking"),
        ),
        MeditationTypeInfo(
            "gratitude",
            "Gratitude Practice",
            "Appreciation for what is already here.",
            ("Mood elevation", "Abundance mindset", "Life satisfaction"),
        ),
        MeditationTypeInfo(
            "manifestation",
            "Manifestation / Intention Setting",
            "Aligning thought and feeling with a desired reality.",
            ("Goal clarity", "Energetic alignment", "Inspired action"),
        ),
        MeditationTypeInfo(
            "presence",
            "Pure Presence / Being",
            "Resting in simple awareness of this moment.",
            ("Inner peace", "Mental stillness", "Spiritual awakening"),
        ),
        MeditationTypeInfo(
            "inquiry",
            "Self-Inquiry",
            "Questioning thoughts and beliefs to find what is true.",
            ("Mental freedom", "Self-knowledge", "Clarity"),
        ),
        MeditationTypeInfo(
            "surrender",
            "Surrender / Letting Go",
            "Releasing control and trusting the flow of life.",
            ("Peace", "Trust", "Emotional release"),
        ),
    )
}

HYPNOSIS_SAFETY_FRAMING = SafetyFraming(
    opening_disclaimer=(
        "Before we begin, please make sure you are somewhere safe and comfortable "
        "where you will not be disturbed. Never listen to hypnosis while driving or "
        "operating machinery. If you have a history of psychosis or a severe mental "
        "health condition, or are unsure whether hypnosis is right for you, please "
        "talk to a healthcare professional first."
    ),
    consent_statement=(
        "Throughout this session you remain in complete control. You can open your "
        "eyes and return to full alertness at any time simply by choosing to. "
        "Hypnosis is a natural state you enter many times a day, like being absorbed "
        "in a book. You will only accept suggestions that are beneficial to you."
    ),
    emergency_exit=(
        "At any moment, if you need to return to full alertness, take three deep "
        'breaths, open your eyes and say "I am fully awake and alert." You are always '
        "in control."
    ),
    emergence_protocol=(
        "In a moment I will count from 1 to 5. With each number you become more alert "
        "and aware. At the count of 5 your eyes open and you feel completely awake, "
        "refreshed and wonderful.\n\n"
        "1... Beginning to return now, energy flowing back into your body.\n"
        "2... More aware now, becoming alert and present.\n"
        "3... Feeling your body and the surface beneath you, energy increasing.\n"
        "4... Almost there, eyes ready to open, mind clear and focused.\n"
        "5... Eyes open, fully awake, fully alert, feeling wonderful.\n\n"
        "Take a moment to stretch and reorient yourself to your surroundings."
    ),
)

_TEMPERATURES: dict[ContentCategory, float] = {
    ContentCategory.MEDITATION: 0.7,
    ContentCategory.AFFIRMATION: 0.6,
    ContentCategory.SELF_HYPNOSIS: 0.5,  # structured, consistent
    ContentCategory.GUIDED_JOURNEY: 0.8,
    ContentCategory.STORY: 0.65,
}


# =============================================================================
# Lookups
# =============================================================================


def get_category_info(category: ContentCategory | str) -> ContentCategoryInfo:
    return CONTENT_CATEGORIES[ContentCategory(category)]


def get_affirmation_info(sub_type: AffirmationSubType | str) -> AffirmationInfo | None:
    try:
        return AFFIRMATION_SUBTYPES[AffirmationSubType(sub_type)]
    except ValueError:
        return None


def get_hypnosis_depth_info(depth: HypnosisDepth | str) -> HypnosisDepthInfo | None:
    try:
        return HYPNOSIS_DEPTHS[HypnosisDepth(depth)]
    except ValueError:
        return None


def get_journey_info(sub_type: JourneySubType | str) -> JourneyInfo | None:
    try:
        return JOURNEY_SUBTYPES[JourneySubType(sub_type)]
    except ValueError:
        return None


def get_story_age_group_info(age_group: StoryAgeGroup | str) -> StoryAgeGroupInfo | None:
    try:
        return STORY_AGE_GROUPS[StoryAgeGroup(age_group)]
    except ValueError:
        return None


def requires_safety_framing(category: ContentCategory | str) -> bool:
    return get_category_info(category).requires_safety_framing


def temperature_for_category(category: ContentCategory | str) -> float:
    """Sampling temperature for the generation call."""
    return _TEMPERATURES.get(ContentCategory(category), 0.7)


def words_per_second(category: ContentCategory | str, sub_type: str | None = None) -> float:
    """Narration pace for a category, refined by affirmation style."""
    category = ContentCategory(category)
    if category is ContentCategory.AFFIRMATION and sub_type:
        info = get_affirmation_info(sub_type)
        if info is not None:
            return info.words_per_second
    return get_category_info(category).words_per_second


def calculate_word_count(category: ContentCategory | str, sub_type: str, duration_minutes: float) -> int:
    """Unclamped spoken word count for ``duration_minutes`` at the category pace."""
    return round(duration_minutes * 60 * words_per_second(category, sub_type))


def sub_type_label(category: ContentCategory | str, sub_type: str) -> str:
    """Human-readable name of a sub-type, used in questions and confirmations."""
    category = ContentCategory(category)
    info: object | None = None
    if category is ContentCategory.MEDITATION:
        info = MEDITATION_TYPES.get(sub_type)
    elif category is ContentCategory.AFFIRMATION:
        info = get_affirmation_info(sub_type)
    elif category is ContentCategory.SELF_HYPNOSIS:
        info = get_hypnosis_depth_info(sub_type)
    elif category is ContentCategory.GUIDED_JOURNEY:
        info = get_journey_info(sub_type)
    elif category is ContentCategory.STORY:
        info = get_story_age_group_info(sub_type)
    name = getattr(info, "name", None)
    return name if isinstance(name, str) else sub_type.replace("_", " ").title()
