"""Declarative detection rule tables.

The detector is driven by three tables:

- ``explicit``: ordered regex rules, first match wins (confidence 85-95)
- ``ambiguous``: phrasings that map to several categories plus a question
- ``clusters``: weighted keyword groups for semantic scoring

The built-in tables are ``DEFAULT_RULES``. A TOML file with ``[[explicit]]``,
``[[ambiguous]]`` and ``[[cluster]]`` arrays can replace any of them:

    [[explicit]]
    pattern = "yoga\\s+nidra"
    category = "meditation"
    sub_type = "body_scan"
    confidence = 90

Every table is validated with pydantic before the detector sees it.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found,no-redef]

from innrvo.errors import RuleTableError

from .types import (
    EXPLICIT_CONFIDENCE_FLOOR,
    ContentAudience,
    ContentCategory,
    HypnosisDepth,
    StoryAgeGroup,
    is_valid_sub_type,
)

logger = logging.getLogger(__name__)


def _check_pattern(value: str) -> str:
    try:
        re.compile(value, re.IGNORECASE)
    except re.error as e:
        raise ValueError(f"invalid regex {value!r}: {e}") from e
    return value


def _check_sub_type(category: ContentCategory, sub_type: str) -> None:
    if not is_valid_sub_type(category, sub_type):
        raise ValueError(f"{sub_type!r} is not a sub-type of {category.value}")


class ExplicitRule(BaseModel):
    """A direct request phrasing that is never second-guessed."""

    pattern: str
    category: ContentCategory
    sub_type: str
    confidence: int = Field(ge=EXPLICIT_CONFIDENCE_FLOOR, le=95)
    audience: ContentAudience | None = None
    depth: HypnosisDepth | None = None
    age_group: StoryAgeGroup | None = None

    _validate_pattern = field_validator("pattern")(_check_pattern)

    @model_validator(mode="after")
    def _sub_type_matches_category(self) -> ExplicitRule:
        _check_sub_type(self.category, self.sub_type)
        if self.depth is not None and self.category is not ContentCategory.SELF_HYPNOSIS:
            raise ValueError("depth only applies to self_hypnosis rules")
        if self.age_group is not None and self.category is not ContentCategory.STORY:
            raise ValueError("age_group only applies to story rules")
        return self


class Candidate(BaseModel):
    category: ContentCategory
    sub_type: str

    @model_validator(mode="after")
    def _sub_type_matches_category(self) -> Candidate:
        _check_sub_type(self.category, self.sub_type)
        return self


class AmbiguousPhrase(BaseModel):
    """A phrasing that plausibly means several things; answered with a question."""

    pattern: str
    candidates: list[Candidate] = Field(min_length=2)
    question: str = Field(min_length=1)

    _validate_pattern = field_validator("pattern")(_check_pattern)


class KeywordCluster(BaseModel):
    """Keywords that vote for one category/sub-type during semantic scoring."""

    category: ContentCategory
    sub_type: str
    keywords: list[str] = Field(min_length=1)
    weight: int = Field(gt=0)
    context_boost: list[str] = Field(default_factory=list)

    @field_validator("keywords", "context_boost")
    @classmethod
    def _lowercase(cls, values: list[str]) -> list[str]:
        return [v.lower() for v in values]

    @model_validator(mode="after")
    def _sub_type_matches_category(self) -> KeywordCluster:
        _check_sub_type(self.category, self.sub_type)
        return self


class RuleSet(BaseModel):
    explicit: list[ExplicitRule] = Field(default_factory=list)
    ambiguous: list[AmbiguousPhrase] = Field(default_factory=list)
    clusters: list[KeywordCluster] = Field(default_factory=list)


# =============================================================================
# Built-in tables
# =============================================================================

# Order encodes priority: specific phrasings must come before general ones.
_EXPLICIT: list[dict[str, Any]] = [
    # Children's stories
    {"pattern": r"(?:bedtime\s+)?story\s+for\s+(?:my\s+)?(?:[0-4][-\s]?(?:years?[-\s]?old|yo)\b|\b(?:two|three|four)\b)",
     "category": "story", "sub_type": "toddler", "confidence": 95, "audience": "parent_to_child", "age_group": "toddler"},
    {"pattern": r"(?:bedtime\s+)?story\s+for\s+(?:my\s+)?(?:toddler|baby|little\s+one|infant)",
     "category": "story", "sub_type": "toddler", "confidence": 95, "audience": "parent_to_child", "age_group": "toddler"},
    {"pattern": r"(?:bedtime\s+)?story\s+for\s+(?:my\s+)?\d+[-\s]?(?:years?[-\s]?old|yo)\b",
     "category": "story", "sub_type": "young_child", "confidence": 90, "audience": "parent_to_child", "age_group": "young_child"},
    {"pattern": r"(?:bedtime\s+)?story\s+for\s+(?:my\s+)?(?:kid|child|son|daughter)",
     "category": "story", "sub_type": "young_child", "confidence": 85, "audience": "parent_to_child"},
    {"pattern": r"children(?:'s)?\s+(?:bedtime\s+)?story",
     "category": "story", "sub_type": "young_child", "confidence": 90, "audience": "parent_to_child"},
    {"pattern": r"read\s+(?:to\s+)?(?:my\s+)?(?:kid|child|son|daughter)",
     "category": "story", "sub_type": "young_child", "confidence": 85, "audience": "parent_to_child"},
    # Self-hypnosis. Specific depths first, then the generic phrasings.
    {"pattern": r"deep\s+(?:trance|hypnosis)",
     "category": "self_hypnosis", "sub_type": "therapeutic", "confidence": 90, "depth": "therapeutic"},
    {"pattern": r"therapeutic\s+hypnosis",
     "category": "self_hypnosis", "sub_type": "therapeutic", "confidence": 95, "depth": "therapeutic"},
    {"pattern": r"light\s+(?:relaxation\s+)?hypnosis",
     "category": "self_hypnosis", "sub_type": "light", "confidence": 95, "depth": "light"},
    {"pattern": r"(?:self[-\s]?)?hypnosis\s+(?:for|about|to)\b",
     "category": "self_hypnosis", "sub_type": "standard", "confidence": 95},
    {"pattern": r"(?:create|make|generate)\s+(?:a\s+|me\s+a\s+)?(?:self[-\s]?)?hypnosis",
     "category": "self_hypnosis", "sub_type": "standard", "confidence": 95},
    {"pattern": r"hypnotize\s+me",
     "category": "self_hypnosis", "sub_type": "standard", "confidence": 95},
    # Affirmations
    {"pattern": r"power\s+affirmations?", "category": "affirmation", "sub_type": "power", "confidence": 95},
    {"pattern": r"i\s+am\s+affirmations?", "category": "affirmation", "sub_type": "power", "confidence": 90},
    {"pattern": r"mirror\s+work(?:\s+affirmations?)?", "category": "affirmation", "sub_type": "mirror_work", "confidence": 95},
    {"pattern": r"louise\s+hay", "category": "affirmation", "sub_type": "mirror_work", "confidence": 90},
    {"pattern": r"sleep\s+affirmations?", "category": "affirmation", "sub_type": "sleep", "confidence": 95},
    {"pattern": r"subliminal\s+affirmations?", "category": "affirmation", "sub_type": "sleep", "confidence": 90},
    {"pattern": r"guided\s+affirmations?", "category": "affirmation", "sub_type": "guided", "confidence": 95},
    {"pattern": r"(?:create|make|generate)\s+(?:some\s+|me\s+)?affirmations?\s+(?:for|about|to)\b",
     "category": "affirmation", "sub_type": "power", "confidence": 85},
    {"pattern": r"affirmations?\s+for\s+(?:confidence|self[-\s]?esteem|abundance|wealth|money|success)",
     "category": "affirmation", "sub_type": "power", "confidence": 85},
    # Guided journeys
    {"pattern": r"past\s+life\s+(?:regression|journey|exploration)", "category": "guided_journey", "sub_type": "past_life", "confidence": 95},
    {"pattern": r"(?:meet|connect\s+with)\s+(?:my\s+)?(?:spirit\s+)?guides?\b", "category": "guided_journey", "sub_type": "spirit_guide", "confidence": 95},
    {"pattern": r"higher\s+self\s+(?:journey|connection|meditation)", "category": "guided_journey", "sub_type": "spirit_guide", "confidence": 90},
    {"pattern": r"shamanic\s+(?:journey|meditation)", "category": "guided_journey", "sub_type": "shamanic", "confidence": 95},
    {"pattern": r"(?:power\s+)?animal\s+(?:journey|retrieval)", "category": "guided_journey", "sub_type": "shamanic", "confidence": 90},
    {"pattern": r"astral\s+(?:projection|travel|journey)", "category": "guided_journey", "sub_type": "astral", "confidence": 95},
    {"pattern": r"out\s+of\s+body\s+(?:experience|journey)", "category": "guided_journey", "sub_type": "astral", "confidence": 95},
    {"pattern": r"akashic\s+(?:records?|journey)", "category": "guided_journey", "sub_type": "akashic", "confidence": 95},
    {"pattern": r"quantum\s+(?:field|journey|meditation)", "category": "guided_journey", "sub_type": "quantum_field", "confidence": 90},
    {"pattern": r"inner\s+journey", "category": "guided_journey", "sub_type": "inner_journey", "confidence": 85},
    {"pattern": r"soul\s+retrieval", "category": "guided_journey", "sub_type": "shamanic", "confidence": 90},
    # Meditations
    {"pattern": r"breathwork\s+(?:meditation|session)", "category": "meditation", "sub_type": "breathwork", "confidence": 95},
    {"pattern": r"body\s+scan", "category": "meditation", "sub_type": "body_scan", "confidence": 95},
    {"pattern": r"loving[-\s]?kindness", "category": "meditation", "sub_type": "loving_kindness", "confidence": 95},
    {"pattern": r"\bmetta\b", "category": "meditation", "sub_type": "loving_kindness", "confidence": 95},
    {"pattern": r"sleep\s+(?:meditation|story)", "category": "meditation", "sub_type": "sleep_story", "confidence": 90},
    {"pattern": r"guided\s+visuali[sz]ation", "category": "meditation", "sub_type": "guided_visualization", "confidence": 95},
    {"pattern": r"shadow\s+work", "category": "meditation", "sub_type": "shadow_work", "confidence": 95},
    {"pattern": r"inner\s+child\s+(?:healing|meditation)", "category": "meditation", "sub_type": "shadow_work", "confidence": 90},
    {"pattern": r"gratitude\s+(?:meditation|practice)", "category": "meditation", "sub_type": "gratitude", "confidence": 95},
    {"pattern": r"manifestation", "category": "meditation", "sub_type": "manifestation", "confidence": 90},
    {"pattern": r"walking\s+meditation", "category": "meditation", "sub_type": "walking_meditation", "confidence": 95},
    {"pattern": r"self[-\s]?inquiry", "category": "meditation", "sub_type": "inquiry", "confidence": 90},
    {"pattern": r"presence\s+(?:meditation|practice)", "category": "meditation", "sub_type": "presence", "confidence": 85},
    {"pattern": r"mindfulness", "category": "meditation", "sub_type": "presence", "confidence": 85},
]

_AMBIGUOUS: list[dict[str, Any]] = [
    {
        "pattern": r"help\s+(?:me\s+)?sleep",
        "candidates": [
            {"category": "meditation", "sub_type": "sleep_story"},
            {"category": "story", "sub_type": "young_child"},
            {"category": "affirmation", "sub_type": "sleep"},
            {"category": "self_hypnosis", "sub_type": "light"},
        ],
        "question": (
            "I can help you sleep in several ways. Would you prefer: "
            "(1) A calming sleep meditation, (2) A bedtime story for your child, "
            "(3) Gentle sleep affirmations, or (4) Sleep hypnosis?"
        ),
    },
    {
        "pattern": r"(?:reprogram|change)\s+(?:my\s+)?beliefs?",
        "candidates": [
            {"category": "affirmation", "sub_type": "power"},
            {"category": "self_hypnosis", "sub_type": "standard"},
        ],
        "question": (
            "For belief work I can offer: (1) Power affirmations to reinforce new "
            "beliefs, or (2) Self-hypnosis to work at the subconscious level. "
            "Which feels right for you?"
        ),
    },
    {
        "pattern": r"(?:story|tale)\s+(?:about|for)\b",
        "candidates": [
            {"category": "story", "sub_type": "young_child"},
            {"category": "meditation", "sub_type": "sleep_story"},
            {"category": "guided_journey", "sub_type": "inner_journey"},
        ],
        "question": (
            "Would you like: (1) A children's bedtime story for a parent to read "
            "aloud, (2) A sleep story for yourself, or (3) A guided inner journey?"
        ),
    },
    {
        "pattern": r"spiritual\s+(?:journey|exploration|experience)",
        "candidates": [
            {"category": "guided_journey", "sub_type": "inner_journey"},
            {"category": "meditation", "sub_type": "guided_visualization"},
        ],
        "question": (
            "For your spiritual exploration, would you prefer: (1) A deep guided "
            "journey (past life, spirit guides and so on), or (2) A spiritual "
            "meditation for inner peace?"
        ),
    },
]

_CLUSTERS: list[dict[str, Any]] = [
    # Stories
    {"category": "story", "sub_type": "toddler", "weight": 15,
     "keywords": ["toddler", "baby", "2 year", "3 year", "4 year", "little one", "bunny", "teddy"],
     "context_boost": ["bedtime", "sleep", "read"]},
    {"category": "story", "sub_type": "young_child", "weight": 15,
     "keywords": ["kid", "child", "son", "daughter", "5 year", "6 year", "7 year", "8 year", "adventure", "dragon", "fairy"],
     "context_boost": ["bedtime", "story", "read", "magical"]},
    # Hypnosis
    {"category": "self_hypnosis", "sub_type": "standard", "weight": 20,
     "keywords": ["hypnosis", "hypnotic", "trance", "subconscious", "reprogram", "induction", "deepen"],
     "context_boost": ["suggestions", "emergence", "deeper"]},
    {"category": "self_hypnosis", "sub_type": "therapeutic", "weight": 15,
     "keywords": ["therapeutic", "deep trance", "profound", "intensive", "transformation"],
     "context_boost": ["healing", "trauma", "release"]},
    # Affirmations
    {"category": "affirmation", "sub_type": "power", "weight": 15,
     "keywords": ["i am", "affirmation", "confident", "powerful", "worthy", "abundance"],
     "context_boost": ["manifest", "believe", "deserve"]},
    {"category": "affirmation", "sub_type": "mirror_work", "weight": 15,
     "keywords": ["mirror", "you are", "self-love", "louise hay"],
     "context_boost": ["reflection", "looking at yourself"]},
    {"category": "affirmation", "sub_type": "sleep", "weight": 15,
     "keywords": ["sleep affirmation", "subliminal", "overnight", "as i sleep"],
     "context_boost": ["drift", "peaceful", "subconscious"]},
    # Journeys
    {"category": "guided_journey", "sub_type": "past_life", "weight": 20,
     "keywords": ["past life", "previous life", "regression", "incarnation", "karma"],
     "context_boost": ["memory", "lifetime", "before this life"]},
    {"category": "guided_journey", "sub_type": "spirit_guide", "weight": 20,
     "keywords": ["spirit guide", "higher self", "guardian", "angel", "guide"],
     "context_boost": ["meet", "connect", "communicate", "message"]},
    {"category": "guided_journey", "sub_type": "shamanic", "weight": 20,
     "keywords": ["shamanic", "power animal", "spirit animal", "lower world", "upper world", "drumming"],
     "context_boost": ["journey", "retrieve", "wisdom"]},
    {"category": "guided_journey", "sub_type": "astral", "weight": 20,
     "keywords": ["astral", "out of body", "obe", "projection", "etheric", "floating"],
     "context_boost": ["leave body", "travel", "plane"]},
    {"category": "guided_journey", "sub_type": "akashic", "weight": 20,
     "keywords": ["akashic", "records", "hall of records", "soul history", "cosmic library"],
     "context_boost": ["access", "read", "information"]},
    {"category": "guided_journey", "sub_type": "quantum_field", "weight": 15,
     "keywords": ["quantum", "unified field", "infinite possibility", "collapse", "wave"],
     "context_boost": ["consciousness", "reality", "create"]},
    {"category": "guided_journey", "sub_type": "inner_journey", "weight": 15,
     "keywords": ["inner world", "inner landscape", "sanctuary", "inner temple"],
     "context_boost": ["explore", "discover", "within"]},
    # General meditation
    {"category": "meditation", "sub_type": "breathwork", "weight": 15,
     "keywords": ["breath", "breathing", "inhale", "exhale", "pranayama"],
     "context_boost": ["relax", "calm", "regulate"]},
    {"category": "meditation", "sub_type": "body_scan", "weight": 15,
     "keywords": ["body scan", "progressive relaxation", "body awareness", "tension release"],
     "context_boost": ["relax", "muscles", "scan"]},
    {"category": "meditation", "sub_type": "sleep_story", "weight": 15,
     "keywords": ["sleep", "insomnia", "can't sleep", "restless", "drift off"],
     "context_boost": ["bed", "night", "rest"]},
]

DEFAULT_RULES = RuleSet.model_validate(
    {"explicit": _EXPLICIT, "ambiguous": _AMBIGUOUS, "clusters": _CLUSTERS}
)


def load_rules(path: Path | str, *, base: RuleSet | None = None) -> RuleSet:
    """Load a rule file, replacing only the tables it defines.

    Args:
        path: TOML file with any of ``[[explicit]]``, ``[[ambiguous]]`` and
            ``[[cluster]]`` arrays.
        base: Tables used for sections the file leaves out. Defaults to
            ``DEFAULT_RULES``.

    Returns:
        A validated RuleSet.

    Raises:
        RuleTableError: If the file cannot be read, is not TOML, or any rule
            is invalid.
    """
    path = Path(path).expanduser()
    base = base or DEFAULT_RULES
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise RuleTableError(f"cannot read rule file: {e}", source=str(path)) from e
    except tomllib.TOMLDecodeError as e:
        raise RuleTableError(f"invalid TOML: {e}", source=str(path)) from e

    unknown = set(data) - {"explicit", "ambiguous", "cluster"}
    if unknown:
        raise RuleTableError(f"unknown sections: {', '.join(sorted(unknown))}", source=str(path))

    merged = {
        "explicit": data.get("explicit", base.model_dump()["explicit"]),
        "ambiguous": data.get("ambiguous", base.model_dump()["ambiguous"]),
        "clusters": data.get("cluster", base.model_dump()["clusters"]),
    }
    try:
        rules = RuleSet.model_validate(merged)
    except ValidationError as e:
        raise RuleTableError(str(e), source=str(path)) from e

    logger.info(
        "Loaded detection rules from %s (%d explicit, %d ambiguous, %d clusters)",
        path,
        len(rules.explicit),
        len(rules.ambiguous),
        len(rules.clusters),
    )
    return rules
