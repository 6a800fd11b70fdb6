"""Context extraction from raw user text.

Two entry points:

- ``extract_context`` pulls the fields the detector enriches a result with
  (duration, story age group, hypnosis depth, goal phrase).
- ``ContextExtractor`` pulls the softer conversational context (situation,
  scene settings, time of day, goal keywords, duration preference) that the
  agent uses when talking to the user.

Extraction never raises; anything that cannot be found is left as ``None``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .types import HypnosisDepth, StoryAgeGroup

logger = logging.getLogger(__name__)

GOAL_MAX_CHARS = 100
HISTORY_GOAL_MAX_CHARS = 200


@dataclass(frozen=True)
class DetectionContext:
    """Fields used to enrich a detection result."""

    duration_minutes: int | None = None
    age_group: StoryAgeGroup | None = None
    depth: HypnosisDepth | None = None
    goal: str | None = None


# =============================================================================
# Detection enrichment
# =============================================================================

_MINUTES_RE = re.compile(r"(\d+)\s*(?:minutes?|mins?)\b", re.IGNORECASE)
_HOURS_RE = re.compile(r"(\d+)\s*(?:hours?|hrs?)\b", re.IGNORECASE)
_SHORT_RE = re.compile(r"\b(?:short|quick)\b", re.IGNORECASE)
_LONG_RE = re.compile(r"\b(?:long|extended)\b", re.IGNORECASE)

_AGE_RE = re.compile(r"(\d+)[-\s]?(?:years?[-\s]?old|yo)\b", re.IGNORECASE)
_TODDLER_WORDS_RE = re.compile(r"\b(?:toddler|baby)\b", re.IGNORECASE)
_CHILD_WORDS_RE = re.compile(r"\b(?:kids?|child(?:ren)?)\b", re.IGNORECASE)

_THERAPEUTIC_RE = re.compile(r"deep\s+(?:trance|hypnosis)|\btherapeutic\b|\bintensive\b", re.IGNORECASE)
_LIGHT_RE = re.compile(r"\b(?:light|gentle|relaxation|beginner)\b", re.IGNORECASE)
_STANDARD_RE = re.compile(r"\bhypno", re.IGNORECASE)

_GOAL_PATTERNS = [
    re.compile(
        r"\b(?:to help with|to overcome|to improve|to increase|for|about)\s+(.+?)(?:[.,!?]|$)",
        re.IGNORECASE,
    ),
    re.compile(r"\bi\s+(?:want|need)\s+(?:to|help\s+with)\s+(.+?)(?:[.,!?]|$)", re.IGNORECASE),
]

# "... for 5 minutes", "... in about 10 mins" trailing the goal phrase.
_TRAILING_DURATION_RE = re.compile(
    r"\s*\b(?:(?:for|in|of)\s+)?(?:about\s+|around\s+)?\d+\s*(?:minutes?|mins?|hours?|hrs?)\b.*$",
    re.IGNORECASE,
)


def extract_duration(text: str) -> int | None:
    """Requested length in minutes. Explicit numbers beat fuzzy words."""
    match = _MINUTES_RE.search(text)
    if match and int(match.group(1)) > 0:
        return int(match.group(1))
    match = _HOURS_RE.search(text)
    if match and int(match.group(1)) > 0:
        return int(match.group(1)) * 60
    if _SHORT_RE.search(text):
        return 5
    if _LONG_RE.search(text):
        return 30
    return None


def bucket_age(age: int) -> StoryAgeGroup:
    """Map a child's age to the story age group that fits it best."""
    if age <= 4:
        return StoryAgeGroup.TODDLER
    return StoryAgeGroup.YOUNG_CHILD


def extract_age_group(text: str) -> StoryAgeGroup | None:
    match = _AGE_RE.search(text)
    if match:
        return bucket_age(int(match.group(1)))
    if _TODDLER_WORDS_RE.search(text):
        return StoryAgeGroup.TODDLER
    if _CHILD_WORDS_RE.search(text):
        return StoryAgeGroup.YOUNG_CHILD
    return None


def extract_depth(text: str) -> HypnosisDepth | None:
    if _THERAPEUTIC_RE.search(text):
        return HypnosisDepth.THERAPEUTIC
    if _LIGHT_RE.search(text):
        return HypnosisDepth.LIGHT
    if _STANDARD_RE.search(text):
        return HypnosisDepth.STANDARD
    return None


def extract_goal(text: str, *, max_chars: int = GOAL_MAX_CHARS) -> str | None:
    """First goal phrase in ``text``, without any trailing duration."""
    for pattern in _GOAL_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        goal = _TRAILING_DURATION_RE.sub("", match.group(1)).strip()
        if goal:
            return goal[:max_chars].rstrip()
    return None


def extract_context(text: str) -> DetectionContext:
    """Extract the enrichment fields for one utterance."""
    return DetectionContext(
        duration_minutes=extract_duration(text),
        age_group=extract_age_group(text),
        depth=extract_depth(text),
        goal=extract_goal(text),
    )


# =============================================================================
# Conversational context
# =============================================================================

_SITUATION_PATTERNS = [
    r"(?:have|got|facing|before|after|during)\s+(?:a|an|my|the)?\s*[a-z\s]+"
    r"(?:interview|meeting|exam|presentation|date|surgery|flight|trip|call|appointment)",
    r"(?:dealing with|going through|struggling with|facing)\s+[a-z\s]+",
    r"(?:my|the)\s+[a-z]+\s+(?:is|are|was|were)\s+(?:making|causing|giving)",
    r"(?:broke up|breakup|divorce|lost my|death of|passed away)",
    r"(?:work|job|boss|coworker|colleague)\s+(?:is|are|stress)",
]

SETTING_KEYWORDS = (
    "beach", "ocean", "sea", "waves", "shore", "sand",
    "forest", "woods", "trees", "nature", "garden",
    "mountain", "mountains", "peak", "summit", "hiking",
    "river", "stream", "waterfall", "lake", "pond",
    "meadow", "field", "flowers", "grass",
    "sky", "clouds", "stars", "moon", "sun", "sunrise", "sunset",
    "rain", "storm", "thunder", "snow", "winter",
    "cabin", "cottage", "home", "room", "bed",
    "temple", "sanctuary", "sacred", "spiritual",
    "space", "cosmos", "universe", "floating",
)

_TIME_PATTERNS = [
    (r"tonight|going to bed|bedtime|before sleep|can't sleep|falling asleep", "nighttime/sleep"),
    (r"morning|wake up|start my day|before work", "morning/awakening"),
    (r"lunch|\bbreak\b|midday|afternoon", "midday/break"),
    (r"evening|after work|wind down|end of day", "evening/unwinding"),
    (r"quick|short|5 minutes?|few minutes?|brief", "quick session"),
    (r"\bdeep\b|\blong\b|extended|thorough|\bfull\b", "extended session"),
]

GOAL_KEYWORDS = (
    "calm", "peace", "relaxation", "focus", "clarity", "confidence",
    "sleep", "rest", "energy", "motivation", "courage", "strength",
    "self-love", "forgiveness", "acceptance", "gratitude", "joy",
    "healing", "release", "letting go", "grounding", "centering",
)

_DURATION_PREFERENCES = [
    (r"\b(?:quick|short|brief)\b", "3-5 minutes"),
    (r"\b(?:medium|normal|regular)\b", "10-15 minutes"),
    (r"\b(?:long|deep|extended|full)\b", "20-30 minutes"),
]
_PREFERENCE_MINUTES_RE = re.compile(r"(\d+)\s*(?:min|minute)", re.IGNORECASE)
_FIRST_NUMBER_RE = re.compile(r"(\d+)")

# A bare numbered-option reply such as "2" or "3.".
OPTION_REPLY_RE = re.compile(r"(\d)[.)]?")


def _word_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)


@dataclass
class ExtractedUserContext:
    situation: str | None = None
    settings: list[str] = field(default_factory=list)
    time_context: str | None = None
    goals: list[str] = field(default_factory=list)
    duration: str | None = None


class ContextExtractor:
    """Extracts situations, scenes and preferences from a user message."""

    def __init__(self) -> None:
        self._situations = [re.compile(p, re.IGNORECASE) for p in _SITUATION_PATTERNS]
        self._settings = [(k, _word_pattern(k)) for k in SETTING_KEYWORDS]
        self._times = [(re.compile(p, re.IGNORECASE), label) for p, label in _TIME_PATTERNS]
        self._goals = [(k, _word_pattern(k)) for k in GOAL_KEYWORDS]
        self._durations = [(re.compile(p, re.IGNORECASE), label) for p, label in _DURATION_PREFERENCES]

    def extract(self, text: str) -> ExtractedUserContext:
        result = ExtractedUserContext()

        for pattern in self._situations:
            match = pattern.search(text)
            if match:
                result.situation = match.group(0).strip()
                break

        result.settings = [k for k, p in self._settings if p.search(text)]

        for pattern, label in self._times:
            if pattern.search(text):
                result.time_context = label
                break

        result.goals = [k for k, p in self._goals if p.search(text)]

        match = _PREFERENCE_MINUTES_RE.search(text)
        if match:
            result.duration = f"{match.group(1)} minutes"
        else:
            for pattern, label in self._durations:
                if pattern.search(text):
                    result.duration = label
                    break

        logger.debug("Extracted context: %s", result)
        return result

    def extract_goal_from_messages(self, messages: Iterable[Mapping[str, str]]) -> str:
        """Join the last three user messages into a bounded goal description.

        Bare option replies to a clarifying question carry no goal and are skipped.
        """
        user_messages = [
            m["content"]
            for m in messages
            if m.get("role") == "user" and not OPTION_REPLY_RE.fullmatch(m["content"].strip())
        ]
        return " ".join(user_messages[-3:])[:HISTORY_GOAL_MAX_CHARS]

    @staticmethod
    def parse_duration_minutes(duration: str | None) -> int | None:
        """First number in a duration preference ("10-15 minutes" -> 10)."""
        if not duration:
            return None
        match = _FIRST_NUMBER_RE.search(duration)
        return int(match.group(1)) if match else None
