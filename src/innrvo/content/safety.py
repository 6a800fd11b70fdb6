"""Guards on text crossing the conversation boundary.

``ResponseValidator`` catches conversational replies where the model wrote a
meditation anyway, and swaps them for a short question. ``is_pasted_script``
spots users pasting in a script of their own.
"""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

LEAK_MIN_INDICATORS = 3
LEAK_MIN_CHARS = 500
LEAK_MIN_PARAGRAPHS = 3

PASTED_MIN_CHARS = 300
PASTED_MIN_INDICATORS = 3

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")

# One pattern per family: breathing, body awareness, visualization,
# audio tags, wind-down, guided-meditation vocabulary.
_LEAK_INDICATORS = [
    r"take a (?:deep |slow )?breath|breathe (?:in|out|deeply)|inhale|exhale",
    r"close your eyes|relax your|feel your body|notice your|let go of",
    r"allow yourself|let yourself|imagine|visuali[sz]e|picture yourself",
    r"\[(?:pause|long pause|breath|deep breath|silence|exhale|inhale)\]",
    r"gently|slowly|when you're ready|\breturn\b|come back|open your eyes",
    r"inner peace|peaceful place|safe space|sanctuary|awareness|mindful",
]

_SCRIPT_INDICATORS = [
    r"welcome|greetings|hello|dear one|beloved",
    r"take a (?:deep |slow )?breath|breathe (?:in|out|deeply)|inhale|exhale",
    r"close your eyes|relax your|feel your body|notice your|let go of",
    r"allow yourself|let yourself|give yourself permission|imagine|visuali[sz]e|picture",
    r"present moment|inner peace|\bcalm|stillness|awareness|mindful|conscious",
    r"gently|slowly|when you're ready|\breturn\b|come back|open your eyes",
]
_SCRIPT_AUDIO_TAG_RE = re.compile(r"\[(?:pause|breath|deep breath|silence|music)\]", re.IGNORECASE)

STATE_RESPONSES: dict[str, tuple[str, ...]] = {
    "anxious": ("What's going on?", "What's making you anxious?", "Tell me what's happening."),
    "stressed": ("What's stressing you out?", "What's going on?", "Tell me about it."),
    "sad": ("What happened?", "What's going on?", "I'm listening."),
    "overwhelmed": ("What's the main thing?", "Where do you want to start?", "What's happening?"),
    "seeking_clarity": ("What are you thinking about?", "Tell me more.", "What's on your mind?"),
    "neutral": ("What's on your mind?", "Tell me more.", "Go on."),
}

DEFAULT_FALLBACKS: tuple[str, ...] = (
    "What's on your mind?",
    "Tell me more.",
    "Go on.",
    "What's happening?",
    "I'm listening.",
)


def _compile(patterns: list[str]) -> list[re.Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


def paragraph_count(text: str) -> int:
    return len(_PARAGRAPH_SPLIT_RE.split(text))


@dataclass(frozen=True)
class SafetyCheck:
    message: str
    replaced: bool
    indicator_count: int


class ResponseValidator:
    """Replaces conversational replies that leaked generated content."""

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()
        self._indicators = _compile(_LEAK_INDICATORS)

    def count_indicators(self, text: str) -> int:
        """Number of indicator families present in ``text``."""
        return sum(1 for p in self._indicators if p.search(text))

    def is_leaked_content(self, text: str) -> bool:
        if self.count_indicators(text) < LEAK_MIN_INDICATORS:
            return False
        return len(text) > LEAK_MIN_CHARS or paragraph_count(text) >= LEAK_MIN_PARAGRAPHS

    def fallback(self, emotional_state: str | None = None) -> str:
        options = STATE_RESPONSES.get(emotional_state or "", DEFAULT_FALLBACKS)
        return self._rng.choice(options)

    def check(self, reply: str, emotional_state: str | None = None) -> SafetyCheck:
        count = self.count_indicators(reply)
        if self.is_leaked_content(reply):
            logger.warning(
                "Conversational reply looked like generated content (%d indicators, %d chars); replacing",
                count,
                len(reply),
            )
            return SafetyCheck(self.fallback(emotional_state), True, count)
        return SafetyCheck(reply, False, count)


_script_indicators = _compile(_SCRIPT_INDICATORS)


def is_pasted_script(text: str) -> bool:
    """Whether the user pasted a ready-made meditation script.

    Needs enough length, at least three script indicator families and some
    structure (several paragraphs or an audio tag).
    """
    if len(text) < PASTED_MIN_CHARS:
        return False
    indicators = sum(1 for p in _script_indicators if p.search(text))
    if indicators < PASTED_MIN_INDICATORS:
        return False
    structured = paragraph_count(text) >= 3 or bool(_SCRIPT_AUDIO_TAG_RE.search(text))
    if structured:
        logger.debug("Pasted script detected (%d indicators, %d chars)", indicators, len(text))
    return structured
