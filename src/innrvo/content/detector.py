"""Layered content intent detection.

``ContentDetector.detect`` runs the classifiers in a fixed order and enriches
whatever wins with context pulled from the raw text:

    explicit pattern (>= 85) -> ambiguous phrase -> semantic scoring
        -> context enrichment -> low-confidence check

It is a pure function of its input and the rule tables it was built with.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import TYPE_CHECKING

from .catalog import MEDITATION_TYPES, get_category_info
from .classifiers import (
    AmbiguityClassifier,
    ExplicitPatternClassifier,
    SemanticScorer,
    disambiguation_question,
)
from .context import OPTION_REPLY_RE, extract_context
from .rules import DEFAULT_RULES, RuleSet, load_rules
from .types import (
    DISAMBIGUATION_THRESHOLD,
    EXPLICIT_CONFIDENCE_FLOOR,
    SUB_TYPES,
    ContentAudience,
    ContentCategory,
    ContentDetectionResult,
    HypnosisDepth,
    StoryAgeGroup,
)

if TYPE_CHECKING:
    from innrvo.config import Config

logger = logging.getLogger(__name__)

SELECTED_CONFIDENCE = 95
NAMED_CATEGORY_CONFIDENCE = 90

# Words a user might answer with when naming a category outright.
_CATEGORY_NAMES: dict[ContentCategory, tuple[str, ...]] = {
    ContentCategory.MEDITATION: ("meditation",),
    ContentCategory.AFFIRMATION: ("affirmation",),
    ContentCategory.SELF_HYPNOSIS: ("self-hypnosis", "self hypnosis", "self_hypnosis", "hypnosis"),
    ContentCategory.GUIDED_JOURNEY: ("guided journey", "guided_journey", "journey"),
    ContentCategory.STORY: ("children's story", "story"),
}


def _category_fields(category: ContentCategory, sub_type: str) -> dict[str, object]:
    """Fields that follow from the category/sub-type pair alone."""
    return {
        "audience": (
            ContentAudience.PARENT_TO_CHILD if category is ContentCategory.STORY else ContentAudience.ADULT
        ),
        "age_group": StoryAgeGroup(sub_type) if category is ContentCategory.STORY else None,
        "depth": HypnosisDepth(sub_type) if category is ContentCategory.SELF_HYPNOSIS else None,
        "meditation_type": (
            sub_type if category is ContentCategory.MEDITATION and sub_type in MEDITATION_TYPES else None
        ),
    }


class ContentDetector:
    """Turns a user utterance into a ``ContentDetectionResult``."""

    def __init__(self, rules: RuleSet | None = None):
        self.rules = rules or DEFAULT_RULES
        self._explicit = ExplicitPatternClassifier(self.rules.explicit)
        self._ambiguous = AmbiguityClassifier(self.rules.ambiguous)
        self._semantic = SemanticScorer(self.rules.clusters)
        self._names = {
            category: [re.compile(rf"\b{re.escape(n)}") for n in names]
            for category, names in _CATEGORY_NAMES.items()
        }

    @classmethod
    def from_config(cls, config: Config) -> ContentDetector:
        """Build a detector using the configured rule file, if any."""
        if config.detection.rules_path:
            return cls(load_rules(config.detection.rules_path))
        return cls()

    def detect(self, text: str | None) -> ContentDetectionResult:
        """Classify one utterance. Never raises for any string input."""
        raw = (text or "").strip()
        lowered = raw.lower()

        explicit = self._explicit.classify(lowered)
        if explicit is not None and explicit.confidence >= EXPLICIT_CONFIDENCE_FLOOR:
            return self._enrich(explicit, raw)

        ambiguous = self._ambiguous.classify(lowered)
        if ambiguous is not None:
            return self._enrich(ambiguous, raw, refine=False)

        result = self._enrich(self._semantic.classify(lowered), raw)

        if result.confidence < DISAMBIGUATION_THRESHOLD and not result.needs_disambiguation:
            result = replace(
                result,
                needs_disambiguation=True,
                disambiguation_question=disambiguation_question(
                    result.primary, result.alternative_interpretations
                ),
            )
        return result

    def handle_disambiguation_response(
        self, text: str | None, previous: ContentDetectionResult | None
    ) -> ContentDetectionResult:
        """Resolve the user's answer to a clarifying question.

        Args:
            text: The reply, e.g. "2", "affirmations" or a fresh request.
            previous: The result that carried the question.

        Returns:
            The selected interpretation at high confidence, or a fresh
            detection of ``text`` when the reply selects nothing.
        """
        raw = (text or "").strip()
        lowered = raw.lower()

        match = OPTION_REPLY_RE.fullmatch(lowered)
        if match and previous is not None and previous.alternative_interpretations:
            options = previous.candidates()
            index = int(match.group(1)) - 1
            if 0 <= index < len(options):
                chosen = options[index]
                logger.debug("Disambiguation option %d -> %s:%s", index + 1, chosen.category.value, chosen.sub_type)
                return self._selected(previous, chosen.category, chosen.sub_type, SELECTED_CONFIDENCE)

        for category, patterns in self._names.items():
            if any(p.search(lowered) for p in patterns):
                sub_type = get_category_info(category).sub_types[0]
                logger.debug("Disambiguation named category %s", category.value)
                return self._selected(previous, category, sub_type, NAMED_CATEGORY_CONFIDENCE)

        return self.detect(raw)

    def _selected(
        self,
        previous: ContentDetectionResult | None,
        category: ContentCategory,
        sub_type: str,
        confidence: int,
    ) -> ContentDetectionResult:
        return ContentDetectionResult(
            category=category,
            sub_type=sub_type,
            confidence=confidence,
            duration_minutes=previous.duration_minutes if previous else None,
            extracted_goal=previous.extracted_goal if previous else None,
            **_category_fields(category, sub_type),  # type: ignore[arg-type]
        )

    def _enrich(
        self, result: ContentDetectionResult, text: str, *, refine: bool = True
    ) -> ContentDetectionResult:
        ctx = extract_context(text)
        sub_type = result.sub_type

        # Context refines the sub-type unless the matching rule pinned it.
        if refine and result.category is ContentCategory.STORY and result.age_group is None and ctx.age_group:
            sub_type = ctx.age_group.value
        if refine and result.category is ContentCategory.SELF_HYPNOSIS and result.depth is None and ctx.depth:
            sub_type = ctx.depth.value
        assert sub_type in SUB_TYPES[result.category]

        enriched = replace(
            result,
            sub_type=sub_type,
            duration_minutes=ctx.duration_minutes or result.duration_minutes,
            extracted_goal=ctx.goal or result.extracted_goal,
            **_category_fields(result.category, sub_type),  # type: ignore[arg-type]
        )
        if enriched.needs_disambiguation and sub_type != result.sub_type:
            enriched = replace(
                enriched,
                disambiguation_question=disambiguation_question(
                    enriched.primary, enriched.alternative_interpretations
                ),
            )
        return enriched
