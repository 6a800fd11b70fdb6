"""Classification strategies for content intent.

Each strategy implements the ``Classifier`` protocol and is independently
testable. ``ContentDetector`` composes them in a fixed order:

1. ``ExplicitPatternClassifier``: ordered regexes, first match wins
2. ``AmbiguityClassifier``: known-ambiguous phrasings, always asks
3. ``SemanticScorer``: weighted keyword clusters, never returns None
"""

from __future__ import annotations

import logging
import re
from typing import Protocol, Sequence

from .catalog import sub_type_label
from .rules import AmbiguousPhrase, ExplicitRule, KeywordCluster
from .types import (
    DISAMBIGUATION_THRESHOLD,
    SEMANTIC_CONFIDENCE_CAP,
    ContentAudience,
    ContentCategory,
    ContentDetectionResult,
    Interpretation,
)

logger = logging.getLogger(__name__)

AMBIGUOUS_CONFIDENCE = 50
AMBIGUOUS_STEP = 5
ALTERNATIVE_CONFIDENCE_CAP = 75
MAX_SEMANTIC_ALTERNATIVES = 3
CONTEXT_BOOST = 5
FALLBACK_CONFIDENCE = 30

DEFAULT_QUESTION = (
    "I'd love to help you. Could you tell me more about what kind of "
    "experience you're looking for?"
)


class Classifier(Protocol):
    """A single detection strategy."""

    def classify(self, text: str) -> ContentDetectionResult | None:
        """Classify lower-cased, trimmed text, or return None if not applicable."""
        ...


def disambiguation_question(
    primary: Interpretation, alternatives: Sequence[Interpretation]
) -> str:
    """Numbered question offering the primary and the first two alternatives."""
    options = [primary]
    for alt in alternatives:
        if len(options) == 3:
            break
        if not any(alt.same_target(o) for o in options):
            options.append(alt)
    if len(options) < 2:
        return DEFAULT_QUESTION
    labels = ", ".join(
        f"({i}) {sub_type_label(o.category, o.sub_type)}" for i, o in enumerate(options, start=1)
    )
    return (
        "I want to make sure I create exactly what you need. "
        f"Are you looking for: {labels}?"
    )


class ExplicitPatternClassifier:
    """Scans explicit rules in declaration order; the first hit wins."""

    def __init__(self, rules: Sequence[ExplicitRule]):
        self._rules = [(re.compile(r.pattern, re.IGNORECASE), r) for r in rules]

    def classify(self, text: str) -> ContentDetectionResult | None:
        for pattern, rule in self._rules:
            if not pattern.search(text):
                continue
            logger.debug("Explicit rule %r matched (%d)", rule.pattern, rule.confidence)
            return ContentDetectionResult(
                category=rule.category,
                sub_type=rule.sub_type,
                confidence=rule.confidence,
                audience=rule.audience or ContentAudience.ADULT,
                depth=rule.depth,
                age_group=rule.age_group,
            )
        return None


class AmbiguityClassifier:
    """Intercepts phrasings that plausibly mean several kinds of content."""

    def __init__(self, phrases: Sequence[AmbiguousPhrase]):
        self._phrases = [(re.compile(p.pattern, re.IGNORECASE), p) for p in phrases]

    def classify(self, text: str) -> ContentDetectionResult | None:
        for pattern, phrase in self._phrases:
            if not pattern.search(text):
                continue
            # Every candidate is listed, primary included, so the numbered
            # question maps 1:1 onto the alternatives.
            alternatives = tuple(
                Interpretation(c.category, c.sub_type, AMBIGUOUS_CONFIDENCE - AMBIGUOUS_STEP * i)
                for i, c in enumerate(phrase.candidates)
            )
            first = phrase.candidates[0]
            logger.debug("Ambiguous phrase %r matched", phrase.pattern)
            return ContentDetectionResult(
                category=first.category,
                sub_type=first.sub_type,
                confidence=AMBIGUOUS_CONFIDENCE,
                needs_disambiguation=True,
                disambiguation_question=phrase.question,
                alternative_interpretations=alternatives,
            )
        return None


class SemanticScorer:
    """Weighted keyword scoring over the cluster table.

    Keyword hits are plain substring tests on the lower-cased text, so "sleep"
    also counts inside "sleepy". Ties keep the earlier-declared cluster.
    """

    def __init__(self, clusters: Sequence[KeywordCluster]):
        self._clusters = list(clusters)

    def score(self, text: str) -> dict[tuple[ContentCategory, str], int]:
        """Best score per (category, sub_type), in cluster declaration order."""
        text = text.lower()
        scores: dict[tuple[ContentCategory, str], int] = {}
        for cluster in self._clusters:
            score = sum(cluster.weight for k in cluster.keywords if k in text)
            score += sum(CONTEXT_BOOST for b in cluster.context_boost if b in text)
            if score <= 0:
                continue
            key = (cluster.category, cluster.sub_type)
            scores[key] = max(scores.get(key, 0), score)
        return scores

    def classify(self, text: str) -> ContentDetectionResult:
        scores = self.score(text)
        if not scores:
            logger.debug("No keyword cluster matched; using fallback")
            return ContentDetectionResult(
                category=ContentCategory.MEDITATION,
                sub_type="guided_visualization",
                confidence=FALLBACK_CONFIDENCE,
                needs_disambiguation=True,
                disambiguation_question=DEFAULT_QUESTION,
            )

        best_key: tuple[ContentCategory, str] | None = None
        best_score = 0
        runners_up: list[tuple[tuple[ContentCategory, str], int]] = []
        for key, score in scores.items():
            if score > best_score:
                if best_key is not None:
                    runners_up.append((best_key, best_score))
                best_key, best_score = key, score
            else:
                runners_up.append((key, score))
        assert best_key is not None

        alternatives = tuple(
            Interpretation(k[0], k[1], min(s * 2, ALTERNATIVE_CONFIDENCE_CAP))
            for k, s in runners_up[:MAX_SEMANTIC_ALTERNATIVES]
        )
        confidence = min(best_score * 2, SEMANTIC_CONFIDENCE_CAP)
        primary = Interpretation(best_key[0], best_key[1], confidence)
        unsure = confidence < DISAMBIGUATION_THRESHOLD
        logger.debug("Semantic best %s:%s score=%d", best_key[0].value, best_key[1], best_score)
        return ContentDetectionResult(
            category=primary.category,
            sub_type=primary.sub_type,
            confidence=confidence,
            needs_disambiguation=unsure,
            disambiguation_question=disambiguation_question(primary, alternatives) if unsure else None,
            alternative_interpretations=alternatives,
        )
