"""Content intent classification and generation planning.

Turns free-form user text into typed generation requests:

- Detection: ``ContentDetector`` (explicit patterns, ambiguous phrases,
  semantic scoring, context enrichment)
- Dialogue: ``SessionState`` and ``DisambiguationMachine``
- Planning: ``ContentRouter``, ``calculate_word_budget``, ``build_content_prompt``
- Guarding: ``ResponseValidator``
"""

from __future__ import annotations

from .budget import WordBudget, calculate_word_budget
from .catalog import (
    CONTENT_CATEGORIES,
    HYPNOSIS_SAFETY_FRAMING,
    MEDITATION_TYPES,
    calculate_word_count,
    get_affirmation_info,
    get_category_info,
    get_hypnosis_depth_info,
    get_journey_info,
    get_story_age_group_info,
    requires_safety_framing,
    temperature_for_category,
)
from .classifiers import AmbiguityClassifier, Classifier, ExplicitPatternClassifier, SemanticScorer
from .context import ContextExtractor, DetectionContext, ExtractedUserContext, extract_context
from .detector import ContentDetector
from .emotions import EMOTIONAL_STATES, EmotionalState, detect_emotional_state
from .prompts import PromptBuildResult, build_content_prompt, build_extend_prompt
from .router import ContentRouter, RoutedContent
from .rules import DEFAULT_RULES, RuleSet, load_rules
from .safety import ResponseValidator, SafetyCheck, is_pasted_script
from .session import (
    AwaitingDisambiguation,
    DisambiguationMachine,
    Idle,
    SessionState,
    TurnKind,
    TurnOutcome,
)
from .types import (
    AffirmationSubType,
    ContentAudience,
    ContentCategory,
    ContentDetectionResult,
    ContentGenerationParams,
    HypnosisDepth,
    Interpretation,
    JourneySubType,
    StoryAgeGroup,
)

__all__ = [
    # Types
    "AffirmationSubType",
    "ContentAudience",
    "ContentCategory",
    "ContentDetectionResult",
    "ContentGenerationParams",
    "HypnosisDepth",
    "Interpretation",
    "JourneySubType",
    "StoryAgeGroup",
    # Tables
    "CONTENT_CATEGORIES",
    "DEFAULT_RULES",
    "EMOTIONAL_STATES",
    "HYPNOSIS_SAFETY_FRAMING",
    "MEDITATION_TYPES",
    "RuleSet",
    "load_rules",
    "calculate_word_count",
    "get_affirmation_info",
    "get_category_info",
    "get_hypnosis_depth_info",
    "get_journey_info",
    "get_story_age_group_info",
    "requires_safety_framing",
    "temperature_for_category",
    # Detection
    "AmbiguityClassifier",
    "Classifier",
    "ContentDetector",
    "ContextExtractor",
    "DetectionContext",
    "EmotionalState",
    "ExplicitPatternClassifier",
    "ExtractedUserContext",
    "SemanticScorer",
    "detect_emotional_state",
    "extract_context",
    # Dialogue
    "AwaitingDisambiguation",
    "DisambiguationMachine",
    "Idle",
    "SessionState",
    "TurnKind",
    "TurnOutcome",
    # Planning
    "ContentRouter",
    "PromptBuildResult",
    "RoutedContent",
    "WordBudget",
    "build_content_prompt",
    "build_extend_prompt",
    "calculate_word_budget",
    # Guarding
    "ResponseValidator",
    "SafetyCheck",
    "is_pasted_script",
]
