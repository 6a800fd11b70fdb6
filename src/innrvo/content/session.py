"""Conversation-scoped state and the disambiguation state machine.

``SessionState`` is the only mutable piece of the pipeline. It is owned by one
conversation and must only be touched by one turn at a time; the agent
enforces that with a lock.

``DisambiguationMachine.step`` decides, once per turn, whether the message
resolves to content, whether to ask a clarifying question, or whether to fall
back to ordinary conversation. It never asks the same question twice in a row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Union

from .detector import ContentDetector
from .types import (
    CLARIFY_THRESHOLD,
    ContentCategory,
    ContentDetectionResult,
    Interpretation,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    """No clarifying question is pending."""


@dataclass(frozen=True)
class AwaitingDisambiguation:
    question: str
    candidates: tuple[Interpretation, ...]


DisambiguationState = Union[Idle, AwaitingDisambiguation]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionState:
    awaiting_disambiguation: bool = False
    last_detection_result: ContentDetectionResult | None = None
    selected_content_category: ContentCategory | None = None
    selected_content_sub_type: str | None = None
    current_mood: str | None = None
    message_count: int = 0
    conversation_started: datetime = field(default_factory=_utcnow)
    last_question_asked: str | None = None

    @property
    def disambiguation_state(self) -> DisambiguationState:
        result = self.last_detection_result
        if self.awaiting_disambiguation and result is not None and result.disambiguation_question:
            return AwaitingDisambiguation(result.disambiguation_question, tuple(result.candidates()))
        return Idle()

    def begin_disambiguation(self, result: ContentDetectionResult) -> None:
        self.awaiting_disambiguation = True
        self.last_detection_result = result
        self.last_question_asked = result.disambiguation_question

    def take_pending(self) -> ContentDetectionResult | None:
        """Return the result awaiting an answer and clear it.

        Clearing happens before the caller tries to resolve anything so a
        failure mid-resolution cannot leave the conversation stuck asking.
        """
        pending = self.last_detection_result if self.awaiting_disambiguation else None
        self.awaiting_disambiguation = False
        self.last_detection_result = None
        return pending

    def record_selection(self, category: ContentCategory, sub_type: str) -> None:
        self.selected_content_category = category
        self.selected_content_sub_type = sub_type

    def reset(self) -> None:
        self.awaiting_disambiguation = False
        self.last_detection_result = None
        self.selected_content_category = None
        self.selected_content_sub_type = None
        self.current_mood = None
        self.message_count = 0
        self.conversation_started = _utcnow()
        self.last_question_asked = None


class TurnKind(str, Enum):
    RESOLVED = "resolved"  # hand to the router
    ASK = "ask"  # show the clarifying question
    CONVERSE = "converse"  # ordinary conversation


@dataclass(frozen=True)
class TurnOutcome:
    kind: TurnKind
    result: ContentDetectionResult | None = None
    question: str | None = None


class DisambiguationMachine:
    """Per-turn transitions between Idle and AwaitingDisambiguation."""

    def __init__(self, detector: ContentDetector, session: SessionState):
        self.detector = detector
        self.session = session

    def step(self, text: str, *, explicit_request: bool) -> TurnOutcome:
        """Advance the state machine by one user message.

        Args:
            text: The user's message.
            explicit_request: Whether the message reads as a request to
                generate something, as opposed to chatting.

        Returns:
            What the caller should do with this turn.
        """
        self.session.last_question_asked = None

        # A question asked last turn is always pending here, so the reply
        # either resolves it or fails open. It is never asked twice in a row.
        pending = self.session.take_pending()
        if pending is not None:
            resolved = self.detector.handle_disambiguation_response(text, pending)
            if resolved.needs_disambiguation:
                logger.info("Disambiguation reply unresolved; continuing as conversation")
                return TurnOutcome(TurnKind.CONVERSE, resolved)
            return TurnOutcome(TurnKind.RESOLVED, resolved)

        result = self.detector.detect(text)
        if not explicit_request:
            return TurnOutcome(TurnKind.CONVERSE, result)
        if not result.needs_disambiguation:
            return TurnOutcome(TurnKind.RESOLVED, result)

        question = result.disambiguation_question
        if 0 < result.confidence < CLARIFY_THRESHOLD and question:
            self.session.begin_disambiguation(result)
            logger.debug("Asking for clarification (confidence %d)", result.confidence)
            return TurnOutcome(TurnKind.ASK, result, question)
        return TurnOutcome(TurnKind.CONVERSE, result)
