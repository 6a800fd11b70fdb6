"""Conversational wellness agent.

Wraps the content pipeline in a chat loop. One ``MeditationAgent`` owns one
conversation: its history, its ``SessionState`` and a lock that rejects
overlapping turns. Text generation is an injected ``generate_text`` callable;
the agent never talks to a model backend directly.
"""

from __future__ import annotations

import logging
import random
import re
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Literal

from innrvo.content.catalog import MEDITATION_TYPES
from innrvo.content.context import ContextExtractor
from innrvo.content.detector import ContentDetector
from innrvo.content.emotions import detect_emotional_state, get_emotional_state
from innrvo.content.prompts import PromptBuildResult, build_content_prompt
from innrvo.content.router import ContentRouter
from innrvo.content.safety import ResponseValidator, is_pasted_script
from innrvo.content.session import DisambiguationMachine, SessionState, TurnKind
from innrvo.content.types import ContentDetectionResult, ContentGenerationParams
from innrvo.errors import ConcurrentTurnError
from innrvo.logging_config import LogContext, log_turn

if TYPE_CHECKING:
    from innrvo.config import Config

logger = logging.getLogger(__name__)

GenerateText = Callable[[str], str]

PASTED_SCRIPT_REPLY = (
    "I see you've brought your own meditation script. Let me take you to the "
    "editor where you can review and customize it."
)

SYSTEM_PROMPT = """\
You are a warm, grounded wellness guide in a meditation app. You talk with
people the way a perceptive friend would, and you create meditations,
affirmations, hypnosis sessions, guided journeys and bedtime stories when they
ask for one.

## WHEN TO CREATE CONTENT

Only when the person clearly asks for it ("make me a meditation", "I need
sleep affirmations", "can you do a body scan"). When they do, confirm in one
short sentence that starts with "I'll create a" or "Let me create", for example:
- "I'll create a calming breathwork session for you."
- "Let me create a gentle sleep story."

When they are just sharing how they feel, talk with them. Do not offer a script
unless they ask, and never write the script itself in this conversation.
- "I'm so anxious today" -> ask what is going on
- "I can't sleep" -> ask what is keeping them up

## HOW YOU TALK

- Short, natural sentences. No lectures.
- Ask before you advise. Acknowledge feelings without rushing to fix them.
- Offer a choice when it helps: keep talking, or try a short practice?
- Match their energy. Go easy on spiritual jargon and emojis.
"""

# Request phrasings that mean "make me something", as opposed to chatting.
_GENERATION_REQUEST_PATTERNS = [
    r"\b(?:create|make|generate|give me|i need|i want|i'd like)\s+(?:a\s+|an\s+|me a\s+|me an\s+|some\s+)?"
    r"(?:[\w-]+\s+){0,3}(?:meditation|affirmations?|story|visuali[sz]ation|breathwork|body scan|hypnosis|journey)",
    r"\b(?:can you|could you|please|would you)\s+(?:create|make|generate|give me|do)\s+(?:a\s+|an\s+|me a\s+|me an\s+|some\s+)?"
    r"(?:[\w-]+\s+){0,3}(?:meditation|affirmations?|story|hypnosis|journey)",
    r"\b(?:let's|ready to)\s+(?:do|start|begin)\s+(?:a\s+|the\s+)?(?:[\w-]+\s+)?meditation",
    r"\b(?:help me|guide me through)\s+(?:a\s+|an\s+)?(?:meditation|relaxation|visuali[sz]ation|sleep)",
]

# Looser phrasings used to tag which meditation the person is after.
_MEDITATION_REQUEST_PATTERNS = [
    r"(?:create|make|generate|give me|i need|i want|i'd like|can you|could you|please)\s+(?:a\s+|an\s+|me a\s+|me an\s+)?"
    r"(?:meditation|meditate|session|affirmation|positive statement|sleep story|bedtime story|story to sleep|"
    r"visualization|guided journey|breathwork|breathing exercise|body scan)",
    r"(?:let's|ready to)\s+(?:do|start|begin)\s+(?:a\s+|an\s+|the\s+)?(?:meditation|session)",
    r"(?:help me|i want to)\s+(?:meditate|relax|sleep|calm down|de-stress)",
]

# Checked in order; the first type with a matching keyword wins.
_MEDITATION_TYPE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("guided_visualization", ("visualization", "visualize", "imagine", "journey", "imagery")),
    ("breathwork", ("breathing", "breath", "breathwork", "box breathing", "4-7-8")),
    ("body_scan", ("body scan", "progressive relaxation", "scan my body", "tension release")),
    ("loving_kindness", ("loving kindness", "metta", "compassion meditation", "love meditation")),
    ("sleep_story", ("sleep", "bedtime", "fall asleep", "insomnia", "rest", "drift off", "story")),
    ("affirmations", ("affirmation", "affirm", "positive statements", "reprogram")),
    ("walking_meditation", ("walking", "walk meditation", "mindful walking")),
    ("shadow_work", ("shadow", "inner child", "parts work", "hidden")),
    ("gratitude", ("gratitude", "grateful", "thankful", "appreciation", "blessings")),
    ("manifestation", ("manifest", "intention", "attract", "create reality", "visualize goals")),
    ("presence", ("presence", "present moment", "just be", "stillness")),
    ("inquiry", ("inquiry", "question thoughts", "the work")),
    ("surrender", ("surrender", "let go", "release", "accept")),
]

_INFERRED_TYPES: list[tuple[tuple[str, ...], str]] = [
    (("breath",), "breathwork"),
    (("body scan", "relaxation"), "body_scan"),
    (("sleep", "rest"), "sleep_story"),
    (("loving", "compassion"), "loving_kindness"),
    (("gratitude", "thankful"), "gratitude"),
    (("affirm",), "affirmations"),
    (("visualiz",), "guided_visualization"),
    (("manifest", "intention"), "manifestation"),
    (("shadow", "inner child"), "shadow_work"),
    (("presence", "present moment"), "presence"),
]

GENERATION_TRIGGER_PHRASES = (
    "i'll craft a",
    "let me craft",
    "i'll create a",
    "let me create",
    "creating your",
    "crafting your",
    "crafting a",
    "i've prepared",
    "i've crafted",
    "i've created",
)

_GENERIC_SESSION_RE = re.compile(r"meditation|meditate|session|relax|calm")


@dataclass(frozen=True)
class ConversationMessage:
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    emotional_state: str | None = None


@dataclass(frozen=True)
class AgentResponse:
    """What the UI layer needs to render one turn."""

    message: str
    emotional_state: str | None = None
    should_generate: bool = False
    disambiguation_question: str | None = None
    detection: ContentDetectionResult | None = None
    params: ContentGenerationParams | None = None
    content_prompt: PromptBuildResult | None = None
    meditation_type: str | None = None
    pasted_script: str | None = None


class MeditationAgent:
    """One conversation with the wellness guide."""

    def __init__(
        self,
        generate_text: GenerateText,
        *,
        detector: ContentDetector | None = None,
        router: ContentRouter | None = None,
        validator: ResponseValidator | None = None,
        extractor: ContextExtractor | None = None,
        session: SessionState | None = None,
        history_window: int = 6,
        conversation_id: str | None = None,
    ) -> None:
        self.conversation_id = conversation_id or uuid.uuid4().hex
        self._generate_text = generate_text
        self.detector = detector or ContentDetector()
        self.router = router or ContentRouter()
        self.validator = validator or ResponseValidator()
        self.extractor = extractor or ContextExtractor()
        self._session = session or SessionState()
        self._machine = DisambiguationMachine(self.detector, self._session)
        self._history: list[ConversationMessage] = []
        self._history_window = history_window
        self._turn_lock = threading.Lock()

    @classmethod
    def from_config(cls, generate_text: GenerateText, config: Config) -> MeditationAgent:
        """Agent wired from the ``[detection]`` and ``[agent]`` config sections."""
        seed = config.agent.fallback_seed
        return cls(
            generate_text,
            detector=ContentDetector.from_config(config),
            validator=ResponseValidator(random.Random(seed) if seed is not None else None),
            history_window=config.agent.history_window,
        )

    @property
    def session_state(self) -> SessionState:
        return self._session

    @property
    def history(self) -> tuple[ConversationMessage, ...]:
        return tuple(self._history)

    def reset_conversation(self) -> None:
        with self._turn_lock:
            self._history.clear()
            self._session.reset()

    def chat(self, message: str) -> AgentResponse:
        """Process one user message.

        Raises:
            ConcurrentTurnError: If another turn is still running.
            LLMError: Or anything else ``generate_text`` raises; the user
                message stays recorded.
        """
        if not self._turn_lock.acquire(blocking=False):
            raise ConcurrentTurnError("a turn is already in progress for this conversation")
        started = time.perf_counter()
        try:
            with LogContext(conversation_id=self.conversation_id):
                response = self._chat(message)
                self._log_turn(response, (time.perf_counter() - started) * 1000)
        finally:
            self._turn_lock.release()
        return response

    @staticmethod
    def _log_turn(response: AgentResponse, elapsed_ms: float) -> None:
        params = response.params
        if response.should_generate:
            kind = "generate"
        elif response.disambiguation_question:
            kind = "ask"
        else:
            kind = "converse"
        log_turn(
            kind,
            category=params.category.value if params else None,
            sub_type=params.sub_type if params else None,
            confidence=response.detection.confidence if params and response.detection else None,
            duration_ms=elapsed_ms,
        )

    def _chat(self, message: str) -> AgentResponse:
        session = self._session

        if is_pasted_script(message):
            logger.info("Pasted script detected (%d chars)", len(message))
            self._record("user", message)
            session.take_pending()
            session.last_question_asked = None
            return AgentResponse(
                message=PASTED_SCRIPT_REPLY,
                should_generate=True,
                meditation_type="guided_visualization",
                pasted_script=message,
            )

        emotion = detect_emotional_state(message)
        mood = emotion.id if emotion else None
        if mood:
            session.current_mood = mood
        self._record("user", message, emotional_state=mood)

        outcome = self._machine.step(message, explicit_request=self.is_explicit_generation_request(message))

        if outcome.kind is TurnKind.RESOLVED:
            assert outcome.result is not None
            return self._resolved(outcome.result, mood)

        if outcome.kind is TurnKind.ASK:
            assert outcome.question is not None
            self._record("assistant", outcome.question)
            return AgentResponse(
                message=outcome.question,
                emotional_state=mood,
                disambiguation_question=outcome.question,
                detection=outcome.result,
            )

        return self._converse(message, mood, outcome.result)

    def _resolved(self, result: ContentDetectionResult, mood: str | None) -> AgentResponse:
        goal = None
        if not result.extracted_goal:
            goal = self.extractor.extract_goal_from_messages(
                {"role": m.role, "content": m.content} for m in self._history
            ) or None
        routed = self.router.route(
            result,
            goal=goal,
            emotional_state=mood or self._session.current_mood,
            session=self._session,
        )
        self._record("assistant", routed.confirmation)
        return AgentResponse(
            message=routed.confirmation,
            emotional_state=mood,
            should_generate=True,
            detection=result,
            params=routed.params,
            content_prompt=build_content_prompt(routed.params),
            meditation_type=routed.params.meditation_type,
        )

    def _converse(
        self, message: str, mood: str | None, detection: ContentDetectionResult | None
    ) -> AgentResponse:
        requested = self.detect_requested_meditation(message)
        prompt = self.build_conversation_prompt(message, mood, requested)
        reply = self._generate_text(prompt)

        lowered = reply.lower()
        triggered = any(phrase in lowered for phrase in GENERATION_TRIGGER_PHRASES)
        if triggered:
            params = None
            content_prompt = None
            if detection is not None and not detection.needs_disambiguation:
                routed = self.router.route(detection, emotional_state=mood, session=self._session)
                params = routed.params
                content_prompt = build_content_prompt(params)
            self._record("assistant", reply)
            return AgentResponse(
                message=reply,
                emotional_state=mood,
                should_generate=True,
                detection=detection,
                params=params,
                content_prompt=content_prompt,
                meditation_type=requested or self.infer_meditation_type(reply),
            )

        if requested is None:
            reply = self.validator.check(reply, mood or self._session.current_mood).message
        self._record("assistant", reply)
        return AgentResponse(message=reply, emotional_state=mood, detection=detection)

    # -------------------------------------------------------------------------
    # Prompting
    # -------------------------------------------------------------------------

    def build_conversation_prompt(
        self, message: str, emotional_state: str | None = None, requested_meditation: str | None = None
    ) -> str:
        """Prompt for a conversational reply, with context and recent history."""
        parts = [SYSTEM_PROMPT]

        if emotional_state:
            state = get_emotional_state(emotional_state)
            approach = state.supportive_message if state else ""
            parts.append(f"[CONTEXT: User appears to be feeling {emotional_state}. Recommended approach: {approach}]")

        if requested_meditation:
            info = MEDITATION_TYPES.get(requested_meditation)
            if info:
                parts.append(f"[USER IS REQUESTING: {info.name} meditation]")

        # The current message is already recorded as the last history entry.
        previous = self._history[-self._history_window:-1] if self._history_window > 0 else []
        if previous:
            lines = ["[RECENT CONVERSATION]"]
            lines.extend(f"{'User' if m.role == 'user' else 'Guide'}: {m.content}" for m in previous)
            parts.append("\n\n".join(lines))

        parts.append(f"User: {message}\n\nGuide:")
        return "\n\n".join(parts)

    # -------------------------------------------------------------------------
    # Request heuristics
    # -------------------------------------------------------------------------

    @staticmethod
    def is_explicit_generation_request(message: str) -> bool:
        lowered = message.lower()
        return any(re.search(p, lowered) for p in _GENERATION_REQUEST_PATTERNS)

    @staticmethod
    def detect_requested_meditation(message: str) -> str | None:
        """Meditation type the user is explicitly asking for, if any."""
        lowered = message.lower()
        if not any(re.search(p, lowered) for p in _MEDITATION_REQUEST_PATTERNS):
            return None
        for meditation_type, keywords in _MEDITATION_TYPE_KEYWORDS:
            if any(k in lowered for k in keywords):
                return meditation_type
        if _GENERIC_SESSION_RE.search(lowered):
            return "guided_visualization"
        return None

    @staticmethod
    def infer_meditation_type(reply: str) -> str:
        """Guess the meditation type from the guide's own wording."""
        lowered = reply.lower()
        for keywords, meditation_type in _INFERRED_TYPES:
            if any(k in lowered for k in keywords):
                return meditation_type
        return "guided_visualization"

    def _record(self, role: Literal["user", "assistant"], content: str, *, emotional_state: str | None = None) -> None:
        self._history.append(ConversationMessage(role, content, emotional_state=emotional_state))
        if role == "user":
            self._session.message_count += 1
