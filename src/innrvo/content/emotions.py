"""Emotional state detection for conversational context."""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class EmotionalState:
    id: str
    emotions: tuple[str, ...]
    suggested_meditations: tuple[str, ...]
    supportive_message: str


EMOTIONAL_STATES: tuple[EmotionalState, ...] = (
    EmotionalState(
        "anxious",
        ("anxious", "worried", "nervous", "panicked", "fearful", "scared", "uneasy"),
        ("breathwork", "body_scan", "presence", "guided_visualization"),
        "Anxiety tends to live in the future. Bring them back to this moment, where they are safe.",
    ),
    EmotionalState(
        "sad",
        ("sad", "depressed", "down", "melancholy", "grieving", "heartbroken", "hopeless"),
        ("loving_kindness", "gratitude", "surrender", "shadow_work"),
        "Their feelings are valid. Let them feel the weight before trying to lift it.",
    ),
    EmotionalState(
        "angry",
        ("angry", "frustrated", "irritated", "resentful", "bitter", "furious"),
        ("breathwork", "loving_kindness", "inquiry", "surrender"),
        "Anger usually points at an unmet need or a crossed boundary. Meet it with curiosity.",
    ),
    EmotionalState(
        "stressed",
        ("stressed", "overwhelmed", "burnt out", "exhausted", "pressured", "tense"),
        ("body_scan", "breathwork", "presence", "surrender"),
        "They have been carrying a lot. Help them set it down, even for a few minutes.",
    ),
    EmotionalState(
        "confused",
        ("confused", "lost", "uncertain", "indecisive", "unclear", "scattered"),
        ("presence", "inquiry", "breathwork", "guided_visualization"),
        "Clarity tends to arrive in stillness. Help them quiet things down first.",
    ),
    EmotionalState(
        "unmotivated",
        ("unmotivated", "stuck", "blocked", "uninspired", "apathetic", "lazy"),
        ("affirmations", "manifestation", "gratitude", "breathwork"),
        "The spark is still there and needs a little kindling. Reconnect them with what matters.",
    ),
    EmotionalState(
        "lonely",
        ("lonely", "isolated", "disconnected", "alone", "abandoned"),
        ("loving_kindness", "presence", "gratitude", "guided_visualization"),
        "Remind them they are connected to more than they can feel right now.",
    ),
    EmotionalState(
        "self_critical",
        ("self-critical", "ashamed", "guilty", "unworthy", "not good enough", "self-hatred"),
        ("loving_kindness", "affirmations", "shadow_work"),
        "They deserve their own kindness. Encourage them to treat themselves like a close friend.",
    ),
    EmotionalState(
        "seeking_peace",
        ("need peace", "want calm", "seeking stillness", "need quiet", "want serenity"),
        ("presence", "breathwork", "body_scan", "sleep_story"),
        "Peace is already there underneath. Help them uncover it rather than chase it.",
    ),
    EmotionalState(
        "grateful",
        ("grateful", "thankful", "appreciative", "blessed", "content"),
        ("gratitude", "loving_kindness", "manifestation"),
        "A lovely place to be. Help them deepen it and let it spread.",
    ),
    EmotionalState(
        "seeking_growth",
        ("want to grow", "seeking transformation", "ready for change", "want to evolve"),
        ("manifestation", "affirmations", "inquiry", "shadow_work"),
        "Wanting to grow is already the first step. Encourage the momentum.",
    ),
    EmotionalState(
        "cant_sleep",
        ("can't sleep", "insomnia", "restless", "racing thoughts", "wide awake"),
        ("sleep_story", "body_scan", "breathwork", "presence"),
        "Guide a busy mind gently toward rest. They deserve a good night's sleep.",
    ),
)

_BY_ID = {s.id: s for s in EMOTIONAL_STATES}

# Indirect phrasings, scored by number of hits when no emotion word matches.
SEMANTIC_PATTERNS: dict[str, tuple[str, ...]] = {
    "anxious": (
        "heart racing", "can't calm down", "mind won't stop", "racing thoughts",
        "butterflies", "on edge", "tight chest", "can't breathe", "panic", "freaking out",
        "so much going on", "big day", "job interview", "presentation", "exam",
        "meeting tomorrow", "deadline", "pressure",
    ),
    "stressed": (
        "overwhelmed", "too much", "drowning", "can't handle", "at my limit",
        "burned out", "running on empty", "exhausted", "drained", "swamped",
        "work is killing", "no break", "non-stop",
    ),
    "sad": (
        "feeling low", "heavy heart", "empty inside", "lost someone", "miss them",
        "crying", "tears", "heartache", "broke up", "alone", "nobody cares",
        "what's the point", "feeling blue", "down in the dumps",
    ),
    "cant_sleep": (
        "wide awake", "tossing and turning", "mind racing at night", "3am",
        "middle of the night", "can't fall asleep", "woke up", "tired but wired",
        "exhausted but can't sleep", "bed time", "going to sleep", "ready for bed",
    ),
    "angry": (
        "so mad", "pissed", "furious", "want to scream", "seeing red",
        "blood boiling", "can't stand", "hate this", "unfair",
    ),
    "seeking_peace": (
        "just want peace", "need calm", "quiet my mind", "find stillness",
        "inner peace", "tranquil", "serene", "chill out", "unwind", "decompress",
        "relax", "de-stress", "wind down",
    ),
    "self_critical": (
        "i'm so stupid", "hate myself", "not good enough", "failure",
        "can't do anything right", "worthless", "useless", "disappointment",
    ),
    "unmotivated": (
        "no energy", "don't feel like", "can't get started", "procrastinating",
        "stuck in a rut", "going through the motions", "lost my drive",
    ),
    "lonely": (
        "no one to talk to", "feel so alone", "isolated", "no friends",
        "disconnected", "nobody understands",
    ),
    "seeking_growth": (
        "want to improve", "become better", "level up", "transform",
        "new chapter", "fresh start", "breakthrough",
    ),
    "grateful": (
        "so blessed", "thankful for", "appreciate", "lucky to have",
        "feeling good about", "happy today",
    ),
}

_DIRECT = [
    (state, [re.compile(rf"\b{re.escape(e)}\b") for e in state.emotions]) for state in EMOTIONAL_STATES
]


def get_emotional_state(state_id: str) -> EmotionalState | None:
    return _BY_ID.get(state_id)


def detect_emotional_state(text: str) -> EmotionalState | None:
    """Best-guess emotional state of a message, or None.

    A named emotion wins outright (first state in table order). Otherwise the
    state with the most indirect phrase hits wins, earlier states on ties.
    """
    lowered = text.lower()
    for state, patterns in _DIRECT:
        if any(p.search(lowered) for p in patterns):
            return state

    best: EmotionalState | None = None
    best_count = 0
    for state_id, phrases in SEMANTIC_PATTERNS.items():
        count = sum(1 for phrase in phrases if phrase in lowered)
        if count > best_count:
            best, best_count = _BY_ID[state_id], count
    return best
