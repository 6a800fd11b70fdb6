from __future__ import annotations

import pytest

from innrvo.content.emotions import EMOTIONAL_STATES, detect_emotional_state, get_emotional_state


def test_states_have_unique_ids() -> None:
    ids = [s.id for s in EMOTIONAL_STATES]
    assert len(ids) == len(set(ids)) == 12


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("I'm so anxious about tomorrow", "anxious"),
        ("feeling really overwhelmed lately", "stressed"),
        ("I can't sleep again", "cant_sleep"),
        ("just so grateful today", "grateful"),
    ],
)
def test_direct_emotion_words(text: str, expected: str) -> None:
    state = detect_emotional_state(text)
    assert state is not None
    assert state.id == expected


def test_emotion_words_match_whole_words() -> None:
    # "lost" is a confused word, "lostwithiel" is not
    assert detect_emotional_state("a trip to lostwithiel") is None


def test_indirect_phrasing_counts_hits() -> None:
    state = detect_emotional_state("big day tomorrow, my heart racing and a job interview at nine")
    assert state is not None
    assert state.id == "anxious"


def test_no_emotion() -> None:
    assert detect_emotional_state("make me a body scan") is None


def test_lookup() -> None:
    state = get_emotional_state("sad")
    assert state is not None
    assert "loving_kindness" in state.suggested_meditations
    assert get_emotional_state("ecstatic") is None
