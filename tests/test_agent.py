from __future__ import annotations

import logging
import random

import pytest

from innrvo.agent import PASTED_SCRIPT_REPLY, MeditationAgent
from innrvo.config import Config
from innrvo.content import ResponseValidator
from innrvo.content.safety import STATE_RESPONSES
from innrvo.content.types import ContentCategory
from innrvo.errors import ConcurrentTurnError, LLMError


class FakeLLM:
    """Records prompts and answers with canned replies."""

    def __init__(self, *replies: str) -> None:
        self.replies = list(replies) or ["Tell me more about that."]
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]


class TestGenerationRequests:
    def test_explicit_request_resolves_without_the_llm(self) -> None:
        llm = FakeLLM()
        agent = MeditationAgent(llm)

        response = agent.chat("Can you create a power affirmation about confidence for 5 minutes")

        assert response.should_generate
        assert response.message == "I'll create power affirmations for you."
        assert response.params is not None
        assert response.params.category is ContentCategory.AFFIRMATION
        assert response.params.sub_type == "power"
        assert response.params.duration_minutes == 5
        assert response.params.goal == "confidence"
        assert response.detection is not None and response.detection.confidence >= 85
        assert response.content_prompt is not None
        assert response.content_prompt.budget.word_range == "405-495"
        assert llm.prompts == []
        assert agent.session_state.selected_content_category is ContentCategory.AFFIRMATION

    def test_ambiguous_request_asks_then_resolves(self) -> None:
        llm = FakeLLM()
        agent = MeditationAgent(llm)

        asked = agent.chat("help me sleep")
        assert not asked.should_generate
        assert asked.disambiguation_question
        assert asked.message == asked.disambiguation_question
        assert agent.session_state.awaiting_disambiguation

        answered = agent.chat("2")
        assert answered.should_generate
        assert answered.params is not None
        assert answered.params.category is ContentCategory.STORY
        assert answered.params.sub_type == "young_child"
        assert answered.message == "I'll create a bedtime story perfect for a young child."
        assert llm.prompts == []

    def test_missing_goal_comes_from_recent_messages(self) -> None:
        agent = MeditationAgent(FakeLLM())
        agent.chat("help me sleep")
        response = agent.chat("1")
        assert response.params is not None
        assert response.params.goal == "help me sleep"

    def test_pasted_script_goes_to_the_editor(self, pasted_script: str) -> None:
        llm = FakeLLM()
        agent = MeditationAgent(llm)

        response = agent.chat(pasted_script)

        assert response.should_generate
        assert response.message == PASTED_SCRIPT_REPLY
        assert response.pasted_script == pasted_script
        assert response.meditation_type == "guided_visualization"
        assert llm.prompts == []
        assert agent.session_state.message_count == 1


class TestConversation:
    def test_feelings_are_talked_through(self) -> None:
        llm = FakeLLM("What about the exam worries you most?")
        agent = MeditationAgent(llm)

        response = agent.chat("I'm feeling anxious about my exam")

        assert not response.should_generate
        assert response.message == "What about the exam worries you most?"
        assert response.emotional_state == "anxious"
        assert agent.session_state.current_mood == "anxious"
        prompt = llm.prompts[0]
        assert "[CONTEXT: User appears to be feeling anxious." in prompt
        assert prompt.endswith("User: I'm feeling anxious about my exam\n\nGuide:")
        assert "[RECENT CONVERSATION]" not in prompt

    def test_history_is_included_on_later_turns(self) -> None:
        llm = FakeLLM("What about the exam worries you most?", "That is soon. How are you sleeping?")
        agent = MeditationAgent(llm)

        agent.chat("I'm feeling anxious about my exam")
        agent.chat("It's tomorrow morning")

        prompt = llm.prompts[1]
        assert "[RECENT CONVERSATION]" in prompt
        assert "User: I'm feeling anxious about my exam" in prompt
        assert "Guide: What about the exam worries you most?" in prompt
        assert len(agent.history) == 4
        assert agent.session_state.message_count == 2

    def test_history_window_limits_context(self) -> None:
        llm = FakeLLM("ok")
        agent = MeditationAgent(llm, history_window=2)
        agent.chat("first thing on my mind")
        agent.chat("second thing on my mind")
        prompt = llm.prompts[-1]
        assert "first thing" not in prompt
        assert "Guide: ok" in prompt

    def test_leaked_script_is_replaced(self, leaked_reply: str) -> None:
        agent = MeditationAgent(FakeLLM(leaked_reply), validator=ResponseValidator(random.Random(3)))

        response = agent.chat("I'm so anxious today")

        assert response.message in STATE_RESPONSES["anxious"]
        assert agent.history[-1].content == response.message

    def test_trigger_phrase_in_reply_starts_generation(self) -> None:
        agent = MeditationAgent(FakeLLM("Let me create a calming breathwork session for you."))

        response = agent.chat("I'd like to try something for my nerves")

        assert response.should_generate
        assert response.meditation_type == "breathwork"
        assert response.params is None

    def test_llm_errors_propagate(self) -> None:
        def failing(prompt: str) -> str:
            raise LLMError("Ollama request failed: connection refused")

        agent = MeditationAgent(failing)
        with pytest.raises(LLMError):
            agent.chat("hello there")
        assert agent.history[-1].content == "hello there"

    def test_overlapping_turns_are_rejected(self) -> None:
        agent: MeditationAgent

        def reentrant(prompt: str) -> str:
            return agent.chat("another message").message

        agent = MeditationAgent(reentrant)
        with pytest.raises(ConcurrentTurnError):
            agent.chat("hello there")

    def test_reset_conversation(self) -> None:
        agent = MeditationAgent(FakeLLM())
        agent.chat("help me sleep")
        agent.reset_conversation()
        assert agent.history == ()
        assert not agent.session_state.awaiting_disambiguation
        assert agent.session_state.message_count == 0


class TestRequestHeuristics:
    @pytest.mark.parametrize(
        "message",
        [
            "Can you create a power affirmation about confidence",
            "make me a meditation",
            "I need a body scan",
            "let's start the meditation",
            "help me sleep",
            "could you make some sleep affirmations",
        ],
    )
    def test_explicit_requests(self, message: str) -> None:
        assert MeditationAgent.is_explicit_generation_request(message)

    @pytest.mark.parametrize("message", ["I'm so stressed", "what is meditation?", "my story is complicated"])
    def test_not_requests(self, message: str) -> None:
        assert not MeditationAgent.is_explicit_generation_request(message)

    def test_requested_meditation_type(self) -> None:
        assert MeditationAgent.detect_requested_meditation("can you make a body scan") == "body_scan"
        assert MeditationAgent.detect_requested_meditation("i want to relax") == "guided_visualization"
        assert MeditationAgent.detect_requested_meditation("i feel stuck") is None

    @pytest.mark.parametrize(
        ("reply", "expected"),
        [
            ("I'll create a breathing practice", "breathwork"),
            ("Let me create a gentle relaxation", "body_scan"),
            ("I'll craft a gratitude session", "gratitude"),
            ("Let me create something special", "guided_visualization"),
        ],
    )
    def test_infer_meditation_type(self, reply: str, expected: str) -> None:
        assert MeditationAgent.infer_meditation_type(reply) == expected


def test_from_config() -> None:
    config = Config()
    config.agent.history_window = 2
    config.agent.fallback_seed = 5
    agent = MeditationAgent.from_config(FakeLLM(), config)
    assert agent._history_window == 2


class TestTurnLogging:
    def test_turn_records_carry_the_conversation_id(self, caplog: pytest.LogCaptureFixture) -> None:
        agent = MeditationAgent(FakeLLM(), conversation_id="conv-42")

        with caplog.at_level(logging.DEBUG, logger="innrvo"):
            agent.chat("Can you create a power affirmation about confidence for 5 minutes")
            agent.chat("I'm feeling anxious about my exam")

        turns = [r for r in caplog.records if r.name == "innrvo.turns"]
        assert [r.turn_kind for r in turns] == ["generate", "converse"]
        assert all(r.conversation_id == "conv-42" for r in turns)
        assert turns[0].sub_type == "power"

    def test_records_outside_a_turn_have_no_conversation_id(self, caplog: pytest.LogCaptureFixture) -> None:
        MeditationAgent(FakeLLM()).chat("hello there")
        with caplog.at_level(logging.INFO, logger="innrvo.test"):
            logging.getLogger("innrvo.test").info("after the turn")
        assert not hasattr(caplog.records[-1], "conversation_id")

    def test_conversation_id_defaults_to_a_fresh_hex_id(self) -> None:
        first, second = MeditationAgent(FakeLLM()), MeditationAgent(FakeLLM())
        assert len(first.conversation_id) == 32
        assert first.conversation_id != second.conversation_id
