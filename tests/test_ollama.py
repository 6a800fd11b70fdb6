from __future__ import annotations

import json

import httpx
import pytest

from innrvo.config import OllamaConfig
from innrvo.errors import LLMError
from innrvo.providers import OllamaProvider


def _transport(models: list[str], reply: object = None, status: int = 200) -> tuple[httpx.MockTransport, list[dict]]:
    sent: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": m} for m in models]})
        if request.url.path == "/api/generate":
            sent.append(json.loads(request.content))
            return httpx.Response(status, json=reply if reply is not None else {"response": "  Tell me more.  "})
        return httpx.Response(404)

    return httpx.MockTransport(handler), sent


def test_generate_text_posts_prompt_and_options() -> None:
    transport, sent = _transport([])
    provider = OllamaProvider(model="llama3.2", transport=transport)

    text = provider.generate_text("User: hi\n\nGuide:", temperature=0.6, max_tokens=400)

    assert text == "Tell me more."
    assert sent == [
        {
            "model": "llama3.2",
            "prompt": "User: hi\n\nGuide:",
            "stream": False,
            "options": {"temperature": 0.6, "num_predict": 400},
        }
    ]


def test_model_is_auto_selected_by_preference() -> None:
    transport, sent = _transport(["tinyllama", "mistral:7b", "llama3.2:3b"])
    provider = OllamaProvider(transport=transport)

    provider.generate_text("hi")

    assert sent[0]["model"] == "llama3.2:3b"


def test_first_model_when_none_preferred() -> None:
    transport, sent = _transport(["tinyllama", "orca"])
    OllamaProvider(transport=transport).generate_text("hi")
    assert sent[0]["model"] == "tinyllama"


def test_no_models_installed() -> None:
    transport, _ = _transport([])
    with pytest.raises(LLMError, match="No Ollama model"):
        OllamaProvider(transport=transport).generate_text("hi")


def test_http_error_becomes_llm_error() -> None:
    transport, _ = _transport([], status=500)
    with pytest.raises(LLMError, match="Ollama request failed"):
        OllamaProvider(model="llama3", transport=transport).generate_text("hi")


def test_malformed_response() -> None:
    transport, _ = _transport([], reply={"done": True})
    with pytest.raises(LLMError, match="missing response text"):
        OllamaProvider(model="llama3", transport=transport).generate_text("hi")


def test_list_models_returns_empty_when_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = OllamaProvider(transport=httpx.MockTransport(handler))
    assert provider.list_models() == []


def test_from_config() -> None:
    provider = OllamaProvider.from_config(OllamaConfig(url="http://ollama:11434/", model="phi3", timeout=5))
    assert provider.url == "http://ollama:11434"
