"""Ollama text generation backend.

Implements the ``generate_text(prompt) -> str`` collaborator the agent talks
to, against a local Ollama server.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from innrvo.errors import LLMError

if TYPE_CHECKING:
    from innrvo.config import OllamaConfig

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://127.0.0.1:11434"

# Models that follow conversational instructions well, in order of preference.
PREFERRED_MODELS = ("llama3", "mistral", "qwen", "gemma", "phi")


class OllamaProvider:
    """Text generation through Ollama's ``/api/generate`` endpoint.

    Example:
        provider = OllamaProvider(model="llama3.2:3b")
        agent = MeditationAgent(provider.generate_text)
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        model: str | None = None,
        timeout_seconds: float = 120.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            url: Ollama server URL.
            model: Model name. Auto-detected from installed models when None.
            timeout_seconds: Per-request timeout.
            transport: Optional httpx transport, e.g. a mock in tests.
        """
        self._url = (url or DEFAULT_URL).rstrip("/")
        self._model = model
        self._timeout = timeout_seconds
        self._transport = transport

    @classmethod
    def from_config(cls, config: OllamaConfig) -> OllamaProvider:
        return cls(url=config.url, model=config.model, timeout_seconds=float(config.timeout))

    @property
    def url(self) -> str:
        return self._url

    def _client(self, timeout: float) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self._transport)

    def generate_text(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Complete ``prompt`` and return the generated text.

        Raises:
            LLMError: If the request fails or the response is malformed.
        """
        options: dict[str, Any] = {}
        if temperature is not None:
            options["temperature"] = float(temperature)
        if max_tokens is not None:
            options["num_predict"] = int(max_tokens)

        payload = {
            "model": self._model or self._get_default_model(),
            "prompt": prompt,
            "stream": False,
            "options": options,
        }
        try:
            with self._client(self._timeout) as client:
                res = client.post(f"{self._url}/api/generate", json=payload)
                res.raise_for_status()
                data = res.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LLMError(f"Ollama request failed: {e}") from e

        if not isinstance(data, dict):
            raise LLMError("Unexpected Ollama response: not an object")
        text = data.get("response")
        if not isinstance(text, str):
            raise LLMError("Unexpected Ollama response: missing response text")
        return text.strip()

    def list_models(self) -> list[str]:
        """Names of the models installed on the server, empty if unreachable."""
        try:
            with self._client(5.0) as client:
                res = client.get(f"{self._url}/api/tags")
                res.raise_for_status()
                data = res.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to list Ollama models: %s", e)
            return []

        models = data.get("models", []) if isinstance(data, dict) else []
        return [m["name"] for m in models if isinstance(m, dict) and isinstance(m.get("name"), str)]

    def _get_default_model(self) -> str:
        names = self.list_models()
        for pattern in PREFERRED_MODELS:
            for name in names:
                if pattern in name.lower():
                    logger.info("Auto-selected model: %s (preferred pattern: %s)", name, pattern)
                    self._model = name
                    return name
        if names:
            logger.info("Auto-selected first available model: %s", names[0])
            self._model = names[0]
            return names[0]
        raise LLMError("No Ollama model configured. Set INNRVO_OLLAMA_MODEL or pull a model.")
