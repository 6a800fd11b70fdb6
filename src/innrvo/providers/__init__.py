"""Text generation backends for the conversational agent."""

from __future__ import annotations

from .ollama import OllamaProvider

__all__ = ["OllamaProvider"]
