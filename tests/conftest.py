from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from innrvo.content import ContentDetector, SessionState
from innrvo.paths import XDGPaths


@pytest.fixture
def detector() -> ContentDetector:
    return ContentDetector()


@pytest.fixture
def session() -> SessionState:
    return SessionState()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[XDGPaths]:
    """Point config loading at a temp home and clear INNRVO_* overrides.

    Resets the cached global config before and after the test.
    """
    import innrvo.config as config_mod

    tmp_paths = XDGPaths(config_home=tmp_path / "config", cache_home=tmp_path / "cache")
    monkeypatch.setattr(config_mod, "paths", tmp_paths)
    monkeypatch.chdir(tmp_path)
    for name in (
        "INNRVO_LOG_LEVEL",
        "INNRVO_LOG_FORMAT",
        "INNRVO_RULES_PATH",
        "INNRVO_HISTORY_WINDOW",
        "INNRVO_FALLBACK_SEED",
        "INNRVO_OLLAMA_URL",
        "INNRVO_OLLAMA_MODEL",
        "INNRVO_OLLAMA_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)

    config_mod._config = None
    try:
        yield tmp_paths
    finally:
        config_mod._config = None


@pytest.fixture
def leaked_reply() -> str:
    """A conversational reply that slipped into writing a meditation."""
    return (
        "Close your eyes and take a deep breath.\n\n"
        "Imagine a peaceful place where everything is still.\n\n"
        "When you're ready, gently come back to the room."
    )


@pytest.fixture
def pasted_script() -> str:
    return (
        "Welcome, dear one. Find a comfortable position and close your eyes. [pause]\n\n"
        "Take a deep breath in through your nose, and exhale slowly through your mouth. "
        "Let your shoulders soften and feel your body grow heavier with every breath.\n\n"
        "Imagine a warm golden light resting at the crown of your head. Allow yourself to "
        "sink into the present moment, calm and safe.\n\n"
        "When you're ready, gently bring your awareness back and open your eyes."
    )
