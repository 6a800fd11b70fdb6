from __future__ import annotations

from pathlib import Path

import pytest

from innrvo.config import DEFAULT_CONFIG_TEMPLATE, Config, get_config, reload_config, write_default_config
from innrvo.paths import XDGPaths


def test_defaults(isolated_config: XDGPaths) -> None:
    config = Config.load()
    assert config.general.log_level == "INFO"
    assert config.detection.rules_path is None
    assert config.agent.history_window == 6
    assert config.ollama.url == "http://127.0.0.1:11434"
    assert config.ollama.model is None


def test_user_file_then_local_file(isolated_config: XDGPaths, tmp_path: Path) -> None:
    isolated_config.config_home.mkdir(parents=True)
    isolated_config.config_file.write_text(
        '[ollama]\nmodel = "llama3.2"\ntimeout = 30\n\n[agent]\nhistory_window = 4\n',
        encoding="utf-8",
    )
    (tmp_path / ".innrvo.toml").write_text('[agent]\nhistory_window = 2\n', encoding="utf-8")

    config = Config.load()

    assert config.ollama.model == "llama3.2"
    assert config.ollama.timeout == 30
    assert config.agent.history_window == 2


def test_env_overrides_files(isolated_config: XDGPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".innrvo.toml").write_text('[ollama]\nmodel = "from-file"\n', encoding="utf-8")
    monkeypatch.setenv("INNRVO_OLLAMA_MODEL", "from-env")
    monkeypatch.setenv("INNRVO_HISTORY_WINDOW", "3")
    monkeypatch.setenv("INNRVO_RULES_PATH", "/tmp/rules.toml")

    config = Config.load()

    assert config.ollama.model == "from-env"
    assert config.agent.history_window == 3
    assert config.detection.rules_path == "/tmp/rules.toml"


def test_invalid_env_value_is_ignored(
    isolated_config: XDGPaths, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("INNRVO_OLLAMA_TIMEOUT", "soon")
    config = Config.load()
    assert config.ollama.timeout == 120
    assert "INNRVO_OLLAMA_TIMEOUT" in caplog.text


def test_broken_file_is_skipped(
    isolated_config: XDGPaths, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    (tmp_path / ".innrvo.toml").write_text("[agent\nhistory_window = ", encoding="utf-8")
    config = Config.load()
    assert config.agent.history_window == 6
    assert "Failed to load config" in caplog.text


def test_string_numbers_are_converted(isolated_config: XDGPaths, tmp_path: Path) -> None:
    (tmp_path / ".innrvo.toml").write_text('[agent]\nhistory_window = "8"\n', encoding="utf-8")
    assert Config.load().agent.history_window == 8


def test_to_dict_round_trips_sections(isolated_config: XDGPaths) -> None:
    data = Config.load().to_dict()
    assert set(data) == {"general", "detection", "agent", "ollama"}
    assert data["agent"]["fallback_seed"] is None


def test_write_default_config(isolated_config: XDGPaths) -> None:
    path = write_default_config()
    assert path == isolated_config.config_file
    assert path.read_text() == DEFAULT_CONFIG_TEMPLATE
    assert Config.load().agent.history_window == 6


def test_get_config_is_cached(isolated_config: XDGPaths, monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_config()
    assert get_config() is first
    monkeypatch.setenv("INNRVO_LOG_LEVEL", "DEBUG")
    assert reload_config().general.log_level == "DEBUG"
