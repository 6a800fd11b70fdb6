from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

import innrvo.logging_config
from innrvo import cli
from innrvo.config import Config
from innrvo.paths import XDGPaths

runner = CliRunner()


@pytest.fixture(autouse=True)
def logging_calls(isolated_config: XDGPaths, monkeypatch: pytest.MonkeyPatch) -> list[Config]:
    """Record logging setup instead of reconfiguring the root logger."""
    calls: list[Config] = []
    monkeypatch.setattr(
        innrvo.logging_config, "setup_logging_from_config", lambda config, **kw: calls.append(config)
    )
    return calls


def test_version() -> None:
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert "Innrvo version" in result.stdout


def test_detect_json() -> None:
    result = runner.invoke(cli.app, ["detect", "a 10 minute body scan", "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["category"] == "meditation"
    assert data["sub_type"] == "body_scan"
    assert data["duration_minutes"] == 10


def test_detect_shows_question_for_ambiguous_text() -> None:
    result = runner.invoke(cli.app, ["detect", "help me sleep"])
    assert result.exit_code == 0
    assert "sleep_story" in result.stdout


def test_prompt_plans_word_budget() -> None:
    result = runner.invoke(
        cli.app, ["prompt", "Can you create a power affirmation about confidence for 5 minutes", "--json"]
    )
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["category"] == "affirmation"
    assert data["word_range"] == "405-495"
    assert data["goal"] == "confidence"


def test_prompt_duration_override() -> None:
    result = runner.invoke(cli.app, ["prompt", "a body scan", "--duration", "10", "--show-prompt"])
    assert result.exit_code == 0
    assert "1080-1320" in result.stdout


def test_prompt_refuses_ambiguous_request() -> None:
    result = runner.invoke(cli.app, ["prompt", "help me sleep"])
    assert result.exit_code == 2


def test_catalog_lists_categories() -> None:
    result = runner.invoke(cli.app, ["catalog"])
    assert result.exit_code == 0
    assert "self_hypnosis" in result.stdout


def test_rules_check(tmp_path: Path) -> None:
    good = tmp_path / "good.toml"
    good.write_text(
        '[[explicit]]\npattern = "reiki"\ncategory = "meditation"\nsub_type = "presence"\nconfidence = 88\n',
        encoding="utf-8",
    )
    result = runner.invoke(cli.app, ["rules", "check", str(good)])
    assert result.exit_code == 0
    assert "1 explicit" in result.stdout

    bad = tmp_path / "bad.toml"
    bad.write_text('[[explicit]]\npattern = "reiki"\ncategory = "meditation"\n', encoding="utf-8")
    result = runner.invoke(cli.app, ["rules", "check", str(bad)])
    assert result.exit_code == 1


def test_config_show_json() -> None:
    result = runner.invoke(cli.app, ["config", "show", "--json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["agent"]["history_window"] == 6


def test_config_init(tmp_path: Path) -> None:
    target = tmp_path / "innrvo.toml"
    assert runner.invoke(cli.app, ["config", "init", "--path", str(target)]).exit_code == 0
    assert target.exists()
    assert runner.invoke(cli.app, ["config", "init", "--path", str(target)]).exit_code == 1
    assert runner.invoke(cli.app, ["config", "init", "--path", str(target), "--force"]).exit_code == 0


def test_chat_single_message(monkeypatch: pytest.MonkeyPatch) -> None:
    prompts: list[str] = []

    def fake_generate(prompt: str) -> str:
        prompts.append(prompt)
        return "What's on your mind tonight?"

    monkeypatch.setattr(cli, "_make_generate_text", lambda config: fake_generate)

    result = runner.invoke(cli.app, ["chat", "hello there"])

    assert result.exit_code == 0
    assert "What's on your mind tonight?" in result.stdout
    assert len(prompts) == 1


def test_chat_reports_backend_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    from innrvo.errors import LLMError

    def failing(prompt: str) -> str:
        raise LLMError("Ollama request failed: refused")

    monkeypatch.setattr(cli, "_make_generate_text", lambda config: failing)

    result = runner.invoke(cli.app, ["chat", "hello there"])

    assert result.exit_code == 0
    assert "Ollama request failed" in result.stdout


def test_detect_sets_up_logging(logging_calls: list[Config]) -> None:
    assert runner.invoke(cli.app, ["detect", "a body scan", "--json"]).exit_code == 0
    assert len(logging_calls) == 1
    assert logging_calls[0].general.log_level == "INFO"


def test_verbose_enables_debug_logging(logging_calls: list[Config], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INNRVO_LOG_LEVEL", "INFO")

    result = runner.invoke(cli.app, ["--verbose", "prompt", "a body scan", "--json"])

    assert result.exit_code == 0
    assert [c.general.log_level for c in logging_calls] == ["DEBUG"]
