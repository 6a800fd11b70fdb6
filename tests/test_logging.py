from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from innrvo.logging_config import JsonFormatter, LogContext, log_turn, setup_logging


@pytest.fixture
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        yield
    finally:
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)


def _record(msg: str = "hello", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("innrvo.test", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self) -> None:
        entry = json.loads(JsonFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "innrvo.test"
        assert entry["message"] == "hello"
        assert entry["location"]["line"] == 10
        assert "extra" not in entry

    def test_extra_fields(self) -> None:
        entry = json.loads(JsonFormatter().format(_record(turn_kind="ask", confidence=45)))
        assert entry["extra"] == {"turn_kind": "ask", "confidence": 45}

    def test_extra_can_be_disabled(self) -> None:
        entry = json.loads(JsonFormatter(include_extra=False).format(_record(turn_kind="ask")))
        assert "extra" not in entry


def test_log_turn_structured_fields(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="innrvo.turns"):
        log_turn("generate", category="affirmation", sub_type="power", confidence=95, duration_ms=1.23456)

    record = caplog.records[-1]
    assert record.getMessage() == "Turn generate"
    assert record.turn_kind == "generate"
    assert record.sub_type == "power"
    assert record.duration_ms == 1.23


def test_log_turn_without_category(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="innrvo.turns"):
        log_turn("converse")
    assert not hasattr(caplog.records[-1], "category")


def test_log_context_adds_fields(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("innrvo.test")
    with caplog.at_level(logging.INFO, logger="innrvo.test"):
        with LogContext(conversation_id="abc123"):
            logger.info("inside")
        logger.info("outside")

    inside, outside = caplog.records[-2:]
    assert inside.conversation_id == "abc123"
    assert not hasattr(outside, "conversation_id")


def test_setup_logging_writes_json_file(tmp_path: Path, restore_root_logging: None) -> None:
    log_file = tmp_path / "logs" / "innrvo.log"
    setup_logging(level="DEBUG", format="json", log_file=log_file)

    logging.getLogger("innrvo.test").debug("written", extra={"turn_kind": "ask"})
    for handler in logging.getLogger().handlers:
        handler.flush()

    entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert entry["message"] == "written"
    assert entry["extra"]["turn_kind"] == "ask"
    assert logging.getLogger("httpx").level == logging.WARNING
