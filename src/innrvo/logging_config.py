"""Structured logging configuration for Innrvo.

Text output for terminals, JSON lines for log aggregation.

Usage:
    from innrvo.logging_config import setup_logging

    setup_logging(level="DEBUG", format="json")

The format can also come from INNRVO_LOG_FORMAT or ``[general] log_format``.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from innrvo.paths import paths

if TYPE_CHECKING:
    from innrvo.config import Config

LogFormat = Literal["text", "json"]

_STANDARD_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "message", "asctime", "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    {"timestamp": "2026-01-15T10:30:45.123+00:00", "level": "INFO",
     "logger": "innrvo.agent", "message": "...", "extra": {"conversation_id": "..."}}
    """

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            log_entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            extra_fields = {
                key: value
                for key, value in record.__dict__.items()
                if key not in _STANDARD_ATTRS and not key.startswith("_")
            }
            if extra_fields:
                log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """Colored text formatter for terminal output."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt or "%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        # Other handlers share the record, so restore the plain level name.
        levelname = record.levelname
        record.levelname = f"{self.COLORS.get(levelname, '')}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logging(
    level: str | None = None,
    format: LogFormat | None = None,
    log_file: Path | None = None,
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> None:
    """Configure root logging for Innrvo.

    Args:
        level: Log level. Defaults to INNRVO_LOG_LEVEL or INFO.
        format: "text" or "json". Defaults to INNRVO_LOG_FORMAT or "text".
        log_file: Log file path. Defaults to ~/.cache/innrvo/innrvo.log.
        max_bytes: Size before rotation. Defaults to 1MB.
        backup_count: Rotated files kept. Defaults to 3.
    """
    level = level or os.environ.get("INNRVO_LOG_LEVEL", "INFO")
    format = format or os.environ.get("INNRVO_LOG_FORMAT", "text")  # type: ignore[assignment]
    log_file = log_file or paths.log_path
    max_bytes = max_bytes or int(os.environ.get("INNRVO_LOG_MAX_BYTES", "1000000"))
    backup_count = backup_count or int(os.environ.get("INNRVO_LOG_BACKUP_COUNT", "3"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers.clear()

    if format == "json":
        console_formatter: logging.Formatter = JsonFormatter()
        file_formatter: logging.Formatter = JsonFormatter()
    else:
        console_formatter = ColoredFormatter()
        file_formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)
    except OSError as e:
        root_logger.warning("Could not create log file at %s: %s", log_file, e)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def setup_logging_from_config(config: Config, *, level: str | None = None) -> None:
    """Configure logging from the ``[general]`` config section."""
    setup_logging(
        level=level or config.general.log_level,
        format=config.general.log_format,  # type: ignore[arg-type]
        max_bytes=config.general.log_max_bytes,
        backup_count=config.general.log_backup_count,
    )


class LogContext:
    """Context manager adding fields to every record logged inside it.

    Usage:
        with LogContext(conversation_id="abc123"):
            logger.info("Turn resolved")  # carries conversation_id
    """

    def __init__(self, **kwargs: Any):
        self.extra = kwargs
        self.old_factory: Any = None

    def __enter__(self) -> LogContext:
        self.old_factory = logging.getLogRecordFactory()
        extra = self.extra

        def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
            record = self.old_factory(*args, **kwargs)
            for key, value in extra.items():
                setattr(record, key, value)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, *args: Any) -> None:
        logging.setLogRecordFactory(self.old_factory)


def log_turn(
    kind: str,
    *,
    category: str | None = None,
    sub_type: str | None = None,
    confidence: int | None = None,
    duration_ms: float | None = None,
) -> None:
    """Log the outcome of one conversation turn with structured fields."""
    logger = logging.getLogger("innrvo.turns")
    data: dict[str, Any] = {"turn_kind": kind}
    if category is not None:
        data["category"] = category
        data["sub_type"] = sub_type
        data["confidence"] = confidence
    if duration_ms is not None:
        data["duration_ms"] = round(duration_ms, 2)
    logger.info("Turn %s", kind, extra=data)
