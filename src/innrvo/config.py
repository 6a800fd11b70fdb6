"""TOML configuration file support for Innrvo.

Loads configuration from:
1. System: /etc/innrvo/config.toml
2. User: ~/.config/innrvo/config.toml (XDG_CONFIG_HOME)
3. Local: ./.innrvo.toml
4. Environment variables (highest priority)

Configuration is merged in order, with later sources overriding earlier ones.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found,no-redef]

from innrvo.paths import paths

logger = logging.getLogger(__name__)


@dataclass
class GeneralConfig:
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"
    log_max_bytes: int = 1_000_000
    log_backup_count: int = 3


@dataclass
class DetectionConfig:
    """Detection rule configuration."""

    rules_path: str | None = None  # TOML rule file replacing built-in tables


@dataclass
class AgentConfig:
    """Conversational agent configuration."""

    history_window: int = 6  # previous messages included in the prompt
    fallback_seed: int | None = None  # fixes fallback reply choice when set


@dataclass
class OllamaConfig:
    """Ollama LLM configuration."""

    url: str = "http://127.0.0.1:11434"
    model: str | None = None
    timeout: int = 120


@dataclass
class Config:
    """Complete Innrvo configuration."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)

    @classmethod
    def load(cls) -> Config:
        """Load configuration from all sources."""
        config = cls()

        config_sources = [
            Path("/etc/innrvo/config.toml"),
            paths.config_file,
            Path.cwd() / ".innrvo.toml",
        ]
        for source in config_sources:
            if source.exists():
                config = config._merge_from_file(source)

        return config._apply_env_overrides()

    def _merge_from_file(self, path: Path) -> Config:
        """Merge configuration from a TOML file."""
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            return self._merge_dict(data)
        except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError) as e:
            # A broken config file must not stop the app
            logger.warning("Failed to load config from %s: %s", path, e)
            return self

    def _merge_dict(self, data: dict[str, Any]) -> Config:
        """Merge a dictionary into the configuration."""
        for section in ("general", "detection", "agent", "ollama"):
            if section in data:
                setattr(self, section, _merge_dataclass(getattr(self, section), data[section]))
        return self

    def _apply_env_overrides(self) -> Config:
        """Apply environment variable overrides."""
        env_mappings = {
            "INNRVO_LOG_LEVEL": ("general", "log_level"),
            "INNRVO_LOG_FORMAT": ("general", "log_format"),
            "INNRVO_RULES_PATH": ("detection", "rules_path"),
            "INNRVO_HISTORY_WINDOW": ("agent", "history_window", int),
            "INNRVO_FALLBACK_SEED": ("agent", "fallback_seed", int),
            "INNRVO_OLLAMA_URL": ("ollama", "url"),
            "INNRVO_OLLAMA_MODEL": ("ollama", "model"),
            "INNRVO_OLLAMA_TIMEOUT": ("ollama", "timeout", int),
        }

        for env_var, mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            section_name, field_name = mapping[0], mapping[1]
            converter = mapping[2] if len(mapping) > 2 else str
            try:
                setattr(getattr(self, section_name), field_name, converter(value))  # type: ignore[operator]
            except (ValueError, TypeError):
                logger.warning("Ignoring invalid value for %s: %r", env_var, value)

        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "general": {
                "log_level": self.general.log_level,
                "log_format": self.general.log_format,
                "log_max_bytes": self.general.log_max_bytes,
                "log_backup_count": self.general.log_backup_count,
            },
            "detection": {
                "rules_path": self.detection.rules_path,
            },
            "agent": {
                "history_window": self.agent.history_window,
                "fallback_seed": self.agent.fallback_seed,
            },
            "ollama": {
                "url": self.ollama.url,
                "model": self.ollama.model,
                "timeout": self.ollama.timeout,
            },
        }


def _merge_dataclass(obj: Any, data: dict[str, Any]) -> Any:
    """Merge dictionary values into a dataclass instance."""
    for key, value in data.items():
        if not hasattr(obj, key):
            continue
        current_value = getattr(obj, key)
        if isinstance(current_value, bool) and isinstance(value, str):
            value = _parse_bool(value)
        elif isinstance(current_value, int) and isinstance(value, str):
            value = int(value)
        setattr(obj, key, value)
    return obj


def _parse_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes", "y", "on")


DEFAULT_CONFIG_TEMPLATE = """\
# Innrvo configuration
#
# This file uses TOML format: https://toml.io/
# INNRVO_* environment variables override these settings.

[general]
# Log level: DEBUG, INFO, WARNING, ERROR
log_level = "INFO"

# Log format: "text" or "json"
log_format = "text"

# Log file rotation
log_max_bytes = 1000000
log_backup_count = 3

[detection]
# TOML file with [[explicit]], [[ambiguous]] and [[cluster]] tables.
# Sections it defines replace the built-in ones.
# rules_path = "~/.config/innrvo/rules.toml"

[agent]
# Previous messages included in the conversation prompt
history_window = 6

# Seed for picking fallback replies (leave unset for random)
# fallback_seed = 7

[ollama]
# Local Ollama endpoint
url = "http://127.0.0.1:11434"

# Model to use (leave empty for auto-detect)
# model = "llama3.2"

# Request timeout in seconds
timeout = 120
"""


def write_default_config(path: Path | None = None) -> Path:
    """Write the default configuration file.

    Args:
        path: Path to write to. Defaults to user config path.

    Returns:
        The path where the config was written.
    """
    if path is None:
        path = paths.config_file

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TEMPLATE)
    return path


_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def reload_config() -> Config:
    """Reload configuration from disk."""
    global _config
    _config = Config.load()
    return _config
