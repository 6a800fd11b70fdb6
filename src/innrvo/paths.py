"""XDG Base Directory compliant paths for Innrvo.

On Linux:
  - Config: ~/.config/innrvo (XDG_CONFIG_HOME)
  - Cache:  ~/.cache/innrvo (XDG_CACHE_HOME)

On other platforms, falls back to ~/.innrvo/{config,cache}.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_NAME: Final[str] = "innrvo"


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


def _get_xdg_path(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory path with fallback to default."""
    if env_var in os.environ:
        return Path(os.environ[env_var]) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


@dataclass(frozen=True)
class XDGPaths:
    """Config and cache directories for the current platform."""

    config_home: Path
    cache_home: Path

    @classmethod
    def detect(cls) -> XDGPaths:
        if _is_linux():
            return cls(
                config_home=_get_xdg_path("XDG_CONFIG_HOME", ".config"),
                cache_home=_get_xdg_path("XDG_CACHE_HOME", ".cache"),
            )
        fallback = Path.home() / f".{APP_NAME}"
        return cls(config_home=fallback / "config", cache_home=fallback / "cache")

    @property
    def log_path(self) -> Path:
        """Application log path."""
        return self.cache_home / "innrvo.log"

    @property
    def config_file(self) -> Path:
        """Main configuration file."""
        return self.config_home / "config.toml"


paths = XDGPaths.detect()
