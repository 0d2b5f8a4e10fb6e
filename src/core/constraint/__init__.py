from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_PATH = Path("config.toml")
ENV_PREFIX = "IMGC_"
APP_VERSION = "0.1.0"

__all__ = ["DEFAULT_CONFIG_PATH", "ENV_PREFIX", "APP_VERSION"]
