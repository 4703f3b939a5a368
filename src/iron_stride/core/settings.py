"""
YAML → runtime settings loader.

Loads runtime settings (data directory, remote API URL, HTTP timeout) from
``~/.iron-stride/config.yaml`` merged over built-in defaults.  Environment
variables override the file:

    IRON_STRIDE_HOME      directory holding config.yaml and local state
    IRON_STRIDE_API_URL   base URL of the remote user-data API
    IRON_STRIDE_TOKEN     bearer token for the remote API
    IRON_STRIDE_USER      signed-in user id (namespaces local state, used by sync)

Usage:
    from iron_stride.core.settings import load_settings
    settings = load_settings()
    settings.data_dir, settings.api_url

If the config file is missing or cannot be parsed, defaults are used
(no crash).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .config import HTTP_TIMEOUT_SECONDS

CONFIG_FILENAME = "config.yaml"


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    data_dir: Path
    api_url: str | None = None
    token: str | None = None
    user_id: str | None = None
    timeout_seconds: float = HTTP_TIMEOUT_SECONDS


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def get_app_home() -> Path:
    """Return the application directory (IRON_STRIDE_HOME or ~/.iron-stride)."""
    override = os.environ.get("IRON_STRIDE_HOME")
    if override:
        return Path(override).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".iron-stride"


def _load_config_file(path: Path) -> dict[str, Any]:
    """Load the YAML config; return {} on any error."""
    if not path.is_file():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def load_settings() -> Settings:
    """
    Resolve settings from defaults, the YAML file, then the environment.

    Returns:
        Settings with every field populated (api_url/token may be None)
    """
    home = get_app_home()
    raw: dict[str, Any] = {
        "data_dir": str(home),
        "api_url": None,
        "timeout_seconds": HTTP_TIMEOUT_SECONDS,
    }
    raw = deep_merge(raw, _load_config_file(home / CONFIG_FILENAME))

    api_url = os.environ.get("IRON_STRIDE_API_URL") or raw.get("api_url")
    token = os.environ.get("IRON_STRIDE_TOKEN") or raw.get("token")
    user_id = os.environ.get("IRON_STRIDE_USER") or raw.get("user_id")

    try:
        timeout = float(raw.get("timeout_seconds", HTTP_TIMEOUT_SECONDS))
    except (TypeError, ValueError):
        timeout = HTTP_TIMEOUT_SECONDS

    return Settings(
        data_dir=Path(str(raw.get("data_dir") or home)).expanduser(),
        api_url=str(api_url).rstrip("/") if api_url else None,
        token=str(token) if token else None,
        user_id=str(user_id) if user_id else None,
        timeout_seconds=timeout,
    )
