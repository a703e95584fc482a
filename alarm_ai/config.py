"""
Configuration loading for the alarm answering tool.

The workflow URL and key normally live in a small JSON file shared with the
other shop-floor tools::

    {"URL": "http://dify.local/v1", "AutoKey": "app-..."}

The file path is taken from ``--config`` / ``ALARM_AI_CONFIG`` and defaults to
``AppConfig.json`` in the working directory. When no file exists the values
fall back to environment variables (a ``.env`` file is honoured):

    ALARM_AI_URL        ← workflow API base URL
    ALARM_AI_AUTO_KEY   ← workflow app key
    ALARM_AI_LOG_DIR    ← folder for the daily request log (optional)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

from .errors import ConfigurationError


DEFAULT_CONFIG_FILE = "AppConfig.json"
DEFAULT_LOG_DIR = os.path.join("logs", "alarm_ai")


@dataclass(frozen=True)
class WorkflowSettings:
    base_url: str
    api_key: str

    @classmethod
    def create(cls, base_url: Optional[str], api_key: Optional[str]) -> "WorkflowSettings":
        """Normalise raw values (trim, drop trailing slash) without validating."""
        return cls(
            base_url=(base_url or "").strip().rstrip("/"),
            api_key=(api_key or "").strip(),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.base_url) and bool(self.api_key)

    def require_complete(self) -> "WorkflowSettings":
        if not self.is_complete:
            raise ConfigurationError("Workflow URL/AutoKey is not configured.")
        return self


def _read_key(root: Dict[str, Any], key: str) -> Optional[str]:
    for name, value in root.items():
        if str(name).lower() == key.lower():
            return None if value is None else str(value)
    return None


def _resolve_config_path(path: Optional[Union[str, Path]]) -> Path:
    if path:
        return Path(path).expanduser()
    env = os.getenv("ALARM_AI_CONFIG")
    if env:
        return Path(env).expanduser()
    return Path(DEFAULT_CONFIG_FILE)


def load_settings_file(path: Union[str, Path]) -> WorkflowSettings:
    """Read URL/AutoKey from a JSON config file (keys are case-insensitive)."""
    config_path = Path(path)
    try:
        root = json.loads(config_path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Failed to read config '{config_path}': {exc}") from exc
    if not isinstance(root, dict):
        raise ConfigurationError(f"Config '{config_path}' must contain a JSON object.")
    return WorkflowSettings.create(_read_key(root, "URL"), _read_key(root, "AutoKey"))


def load_settings(path: Optional[Union[str, Path]] = None) -> WorkflowSettings:
    """Return complete workflow settings or raise ``ConfigurationError``."""
    load_dotenv(override=False)

    config_path = _resolve_config_path(path)
    if config_path.exists():
        settings = load_settings_file(config_path)
    elif path:
        raise ConfigurationError(f"Config file not found: {config_path}")
    else:
        settings = WorkflowSettings.create(
            os.getenv("ALARM_AI_URL"), os.getenv("ALARM_AI_AUTO_KEY")
        )
    return settings.require_complete()


def resolve_log_dir(value: Optional[str] = None) -> Path:
    return Path(value or os.getenv("ALARM_AI_LOG_DIR") or DEFAULT_LOG_DIR).expanduser()


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_LOG_DIR",
    "WorkflowSettings",
    "load_settings",
    "load_settings_file",
    "resolve_log_dir",
]
