"""Startup configuration and optional settings file discovery."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from texcompiler.backends.registry import DEFAULT_BACKEND

APP_NAME = "texture"
COMPILER_VERSION = 1
ENV_SETTINGS_PATH = "TEXCOMPILER_SETTINGS"
ENV_BACKEND = "TEXCOMPILER_BACKEND"
SETTINGS_FILENAME = "texcompiler.json"


class Mode(Enum):
    """Execution mode selected once at startup."""

    STANDALONE = "standalone"
    PERSISTENT = "persistent"


@dataclass(frozen=True)
class AppConfig:
    """Immutable application configuration built once by the CLI."""

    mode: Mode
    startup_directory: str
    source_path: str = ""
    target_path: str = ""
    platform: str = ""
    backend_name: str = DEFAULT_BACKEND
    name: str = APP_NAME
    version: int = COMPILER_VERSION

    @property
    def persistent(self) -> bool:
        return self.mode is Mode.PERSISTENT


def _default_candidate_paths() -> list[Path]:
    """Return default settings locations in priority order."""
    return [Path.cwd() / SETTINGS_FILENAME]


def _load_candidate(candidate: Path) -> dict[str, Any] | None:
    """Load settings from a single candidate path."""
    if not candidate.exists():
        return None
    try:
        data = json.loads(candidate.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Load settings from JSON config, if available."""
    if path:
        return _load_candidate(path) or {}
    env_path = os.environ.get(ENV_SETTINGS_PATH)
    if env_path:
        return _load_candidate(Path(env_path)) or {}
    for candidate in _default_candidate_paths():
        result = _load_candidate(candidate)
        if result is not None:
            return result
    return {}


def resolve_backend_name(explicit: str | None = None, settings: dict[str, Any] | None = None) -> str:
    """Pick the backend name from the CLI, environment, settings, or default."""
    if explicit:
        return explicit
    env_value = os.environ.get(ENV_BACKEND)
    if env_value:
        return env_value
    configured = (settings or {}).get("backend")
    if isinstance(configured, str) and configured:
        return configured
    return DEFAULT_BACKEND
