"""Settings for the terminal client, stored as JSON.

Lookup order for :func:`load_settings`: an explicit path, then
``./dnet-tui.json``, then ``$DNET_CONFIG_DIR/tui.json`` (``~/.dnet`` by
default).  When no file exists the defaults are used.
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dnet.tui.errors import ConfigError

__all__ = [
    "Settings",
    "LOG_LEVELS",
    "config_dir",
    "settings_from_dict",
    "settings_to_dict",
    "find_settings_file",
    "load_settings",
    "save_settings",
]

LOCAL_SETTINGS_FILE = "dnet-tui.json"
SETTINGS_FILE = "tui.json"
LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass
class Settings:
    """Client settings."""

    tick_interval_ms: int = 250
    log_file: str | None = None
    log_level: str = "info"
    strict_transitions: bool = False
    api_host: str = "127.0.0.1"
    api_port: int = 8080

    @property
    def api_url(self) -> str:
        return f"http://{self.api_host}:{self.api_port}"


def config_dir() -> Path:
    return Path(os.environ.get("DNET_CONFIG_DIR", Path.home() / ".dnet"))


def _check(path: str, name: str, value: Any, expected: type) -> None:
    # bool is an int subclass; don't accept it for numeric fields
    if expected is int and isinstance(value, bool):
        raise ConfigError(path, f"'{name}' must be an integer")
    if not isinstance(value, expected):
        raise ConfigError(path, f"'{name}' must be of type {expected.__name__}")


def settings_from_dict(data: dict[str, Any], path: str = "<dict>") -> Settings:
    """Build :class:`Settings` from a JSON-compatible dict.

    Unknown keys are ignored; known keys with the wrong type or an invalid
    value raise :class:`ConfigError`.
    """
    if not isinstance(data, dict):
        raise ConfigError(path, "top level must be an object")

    settings = Settings()
    types = {
        "tick_interval_ms": int,
        "log_level": str,
        "strict_transitions": bool,
        "api_host": str,
        "api_port": int,
    }
    for name, expected in types.items():
        if name in data:
            _check(path, name, data[name], expected)
            setattr(settings, name, data[name])

    log_file = data.get("log_file")
    if log_file is not None:
        _check(path, "log_file", log_file, str)
        settings.log_file = log_file

    if settings.tick_interval_ms <= 0:
        raise ConfigError(path, "'tick_interval_ms' must be positive")
    if settings.log_level not in LOG_LEVELS:
        raise ConfigError(path, f"'log_level' must be one of {', '.join(LOG_LEVELS)}")
    if not 0 < settings.api_port < 65536:
        raise ConfigError(path, "'api_port' must be between 1 and 65535")
    return settings


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    return dataclasses.asdict(settings)


def find_settings_file() -> Path | None:
    """First existing settings file in lookup order, if any."""
    for candidate in (Path(LOCAL_SETTINGS_FILE), config_dir() / SETTINGS_FILE):
        if candidate.exists():
            return candidate
    return None


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from *path* or the first file found in lookup order."""
    if path is None:
        found = find_settings_file()
        if found is None:
            return Settings()
        path = found

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(str(path), "file not found") from e
    except OSError as e:
        raise ConfigError(str(path), str(e)) from e
    except json.JSONDecodeError as e:
        raise ConfigError(str(path), f"not valid JSON ({e.msg} at line {e.lineno})") from e
    return settings_from_dict(data, str(path))


def save_settings(settings: Settings, path: str | Path | None = None) -> Path:
    """Write *settings* as pretty JSON; defaults to ``$DNET_CONFIG_DIR/tui.json``."""
    target = Path(path) if path is not None else config_dir() / SETTINGS_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(settings_to_dict(settings), indent=2), encoding="utf-8")
    return target
