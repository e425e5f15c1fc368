"""Settings record and the stores that hold it.

The settings file is a flat camelCase JSON object so that it stays
compatible with the record the browser version kept in localStorage.
"""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Protocol

import click

logger = logging.getLogger("feierabend.settings")

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "feierabend" / "settings.json"

THEMES = ("system", "light", "dark")
LANGUAGES = ("en", "de")

MAX_TARGET_HOURS = 24.0
MAX_BREAK_MINUTES = 24 * 60
MAX_BALANCE_HOURS = 100_000.0

# Settings attribute -> key in the JSON record
JSON_KEYS: dict[str, str] = {
    "target_hours": "targetHours",
    "break_minutes": "breakDuration",
    "prior_balance_hours": "priorBalance",
    "theme": "theme",
    "language": "language",
    "audio_enabled": "audio",
    "notifications_enabled": "notifications",
}


@dataclass(frozen=True)
class Settings:
    """User settings for the calculator and countdown.

    theme picks the rich palette in the CLI; "system" keeps the terminal's
    own foreground colour for neutral values.
    """

    target_hours: float = 8.0
    break_minutes: int = 30
    prior_balance_hours: float = 0.0
    theme: str = "system"
    language: str = "en"
    audio_enabled: bool = False
    notifications_enabled: bool = False

    def sanitized(self) -> Settings:
        """Clamp impossible values instead of failing on them."""
        defaults = Settings()
        target = _bounded(self.target_hours, defaults.target_hours, 0.0, MAX_TARGET_HOURS)
        break_minutes = int(_bounded(self.break_minutes, defaults.break_minutes, 0, MAX_BREAK_MINUTES))
        balance = _bounded(
            self.prior_balance_hours, defaults.prior_balance_hours, -MAX_BALANCE_HOURS, MAX_BALANCE_HOURS
        )
        theme = self.theme if self.theme in THEMES else "system"
        language = self.language if self.language in LANGUAGES else "en"
        return replace(
            self,
            target_hours=target,
            break_minutes=break_minutes,
            prior_balance_hours=balance,
            theme=theme,
            language=language,
        )

    def to_json_dict(self) -> dict[str, Any]:
        """CamelCase dict for the settings file."""
        return {JSON_KEYS[name]: value for name, value in asdict(self).items()}

    @classmethod
    def from_json_dict(cls, data: dict[str, Any]) -> Settings:
        """Build settings from a stored record, ignoring unknown keys."""
        defaults = cls()
        values: dict[str, Any] = {}
        for f in fields(cls):
            key = JSON_KEYS[f.name]
            if key not in data:
                continue
            default = getattr(defaults, f.name)
            try:
                values[f.name] = _coerce(data[key], type(default))
            except (TypeError, ValueError, OverflowError):
                logger.warning(f"Ignoring invalid {key}={data[key]!r} in settings")
        return cls(**values).sanitized()


def _bounded(value: Any, default: float, low: float, high: float) -> float:
    """Clamp value into [low, high]; non-finite or non-numeric values give default."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return min(max(number, low), high)


def _coerce(value: Any, kind: type) -> Any:
    if kind is bool:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    return kind(value)


class SettingsStore(Protocol):
    def get(self) -> Settings: ...

    def set(self, **changes: Any) -> Settings: ...


class MemorySettingsStore:
    """In-process store, nothing survives the process."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or Settings()

    def get(self) -> Settings:
        return self._settings

    def set(self, **changes: Any) -> Settings:
        self._settings = replace(self._settings, **changes).sanitized()
        return self._settings

    def reset(self) -> Settings:
        self._settings = Settings()
        return self._settings


class JsonSettingsStore:
    """Settings persisted as a flat JSON file.

    Read failures fall back to defaults and write failures are logged;
    neither ever stops a recalculation.
    """

    def __init__(self, path: Path):
        self.path = path

    def get(self) -> Settings:
        if not self.path.exists():
            return Settings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(f"Failed to load settings from {self.path}, using defaults: {exc}")
            return Settings()
        if not isinstance(data, dict):
            logger.warning(f"Settings file {self.path} is not an object, using defaults")
            return Settings()
        return Settings.from_json_dict(data)

    def set(self, **changes: Any) -> Settings:
        settings = replace(self.get(), **changes).sanitized()
        self._write(settings)
        return settings

    def reset(self) -> Settings:
        settings = Settings()
        self._write(settings)
        return settings

    def _write(self, settings: Settings) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(settings.to_json_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error(f"Failed to save settings to {self.path}: {exc}")


class AppConfig:
    """Process-level configuration taken from the environment."""

    def __init__(self):
        self.settings_path = Path(
            os.environ.get("FEIERABEND_SETTINGS", str(DEFAULT_SETTINGS_PATH))
        ).expanduser()
        self.verbose = os.environ.get("FEIERABEND_VERBOSE", "false").lower() == "true"

    def validate(self) -> None:
        if self.settings_path.exists() and self.settings_path.is_dir():
            raise click.ClickException(
                f"Settings path '{self.settings_path}' is a directory, expected a JSON file"
            )

    def store(self) -> JsonSettingsStore:
        return JsonSettingsStore(self.settings_path)


def get_config() -> AppConfig:
    config = AppConfig()
    config.validate()
    return config
