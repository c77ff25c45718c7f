from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value: Union["Difficulty", str, None]) -> "Difficulty":
        """Map a stored value onto a difficulty. Anything unrecognised is Medium."""
        if isinstance(value, Difficulty):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            for member in cls:
                if member.value.lower() == text or member.name.lower() == text:
                    return member
        return cls.MEDIUM


def data_dir() -> Path:
    """Directory holding progress.json and settings.json."""
    override = os.environ.get("PHOTOQUIZ_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".photoquiz"


@dataclass(frozen=True)
class Settings:
    difficulty: Difficulty = Difficulty.MEDIUM
    sound_enabled: bool = True
    game_lock_enabled: bool = True
    hints_enabled: bool = True
    timer_enabled: bool = True


_BOOL_FIELDS = ("sound_enabled", "game_lock_enabled", "hints_enabled", "timer_enabled")


class SettingsStore:
    """User preferences persisted as JSON. Defaults apply to anything missing or unreadable."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or data_dir() / "settings.json"
        self._settings = self._load()

    @property
    def settings(self) -> Settings:
        return self._settings

    def load(self) -> Settings:
        """Re-read the settings file."""
        self._settings = self._load()
        return self._settings

    def update(self, **changes: Any) -> Settings:
        known = {f.name for f in fields(Settings)}
        unknown = set(changes) - known
        if unknown:
            raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if "difficulty" in changes:
            changes["difficulty"] = Difficulty.parse(changes["difficulty"])
        for name in _BOOL_FIELDS:
            if name in changes:
                changes[name] = bool(changes[name])
        self._settings = replace(self._settings, **changes)
        self._save()
        return self._settings

    def save(self) -> None:
        self._save()

    def _load(self) -> Settings:
        if not self._file_path.exists():
            return Settings()
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load settings from %s: %s", self._file_path, e)
            return Settings()
        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed settings file %s", self._file_path)
            return Settings()

        values: Dict[str, Any] = {"difficulty": Difficulty.parse(payload.get("difficulty"))}
        defaults = Settings()
        for name in _BOOL_FIELDS:
            raw = payload.get(name, getattr(defaults, name))
            values[name] = raw if isinstance(raw, bool) else getattr(defaults, name)
        return Settings(**values)

    def _save(self) -> None:
        payload = asdict(self._settings)
        payload["difficulty"] = self._settings.difficulty.value
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self._file_path, e)
