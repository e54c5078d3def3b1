from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from bible_progress.connectors.bible_apps import DEFAULT_APP, DEFAULT_VERSION, BibleApp, BibleVersion
from bible_progress.utils.dates import is_valid_date


logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path("settings.yaml")
DEFAULT_DAILY_GOAL = 86


@dataclass(frozen=True)
class UserSettings:
    """
    Per-user preferences, stored as a flat YAML mapping.

    ``look_back_date`` limits which log entries count toward progress;
    ``None`` means the whole log.
    """

    daily_verse_goal: int = DEFAULT_DAILY_GOAL
    look_back_date: Optional[str] = None
    bible_app: BibleApp = DEFAULT_APP
    bible_version: BibleVersion = DEFAULT_VERSION
    log_path: str = "reading-log.json"

    def __post_init__(self) -> None:
        if self.daily_verse_goal < 1:
            raise ValueError(f"daily_verse_goal must be at least 1, got {self.daily_verse_goal}")
        if self.look_back_date is not None and not is_valid_date(self.look_back_date):
            raise ValueError(f"look_back_date must be YYYY-MM-DD, got {self.look_back_date!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSettings":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}

        if "daily_verse_goal" in values:
            try:
                values["daily_verse_goal"] = int(values["daily_verse_goal"])
            except (TypeError, ValueError):
                raise ValueError(f"daily_verse_goal must be an integer, got {values['daily_verse_goal']!r}") from None
        if values.get("look_back_date") is not None:
            # YAML reads unquoted dates as datetime.date.
            values["look_back_date"] = str(values["look_back_date"])
        if "bible_app" in values:
            values["bible_app"] = _enum_value(BibleApp, values["bible_app"], "bible_app")
        if "bible_version" in values:
            values["bible_version"] = _enum_value(BibleVersion, values["bible_version"], "bible_version")
        if "log_path" in values:
            values["log_path"] = str(values["log_path"])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "daily_verse_goal": self.daily_verse_goal,
            "look_back_date": self.look_back_date,
            "bible_app": self.bible_app.value,
            "bible_version": self.bible_version.value,
            "log_path": self.log_path,
        }


def _enum_value(enum_cls: type, raw: Any, name: str) -> Any:
    try:
        return enum_cls(str(raw).upper())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{name} must be one of {choices}, got {raw!r}") from None


def load_settings(path: Path = DEFAULT_SETTINGS_PATH) -> UserSettings:
    if not path.exists():
        logger.debug("No settings file at %s; using defaults", path)
        return UserSettings()
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return UserSettings()
    if not isinstance(data, dict):
        raise ValueError(f"Invalid settings format (expected mapping): {path}")
    return UserSettings.from_dict(data)


def save_settings(path: Path, settings: UserSettings) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(settings.to_dict(), f, sort_keys=False)
    logger.info("Saved settings to %s", path)
