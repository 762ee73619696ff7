"""
YAML -> typed settings loader.

Loads settings from settings.yaml (bundled with the package) and merges
user overrides from ~/.geekfit/settings.yaml. The home directory can be
moved with the GEEKFIT_HOME environment variable.

Usage:
    from geekfit.core.settings import load_settings
    settings = load_settings()
    settings.goals.daily_goal_xp

A user file that cannot be parsed is ignored with a warning; values that
parse but are out of range raise InvalidInputError naming the key.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import DEFAULT_DAILY_GOAL_XP, DEFAULT_FLAGSHIP_EXERCISE
from .errors import InvalidInputError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# ---------------------------------------------------------------------------
# Typed settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReminderSettings:
    """When and how often the reminder scheduler suggests an exercise."""

    enabled: bool = True
    min_interval_minutes: int = 60
    max_interval_minutes: int = 120
    use_random_intervals: bool = True
    work_start_hour: int = 9
    work_end_hour: int = 17
    active_days: tuple[int, ...] = (1, 2, 3, 4, 5)  # 0 = Sunday
    default_reps: int = 10


@dataclass(frozen=True)
class GoalSettings:
    daily_goal_xp: int = DEFAULT_DAILY_GOAL_XP


@dataclass(frozen=True)
class AchievementSettings:
    flagship_exercise: str = DEFAULT_FLAGSHIP_EXERCISE


@dataclass(frozen=True)
class StorageSettings:
    data_dir: Path | None = None


@dataclass(frozen=True)
class Settings:
    """All user-tunable settings."""

    reminders: ReminderSettings = field(default_factory=ReminderSettings)
    goals: GoalSettings = field(default_factory=GoalSettings)
    achievements: AchievementSettings = field(default_factory=AchievementSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    log_level: str = "WARNING"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping. Raises yaml.YAMLError / OSError on failure."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _int(section: dict, key: str, path: str, minimum: int, maximum: int | None = None) -> int:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{path}.{key} must be an integer, got {value!r}")
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f">= {minimum}" if maximum is None else f"in [{minimum}, {maximum}]"
        raise InvalidInputError(f"{path}.{key} must be {bounds}, got {value}")
    return value


def _bool(section: dict, key: str, path: str) -> bool:
    value = section.get(key)
    if not isinstance(value, bool):
        raise InvalidInputError(f"{path}.{key} must be true or false, got {value!r}")
    return value


def _reminders_from_dict(d: dict) -> ReminderSettings:
    path = "reminders"
    min_minutes = _int(d, "min_interval_minutes", path, 1)
    max_minutes = _int(d, "max_interval_minutes", path, 1)
    if max_minutes < min_minutes:
        raise InvalidInputError(
            "reminders.max_interval_minutes must be >= reminders.min_interval_minutes"
        )
    start = _int(d, "work_start_hour", path, 0, 23)
    end = _int(d, "work_end_hour", path, 1, 24)
    if end <= start:
        raise InvalidInputError("reminders.work_end_hour must be after work_start_hour")

    raw_days = d.get("active_days")
    if not isinstance(raw_days, list):
        raise InvalidInputError(f"reminders.active_days must be a list, got {raw_days!r}")
    for day in raw_days:
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            raise InvalidInputError(f"reminders.active_days entries must be 0-6, got {day!r}")

    return ReminderSettings(
        enabled=_bool(d, "enabled", path),
        min_interval_minutes=min_minutes,
        max_interval_minutes=max_minutes,
        use_random_intervals=_bool(d, "use_random_intervals", path),
        work_start_hour=start,
        work_end_hour=end,
        active_days=tuple(sorted(set(raw_days))),
        default_reps=_int(d, "default_reps", path, 1),
    )


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """
    Convert a merged settings mapping to Settings.

    Args:
        data: Mapping with the sections of settings.yaml

    Returns:
        Validated Settings

    Raises:
        InvalidInputError: If a value has the wrong type or is out of range
    """
    reminders = _reminders_from_dict(data.get("reminders") or {})
    goals = data.get("goals") or {}
    achievements = data.get("achievements") or {}
    storage = data.get("storage") or {}
    logging_cfg = data.get("logging") or {}

    flagship = achievements.get("flagship_exercise")
    if not isinstance(flagship, str) or not flagship.strip():
        raise InvalidInputError(
            f"achievements.flagship_exercise must be a non-empty string, got {flagship!r}"
        )

    raw_dir = storage.get("data_dir")
    if raw_dir is not None and not isinstance(raw_dir, str):
        raise InvalidInputError(f"storage.data_dir must be a path string, got {raw_dir!r}")

    level = str(logging_cfg.get("level", "WARNING")).upper()
    if level not in _LOG_LEVELS:
        raise InvalidInputError(f"logging.level must be one of {', '.join(_LOG_LEVELS)}")

    return Settings(
        reminders=reminders,
        goals=GoalSettings(daily_goal_xp=_int(goals, "daily_goal_xp", "goals", 1)),
        achievements=AchievementSettings(flagship_exercise=flagship.strip()),
        storage=StorageSettings(
            data_dir=Path(raw_dir).expanduser() if raw_dir else None
        ),
        log_level=level,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def geekfit_home() -> Path:
    """Return the per-user geekfit directory ($GEEKFIT_HOME or ~/.geekfit)."""
    override = os.environ.get("GEEKFIT_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".geekfit"


def get_bundled_settings_path() -> Path:
    """Return the path to the bundled settings.yaml."""
    return Path(__file__).parent.parent / "settings.yaml"


def get_user_settings_path() -> Path | None:
    """Return the user's settings.yaml if it exists, else None."""
    p = geekfit_home() / "settings.yaml"
    return p if p.exists() else None


def load_settings(user_path: Path | None = None) -> Settings:
    """
    Load and merge settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/geekfit/settings.yaml
    2. User override (``user_path`` or ~/.geekfit/settings.yaml)

    Returns:
        Validated Settings
    """
    config = _load_yaml_file(get_bundled_settings_path())

    user = user_path if user_path is not None else get_user_settings_path()
    if user is not None and user.exists():
        try:
            config = _deep_merge(config, _load_yaml_file(user))
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"geekfit: ignoring unreadable settings file {user} ({exc})",
                stacklevel=2,
            )

    return settings_from_dict(config)
