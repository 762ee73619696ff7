"""
JSON serialization for progress data.

Handles conversion between the dataclasses in core.models and
JSON-compatible dicts, and the full validation of snapshot documents
(the on-disk progress.json and exported backups share one format).
"""

import json
from datetime import date, datetime
from typing import Any

from ..core.achievements import default_achievements
from ..core.config import DATE_FORMAT, SNAPSHOT_VERSION, TIMESTAMP_FORMAT
from ..core.errors import InvalidInputError
from ..core.models import (
    Achievement,
    AchievementKey,
    ExerciseDefinition,
    ExerciseLogEntry,
    ProgressState,
    StreakState,
)


class ValidationError(InvalidInputError):
    """Raised when snapshot data validation fails."""

    pass


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------


def validate_date(value: Any, field: str = "date") -> date:
    """
    Parse a YYYY-MM-DD string.

    Raises:
        ValidationError: If the value is not a valid ISO date string
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a YYYY-MM-DD string, got {value!r}")
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise ValidationError(f"Invalid {field}: {value!r}. Expected YYYY-MM-DD") from e


def validate_timestamp(value: Any, field: str = "timestamp") -> datetime:
    """
    Parse a local "YYYY-MM-DD HH:MM:SS" timestamp.

    ISO strings with a "T" separator are accepted as well.

    Raises:
        ValidationError: If the value is not a valid timestamp string
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a timestamp string, got {value!r}")
    try:
        return datetime.strptime(value.replace("T", " "), TIMESTAMP_FORMAT)
    except ValueError as e:
        raise ValidationError(
            f"Invalid {field}: {value!r}. Expected YYYY-MM-DD HH:MM:SS"
        ) from e


def validate_int(value: Any, field: str, minimum: int) -> int:
    """
    Validate an integer that must be >= minimum.

    Booleans are rejected even though bool is an int subclass.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer, got {value!r}")
    if value < minimum:
        raise ValidationError(f"{field} must be >= {minimum}, got {value}")
    return value


def _require_mapping(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValidationError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _require_list(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if not isinstance(value, list):
        raise ValidationError(f"'{key}' must be a list")
    return value


def format_timestamp(ts: datetime) -> str:
    return ts.strftime(TIMESTAMP_FORMAT)


# ---------------------------------------------------------------------------
# Exercises
# ---------------------------------------------------------------------------


def exercise_to_dict(ex: ExerciseDefinition) -> dict[str, Any]:
    """
    Convert ExerciseDefinition to JSON-compatible dict.

    current_level is written for readability; it is checked, not trusted,
    on the way back in.
    """
    return {
        "id": ex.exercise_id,
        "name": ex.name,
        "xp_per_rep": ex.xp_per_rep,
        "total_xp": ex.total_xp,
        "current_level": ex.current_level,
        "icon": ex.icon,
        "created_at": format_timestamp(ex.created_at) if ex.created_at else None,
    }


def dict_to_exercise(data: dict[str, Any]) -> ExerciseDefinition:
    """
    Convert dict to ExerciseDefinition.

    Raises:
        ValidationError: If data is invalid
    """
    data = _require_mapping(data, "exercise")
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"exercise name must be a non-empty string, got {name!r}")

    ex = ExerciseDefinition(
        exercise_id=validate_int(data.get("id"), f"exercise '{name}' id", 1),
        name=name.strip(),
        xp_per_rep=validate_int(data.get("xp_per_rep"), f"exercise '{name}' xp_per_rep", 1),
        total_xp=validate_int(data.get("total_xp", 0), f"exercise '{name}' total_xp", 0),
        icon=data.get("icon") if isinstance(data.get("icon"), str) else None,
        created_at=(
            validate_timestamp(data["created_at"], f"exercise '{name}' created_at")
            if data.get("created_at") is not None
            else None
        ),
    )

    level = data.get("current_level")
    if level is not None and level != ex.current_level:
        raise ValidationError(
            f"exercise '{name}' current_level {level!r} does not match "
            f"total_xp {ex.total_xp} (level {ex.current_level})"
        )
    return ex


# ---------------------------------------------------------------------------
# Log entries
# ---------------------------------------------------------------------------


def log_to_dict(log: ExerciseLogEntry) -> dict[str, Any]:
    """Convert ExerciseLogEntry to JSON-compatible dict."""
    return {
        "id": log.log_id,
        "exercise_id": log.exercise_id,
        "reps": log.reps,
        "xp_earned": log.xp_earned,
        "logged_at": format_timestamp(log.logged_at),
    }


def dict_to_log(data: dict[str, Any]) -> ExerciseLogEntry:
    """
    Convert dict to ExerciseLogEntry.

    Raises:
        ValidationError: If data is invalid
    """
    data = _require_mapping(data, "log entry")
    log_id = validate_int(data.get("id"), "log id", 1)
    return ExerciseLogEntry(
        log_id=log_id,
        exercise_id=validate_int(data.get("exercise_id"), f"log {log_id} exercise_id", 1),
        reps=validate_int(data.get("reps"), f"log {log_id} reps", 1),
        xp_earned=validate_int(data.get("xp_earned"), f"log {log_id} xp_earned", 1),
        logged_at=validate_timestamp(data.get("logged_at"), f"log {log_id} logged_at"),
    )


# ---------------------------------------------------------------------------
# Streak
# ---------------------------------------------------------------------------


def streak_to_dict(streak: StreakState) -> dict[str, Any]:
    """Convert StreakState to JSON-compatible dict."""
    return {
        "current_streak": streak.current_streak,
        "longest_streak": streak.longest_streak,
        "last_active_date": (
            streak.last_active_date.strftime(DATE_FORMAT)
            if streak.last_active_date
            else None
        ),
    }


def dict_to_streak(data: dict[str, Any]) -> StreakState:
    """
    Convert dict to StreakState.

    Raises:
        ValidationError: If data is invalid or longest < current
    """
    data = _require_mapping(data, "streak")
    current = validate_int(data.get("current_streak", 0), "current_streak", 0)
    longest = validate_int(data.get("longest_streak", 0), "longest_streak", 0)
    if longest < current:
        raise ValidationError(
            f"longest_streak ({longest}) must be >= current_streak ({current})"
        )
    raw_last = data.get("last_active_date")
    last = validate_date(raw_last, "last_active_date") if raw_last is not None else None
    if current > 0 and last is None:
        raise ValidationError("A non-zero current_streak requires last_active_date")
    if current == 0 and last is not None:
        raise ValidationError("last_active_date is set but current_streak is 0")
    return StreakState(current_streak=current, longest_streak=longest, last_active_date=last)


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


def achievement_to_dict(ach: Achievement) -> dict[str, Any]:
    """Convert Achievement to JSON-compatible dict."""
    return {
        "key": ach.key.value,
        "name": ach.name,
        "description": ach.description,
        "unlocked_at": format_timestamp(ach.unlocked_at) if ach.unlocked_at else None,
    }


def dicts_to_achievements(items: list[Any]) -> list[Achievement]:
    """
    Merge stored unlock timestamps onto the static achievement definitions.

    Names and descriptions always come from the definitions. Unknown or
    duplicated keys are rejected; keys absent from the data stay locked.

    Raises:
        ValidationError: If an entry is malformed
    """
    unlocked: dict[AchievementKey, datetime | None] = {}
    for item in items:
        item = _require_mapping(item, "achievement")
        raw_key = item.get("key")
        try:
            key = AchievementKey(raw_key)
        except ValueError as e:
            raise ValidationError(f"Unknown achievement key: {raw_key!r}") from e
        if key in unlocked:
            raise ValidationError(f"Duplicate achievement key: {key.value}")
        raw_ts = item.get("unlocked_at")
        unlocked[key] = (
            validate_timestamp(raw_ts, f"achievement '{key.value}' unlocked_at")
            if raw_ts is not None
            else None
        )

    achievements = default_achievements()
    for ach in achievements:
        ach.unlocked_at = unlocked.get(ach.key)
    return achievements


# ---------------------------------------------------------------------------
# Whole snapshot
# ---------------------------------------------------------------------------


def state_to_dict(state: ProgressState, exported_at: datetime | None = None) -> dict[str, Any]:
    """
    Convert a ProgressState to a snapshot document.

    Args:
        state: State to serialize
        exported_at: Optional export timestamp to embed

    Returns:
        JSON-compatible dict
    """
    d: dict[str, Any] = {"version": SNAPSHOT_VERSION}
    if exported_at is not None:
        d["exported_at"] = format_timestamp(exported_at)
    d.update(
        {
            "next_exercise_id": state.next_exercise_id,
            "next_log_id": state.next_log_id,
            "exercises": [exercise_to_dict(ex) for ex in state.exercises],
            "exercise_logs": [log_to_dict(log) for log in state.logs],
            "streak": streak_to_dict(state.streak),
            "achievements": [achievement_to_dict(a) for a in state.achievements],
        }
    )
    return d


def dict_to_state(data: Any) -> ProgressState:
    """
    Validate a snapshot document and convert it to a ProgressState.

    Checks, in order: shape, per-record values, unique exercise names and
    ids, unique log ids, that every log references an existing exercise
    and earned xp_per_rep * reps, that each exercise's total_xp equals the
    sum of its logs' xp_earned, and streak consistency. The first violation
    aborts the conversion.

    Args:
        data: Parsed JSON document

    Returns:
        ProgressState

    Raises:
        ValidationError: On the first violation found
    """
    data = _require_mapping(data, "snapshot")
    version = data.get("version")
    if not isinstance(version, str) or version.split(".")[0] != SNAPSHOT_VERSION.split(".")[0]:
        raise ValidationError(
            f"Unsupported snapshot version {version!r} (expected {SNAPSHOT_VERSION})"
        )

    exercises = [dict_to_exercise(e) for e in _require_list(data, "exercises")]
    logs = [dict_to_log(entry) for entry in _require_list(data, "exercise_logs")]
    streak = dict_to_streak(data.get("streak", {}))
    achievements = dicts_to_achievements(data.get("achievements") or [])

    by_id: dict[int, ExerciseDefinition] = {}
    names: set[str] = set()
    for ex in exercises:
        if ex.exercise_id in by_id:
            raise ValidationError(f"Duplicate exercise id: {ex.exercise_id}")
        if ex.name.lower() in names:
            raise ValidationError(f"Duplicate exercise name: {ex.name}")
        by_id[ex.exercise_id] = ex
        names.add(ex.name.lower())

    log_ids: set[int] = set()
    xp_by_exercise: dict[int, int] = {ex_id: 0 for ex_id in by_id}
    for log in logs:
        if log.log_id in log_ids:
            raise ValidationError(f"Duplicate log id: {log.log_id}")
        log_ids.add(log.log_id)
        if log.exercise_id not in by_id:
            raise ValidationError(
                f"Log {log.log_id} references unknown exercise id {log.exercise_id}"
            )
        expected = by_id[log.exercise_id].xp_per_rep * log.reps
        if log.xp_earned != expected:
            raise ValidationError(
                f"Log {log.log_id} xp_earned {log.xp_earned} does not match "
                f"{log.reps} reps x {by_id[log.exercise_id].xp_per_rep} XP"
            )
        xp_by_exercise[log.exercise_id] += log.xp_earned

    for ex in exercises:
        if xp_by_exercise[ex.exercise_id] != ex.total_xp:
            raise ValidationError(
                f"Exercise '{ex.name}' total_xp {ex.total_xp} does not match "
                f"logged XP {xp_by_exercise[ex.exercise_id]}"
            )

    if logs and streak.last_active_date is None:
        raise ValidationError("Snapshot has log entries but no last_active_date")

    next_exercise_id = max(
        validate_int(data.get("next_exercise_id", 1), "next_exercise_id", 1),
        max(by_id, default=0) + 1,
    )
    next_log_id = max(
        validate_int(data.get("next_log_id", 1), "next_log_id", 1),
        max(log_ids, default=0) + 1,
    )

    return ProgressState(
        exercises=exercises,
        logs=logs,
        streak=streak,
        achievements=achievements,
        next_exercise_id=next_exercise_id,
        next_log_id=next_log_id,
    )


def state_to_json(state: ProgressState, exported_at: datetime | None = None) -> str:
    """Serialize a state to pretty-printed JSON."""
    return json.dumps(state_to_dict(state, exported_at), indent=2)


def json_to_state(text: str) -> ProgressState:
    """
    Parse and validate a JSON snapshot.

    Raises:
        ValidationError: If the JSON is invalid or validation fails
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    return dict_to_state(data)
