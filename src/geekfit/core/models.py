"""
Data models for geekfit.

Dataclasses for exercises, log entries, the streak singleton, achievements
and the aggregate ProgressState that the engine owns. Also the read-only
result types returned to callers.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .xp_curve import level_from_xp


class AchievementKey(str, Enum):
    """Closed set of achievement identifiers."""

    FIRST_EXERCISE = "first-exercise"
    CENTURY = "century"
    WEEK_STREAK = "week-streak"
    MONTH_STREAK = "month-streak"
    SKILL_10 = "skill-10"
    SKILL_25 = "skill-25"
    SKILL_50 = "skill-50"
    TOTAL_100 = "total-100"
    VARIETY = "variety"


@dataclass
class ExerciseDefinition:
    """
    One exercise in the catalog and its accumulated progress.

    current_level is derived from total_xp and cannot be set directly;
    use ExerciseCatalog.apply_xp to change total_xp.
    """

    exercise_id: int
    name: str
    xp_per_rep: int
    total_xp: int = 0
    icon: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.name or not self.name.strip():
            raise ValueError("name must be a non-empty string")
        if self.xp_per_rep <= 0:
            raise ValueError("xp_per_rep must be positive")
        if self.total_xp < 0:
            raise ValueError("total_xp must be non-negative")

    @property
    def current_level(self) -> int:
        """Level derived from total_xp (always in [1, 99])."""
        return level_from_xp(self.total_xp)


@dataclass(frozen=True)
class ExerciseLogEntry:
    """A single logged exercise event. Immutable once created."""

    log_id: int
    exercise_id: int
    reps: int
    xp_earned: int
    logged_at: datetime

    def __post_init__(self) -> None:
        if self.reps <= 0:
            raise ValueError("reps must be positive")
        if self.xp_earned <= 0:
            raise ValueError("xp_earned must be positive")


@dataclass
class StreakState:
    """Daily activity streak singleton."""

    current_streak: int = 0
    longest_streak: int = 0
    last_active_date: date | None = None

    def __post_init__(self) -> None:
        if self.current_streak < 0:
            raise ValueError("current_streak must be non-negative")
        if self.longest_streak < self.current_streak:
            raise ValueError("longest_streak must be >= current_streak")


@dataclass
class Achievement:
    """An achievement definition plus its unlock timestamp."""

    key: AchievementKey
    name: str
    description: str
    unlocked_at: datetime | None = None

    @property
    def is_unlocked(self) -> bool:
        return self.unlocked_at is not None


@dataclass
class ProgressState:
    """
    Complete engine state: catalog, log, streak and achievements.

    Exercises are kept in insertion order, which is the order used for
    substring lookups. next_exercise_id / next_log_id are the id counters
    so ids stay unique across deletions.
    """

    exercises: list[ExerciseDefinition] = field(default_factory=list)
    logs: list[ExerciseLogEntry] = field(default_factory=list)
    streak: StreakState = field(default_factory=StreakState)
    achievements: list[Achievement] = field(default_factory=list)
    next_exercise_id: int = 1
    next_log_id: int = 1

    def achievement(self, key: AchievementKey) -> Achievement:
        """Return the achievement with the given key."""
        for ach in self.achievements:
            if ach.key == key:
                return ach
        raise KeyError(key.value)


@dataclass(frozen=True)
class LogResult:
    """Summary of one committed Progress Transaction."""

    exercise_id: int
    exercise_name: str
    reps: int
    xp_earned: int
    old_level: int
    new_level: int
    total_xp: int
    streak: int
    newly_unlocked: tuple[Achievement, ...] = ()

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


@dataclass(frozen=True)
class AggregateStats:
    """Totals across the whole catalog plus the streak."""

    total_xp: int
    total_level: int
    current_streak: int
    longest_streak: int
    last_active_date: date | None
    exercise_count: int
    log_count: int


@dataclass(frozen=True)
class DailyExerciseTotal:
    """Reps and XP logged for one exercise on one day."""

    exercise_id: int
    name: str
    reps: int
    xp: int


@dataclass(frozen=True)
class TodaySummary:
    """Today's XP against the daily goal, with a per-exercise breakdown."""

    day: date
    total_xp: int
    daily_goal_xp: int
    exercises: tuple[DailyExerciseTotal, ...] = ()

    @property
    def goal_reached(self) -> bool:
        return self.total_xp >= self.daily_goal_xp

    @property
    def xp_remaining(self) -> int:
        return max(0, self.daily_goal_xp - self.total_xp)

