"""
Achievement ruleset.

Each achievement is a named, monotonic predicate over a read-only
AchievementContext built from the post-update state of a Progress
Transaction. Evaluation unlocks an achievement (stamps unlocked_at) the
first time its predicate holds; once stamped it is never touched again, so
re-evaluating is always safe.

Thresholds are inclusive. The "century" rule is tied to one flagship
exercise (configurable, Pushups by default): 100 reps of it on the same
calendar day.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

from .config import (
    CENTURY_REPS,
    MONTH_STREAK_DAYS,
    SKILL_LEVEL_THRESHOLDS,
    TOTAL_LEVEL_THRESHOLD,
    VARIETY_DISTINCT_EXERCISES,
    WEEK_STREAK_DAYS,
)
from .models import Achievement, AchievementKey, ProgressState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementContext:
    """Aggregate metrics the rules are evaluated against."""

    exercise_level: int         # level of the exercise just logged
    streak: int                 # current streak after the transition
    total_level: int            # sum of all per-exercise levels
    distinct_exercises: int     # exercises with at least one log entry
    log_count: int              # log entries ever created
    flagship_reps_today: int    # reps of the flagship exercise logged today


@dataclass(frozen=True)
class AchievementRule:
    """Static definition of one achievement."""

    key: AchievementKey
    name: str
    description: str
    target: int
    measure: Callable[[AchievementContext], int]
    exact: bool = False  # unlock on measure == target instead of >=

    def is_satisfied(self, ctx: AchievementContext) -> bool:
        value = self.measure(ctx)
        return value == self.target if self.exact else value >= self.target


RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        AchievementKey.FIRST_EXERCISE, "First Steps", "Complete your first exercise",
        1, lambda c: c.log_count, exact=True,
    ),
    AchievementRule(
        AchievementKey.CENTURY, "Century", "Complete 100 reps of the flagship exercise in a single day",
        CENTURY_REPS, lambda c: c.flagship_reps_today,
    ),
    AchievementRule(
        AchievementKey.WEEK_STREAK, "Dedicated", "Maintain a 7-day exercise streak",
        WEEK_STREAK_DAYS, lambda c: c.streak,
    ),
    AchievementRule(
        AchievementKey.MONTH_STREAK, "Committed", "Maintain a 30-day exercise streak",
        MONTH_STREAK_DAYS, lambda c: c.streak,
    ),
    AchievementRule(
        AchievementKey.SKILL_10, "Rising Star", "Get any exercise to level 10",
        SKILL_LEVEL_THRESHOLDS["skill-10"], lambda c: c.exercise_level,
    ),
    AchievementRule(
        AchievementKey.SKILL_25, "Fitness Warrior", "Get any exercise to level 25",
        SKILL_LEVEL_THRESHOLDS["skill-25"], lambda c: c.exercise_level,
    ),
    AchievementRule(
        AchievementKey.SKILL_50, "Legend", "Get any exercise to level 50",
        SKILL_LEVEL_THRESHOLDS["skill-50"], lambda c: c.exercise_level,
    ),
    AchievementRule(
        AchievementKey.TOTAL_100, "Century Club", "Reach 100 total level",
        TOTAL_LEVEL_THRESHOLD, lambda c: c.total_level,
    ),
    AchievementRule(
        AchievementKey.VARIETY, "Well-Rounded", "Log 5 different types of exercises",
        VARIETY_DISTINCT_EXERCISES, lambda c: c.distinct_exercises,
    ),
)

_RULES_BY_KEY: dict[AchievementKey, AchievementRule] = {r.key: r for r in RULES}


def default_achievements() -> list[Achievement]:
    """All achievements, locked, in definition order."""
    return [Achievement(key=r.key, name=r.name, description=r.description) for r in RULES]


def flagship_reps_on(state: ProgressState, flagship_name: str, day: date) -> int:
    """Reps logged on *day* for the exercise named *flagship_name* (case-insensitive)."""
    wanted = flagship_name.strip().lower()
    ids = {ex.exercise_id for ex in state.exercises if ex.name.lower() == wanted}
    if not ids:
        return 0
    return sum(
        log.reps for log in state.logs
        if log.exercise_id in ids and log.logged_at.date() == day
    )


def build_context(
    state: ProgressState,
    exercise_level: int,
    today: date,
    flagship_name: str,
) -> AchievementContext:
    """
    Snapshot the metrics the rules need from a (post-update) state.

    Args:
        state: Progress state after the log entry, XP and streak were applied
        exercise_level: Level of the exercise that was just logged
        today: Transaction date
        flagship_name: Name of the exercise driving the century rule
    """
    return AchievementContext(
        exercise_level=exercise_level,
        streak=state.streak.current_streak,
        total_level=sum(ex.current_level for ex in state.exercises),
        distinct_exercises=len({log.exercise_id for log in state.logs}),
        log_count=state.next_log_id - 1,
        flagship_reps_today=flagship_reps_on(state, flagship_name, today),
    )


def evaluate_achievements(
    achievements: list[Achievement],
    ctx: AchievementContext,
    now: datetime,
) -> list[Achievement]:
    """
    Unlock every locked achievement whose rule now holds.

    Already-unlocked achievements are left untouched. Achievements are
    modified in place, so pass the working copy of a transaction.

    Args:
        achievements: Achievement rows to evaluate
        ctx: Post-update metrics
        now: Unlock timestamp

    Returns:
        Achievements newly unlocked by this call, in definition order
    """
    unlocked: list[Achievement] = []
    for ach in achievements:
        if ach.is_unlocked:
            continue
        rule = _RULES_BY_KEY.get(ach.key)
        if rule is None or not rule.is_satisfied(ctx):
            continue
        ach.unlocked_at = now
        unlocked.append(ach)
        logger.info("Achievement unlocked: %s (%s)", ach.name, ach.key.value)
    return unlocked


def achievement_progress(key: AchievementKey, ctx: AchievementContext) -> tuple[int, int]:
    """Return (current, target) for a rule, with current capped at target."""
    rule = _RULES_BY_KEY[key]
    return min(rule.measure(ctx), rule.target), rule.target
