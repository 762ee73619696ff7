"""
Daily streak state machine.

A streak counts consecutive calendar days with at least one logged
exercise. The transition is evaluated once per logged exercise with the
caller's local date:

    no previous activity      -> 1
    last active today         -> unchanged
    last active yesterday     -> +1
    anything else             -> 1   (gap of 2+ days, or a date in the future)

longest_streak never decreases.
"""

from datetime import date, timedelta

from .config import STREAK_MILESTONES
from .models import StreakState


def advance_streak(state: StreakState, today: date) -> StreakState:
    """
    Compute the streak after activity on *today*.

    Args:
        state: Streak before the activity (not modified)
        today: Local calendar date of the activity

    Returns:
        New StreakState with last_active_date = today
    """
    last = state.last_active_date
    if last is None:
        current = 1
    elif last == today:
        current = state.current_streak
    elif last == today - timedelta(days=1):
        current = state.current_streak + 1
    else:
        current = 1

    return StreakState(
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        last_active_date=today,
    )


def is_streak_milestone(streak: int) -> bool:
    """True for the streak lengths worth celebrating (7, 14, 30, 60, 90, 100)."""
    return streak in STREAK_MILESTONES


def streak_at_risk(state: StreakState, today: date) -> bool:
    """True when the streak is alive but nothing has been logged today yet."""
    return (
        state.current_streak > 0
        and state.last_active_date == today - timedelta(days=1)
    )
