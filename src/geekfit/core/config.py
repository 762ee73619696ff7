"""
Configuration constants for the geekfit progress engine.

All tunable numbers of the XP curve, the streak milestones, and the
achievement thresholds are centralized here.
"""

from typing import Final

# =============================================================================
# XP CURVE
# =============================================================================

MIN_LEVEL: Final[int] = 1
MAX_LEVEL: Final[int] = 99

XP_CURVE_BASE: Final[float] = 300.0  # Multiplier on the exponential term
XP_CURVE_DOUBLING: Final[float] = 7.0  # Levels per doubling of the exponential term
XP_CURVE_DIVISOR: Final[int] = 4  # Sum is divided by this before flooring

# Tier lower bounds (inclusive), highest first
LEVEL_TIERS: Final[tuple[tuple[int, str], ...]] = (
    (99, "master"),
    (75, "diamond"),
    (50, "platinum"),
    (25, "gold"),
    (10, "silver"),
    (1, "bronze"),
)

# Titles shown next to the total level in the CLI, keyed by inclusive lower bound
TOTAL_LEVEL_TITLES: Final[tuple[tuple[int, str], ...]] = (
    (50, "Legendary Geek"),
    (40, "Fitness Warrior"),
    (30, "Endurance Elite"),
    (20, "Strength Seeker"),
    (10, "Gym Initiate"),
    (5, "Fitness Apprentice"),
    (0, "Novice Geek"),
)

# =============================================================================
# STREAKS
# =============================================================================

STREAK_MILESTONES: Final[frozenset[int]] = frozenset({7, 14, 30, 60, 90, 100})

# =============================================================================
# ACHIEVEMENT THRESHOLDS (inclusive)
# =============================================================================

SKILL_LEVEL_THRESHOLDS: Final[dict[str, int]] = {
    "skill-10": 10,
    "skill-25": 25,
    "skill-50": 50,
}
TOTAL_LEVEL_THRESHOLD: Final[int] = 100
WEEK_STREAK_DAYS: Final[int] = 7
MONTH_STREAK_DAYS: Final[int] = 30
VARIETY_DISTINCT_EXERCISES: Final[int] = 5
CENTURY_REPS: Final[int] = 100
DEFAULT_FLAGSHIP_EXERCISE: Final[str] = "Pushups"

# =============================================================================
# DAILY GOAL / HISTORY
# =============================================================================

DEFAULT_DAILY_GOAL_XP: Final[int] = 500
DEFAULT_HISTORY_DAYS: Final[int] = 7
SEARCH_RESULT_LIMIT: Final[int] = 10

# =============================================================================
# SNAPSHOT FORMAT
# =============================================================================

SNAPSHOT_VERSION: Final[str] = "1.0.0"
TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"  # Local time, second precision
DATE_FORMAT: Final[str] = "%Y-%m-%d"
