"""
XP curve: the mapping between levels and cumulative experience.

The curve is the classic exponential progression used by skill-based
games: early levels cost a few hundred XP, level 99 costs millions.

    xp_for_level(L) = floor( sum_{i=1}^{L-1} (i + 300 * 2^(i/7)) / 4 )

Thresholds for every level are computed once at import time; lookups are
a binary search over that table.
"""

import bisect
import math

from .config import (
    LEVEL_TIERS,
    MAX_LEVEL,
    MIN_LEVEL,
    TOTAL_LEVEL_TITLES,
    XP_CURVE_BASE,
    XP_CURVE_DIVISOR,
    XP_CURVE_DOUBLING,
)


def _build_thresholds() -> tuple[int, ...]:
    """Cumulative XP needed for levels 1..MAX_LEVEL (index 0 is level 1)."""
    thresholds = [0]
    running = 0.0
    for i in range(MIN_LEVEL, MAX_LEVEL):
        running += i + XP_CURVE_BASE * 2 ** (i / XP_CURVE_DOUBLING)
        thresholds.append(math.floor(running / XP_CURVE_DIVISOR))
    return tuple(thresholds)


_THRESHOLDS: tuple[int, ...] = _build_thresholds()


def xp_for_level(level: int) -> int:
    """
    Total XP required to reach a level.

    Args:
        level: Level in [1, 99]

    Returns:
        Cumulative XP threshold (0 for level 1)

    Raises:
        ValueError: If level is outside [1, 99]
    """
    if level < MIN_LEVEL or level > MAX_LEVEL:
        raise ValueError(f"level must be in [{MIN_LEVEL}, {MAX_LEVEL}], got {level}")
    return _THRESHOLDS[level - 1]


def level_from_xp(xp: int) -> int:
    """
    Highest level whose threshold is <= xp.

    Saturates at 99 for arbitrarily large XP. Negative XP is a caller
    error and maps to level 1.
    """
    return max(MIN_LEVEL, bisect.bisect_right(_THRESHOLDS, xp))


def xp_progress(total_xp: int) -> tuple[int, int]:
    """Return (xp gained inside the current level, xp span of the current level).

    At level 99 the span is 0.
    """
    level = level_from_xp(total_xp)
    current = xp_for_level(level)
    if level >= MAX_LEVEL:
        return total_xp - current, 0
    return total_xp - current, xp_for_level(level + 1) - current


def xp_progress_percent(total_xp: int) -> int:
    """Progress through the current level as an integer percentage (100 at max level)."""
    into, needed = xp_progress(total_xp)
    if needed == 0:
        return 100
    return min(100, into * 100 // needed)


def xp_to_next_level(total_xp: int) -> int:
    """XP still missing for the next level; 0 once level 99 is reached."""
    level = level_from_xp(total_xp)
    if level >= MAX_LEVEL:
        return 0
    return max(0, xp_for_level(level + 1) - total_xp)


def format_xp(xp: int) -> str:
    """Format XP with K/M suffixes: 950 -> '950', 1234 -> '1.2K', 3400000 -> '3.4M'."""
    if xp >= 1_000_000:
        return f"{xp / 1_000_000:.1f}M"
    if xp >= 1000:
        return f"{xp / 1000:.1f}K"
    return str(xp)


def level_tier(level: int) -> str:
    """Colour tier for a single exercise level (bronze .. master)."""
    for lower, tier in LEVEL_TIERS:
        if level >= lower:
            return tier
    return LEVEL_TIERS[-1][1]


def title_for_total_level(total_level: int) -> str:
    """Title shown next to the total level."""
    for lower, title in TOTAL_LEVEL_TITLES:
        if total_level >= lower:
            return title
    return TOTAL_LEVEL_TITLES[-1][1]
