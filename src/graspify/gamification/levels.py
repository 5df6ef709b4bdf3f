"""Level computation, titles and streak multipliers.

Pure functions of a handful of integers. The quadratic curve and the title
bands MUST match the web client exactly.
"""

from __future__ import annotations

import math
from typing import NamedTuple

XP_PER_LEVEL_UNIT = 100

# (upper bound inclusive, title); the last band is open-ended.
LEVEL_TITLES: list[tuple[int | None, str]] = [
    (5, "Novice Learner"),
    (10, "Curious Student"),
    (20, "Knowledge Seeker"),
    (35, "Wisdom Gatherer"),
    (50, "Expert Scholar"),
    (75, "Master Mind"),
    (None, "Knowledge Legend"),
]

# (minimum streak days, multiplier), highest first.
STREAK_MULTIPLIERS: list[tuple[int, float]] = [
    (30, 2.0),
    (14, 1.75),
    (7, 1.5),
    (3, 1.25),
]


class LevelProgress(NamedTuple):
    xp_into_level: int
    xp_for_level: int
    percent: float


def compute_level(xp: int) -> int:
    """``floor(sqrt(xp / 100)) + 1``, computed in integers."""
    return math.isqrt(max(xp, 0) // XP_PER_LEVEL_UNIT) + 1


def xp_at_level_start(level: int) -> int:
    """Cumulative XP at which ``level`` begins."""
    return (level - 1) ** 2 * XP_PER_LEVEL_UNIT


def level_progress(xp: int, level: int) -> LevelProgress:
    """XP progress through ``level``. Percent is not clamped."""
    start = xp_at_level_start(level)
    end = xp_at_level_start(level + 1)
    xp_into_level = xp - start
    xp_for_level = end - start
    return LevelProgress(
        xp_into_level=xp_into_level,
        xp_for_level=xp_for_level,
        percent=xp_into_level / xp_for_level * 100,
    )


def level_title(level: int) -> str:
    for upper, title in LEVEL_TITLES:
        if upper is None or level <= upper:
            return title
    return LEVEL_TITLES[-1][1]


def streak_multiplier(streak: int) -> float:
    for min_days, multiplier in STREAK_MULTIPLIERS:
        if streak >= min_days:
            return multiplier
    return 1.0
