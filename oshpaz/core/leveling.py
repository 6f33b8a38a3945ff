"""
XP/Level Calculator.
"""

from bisect import bisect_right
from typing import Tuple

from ..config.constants import (
    LEVEL_THRESHOLDS,
    LEVEL_OVERFLOW_SPAN,
    XP_MEAL_LOGGED,
    XP_WEIGHT_LOGGED,
    XP_STREAK_BONUS_PER_DAY,
    XP_STREAK_BONUS_CAP,
)


def calculate_level(xp: int) -> int:
    """Level = 1 + largest index i with xp >= LEVEL_THRESHOLDS[i]."""
    return max(bisect_right(LEVEL_THRESHOLDS, max(xp, 0)), 1)


def streak_bonus(streak: int) -> int:
    return min(streak * XP_STREAK_BONUS_PER_DAY, XP_STREAK_BONUS_CAP)


def meal_xp(streak: int, streak_changed: bool) -> int:
    """Flat meal reward plus the capped streak bonus when the streak just grew past 1."""
    xp = XP_MEAL_LOGGED
    if streak_changed and streak > 1:
        xp += streak_bonus(streak)
    return xp


def weight_xp() -> int:
    return XP_WEIGHT_LOGGED


def level_bounds(level: int) -> Tuple[int, int]:
    """XP at which `level` starts and the next one starts."""
    current = LEVEL_THRESHOLDS[min(level, len(LEVEL_THRESHOLDS)) - 1]
    if level < len(LEVEL_THRESHOLDS):
        return current, LEVEL_THRESHOLDS[level]
    # past the table every level spans LEVEL_OVERFLOW_SPAN
    current = LEVEL_THRESHOLDS[-1] + (level - len(LEVEL_THRESHOLDS)) * LEVEL_OVERFLOW_SPAN
    return current, current + LEVEL_OVERFLOW_SPAN


def level_progress(xp: int) -> Tuple[int, int, int]:
    """
    Returns (level, xp_for_current_level, xp_to_next_level).

    xp_for_current_level is the XP earned inside the current level, and
    xp_to_next_level the XP still missing for the next one.
    """
    level = calculate_level(xp)
    start, nxt = level_bounds(level)
    return level, xp - start, max(nxt - xp, 0)
