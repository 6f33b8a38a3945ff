"""
Unit tests for XP and level calculation.
"""

import pytest

from oshpaz.config.constants import LEVEL_THRESHOLDS
from oshpaz.core.leveling import (
    calculate_level,
    level_bounds,
    level_progress,
    meal_xp,
    streak_bonus,
    weight_xp,
)


class TestCalculateLevel:

    @pytest.mark.parametrize("xp,level", [
        (0, 1), (49, 1), (50, 2), (149, 2), (150, 3), (500, 5), (10000, 15), (99999, 15),
    ])
    def test_thresholds(self, xp, level):
        assert calculate_level(xp) == level

    def test_negative_xp_is_level_one(self):
        assert calculate_level(-10) == 1

    def test_monotonic(self):
        levels = [calculate_level(xp) for xp in range(0, 12000, 7)]
        assert levels == sorted(levels)


class TestRewards:

    def test_streak_bonus_capped(self):
        assert streak_bonus(2) == 10
        assert streak_bonus(7) == 35
        assert streak_bonus(30) == 50

    def test_meal_xp_without_streak_growth(self):
        assert meal_xp(1, True) == 10
        assert meal_xp(5, False) == 10

    def test_meal_xp_with_streak_growth(self):
        assert meal_xp(7, True) == 45

    def test_weight_xp(self):
        assert weight_xp() == 15


class TestLevelProgress:

    def test_inside_table(self):
        assert level_progress(0) == (1, 0, 50)
        assert level_progress(175) == (3, 25, 125)

    def test_bounds_of_last_table_level(self):
        start, nxt = level_bounds(len(LEVEL_THRESHOLDS))
        assert start == LEVEL_THRESHOLDS[-1]
        assert nxt == LEVEL_THRESHOLDS[-1] + 1000

    def test_beyond_table(self):
        level, in_level, to_next = level_progress(10400)
        assert level == 15
        assert in_level == 400
        assert to_next == 600
