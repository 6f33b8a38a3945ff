"""
Streak Tracker - consecutive-day logging streak from a last-log-date watermark.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from .clock import local_day


@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_log_date: Optional[datetime] = None


@dataclass(frozen=True)
class StreakUpdate:
    changed: bool
    current_streak: int
    longest_streak: int
    last_log_date: Optional[datetime]


def update_streak(state: StreakState, now: datetime, tz: ZoneInfo) -> StreakUpdate:
    """
    Advance the streak for a confirmed meal logged at `now`.

    Days are compared in `tz`. The same day leaves the state unchanged, the
    following day extends the streak, anything else (first log, a gap, or a
    day before the watermark) restarts it at 1.
    """
    today = local_day(now, tz)

    if state.last_log_date is None:
        return StreakUpdate(True, 1, max(state.longest_streak, 1), now)

    last_day = local_day(state.last_log_date, tz)
    if today == last_day:
        return StreakUpdate(False, state.current_streak, state.longest_streak, state.last_log_date)

    if today == last_day + timedelta(days=1):
        streak = state.current_streak + 1
        return StreakUpdate(True, streak, max(state.longest_streak, streak), now)

    return StreakUpdate(True, 1, max(state.longest_streak, 1), now)
