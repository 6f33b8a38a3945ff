"""
Clock sources and a small TTL cache.

Components that depend on "now" take a Clock so tests can pin time.
"""

import time
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Generic, Hashable, Optional, Tuple, TypeVar
from zoneinfo import ZoneInfo

V = TypeVar("V")


class Clock:
    """Wall clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()


class FixedClock(Clock):
    """Clock frozen at a given instant; advance() moves it forward."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._now = instant
        self._monotonic = 0.0

    def now(self) -> datetime:
        return self._now

    def monotonic(self) -> float:
        return self._monotonic

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._monotonic += max((instant - self._now).total_seconds(), 0.0)
        self._now = instant

    def advance(self, **kwargs: Any) -> None:
        delta = timedelta(**kwargs)
        self._now += delta
        self._monotonic += delta.total_seconds()


def local_day(instant: datetime, tz: ZoneInfo) -> date:
    """Calendar day of an instant in the given timezone."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).date()


def day_bounds(day: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """Return [start, end) of a calendar day in tz as aware datetimes."""
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), datetime.min.time(), tzinfo=tz)
    return start, end


class TTLCache(Generic[V]):
    """
    Expiring key/value cache driven by an injected clock.

    Built once at startup and handed to the components that need it. Past max_entries,
    expired entries are purged; if it is still too big the soonest-expiring
    ones are dropped down to half size.
    """

    def __init__(self, ttl_seconds: float, clock: Optional[Clock] = None,
                 max_entries: Optional[int] = None):
        self.ttl_seconds = ttl_seconds
        self.clock = clock or Clock()
        self.max_entries = max_entries
        self._entries: Dict[Hashable, Tuple[float, V]] = {}

    def get(self, key: Hashable) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self.clock.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: V) -> None:
        self._entries[key] = (self.clock.monotonic() + self.ttl_seconds, value)
        if self.max_entries is not None and len(self._entries) > self.max_entries:
            self._prune()

    def _prune(self) -> None:
        now = self.clock.monotonic()
        self._entries = {k: e for k, e in self._entries.items() if e[0] > now}
        excess = len(self._entries) - self.max_entries // 2
        if len(self._entries) > self.max_entries and excess > 0:
            for key in sorted(self._entries, key=lambda k: self._entries[k][0])[:excess]:
                del self._entries[key]

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
