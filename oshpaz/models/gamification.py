"""
Gamification Models - Outcome of a rewarded event and the profile snapshot.
"""

from typing import List, Optional

from .base import CamelModel


class UnlockedBadge(CamelModel):
    """Badge returned to the client right after it unlocks."""
    id: str
    name: str
    description: str = ""
    icon: str = ""
    category: str


class GamificationResult(CamelModel):
    """
    Result of one rewarded event (meal confirmed, weight logged, friend accepted).

    A neutral result (all zero / False) is returned when nothing changed or the
    user is unknown.
    """
    xp_gained: int = 0
    new_badges: List[UnlockedBadge] = []
    streak_updated: bool = False
    new_streak: int = 0
    level_up: bool = False
    new_level: int = 1


class BadgeView(CamelModel):
    id: str
    name: str
    description: str = ""
    icon: str = ""
    category: str
    unlocked_at: Optional[str] = None
    seen: bool = False


class GamificationProfile(CamelModel):
    xp: int
    level: int
    xp_for_current_level: int
    xp_to_next_level: int
    current_streak: int
    longest_streak: int
    badges: List[BadgeView] = []
    unseen_badges: List[BadgeView] = []


class BadgesSeenRequest(CamelModel):
    badge_ids: List[str]
