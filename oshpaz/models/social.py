"""
Social Models - Friendships, friend requests and the weekly leaderboard.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import Field

from .base import CamelModel

FriendshipStatus = Literal["pending", "accepted"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Friendship(CamelModel):
    """Directed friendship row. Acceptance stores the reverse row too."""
    user_tg_id: str
    friend_tg_id: str
    status: FriendshipStatus = "pending"
    created_at: datetime = Field(default_factory=_utcnow)


class FriendInfo(CamelModel):
    tg_id: str
    first_name: str = ""
    username: str = ""
    current_streak: int = 0
    level: int = 1
    weekly_calories: Optional[int] = None
    goal_rate: Optional[int] = None  # percent of the weekly calorie goal, None when hidden


class LeaderboardEntry(FriendInfo):
    rank: int = 0
    is_me: bool = False


class FriendRequestView(CamelModel):
    tg_id: str
    first_name: str = ""
    username: str = ""
    created_at: datetime


class ReferralInfo(CamelModel):
    referral_code: str
    link: str


class FriendRequestCreate(CamelModel):
    """Either a referral code or a username identifies the target."""
    referral_code: Optional[str] = None
    username: Optional[str] = None


class FriendRequestAccept(CamelModel):
    from_tg_id: str


class SocialActionResult(CamelModel):
    success: bool
    message: str = ""
