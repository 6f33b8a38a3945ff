"""
Social Service - referral codes, friend requests and the weekly leaderboard.
"""

import logging
from typing import List, Optional, Tuple

from ..models.gamification import GamificationResult
from ..models.social import (
    FriendInfo,
    FriendRequestView,
    Friendship,
    LeaderboardEntry,
    ReferralInfo,
    SocialActionResult,
)
from ..models.user import UserProfile
from ..storage.social_repository import FriendshipRepository
from ..storage.user_repository import UserRepository
from .clock import Clock, TTLCache
from .gamification import GamificationService
from .logging_config import user_logger
from .nutrition import NutritionAggregator, progress_percentage
from .profile import new_referral_code, resolve_daily_goal

logger = logging.getLogger(__name__)


class SocialService:
    """
    Friendships are directed rows; an accepted friendship exists in both
    directions. Leaderboards are cached per user.
    """

    def __init__(self, users: UserRepository, friendships: FriendshipRepository,
                 nutrition: NutritionAggregator, gamification: GamificationService,
                 leaderboard_cache: TTLCache, clock: Clock, bot_username: str):
        self.users = users
        self.friendships = friendships
        self.nutrition = nutrition
        self.gamification = gamification
        self.leaderboard_cache = leaderboard_cache
        self.clock = clock
        self.bot_username = bot_username

    async def get_referral_info(self, tg_id: str) -> Optional[ReferralInfo]:
        user = await self.users.get(tg_id)
        if user is None:
            return None
        if not user.referral_code:
            user.referral_code = new_referral_code()
            await self.users.save(user)
        return ReferralInfo(
            referral_code=user.referral_code,
            link=f"https://t.me/{self.bot_username}?start=ref_{user.referral_code}",
        )

    async def send_request(self, sender_tg_id: str, referral_code: Optional[str] = None,
                           username: Optional[str] = None) -> SocialActionResult:
        target = None
        if referral_code:
            target = await self.users.get_by_referral_code(referral_code)
        if target is None and username:
            target = await self.users.get_by_username(username)

        if target is None:
            return SocialActionResult(success=False, message="User not found")
        if target.tg_id == sender_tg_id:
            return SocialActionResult(success=False, message="Cannot add yourself")

        existing = (await self.friendships.get(sender_tg_id, target.tg_id)
                    or await self.friendships.get(target.tg_id, sender_tg_id))
        if existing is not None:
            if existing.status == "accepted":
                return SocialActionResult(success=False, message="Already friends")
            return SocialActionResult(success=False, message="Request already sent")

        await self.friendships.save(Friendship(
            user_tg_id=sender_tg_id,
            friend_tg_id=target.tg_id,
            status="pending",
            created_at=self.clock.now(),
        ))
        user_logger(logger, sender_tg_id).info(
            "Friend request sent", extra={"extra_fields": {"to": target.tg_id}}
        )
        return SocialActionResult(success=True, message="Request sent")

    async def accept_request(self, tg_id: str, from_tg_id: str) -> Tuple[bool, GamificationResult]:
        """
        Accept a pending request sent by from_tg_id. Both users are checked for
        social badges. Returns the acceptor's gamification outcome.
        """
        request = await self.friendships.get(from_tg_id, tg_id)
        if request is None or request.status != "pending":
            return False, GamificationResult()

        request.status = "accepted"
        await self.friendships.save(request)
        await self.friendships.save(Friendship(
            user_tg_id=tg_id,
            friend_tg_id=from_tg_id,
            status="accepted",
            created_at=self.clock.now(),
        ))

        await self.gamification.on_friendship_accepted(from_tg_id)
        result = await self.gamification.on_friendship_accepted(tg_id)

        self._invalidate(tg_id, from_tg_id)
        user_logger(logger, tg_id).info(
            "Friend request accepted", extra={"extra_fields": {"from": from_tg_id}}
        )
        return True, result

    async def remove_friend(self, tg_id: str, friend_tg_id: str) -> bool:
        removed = await self.friendships.delete(tg_id, friend_tg_id)
        removed = await self.friendships.delete(friend_tg_id, tg_id) or removed
        self._invalidate(tg_id, friend_tg_id)
        return removed

    async def get_friends(self, tg_id: str) -> List[FriendInfo]:
        rows = await self.friendships.list_outgoing(tg_id, status="accepted")
        friends = []
        for row in rows:
            friend = await self.users.get(row.friend_tg_id)
            if friend is None:
                continue
            friends.append(await self._friend_info(friend, hide_private=True))
        return friends

    async def get_pending_requests(self, tg_id: str) -> List[FriendRequestView]:
        rows = await self.friendships.list_incoming(tg_id, status="pending")
        requests = []
        for row in rows:
            sender = await self.users.get(row.user_tg_id)
            requests.append(FriendRequestView(
                tg_id=row.user_tg_id,
                first_name=sender.first_name if sender else "User",
                username=sender.username if sender else "",
                created_at=row.created_at,
            ))
        return sorted(requests, key=lambda r: r.created_at, reverse=True)

    async def get_leaderboard(self, tg_id: str) -> List[LeaderboardEntry]:
        """The user and their friends, ranked by percent of the weekly calorie goal."""
        cached = self.leaderboard_cache.get(tg_id)
        if cached is not None:
            return cached

        user = await self.users.get(tg_id)
        if user is None:
            return []

        me = await self._friend_info(user, hide_private=False)
        entries = [LeaderboardEntry(**me.model_dump(), is_me=True)]
        for friend in await self.get_friends(tg_id):
            entries.append(LeaderboardEntry(**friend.model_dump()))

        # hidden rates rank last
        entries.sort(key=lambda e: (e.goal_rate is not None, e.goal_rate or 0), reverse=True)
        for rank, entry in enumerate(entries, start=1):
            entry.rank = rank

        self.leaderboard_cache.set(tg_id, entries)
        return entries

    async def _friend_info(self, user: UserProfile, hide_private: bool) -> FriendInfo:
        weekly = await self.nutrition.weekly_calories(user.tg_id)
        show_calories = not hide_private or user.privacy_settings.show_calories
        show_streak = not hide_private or user.privacy_settings.show_streak
        return FriendInfo(
            tg_id=user.tg_id,
            first_name=user.first_name,
            username=user.username,
            current_streak=user.current_streak if show_streak else 0,
            level=user.level,
            weekly_calories=weekly if show_calories else None,
            goal_rate=progress_percentage(weekly, resolve_daily_goal(user) * 7) if show_calories else None,
        )

    def _invalidate(self, *tg_ids: str) -> None:
        for tg_id in tg_ids:
            self.leaderboard_cache.invalidate(tg_id)
