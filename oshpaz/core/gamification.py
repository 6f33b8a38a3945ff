"""
Gamification Orchestrator - streak, XP, level and badges on rewarded events.
"""

import logging
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from ..models.gamification import GamificationResult, GamificationProfile, UnlockedBadge, BadgeView
from ..models.user import Badge, UserProfile
from ..storage.meal_repository import MealRepository
from ..storage.social_repository import FriendshipRepository
from ..storage.user_repository import UserRepository
from .badges import BadgeStats, evaluate_badges, mark_badges_seen
from .clock import Clock
from .leveling import calculate_level, level_progress, meal_xp, weight_xp
from .logging_config import user_logger
from .streak import StreakState, update_streak

logger = logging.getLogger(__name__)


def _unlocked(badges: List[Badge]) -> List[UnlockedBadge]:
    return [
        UnlockedBadge(id=b.id, name=b.name, description=b.description, icon=b.icon, category=b.category)
        for b in badges
    ]


def _view(badge: Badge) -> BadgeView:
    return BadgeView(
        id=badge.id,
        name=badge.name,
        description=badge.description,
        icon=badge.icon,
        category=badge.category,
        unlocked_at=badge.unlocked_at.isoformat(),
        seen=badge.seen,
    )


class GamificationService:
    """
    Entry points return a GamificationResult; an unknown user gets a neutral
    result instead of an error.

    Each event is one read-modify-write of the user document. Concurrent
    events for the same user may lose an update.
    """

    def __init__(self, users: UserRepository, meals: MealRepository,
                 friendships: FriendshipRepository, clock: Clock, tz: ZoneInfo):
        self.users = users
        self.meals = meals
        self.friendships = friendships
        self.clock = clock
        self.tz = tz

    async def on_meal_confirmed(self, tg_id: str) -> GamificationResult:
        user = await self.users.get(tg_id)
        if user is None:
            logger.warning(f"Gamification skipped for unknown user {tg_id}")
            return GamificationResult()

        now = self.clock.now()
        streak = update_streak(
            StreakState(user.current_streak, user.longest_streak, user.last_log_date), now, self.tz
        )
        user.current_streak = streak.current_streak
        user.longest_streak = streak.longest_streak
        user.last_log_date = streak.last_log_date

        result = await self._reward(user, meal_xp(streak.current_streak, streak.changed))
        result.streak_updated = streak.changed
        return result

    async def on_weight_logged(self, tg_id: str) -> GamificationResult:
        user = await self.users.get(tg_id)
        if user is None:
            logger.warning(f"Gamification skipped for unknown user {tg_id}")
            return GamificationResult()
        return await self._reward(user, weight_xp())

    async def on_friendship_accepted(self, tg_id: str) -> GamificationResult:
        """Badges only, no XP."""
        user = await self.users.get(tg_id)
        if user is None:
            return GamificationResult()
        return await self._reward(user, 0)

    async def _reward(self, user: UserProfile, xp_gained: int) -> GamificationResult:
        log = user_logger(logger, user.tg_id)

        previous_level = max(user.level, calculate_level(user.xp))
        user.xp += xp_gained
        user.level = calculate_level(user.xp)

        stats = BadgeStats(
            confirmed_meals=await self.meals.count_confirmed(user.tg_id),
            current_streak=user.current_streak,
            level=user.level,
            accepted_friends=await self.friendships.count_accepted(user.tg_id),
            weight=user.weight,
            target_weight=user.target_weight,
        )
        new_badges = evaluate_badges(stats, user.badge_ids(), self.clock.now(), user.language)
        user.badges.extend(new_badges)

        await self.users.save(user)

        result = GamificationResult(
            xp_gained=xp_gained,
            new_badges=_unlocked(new_badges),
            new_streak=user.current_streak,
            level_up=user.level > previous_level,
            new_level=user.level,
        )
        log.info(
            "Gamification applied",
            extra={"extra_fields": {
                "xp_gained": xp_gained,
                "xp": user.xp,
                "level": user.level,
                "streak": user.current_streak,
                "new_badges": [b.id for b in new_badges],
            }}
        )
        return result

    async def get_profile(self, tg_id: str) -> Optional[GamificationProfile]:
        user = await self.users.get(tg_id)
        if user is None:
            return None
        level, xp_in_level, xp_to_next = level_progress(user.xp)
        badges = [_view(b) for b in user.badges]
        return GamificationProfile(
            xp=user.xp,
            level=level,
            xp_for_current_level=xp_in_level,
            xp_to_next_level=xp_to_next,
            current_streak=user.current_streak,
            longest_streak=user.longest_streak,
            badges=badges,
            unseen_badges=[b for b in badges if not b.seen],
        )

    async def mark_badges_seen(self, tg_id: str, badge_ids: Iterable[str]) -> Optional[int]:
        """Acknowledge badges. Returns the number flipped, or None for an unknown user."""
        user = await self.users.get(tg_id)
        if user is None:
            return None
        changed = mark_badges_seen(user.badges, badge_ids)
        if changed:
            await self.users.save(user)
        return changed
