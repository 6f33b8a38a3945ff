"""
Profile Service - user lifecycle, calorie goal and weight tracking.

resolve_daily_goal() is the one place a missing goal turns into the default.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from ..config import settings
from ..config.constants import (
    ACTIVITY_MULTIPLIERS,
    CALORIE_GOAL_MAX,
    CALORIE_GOAL_MIN,
    DEFAULT_LANGUAGE,
    GOAL_CALORIE_ADJUSTMENT,
)
from ..models.gamification import GamificationResult
from ..models.user import ProfileUpdate, TelegramUser, UserProfile, WeightEntry
from ..storage.social_repository import SubscriptionRepository
from ..storage.user_repository import UserRepository
from .clock import Clock, local_day
from .gamification import GamificationService
from .logging_config import user_logger

logger = logging.getLogger(__name__)


class InvalidGoalError(ValueError):
    """Calorie goal outside the allowed range."""

    def __init__(self, goal: int):
        super().__init__(
            f"Daily goal must be between {CALORIE_GOAL_MIN} and {CALORIE_GOAL_MAX} kcal, got {goal}"
        )
        self.goal = goal


def resolve_daily_goal(user: Optional[UserProfile], default: Optional[int] = None) -> int:
    """The user's daily calorie goal, or the configured default when unset."""
    if default is None:
        default = settings.default_calorie_goal
    if user is None or not user.daily_goal or user.daily_goal <= 0:
        return default
    return user.daily_goal


def calculate_daily_calories(user: UserProfile) -> Optional[int]:
    """
    Mifflin-St Jeor BMR x activity multiplier, adjusted for the goal and
    clamped to the allowed range. None if the profile is incomplete.
    """
    if not all([user.gender, user.age, user.height, user.weight, user.activity_level, user.goal]):
        return None

    bmr = 10 * user.weight + 6.25 * user.height - 5 * user.age
    bmr += 5 if user.gender == "male" else -161
    tdee = bmr * ACTIVITY_MULTIPLIERS.get(user.activity_level, 1.2)
    target = tdee + GOAL_CALORIE_ADJUSTMENT.get(user.goal, 0)
    return max(CALORIE_GOAL_MIN, min(CALORIE_GOAL_MAX, round(target)))


@dataclass(frozen=True)
class ScanAllowance:
    allowed: bool
    scans_left: Optional[int]  # None = unlimited (premium)


def new_referral_code() -> str:
    return secrets.token_hex(4).upper()


class ProfileService:
    """User lookup/creation, profile edits, goals, weight log and the free scan limit."""

    def __init__(self, users: UserRepository, subscriptions: SubscriptionRepository,
                 gamification: GamificationService, clock: Clock, tz: ZoneInfo,
                 free_daily_scan_limit: int = 3):
        self.users = users
        self.subscriptions = subscriptions
        self.gamification = gamification
        self.clock = clock
        self.tz = tz
        self.free_daily_scan_limit = free_daily_scan_limit

    async def get(self, tg_id: str) -> Optional[UserProfile]:
        return await self.users.get(tg_id)

    async def find_or_create(self, telegram_user: TelegramUser, language: Optional[str] = None) -> UserProfile:
        tg_id = str(telegram_user.id)
        user = await self.users.get(tg_id)
        if user is not None:
            return user

        now = self.clock.now()
        user = UserProfile(
            tg_id=tg_id,
            first_name=telegram_user.first_name or "",
            last_name=telegram_user.last_name or "",
            username=telegram_user.username or "",
            language=language or DEFAULT_LANGUAGE,
            daily_goal=settings.default_calorie_goal,
            referral_code=new_referral_code(),
            registration_date=now,
            created_at=now,
        )
        await self.users.save(user)
        user_logger(logger, tg_id).info("New user created")
        return user

    async def update_language(self, tg_id: str, language: str) -> Optional[UserProfile]:
        user = await self.users.get(tg_id)
        if user is None:
            return None
        user.language = language
        return await self.users.save(user)

    async def update_profile(self, tg_id: str, update: ProfileUpdate) -> Optional[UserProfile]:
        """Apply the given fields; recalculates the daily goal once the profile is complete."""
        user = await self.users.get(tg_id)
        if user is None:
            return None

        changes = update.model_dump(exclude_none=True)
        new_weight = changes.get("weight")
        if new_weight is not None and new_weight != user.weight:
            user.weight_history.append(WeightEntry(weight=new_weight, date=self.clock.now()))

        for field, value in changes.items():
            setattr(user, field, value)

        goal = calculate_daily_calories(user)
        if goal is not None:
            user.daily_goal = goal

        return await self.users.save(user)

    async def update_daily_goal(self, tg_id: str, goal: int) -> Optional[UserProfile]:
        """
        Raises:
            InvalidGoalError: If the goal is outside the allowed range
        """
        if goal < CALORIE_GOAL_MIN or goal > CALORIE_GOAL_MAX:
            raise InvalidGoalError(goal)
        user = await self.users.get(tg_id)
        if user is None:
            return None
        user.daily_goal = goal
        return await self.users.save(user)

    async def get_weight_history(self, tg_id: str) -> List[WeightEntry]:
        user = await self.users.get(tg_id)
        if user is None:
            return []
        return sorted(user.weight_history, key=lambda e: e.date)

    async def log_weight(self, tg_id: str, weight: float) -> Tuple[Optional[UserProfile], GamificationResult]:
        """Record a weigh-in and award weight XP."""
        user = await self.users.get(tg_id)
        if user is None:
            return None, GamificationResult()

        user.weight = weight
        user.weight_history.append(WeightEntry(weight=weight, date=self.clock.now()))
        await self.users.save(user)

        result = await self.gamification.on_weight_logged(tg_id)
        return await self.users.get(tg_id), result

    async def scan_allowance(self, user: UserProfile) -> ScanAllowance:
        """Free users get a fixed number of analyses per local day; premium is unlimited."""
        if await self.subscriptions.is_premium(user.tg_id, self.clock.now()):
            return ScanAllowance(True, None)
        used = self._scans_today(user)
        left = max(self.free_daily_scan_limit - used, 0)
        return ScanAllowance(left > 0, left)

    async def record_scan(self, user: UserProfile) -> Optional[int]:
        """Count one analysis for a free user. Returns the scans left (None if premium)."""
        now = self.clock.now()
        if await self.subscriptions.is_premium(user.tg_id, now):
            return None
        user.photo_scan_count = self._scans_today(user) + 1
        user.last_scan_date = now
        await self.users.save(user)
        return max(self.free_daily_scan_limit - user.photo_scan_count, 0)

    def _scans_today(self, user: UserProfile) -> int:
        if user.last_scan_date is None:
            return 0
        if local_day(user.last_scan_date, self.tz) != local_day(self.clock.now(), self.tz):
            return 0
        return user.photo_scan_count
