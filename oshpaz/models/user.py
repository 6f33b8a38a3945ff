"""
User Model - Defines the user document and profile payloads.
"""

import re
from datetime import date, datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .base import CamelModel
from .gamification import GamificationResult
from .report_card import DailyReportCard

_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

Gender = Literal["male", "female"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]
GoalType = Literal["lose_weight", "maintain", "gain_muscle"]
Language = Literal["uz", "en"]
Units = Literal["metric", "imperial"]
WorkType = Literal["office", "physical", "student", "homemaker", "freelance"]
BadgeCategory = Literal["streak", "logging", "nutrition", "social", "milestone"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Badge(CamelModel):
    """An unlocked achievement instance."""
    id: str
    name: str
    description: str = ""
    icon: str = ""
    category: BadgeCategory
    unlocked_at: datetime = Field(default_factory=_utcnow)
    seen: bool = False


class ReminderSlot(CamelModel):
    enabled: bool = False
    time: str = "08:00"  # HH:MM in the reference timezone

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not _TIME_OF_DAY.match(value):
            raise ValueError("time must be HH:MM (24h)")
        return value


class WeighInReminder(ReminderSlot):
    day_of_week: int = Field(1, ge=0, le=6)  # 0 = Sunday


class ReminderSettings(CamelModel):
    """Per-category reminder configuration."""
    breakfast: ReminderSlot = ReminderSlot(enabled=False, time="08:00")
    lunch: ReminderSlot = ReminderSlot(enabled=False, time="13:00")
    dinner: ReminderSlot = ReminderSlot(enabled=False, time="19:00")
    weigh_in: WeighInReminder = WeighInReminder(enabled=False, time="09:00", day_of_week=1)
    streak_reminder: ReminderSlot = ReminderSlot(enabled=True, time="20:00")
    daily_report: ReminderSlot = ReminderSlot(enabled=True, time="21:00")


class ReminderSettingsUpdate(CamelModel):
    """Partial reminder update - omitted categories keep their value."""
    breakfast: Optional[ReminderSlot] = None
    lunch: Optional[ReminderSlot] = None
    dinner: Optional[ReminderSlot] = None
    weigh_in: Optional[WeighInReminder] = None
    streak_reminder: Optional[ReminderSlot] = None
    daily_report: Optional[ReminderSlot] = None


class PrivacySettings(CamelModel):
    show_streak: bool = True
    show_calories: bool = True
    show_weight: bool = False


class WeightEntry(CamelModel):
    weight: float
    date: datetime = Field(default_factory=_utcnow)


class UserProfile(CamelModel):
    """User document as stored."""
    tg_id: str
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    daily_goal: Optional[int] = None  # resolved by core.profile.resolve_daily_goal

    # Profile
    gender: Optional[Gender] = None
    age: Optional[int] = None
    height: Optional[float] = None  # cm
    weight: Optional[float] = None  # kg
    weight_history: List[WeightEntry] = []
    units: Units = "metric"
    activity_level: Optional[ActivityLevel] = None
    goal: Optional[GoalType] = None
    target_weight: Optional[float] = None
    language: Language = "uz"
    work_type: Optional[WorkType] = None
    registration_date: datetime = Field(default_factory=_utcnow)

    # Free-tier scan limit
    photo_scan_count: int = 0
    last_scan_date: Optional[datetime] = None

    # Gamification
    xp: int = Field(0, ge=0)
    level: int = Field(1, ge=1)
    current_streak: int = 0
    longest_streak: int = 0
    last_log_date: Optional[datetime] = None
    badges: List[Badge] = []

    # Social
    referral_code: Optional[str] = None
    privacy_settings: PrivacySettings = PrivacySettings()

    # Reminders
    reminders: ReminderSettings = ReminderSettings()
    timezone: str = "Asia/Tashkent"

    # Report card cache
    last_report_card: Optional[DailyReportCard] = None
    last_report_card_date: Optional[date] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def badge_ids(self) -> set:
        return {b.id for b in self.badges}


class ProfileUpdate(CamelModel):
    """Profile edit - all fields optional."""
    gender: Optional[Gender] = None
    age: Optional[int] = Field(None, gt=0, lt=130)
    height: Optional[float] = Field(None, gt=0)
    weight: Optional[float] = Field(None, gt=0)
    activity_level: Optional[ActivityLevel] = None
    goal: Optional[GoalType] = None
    target_weight: Optional[float] = Field(None, gt=0)
    units: Optional[Units] = None
    language: Optional[Language] = None
    work_type: Optional[WorkType] = None


class GoalUpdate(BaseModel):
    goal: int


class WeightLog(BaseModel):
    weight: float = Field(..., gt=0)


class TelegramUser(BaseModel):
    """Subset of the Telegram User object."""
    id: int
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None


class TelegramAuthRequest(CamelModel):
    init_data: str


class Token(BaseModel):
    """JWT token response model."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Token payload data."""
    tg_id: Optional[str] = None


class WeightLogResponse(CamelModel):
    user: UserProfile
    gamification: GamificationResult
