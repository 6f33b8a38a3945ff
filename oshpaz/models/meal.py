"""
Meal Models - Logged meals, AI nutrition estimates and aggregated stats.
"""

from datetime import date, datetime, timezone
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import Field, field_validator

from .base import CamelModel
from .gamification import GamificationResult

MealStatus = Literal["pending", "confirmed"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FoodItem(CamelModel):
    name: str
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0
    weight: Optional[float] = None  # estimated grams


class NutritionData(CamelModel):
    """Structured output of the food analysis model."""
    items: List[FoodItem] = []
    total_calories: float = 0
    total_protein: float = 0
    total_carbs: float = 0
    total_fats: float = 0
    confidence: Optional[float] = Field(None, ge=0, le=1)


class Meal(CamelModel):
    """
    A logged meal.

    pending   - produced by AI analysis, waiting for the user to confirm
    confirmed - counted toward stats, streaks and XP
    """
    id: str = Field(default_factory=lambda: uuid4().hex)
    tg_id: str
    name: str
    calories: int = Field(..., ge=0)
    protein: int = Field(..., ge=0)
    carbs: int = Field(..., ge=0)
    fats: int = Field(..., ge=0)
    items: List[FoodItem] = []
    confidence: Optional[float] = Field(None, ge=0, le=1)
    status: MealStatus = "pending"
    image_url: str = ""
    timestamp: datetime = Field(default_factory=_utcnow)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("timestamp", "created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # naive timestamps are stored as UTC
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class MealUpdate(CamelModel):
    """Direct edit of a meal's name and macros."""
    name: Optional[str] = None
    calories: Optional[int] = Field(None, ge=0)
    protein: Optional[int] = Field(None, ge=0)
    carbs: Optional[int] = Field(None, ge=0)
    fats: Optional[int] = Field(None, ge=0)
    items: Optional[List[FoodItem]] = None


class DailyStats(CamelModel):
    day: Optional[date] = Field(None, alias="date")
    total_calories: int = 0
    total_protein: int = 0
    total_carbs: int = 0
    total_fats: int = 0
    meals_count: int = 0
    daily_goal: int = 0
    remaining_calories: int = 0
    progress_percentage: int = 0


class DistributionSlice(CamelModel):
    name: str
    value: int


class MealAnalytics(CamelModel):
    calorie_distribution: List[DistributionSlice]
    insight: str


class MealAnalysisResponse(CamelModel):
    """A freshly analyzed, still pending meal."""
    meal: Meal
    nutrition: NutritionData
    scans_left: Optional[int] = None


class MealConfirmResponse(CamelModel):
    meal: Meal
    stats: DailyStats
    gamification: GamificationResult
