"""
Meal Service - pending/confirmed meal lifecycle.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from ..models.gamification import GamificationResult
from ..models.meal import Meal, MealUpdate, NutritionData
from ..storage.meal_repository import MealRepository
from .clock import Clock
from .gamification import GamificationService
from .logging_config import user_logger
from .nutrition import NutritionAggregator

logger = logging.getLogger(__name__)


class MealService:
    """
    Meals start as pending after analysis. Confirming one moves it into the
    stats and triggers gamification exactly once.
    """

    def __init__(self, meals: MealRepository, nutrition: NutritionAggregator,
                 gamification: GamificationService, clock: Clock):
        self.meals = meals
        self.nutrition = nutrition
        self.gamification = gamification
        self.clock = clock

    async def save_pending_meal(self, tg_id: str, nutrition: NutritionData, image_url: str = "") -> Meal:
        now = self.clock.now()
        meal = Meal(
            tg_id=tg_id,
            name=", ".join(item.name for item in nutrition.items),
            calories=round(nutrition.total_calories),
            protein=round(nutrition.total_protein),
            carbs=round(nutrition.total_carbs),
            fats=round(nutrition.total_fats),
            items=nutrition.items,
            confidence=nutrition.confidence,
            status="pending",
            image_url=image_url,
            timestamp=now,
            created_at=now,
        )
        await self.meals.save(meal)
        user_logger(logger, tg_id).info(
            f"Meal saved (pending): {meal.name} - {meal.calories} kcal",
            extra={"extra_fields": {"meal_id": meal.id}}
        )
        return meal

    async def confirm_meal(self, tg_id: str, meal_id: str) -> Optional[Tuple[Meal, GamificationResult]]:
        """
        Confirm a pending meal. Returns None if the meal does not exist.
        Re-confirming an already confirmed meal changes nothing.
        """
        meal = await self.meals.get(tg_id, meal_id)
        if meal is None:
            return None
        if meal.status == "confirmed":
            return meal, GamificationResult()

        meal.status = "confirmed"
        await self.meals.save(meal)
        result = await self.gamification.on_meal_confirmed(tg_id)
        user_logger(logger, tg_id).info(
            "Meal confirmed",
            extra={"extra_fields": {"meal_id": meal.id, "xp_gained": result.xp_gained}}
        )
        return meal, result

    async def get_meal(self, tg_id: str, meal_id: str) -> Optional[Meal]:
        return await self.meals.get(tg_id, meal_id)

    async def update_meal(self, tg_id: str, meal_id: str, update: MealUpdate) -> Optional[Meal]:
        meal = await self.meals.get(tg_id, meal_id)
        if meal is None:
            return None
        for field, value in update.model_dump(exclude_none=True, exclude={"items"}).items():
            setattr(meal, field, value)
        if update.items is not None:
            meal.items = update.items
        return await self.meals.save(meal)

    async def delete_meal(self, tg_id: str, meal_id: str) -> bool:
        return await self.meals.delete(tg_id, meal_id)

    async def get_meals_by_date(self, tg_id: str, day: date) -> List[Meal]:
        """All meals of a local day, pending ones included, newest first."""
        return await self.nutrition.get_day_meals(tg_id, day, confirmed_only=False)
