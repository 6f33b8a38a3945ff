"""
Meal Repository - Persistent storage for logged meals.
Meals live under meals/{tg_id}/{meal_id}.json.
"""

from datetime import datetime, timezone
from typing import Optional, List

from ..models.meal import Meal, MealStatus
from .repository import DocumentRepository


class MealRepository(DocumentRepository):
    """Meals are always addressed through their owner, which scopes access."""

    meals_dir = "meals"

    def _meal_path(self, tg_id: str, meal_id: str) -> str:
        return f"{self.meals_dir}/{tg_id}/{meal_id}.json"

    async def get(self, tg_id: str, meal_id: str) -> Optional[Meal]:
        return await self._load_model(self._meal_path(tg_id, meal_id), Meal)

    async def save(self, meal: Meal) -> Meal:
        meal.updated_at = datetime.now(timezone.utc)
        await self._save_model(self._meal_path(meal.tg_id, meal.id), meal)
        return meal

    async def delete(self, tg_id: str, meal_id: str) -> bool:
        return await self.storage.delete(self._meal_path(tg_id, meal_id))

    async def list_for_user(
        self,
        tg_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[MealStatus] = None,
    ) -> List[Meal]:
        """
        List a user's meals ordered oldest first.

        Args:
            tg_id: Owner
            start: Inclusive lower bound on the meal timestamp
            end: Exclusive upper bound on the meal timestamp
            status: Only meals with this status
        """
        meals = await self._load_all(f"{self.meals_dir}/{tg_id}", Meal)
        result = []
        for meal in meals:
            ts = meal.timestamp
            if start is not None and ts < start:
                continue
            if end is not None and ts >= end:
                continue
            if status is not None and meal.status != status:
                continue
            result.append(meal)
        result.sort(key=lambda m: m.timestamp)
        return result

    async def count_confirmed(self, tg_id: str) -> int:
        return len(await self.list_for_user(tg_id, status="confirmed"))
