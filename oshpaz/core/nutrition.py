"""
Nutrition Aggregator - Daily, weekly and 30-day statistics over confirmed meals.
All calendar days are taken in the reference timezone. Read-only.
"""

import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from ..config.constants import MEAL_WINDOWS
from ..models.meal import Meal, DailyStats, MealAnalytics, DistributionSlice
from ..storage.meal_repository import MealRepository
from .clock import Clock, local_day, day_bounds


def progress_percentage(consumed: int, goal: int) -> int:
    """Percent of goal, rounded half up. A non-positive goal yields 0."""
    if goal <= 0:
        return 0
    return int(math.floor(consumed * 100 / goal + 0.5))


def slot_for_hour(hour: int) -> str:
    """Meal slot of a local hour: breakfast, lunch, dinner, or snack outside the windows."""
    for slot, (start, end) in MEAL_WINDOWS.items():
        if start <= hour < end:
            return slot
    return "snack"


def summarize(meals: List[Meal], daily_goal: int, day: Optional[date] = None) -> DailyStats:
    """Sum meal macros into a DailyStats record."""
    total_calories = sum(m.calories for m in meals)
    return DailyStats(
        day=day,
        total_calories=total_calories,
        total_protein=sum(m.protein for m in meals),
        total_carbs=sum(m.carbs for m in meals),
        total_fats=sum(m.fats for m in meals),
        meals_count=len(meals),
        daily_goal=daily_goal,
        remaining_calories=daily_goal - total_calories,
        progress_percentage=progress_percentage(total_calories, daily_goal),
    )


class NutritionAggregator:
    """
    Aggregates confirmed meals per calendar day.

    Storage failures propagate as StorageError.
    """

    def __init__(self, meals: MealRepository, clock: Clock, tz: ZoneInfo):
        self.meals = meals
        self.clock = clock
        self.tz = tz

    def today(self) -> date:
        return local_day(self.clock.now(), self.tz)

    async def get_day_meals(self, tg_id: str, day: Optional[date] = None,
                            confirmed_only: bool = True) -> List[Meal]:
        """Meals of one local day, newest first."""
        start, end = day_bounds(day or self.today(), self.tz)
        meals = await self.meals.list_for_user(
            tg_id, start=start, end=end, status="confirmed" if confirmed_only else None
        )
        return list(reversed(meals))

    async def get_daily_stats(self, tg_id: str, daily_goal: int, day: Optional[date] = None) -> DailyStats:
        day = day or self.today()
        meals = await self.get_day_meals(tg_id, day)
        return summarize(meals, daily_goal, day)

    async def get_last_7_days(self, tg_id: str, daily_goal: int) -> List[DailyStats]:
        """One entry per day for the trailing 7 days including today, oldest first."""
        today = self.today()
        first_day = today - timedelta(days=6)
        start, _ = day_bounds(first_day, self.tz)
        _, end = day_bounds(today, self.tz)
        meals = await self.meals.list_for_user(tg_id, start=start, end=end, status="confirmed")

        by_day = defaultdict(list)
        for meal in meals:
            by_day[local_day(meal.timestamp, self.tz)].append(meal)

        return [
            summarize(by_day.get(day, []), daily_goal, day)
            for day in (first_day + timedelta(days=i) for i in range(7))
        ]

    async def get_recent_meals(self, tg_id: str, limit: int = 10) -> List[Meal]:
        meals = await self.meals.list_for_user(tg_id, status="confirmed")
        return list(reversed(meals))[:limit]

    async def has_meal_between(self, tg_id: str, start_hour: int, end_hour: int,
                               day: Optional[date] = None) -> bool:
        """True if a confirmed meal exists in [start_hour, end_hour) of the local day."""
        day_start, _ = day_bounds(day or self.today(), self.tz)
        meals = await self.meals.list_for_user(
            tg_id,
            start=day_start + timedelta(hours=start_hour),
            end=day_start + timedelta(hours=end_hour),
            status="confirmed",
        )
        return bool(meals)

    async def has_meal_today(self, tg_id: str) -> bool:
        return bool(await self.get_day_meals(tg_id))

    def start_of_week(self) -> datetime:
        """Local midnight of the most recent Sunday."""
        today = self.today()
        sunday = today - timedelta(days=(today.weekday() + 1) % 7)
        return day_bounds(sunday, self.tz)[0]

    async def weekly_calories(self, tg_id: str) -> int:
        meals = await self.meals.list_for_user(tg_id, start=self.start_of_week(), status="confirmed")
        return sum(m.calories for m in meals)

    async def get_analytics(self, tg_id: str) -> MealAnalytics:
        """
        30-day calorie distribution by meal slot, plus a habit insight naming the
        food with the highest count x average calories among foods seen twice or more.
        """
        since = self.clock.now() - timedelta(days=30)
        meals = await self.meals.list_for_user(tg_id, start=since, status="confirmed")

        distribution = {"breakfast": 0, "lunch": 0, "dinner": 0, "snack": 0}
        frequency = defaultdict(int)
        calories = defaultdict(int)
        for meal in meals:
            hour = meal.timestamp.astimezone(self.tz).hour
            distribution[slot_for_hour(hour)] += meal.calories

            name = meal.items[0].name if meal.items else meal.name.split(",")[0].strip()
            if name:
                frequency[name] += 1
                calories[name] += meal.calories

        top_food, best_score = "", 0.0
        for food, count in frequency.items():
            if count < 2:
                continue
            # count * average calories
            score = float(calories[food])
            if score > best_score:
                top_food, best_score = food, score

        if top_food:
            insight = (
                f"Your most frequent high-calorie food is {top_food}. "
                f"Reducing its portion could speed up your progress."
            )
        else:
            insight = "Track more meals to get personalized diet insights!"

        return MealAnalytics(
            calorie_distribution=[
                DistributionSlice(name=name.capitalize(), value=value)
                for name, value in distribution.items() if value > 0
            ],
            insight=insight,
        )
