"""
Unit tests for the nutrition aggregator.
"""

import pytest

from oshpaz.core.nutrition import progress_percentage, slot_for_hour, summarize
from oshpaz.models import FoodItem
from conftest import TZ, add_meal, tashkent


class TestHelpers:

    @pytest.mark.parametrize("consumed,goal,expected", [
        (1000, 2000, 50),
        (1, 3, 33),
        (1, 200, 1),  # 0.5 rounds up
        (2500, 2000, 125),
        (500, 0, 0),
    ])
    def test_progress_percentage(self, consumed, goal, expected):
        assert progress_percentage(consumed, goal) == expected

    @pytest.mark.parametrize("hour,slot", [
        (5, "breakfast"), (10, "breakfast"), (11, "lunch"), (16, "snack"),
        (17, "dinner"), (22, "snack"), (2, "snack"),
    ])
    def test_slot_for_hour(self, hour, slot):
        assert slot_for_hour(hour) == slot

    def test_summarize_empty(self):
        stats = summarize([], 1800)
        assert stats.total_calories == 0
        assert stats.remaining_calories == 1800
        assert stats.progress_percentage == 0


class TestDailyStats:

    @pytest.mark.asyncio
    async def test_only_confirmed_meals_of_today(self, services):
        await add_meal(services, when=tashkent(2025, 3, 12, 8), calories=400, protein=20, carbs=50, fats=10)
        await add_meal(services, when=tashkent(2025, 3, 12, 13), calories=700, protein=35, carbs=80, fats=25)
        await add_meal(services, when=tashkent(2025, 3, 12, 14), calories=900, status="pending")
        await add_meal(services, when=tashkent(2025, 3, 11, 23, 30), calories=300)

        stats = await services.nutrition.get_daily_stats("100", 2000)

        assert stats.day.isoformat() == "2025-03-12"
        assert stats.total_calories == 1100
        assert stats.total_protein == 55
        assert stats.total_carbs == 130
        assert stats.total_fats == 35
        assert stats.meals_count == 2
        assert stats.remaining_calories == 900
        assert stats.progress_percentage == 55

    @pytest.mark.asyncio
    async def test_day_meals_newest_first(self, services):
        first = await add_meal(services, when=tashkent(2025, 3, 12, 8), name="Non")
        second = await add_meal(services, when=tashkent(2025, 3, 12, 19), name="Lagman")

        meals = await services.nutrition.get_day_meals("100")

        assert [m.id for m in meals] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_serialized_with_date_alias(self, services):
        stats = await services.nutrition.get_daily_stats("100", 2000)
        body = stats.model_dump(by_alias=True, mode="json")
        assert body["date"] == "2025-03-12"
        assert body["totalCalories"] == 0


class TestWindows:

    @pytest.mark.asyncio
    async def test_last_7_days_fills_gaps(self, services):
        await add_meal(services, when=tashkent(2025, 3, 6, 12), calories=800)
        await add_meal(services, when=tashkent(2025, 3, 10, 12), calories=600)
        await add_meal(services, when=tashkent(2025, 3, 5, 12), calories=999)

        days = await services.nutrition.get_last_7_days("100", 2000)

        assert [d.day.isoformat() for d in days] == [
            "2025-03-06", "2025-03-07", "2025-03-08", "2025-03-09",
            "2025-03-10", "2025-03-11", "2025-03-12",
        ]
        assert [d.total_calories for d in days] == [800, 0, 0, 0, 600, 0, 0]

    @pytest.mark.asyncio
    async def test_has_meal_between(self, services):
        await add_meal(services, when=tashkent(2025, 3, 12, 8))

        assert await services.nutrition.has_meal_between("100", 5, 11) is True
        assert await services.nutrition.has_meal_between("100", 11, 16) is False

    @pytest.mark.asyncio
    async def test_has_meal_today_ignores_pending(self, services):
        await add_meal(services, status="pending")
        assert await services.nutrition.has_meal_today("100") is False
        await add_meal(services)
        assert await services.nutrition.has_meal_today("100") is True

    def test_week_starts_on_sunday(self, services):
        start = services.nutrition.start_of_week()
        assert start == tashkent(2025, 3, 9, 0)
        assert start.tzinfo is not None

    @pytest.mark.asyncio
    async def test_weekly_calories(self, services):
        await add_meal(services, when=tashkent(2025, 3, 8, 20), calories=1000)
        await add_meal(services, when=tashkent(2025, 3, 9, 9), calories=400)
        await add_meal(services, when=tashkent(2025, 3, 12, 9), calories=600)

        assert await services.nutrition.weekly_calories("100") == 1000

    @pytest.mark.asyncio
    async def test_recent_meals_limit(self, services):
        for hour in (7, 9, 11):
            await add_meal(services, when=tashkent(2025, 3, 12, hour), name=f"meal-{hour}")

        recent = await services.nutrition.get_recent_meals("100", limit=2)

        assert [m.name for m in recent] == ["meal-11", "meal-9"]


class TestAnalytics:

    @pytest.mark.asyncio
    async def test_distribution_and_insight(self, services):
        await add_meal(services, when=tashkent(2025, 3, 10, 13), calories=700, name="Plov, Salad")
        await add_meal(services, when=tashkent(2025, 3, 11, 13), calories=650, name="Plov")
        await add_meal(services, when=tashkent(2025, 3, 12, 8), calories=300, name="Non")

        analytics = await services.nutrition.get_analytics("100")

        slices = {s.name: s.value for s in analytics.calorie_distribution}
        assert slices == {"Breakfast": 300, "Lunch": 1350}
        assert "Plov" in analytics.insight

    @pytest.mark.asyncio
    async def test_item_name_preferred(self, services):
        for day in (10, 11):
            meal = await add_meal(services, when=tashkent(2025, 3, day, 19), name="Dinner plate")
            meal.items = [FoodItem(name="Shashlik", calories=500)]
            await services.meals.save(meal)

        analytics = await services.nutrition.get_analytics("100")

        assert "Shashlik" in analytics.insight

    @pytest.mark.asyncio
    async def test_no_repeated_food(self, services):
        await add_meal(services, when=tashkent(2025, 3, 12, 8), name="Non")
        analytics = await services.nutrition.get_analytics("100")
        assert analytics.insight.startswith("Track more meals")

    def test_reference_timezone(self, services):
        assert services.nutrition.tz == TZ
