"""
Unit tests for the profile service: user lifecycle, goals, weight and scan limits.
"""

import pytest

from oshpaz.core.profile import (
    InvalidGoalError,
    calculate_daily_calories,
    new_referral_code,
    resolve_daily_goal,
)
from oshpaz.models import ProfileUpdate, TelegramUser, UserProfile
from conftest import make_user


def complete_profile(**overrides) -> UserProfile:
    fields = dict(
        tg_id="100", gender="male", age=30, height=180, weight=80,
        activity_level="moderate", goal="maintain",
    )
    fields.update(overrides)
    return UserProfile(**fields)


class TestGoalHelpers:

    def test_resolve_default(self):
        assert resolve_daily_goal(None, 2000) == 2000
        assert resolve_daily_goal(UserProfile(tg_id="1"), 2000) == 2000
        assert resolve_daily_goal(UserProfile(tg_id="1", daily_goal=0), 2000) == 2000

    def test_resolve_user_goal(self):
        assert resolve_daily_goal(UserProfile(tg_id="1", daily_goal=1800), 2000) == 1800

    def test_calculate_maintain(self):
        assert calculate_daily_calories(complete_profile()) == 2759

    def test_calculate_lose_weight(self):
        assert calculate_daily_calories(complete_profile(goal="lose_weight")) == 2259

    def test_calculate_clamped(self):
        tiny = complete_profile(gender="female", age=90, height=140, weight=35,
                                activity_level="sedentary", goal="lose_weight")
        assert calculate_daily_calories(tiny) == 1000

    def test_incomplete_profile(self):
        assert calculate_daily_calories(complete_profile(age=None)) is None

    def test_referral_code_format(self):
        code = new_referral_code()
        assert len(code) == 8
        assert code == code.upper()


class TestUserLifecycle:

    @pytest.mark.asyncio
    async def test_find_or_create_new_user(self, services):
        tg_user = TelegramUser(id=555, first_name="Dilnoza", username="dilnoza")

        user = await services.profiles.find_or_create(tg_user, language="en")

        assert user.tg_id == "555"
        assert user.language == "en"
        assert user.daily_goal == 2000
        assert user.referral_code
        assert (await services.users.get_by_username("@Dilnoza")).tg_id == "555"
        assert (await services.users.get_by_referral_code(user.referral_code.lower())).tg_id == "555"

    @pytest.mark.asyncio
    async def test_find_or_create_returns_existing(self, services):
        await make_user(services, tg_id="555", first_name="Old")
        user = await services.profiles.find_or_create(TelegramUser(id=555, first_name="New"))
        assert user.first_name == "Old"

    @pytest.mark.asyncio
    async def test_default_language(self, services):
        user = await services.profiles.find_or_create(TelegramUser(id=7))
        assert user.language == "uz"

    @pytest.mark.asyncio
    async def test_update_language(self, services):
        await make_user(services)
        user = await services.profiles.update_language("100", "en")
        assert user.language == "en"
        assert await services.profiles.update_language("404", "en") is None


class TestProfileEdits:

    @pytest.mark.asyncio
    async def test_update_profile_recalculates_goal(self, services):
        await make_user(services, weight=82)

        update = ProfileUpdate(gender="male", age=30, height=180, weight=80,
                               activity_level="moderate", goal="maintain")
        user = await services.profiles.update_profile("100", update)

        assert user.daily_goal == 2759
        assert [e.weight for e in user.weight_history] == [80]

    @pytest.mark.asyncio
    async def test_partial_update_keeps_goal(self, services):
        await make_user(services, daily_goal=1700)
        user = await services.profiles.update_profile("100", ProfileUpdate(age=41))
        assert user.age == 41
        assert user.daily_goal == 1700

    @pytest.mark.asyncio
    async def test_update_goal(self, services):
        await make_user(services)
        user = await services.profiles.update_daily_goal("100", 2200)
        assert user.daily_goal == 2200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("goal", [999, 5001])
    async def test_update_goal_out_of_range(self, services, goal):
        await make_user(services)
        with pytest.raises(InvalidGoalError):
            await services.profiles.update_daily_goal("100", goal)
        assert (await services.users.get("100")).daily_goal == 2000

    @pytest.mark.asyncio
    async def test_log_weight(self, services):
        await make_user(services, language="en", target_weight=70.0)

        user, result = await services.profiles.log_weight("100", 70.3)

        assert user.weight == 70.3
        assert user.xp == 15
        assert result.xp_gained == 15
        assert [b.id for b in result.new_badges] == ["weight_goal"]
        history = await services.profiles.get_weight_history("100")
        assert [e.weight for e in history] == [70.3]

    @pytest.mark.asyncio
    async def test_log_weight_unknown_user(self, services):
        user, result = await services.profiles.log_weight("404", 70)
        assert user is None
        assert result.xp_gained == 0


class TestScanAllowance:

    @pytest.mark.asyncio
    async def test_free_limit_per_day(self, services, clock):
        user = await make_user(services)

        for expected_left in (2, 1, 0):
            assert (await services.profiles.scan_allowance(user)).allowed is True
            assert await services.profiles.record_scan(user) == expected_left

        allowance = await services.profiles.scan_allowance(user)
        assert allowance.allowed is False
        assert allowance.scans_left == 0

        clock.advance(days=1)
        allowance = await services.profiles.scan_allowance(user)
        assert allowance.allowed is True
        assert allowance.scans_left == 3

    @pytest.mark.asyncio
    async def test_premium_is_unlimited(self, services, clock):
        user = await make_user(services)
        await services.subscriptions.grant("100", 30, clock.now())

        allowance = await services.profiles.scan_allowance(user)

        assert allowance.allowed is True
        assert allowance.scans_left is None
        assert await services.profiles.record_scan(user) is None
