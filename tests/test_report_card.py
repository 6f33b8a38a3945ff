"""
Unit tests for the daily report card.
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from oshpaz.core.report_card import (
    CACHED,
    GENERATED,
    GENERATION_FAILED,
    NO_MEALS,
    USER_NOT_FOUND,
    build_report,
    calorie_status,
    format_report_message,
    grade_for_progress,
    strip_for_free_tier,
)
from oshpaz.core.messages import progress_bar, t
from oshpaz.llm import OpenAIProvider
from oshpaz.models import DailyStats
from conftest import REPORT_PAYLOAD, add_meal, llm_returning, make_user


def stats(consumed=1700, goal=2000, meals=3, pct=85) -> DailyStats:
    return DailyStats(
        total_calories=consumed, total_protein=90, total_carbs=200, total_fats=80,
        meals_count=meals, daily_goal=goal, remaining_calories=goal - consumed, progress_percentage=pct,
    )


class TestRubric:

    @pytest.mark.parametrize("pct,meals,grade", [
        (100, 3, "A"),
        (100, 2, "B"),
        (85, 2, "B"),
        (100, 1, "C"),
        (125, 3, "C"),
        (60, 3, "D"),
        (140, 3, "D"),
        (40, 3, "F"),
        (160, 3, "F"),
    ])
    def test_grade_for_progress(self, pct, meals, grade):
        assert grade_for_progress(pct, meals) == grade

    def test_calorie_status(self):
        assert calorie_status(1900, 2000) == "on_target"
        assert calorie_status(2300, 2000) == "over"
        assert calorie_status(1500, 2000) == "under"


class TestBuildReport:

    def test_from_full_payload(self):
        report = build_report(REPORT_PAYLOAD, stats(), "2025-03-12")
        assert report.grade == "B"
        assert report.calorie_score.difference == -300
        assert report.macro_balance.fats.status == "high"
        assert report.tomorrow_tip == "Try mastava for lunch"

    def test_missing_parts_filled_locally(self):
        report = build_report({"grade": "Z"}, stats(consumed=1950, pct=98), "2025-03-12")
        assert report.grade == "A"
        assert report.calorie_score.status == "on_target"
        assert report.calorie_score.difference == -50
        assert report.macro_balance.protein.consumed == 90
        assert report.highlights == []

    @pytest.mark.parametrize("payload", [
        {"calorieScore": {"consumed": "lots"}},
        {"calorieScore": {"consumed": 1850.5, "goal": 2000, "status": "under", "difference": -149.5}},
        {"calorieScore": {"consumed": 1700, "goal": 2000, "status": "on target", "difference": -300}},
        {"macroBalance": {"protein": {"consumed": 90, "status": "moderate"}}},
        {"macroBalance": {"protein": "plenty", "fats": {"status": ["high"]}}},
        {"grade": ["A"], "macroBalance": []},
    ])
    def test_bad_shapes_fall_back_to_stats(self, payload):
        report = build_report(payload, stats(), "2025-03-12")
        assert report.calorie_score.consumed == 1700
        assert report.calorie_score.goal == 2000
        assert report.calorie_score.status == "under"
        assert report.calorie_score.difference == -300
        assert report.macro_balance.protein.consumed == 90
        assert report.macro_balance.protein.status == "good"
        assert report.macro_balance.fats.status == "good"

    def test_model_numbers_are_ignored(self):
        payload = dict(REPORT_PAYLOAD, calorieScore={
            "consumed": 900, "goal": 3000, "status": "under", "difference": -2100,
        })
        report = build_report(payload, stats(), "2025-03-12")
        assert report.calorie_score.consumed == 1700
        assert report.calorie_score.difference == -300

    def test_free_tier_strips_details(self):
        report = strip_for_free_tier(build_report(REPORT_PAYLOAD, stats(), "2025-03-12"))
        assert report.grade == "B"
        assert report.calorie_score.consumed == 1700
        assert report.macro_balance is None
        assert report.highlights == []
        assert report.detailed_analysis == ""


class TestFormatting:

    def test_free_message(self):
        report = build_report(REPORT_PAYLOAD, stats(), "2025-03-12")
        text = format_report_message(report, "en", premium=False)
        assert "Today's Grade" in text
        assert "1700/2000" in text
        assert "Logged 3 meals" not in text

    def test_premium_message(self):
        report = build_report(REPORT_PAYLOAD, stats(), "2025-03-12")
        text = format_report_message(report, "en", premium=True)
        assert "Daily Report" in text
        assert "✨ Logged 3 meals" in text
        assert "💡 Add tvorog at breakfast" in text
        assert "Fats: 80g ⚠️" in text
        assert "Protein: 90g ✅" in text

    def test_unknown_language_falls_back(self):
        assert t("fr", "open_app") == t("uz", "open_app")

    def test_progress_bar(self):
        assert progress_bar(0) == "░" * 10
        assert progress_bar(42) == "█" * 4 + "░" * 6
        assert progress_bar(250) == "█" * 10


class TestReportCardGenerator:

    @pytest.mark.asyncio
    async def test_generate_and_cache(self, services):
        services.report_cards.llm = llm_returning(json.dumps(REPORT_PAYLOAD))
        await make_user(services, language="en")
        await add_meal(services)

        first = await services.report_cards.get_today("100")
        assert first.status == GENERATED
        assert first.report.grade == "B"
        assert first.report.date == "2025-03-12"

        second = await services.report_cards.get_today("100")
        assert second.status == CACHED
        assert second.report.model_dump_json() == first.report.model_dump_json()
        assert services.report_cards.llm.chat_completion.await_count == 1

    @pytest.mark.asyncio
    async def test_prompt_language(self, services):
        llm = llm_returning(json.dumps(REPORT_PAYLOAD))
        services.report_cards.llm = llm
        await make_user(services, language="uz")
        await add_meal(services, name="Plov")

        await services.report_cards.generate("100")

        system, user = llm.chat_completion.call_args.args[0]
        assert "Respond in Uzbek" in system.content
        assert "- Plov: 500 kcal" in user.content
        assert llm.chat_completion.call_args.kwargs["json_mode"] is True

    @pytest.mark.asyncio
    async def test_cache_expires_next_day(self, services, clock):
        services.report_cards.llm = llm_returning(json.dumps(REPORT_PAYLOAD))
        await make_user(services)
        await add_meal(services)
        await services.report_cards.get_today("100")

        clock.advance(days=1)
        await add_meal(services)
        result = await services.report_cards.get_today("100")

        assert result.status == GENERATED
        assert result.report.date == "2025-03-13"

    @pytest.mark.asyncio
    async def test_force_refresh_regenerates(self, services):
        services.report_cards.llm = llm_returning(json.dumps(REPORT_PAYLOAD))
        await make_user(services)
        await add_meal(services)
        await services.report_cards.get_today("100")

        result = await services.report_cards.generate("100", force_refresh=True)

        assert result.status == GENERATED
        assert services.report_cards.llm.chat_completion.await_count == 2

    @pytest.mark.asyncio
    async def test_no_meals_even_when_forced(self, services):
        await make_user(services)
        await add_meal(services, status="pending")

        result = await services.report_cards.generate("100", force_refresh=True)

        assert result.status == NO_MEALS
        assert result.available is False
        services.report_cards.llm.chat_completion.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_user(self, services):
        result = await services.report_cards.get_today("404")
        assert result.status == USER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_llm_error(self, services):
        llm = AsyncMock()
        llm.chat_completion = AsyncMock(side_effect=httpx.ReadTimeout("slow", request=MagicMock()))
        services.report_cards.llm = llm
        await make_user(services)
        await add_meal(services)

        result = await services.report_cards.get_today("100")

        assert result.status == GENERATION_FAILED
        assert (await services.users.get("100")).last_report_card is None

    @pytest.mark.asyncio
    async def test_unparseable_response(self, services):
        services.report_cards.llm = llm_returning("no json here")
        await make_user(services)
        await add_meal(services)

        result = await services.report_cards.get_today("100")

        assert result.status == GENERATION_FAILED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("calorie_score,protein", [
        ({"consumed": 1850.5, "goal": 2000, "status": "under", "difference": -149.5}, {"status": "good"}),
        ({"consumed": 500, "goal": 2000, "status": "on target", "difference": -1500}, {"status": "good"}),
        ({"consumed": 500, "goal": 2000, "status": "under", "difference": -1500}, {"status": "moderate"}),
    ])
    async def test_sloppy_model_numbers_still_generate(self, services, calorie_score, protein):
        payload = dict(REPORT_PAYLOAD, calorieScore=calorie_score,
                       macroBalance=dict(REPORT_PAYLOAD["macroBalance"], protein=protein))
        services.report_cards.llm = llm_returning(json.dumps(payload))
        await make_user(services)
        await add_meal(services, calories=500, protein=30)

        result = await services.report_cards.get_today("100")

        assert result.status == GENERATED
        assert result.report.calorie_score.consumed == 500
        assert result.report.calorie_score.status == "under"
        assert result.report.calorie_score.difference == -1500
        assert result.report.macro_balance.protein.consumed == 30
        assert result.report.macro_balance.protein.status == "good"

    @pytest.mark.asyncio
    async def test_provider_error_body(self, services):
        response = MagicMock()
        response.json.return_value = {"error": {"message": "The server is overloaded"}}
        client = AsyncMock()
        client.post.return_value = response
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=False)
        services.report_cards.llm = OpenAIProvider(api_key="test-key", log_calls=False)
        await make_user(services)
        await add_meal(services)

        with patch("httpx.AsyncClient", return_value=client):
            result = await services.report_cards.get_today("100")

        assert result.status == GENERATION_FAILED
        assert (await services.users.get("100")).last_report_card is None

    @pytest.mark.asyncio
    async def test_without_llm(self, services):
        services.report_cards.llm = None
        await make_user(services)
        await add_meal(services)

        result = await services.report_cards.get_today("100")

        assert result.status == GENERATION_FAILED
