"""
Report Card Generator - once-per-day nutrition report built by the LLM.

The report is cached on the user document and returned unchanged for the rest
of the calendar day (reference timezone) unless a refresh is forced.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

import httpx
from pydantic import ValidationError

from ..config.constants import DEFAULT_GRADE_EMOJI, GRADE_EMOJI
from ..llm.base import LLMError, LLMProvider, LLMMessage
from ..models.gamification import GamificationProfile
from ..models.meal import DailyStats, Meal
from ..models.report_card import CalorieScore, DailyReportCard, MacroBalance, MacroStatus
from ..models.user import UserProfile
from ..storage.user_repository import UserRepository
from .clock import Clock
from .gamification import GamificationService
from .logging_config import user_logger
from .messages import t
from .nutrition import NutritionAggregator
from .profile import resolve_daily_goal

logger = logging.getLogger(__name__)

# ReportCardResult.status values
GENERATED = "generated"
CACHED = "cached"
NO_MEALS = "no_meals"
USER_NOT_FOUND = "user_not_found"
GENERATION_FAILED = "generation_failed"

REPORT_CARD_PROMPT = """You are a supportive nutrition coach. Analyze the user's daily eating and generate a report card.
Return ONLY a JSON object:
{
  "grade": "A" | "B" | "C" | "D" | "F",
  "calorieScore": {
    "consumed": number,
    "goal": number,
    "status": "over" | "under" | "on_target",
    "difference": number
  },
  "macroBalance": {
    "protein": { "consumed": number, "status": "good" | "low" | "high" },
    "carbs": { "consumed": number, "status": "good" | "low" | "high" },
    "fats": { "consumed": number, "status": "good" | "low" | "high" }
  },
  "highlights": ["string", "string"],
  "improvements": ["string"],
  "tomorrowTip": "string",
  "streakAck": "string",
  "detailedAnalysis": "string"
}

Grading:
- A: 90-110% calorie goal + balanced macros + 3+ meals
- B: 80-120% + decent macros + 2+ meals
- C: 70-130% or only 1-2 meals
- D: 50-70% or 130-150%
- F: <50% or >150%

Macro status: protein >0.8g/kg = good, carbs 40-60% = good, fats 20-35% = good.

Rules:
1. Be encouraging, not judgmental
2. highlights: 2-3 positive things (e.g., "Hit protein target", "Logged 3 meals")
3. improvements: 1-2 actionable tips (e.g., "Add tvorog at breakfast for +12g protein")
4. tomorrowTip: specific Uzbek dish with rough macros
5. streakAck: acknowledge current streak
6. detailedAnalysis: 2-3 sentence summary
7. Respond in {language}
8. Return ONLY valid JSON"""

LANGUAGE_NAMES = {"uz": "Uzbek", "en": "English"}

MACRO_LEVELS = ("good", "low", "high")


@dataclass
class ReportCardResult:
    status: str
    report: Optional[DailyReportCard] = None

    @property
    def available(self) -> bool:
        return self.report is not None


def grade_for_progress(percentage: float, meals_count: int) -> str:
    """Local version of the grading rubric, used when the model omits the grade."""
    if 90 <= percentage <= 110 and meals_count >= 3:
        return "A"
    if 80 <= percentage <= 120 and meals_count >= 2:
        return "B"
    if 70 <= percentage <= 130:
        return "C"
    if 50 <= percentage < 70 or 130 < percentage <= 150:
        return "D"
    return "F"


def calorie_status(consumed: int, goal: int) -> str:
    """on_target within 90-110% of the goal, otherwise over or under."""
    if goal <= 0:
        return "on_target" if consumed == 0 else "over"
    ratio = consumed / goal
    if ratio > 1.1:
        return "over"
    if ratio < 0.9:
        return "under"
    return "on_target"


def strip_for_free_tier(report: DailyReportCard) -> DailyReportCard:
    """Keep grade, emoji and calorie numbers only."""
    return DailyReportCard(
        date=report.date,
        grade=report.grade,
        grade_emoji=report.grade_emoji,
        calorie_score=report.calorie_score,
    )


def format_report_message(report: DailyReportCard, language: str, premium: bool) -> str:
    """Telegram Markdown text for a report card."""
    score = report.calorie_score
    if not premium:
        return t(language, "report_free", emoji=report.grade_emoji, grade=report.grade,
                 consumed=score.consumed, goal=score.goal)

    def mark(ok: bool) -> str:
        return "✅" if ok else "⚠️"

    lines = [
        t(language, "report_title", emoji=report.grade_emoji, grade=report.grade),
        "",
        t(language, "report_calories", consumed=score.consumed, goal=score.goal,
          mark=mark(score.status == "on_target")),
    ]
    if report.macro_balance is not None:
        macros = report.macro_balance
        lines += [
            "",
            t(language, "report_macros"),
            f"🥩 {t(language, 'protein')}: {macros.protein.consumed:g}g {mark(macros.protein.status == 'good')}",
            f"🍞 {t(language, 'carbs')}: {macros.carbs.consumed:g}g {mark(macros.carbs.status == 'good')}",
            f"🧈 {t(language, 'fats')}: {macros.fats.consumed:g}g {mark(macros.fats.status == 'good')}",
        ]
    if report.highlights:
        lines += ["", t(language, "report_highlights")] + [f"✨ {h}" for h in report.highlights]
    if report.improvements:
        lines += ["", t(language, "report_improvements")] + [f"💡 {i}" for i in report.improvements]
    if report.tomorrow_tip:
        lines += ["", f"🍽 {report.tomorrow_tip}"]
    if report.streak_ack:
        lines += ["", f"🔥 {report.streak_ack}"]
    return "\n".join(lines)


def build_user_prompt(user: UserProfile, stats: DailyStats, meals: List[Meal],
                      profile: Optional[GamificationProfile], language: str) -> str:
    meal_list = "\n".join(
        f"- {m.name}: {m.calories} kcal (P:{m.protein}g C:{m.carbs}g F:{m.fats}g)" for m in meals
    )
    streak = profile.current_streak if profile else 0
    level = profile.level if profile else 1
    weight = f"{user.weight:g}" if user.weight else "?"
    return (
        f"User: Goal={user.goal or 'maintain'}, DailyGoal={stats.daily_goal} kcal, Weight={weight}kg\n\n"
        f"Today's Stats:\n"
        f"- Calories: {stats.total_calories}/{stats.daily_goal} kcal ({stats.progress_percentage}%)\n"
        f"- Protein: {stats.total_protein}g, Carbs: {stats.total_carbs}g, Fats: {stats.total_fats}g\n"
        f"- Meals: {stats.meals_count}\n\n"
        f"Meals:\n{meal_list or 'None'}\n\n"
        f"Streak: {streak} days, Level: {level}\n\n"
        f"Language: {LANGUAGE_NAMES.get(language, 'English')}"
    )


def _macro_status(payload: Dict[str, Any], name: str, consumed: float) -> MacroStatus:
    """Grams come from today's stats; only a recognized level is taken from the model."""
    block = payload.get("macroBalance")
    entry = block.get(name) if isinstance(block, dict) else None
    level = entry.get("status") if isinstance(entry, dict) else None
    return MacroStatus(consumed=consumed, status=level if level in MACRO_LEVELS else "good")


def build_report(payload: Dict[str, Any], stats: DailyStats, day: str) -> DailyReportCard:
    """
    Turn the model's JSON into a report card.

    Calorie numbers and macro grams always come from today's stats. The grade
    and the macro levels are taken from the model when recognized, otherwise
    from the local rubric.
    """
    grade = payload.get("grade")
    if not isinstance(grade, str) or grade not in GRADE_EMOJI:
        grade = grade_for_progress(stats.progress_percentage, stats.meals_count)

    calorie_score = CalorieScore(
        consumed=stats.total_calories,
        goal=stats.daily_goal,
        status=calorie_status(stats.total_calories, stats.daily_goal),
        difference=stats.total_calories - stats.daily_goal,
    )
    macro_balance = MacroBalance(
        protein=_macro_status(payload, "protein", stats.total_protein),
        carbs=_macro_status(payload, "carbs", stats.total_carbs),
        fats=_macro_status(payload, "fats", stats.total_fats),
    )

    return DailyReportCard(
        date=day,
        grade=grade,
        grade_emoji=GRADE_EMOJI.get(grade, DEFAULT_GRADE_EMOJI),
        calorie_score=calorie_score,
        macro_balance=macro_balance,
        highlights=[str(h) for h in payload.get("highlights") or []],
        improvements=[str(i) for i in payload.get("improvements") or []],
        tomorrow_tip=str(payload.get("tomorrowTip") or ""),
        streak_ack=str(payload.get("streakAck") or ""),
        detailed_analysis=str(payload.get("detailedAnalysis") or ""),
    )


class ReportCardGenerator:
    """
    Builds and caches the daily report card.

    Premium gating is not applied here; callers decide between the full
    report and strip_for_free_tier().
    """

    def __init__(self, users: UserRepository, nutrition: NutritionAggregator,
                 gamification: GamificationService, llm: Optional[LLMProvider],
                 clock: Clock, tz: ZoneInfo, temperature: float = 0.5, max_tokens: int = 1200):
        self.users = users
        self.nutrition = nutrition
        self.gamification = gamification
        self.llm = llm
        self.clock = clock
        self.tz = tz
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def get_today(self, tg_id: str, language: Optional[str] = None) -> ReportCardResult:
        return await self.generate(tg_id, language, force_refresh=False)

    async def generate(self, tg_id: str, language: Optional[str] = None,
                       force_refresh: bool = False) -> ReportCardResult:
        user = await self.users.get(tg_id)
        if user is None:
            return ReportCardResult(USER_NOT_FOUND)

        log = user_logger(logger, tg_id)
        today = self.nutrition.today()

        if not force_refresh and user.last_report_card is not None and user.last_report_card_date == today:
            return ReportCardResult(CACHED, user.last_report_card)

        stats = await self.nutrition.get_daily_stats(tg_id, resolve_daily_goal(user), today)
        if stats.meals_count == 0:
            return ReportCardResult(NO_MEALS)

        if self.llm is None:
            log.warning("Report card requested but no LLM provider is configured")
            return ReportCardResult(GENERATION_FAILED)

        language = language or user.language
        meals = await self.nutrition.get_day_meals(tg_id, today)
        profile = await self.gamification.get_profile(tg_id)

        messages = [
            LLMMessage.text(
                "system",
                REPORT_CARD_PROMPT.replace("{language}", LANGUAGE_NAMES.get(language, "English")),
            ),
            LLMMessage.text("user", build_user_prompt(user, stats, meals, profile, language)),
        ]
        try:
            response = await self.llm.chat_completion(
                messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
            )
        except (httpx.HTTPError, LLMError):
            # already logged by the provider
            return ReportCardResult(GENERATION_FAILED)

        try:
            report = build_report(response.json(), stats, today.isoformat())
        except (ValueError, ValidationError) as e:
            log.warning(f"Unparseable report card response: {e}")
            return ReportCardResult(GENERATION_FAILED)

        user.last_report_card = report
        user.last_report_card_date = today
        await self.users.save(user)

        log.info(
            "Report card generated",
            extra={"extra_fields": {"grade": report.grade, "meals": stats.meals_count}}
        )
        return ReportCardResult(GENERATED, report)
