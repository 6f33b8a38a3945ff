"""
Reminder Scheduler - timer-driven bot reminders.

A single asyncio task calls tick() every poll interval. Each tick looks at the
current minute in the reference timezone and sends the meal, streak, weigh-in
and daily report reminders due in that minute. Every dispatch is recorded in
the ReminderLedger first, so a minute is never sent twice, restarts included.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from ..config.constants import MEAL_WINDOWS
from ..models.user import ReminderSlot, UserProfile
from ..storage.reminder_ledger import ReminderLedger
from ..storage.social_repository import SubscriptionRepository
from ..storage.user_repository import UserRepository
from .clock import Clock
from .messages import t
from .nutrition import NutritionAggregator
from .report_card import ReportCardGenerator, format_report_message

logger = logging.getLogger(__name__)

MEAL_SLOTS = ("breakfast", "lunch", "dinner")


@dataclass
class TickSummary:
    """Outcome of one tick. skipped=True when the minute was already processed."""
    minute: str = ""
    sent: int = 0
    suppressed: int = 0
    failed: int = 0
    skipped: bool = False


def _due(slot: ReminderSlot, hhmm: str) -> bool:
    return slot.enabled and slot.time == hhmm


class ReminderScheduler:
    """
    Sends due reminders through the bot.

    bot only needs an async send_message(chat_id, text, reply_markup=None,
    parse_mode=None).
    """

    def __init__(self, users: UserRepository, nutrition: NutritionAggregator,
                 report_cards: ReportCardGenerator, subscriptions: SubscriptionRepository,
                 ledger: ReminderLedger, bot: Any, clock: Clock, tz: ZoneInfo,
                 interval_seconds: float = 30.0, mini_app_url: str = ""):
        self.users = users
        self.nutrition = nutrition
        self.report_cards = report_cards
        self.subscriptions = subscriptions
        self.ledger = ledger
        self.bot = bot
        self.clock = clock
        self.tz = tz
        self.interval_seconds = interval_seconds
        self.mini_app_url = mini_app_url

        self._last_minute: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(
            "Reminder scheduler started",
            extra={"extra_fields": {"interval_seconds": self.interval_seconds}}
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Reminder scheduler stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Reminder tick failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval_seconds)

    async def tick(self) -> TickSummary:
        local_now = self.clock.now().astimezone(self.tz)
        minute = local_now.strftime("%Y-%m-%dT%H:%M")
        if minute == self._last_minute:
            return TickSummary(minute=minute, skipped=True)
        self._last_minute = minute

        hhmm = local_now.strftime("%H:%M")
        weekday = (local_now.weekday() + 1) % 7  # 0 = Sunday
        summary = TickSummary(minute=minute)

        users = await self.users.list_all()
        for user in users:
            for category, text, parse_mode in await self._due_reminders(user, minute, hhmm, weekday, summary):
                await self._dispatch(user, category, minute, text, parse_mode, summary)

        if summary.sent or summary.failed:
            logger.info(
                "Reminder tick",
                extra={"extra_fields": {
                    "minute": minute,
                    "sent": summary.sent,
                    "suppressed": summary.suppressed,
                    "failed": summary.failed,
                }}
            )
        return summary

    async def _due_reminders(self, user: UserProfile, minute: str, hhmm: str, weekday: int,
                             summary: TickSummary) -> List[tuple]:
        """(category, text, parse_mode) for every reminder of this user due now."""
        reminders = user.reminders
        language = user.language
        due = []
        try:
            for slot in MEAL_SLOTS:
                if not _due(getattr(reminders, slot), hhmm):
                    continue
                start, end = MEAL_WINDOWS[slot]
                if await self.nutrition.has_meal_between(user.tg_id, start, end):
                    summary.suppressed += 1
                else:
                    due.append((slot, t(language, slot), None))

            if _due(reminders.streak_reminder, hhmm) and user.current_streak > 0:
                if await self.nutrition.has_meal_today(user.tg_id):
                    summary.suppressed += 1
                else:
                    due.append((
                        "streak_reminder",
                        t(language, "streak_reminder", streak=user.current_streak),
                        None,
                    ))

            if _due(reminders.weigh_in, hhmm) and reminders.weigh_in.day_of_week == weekday:
                due.append(("weigh_in", t(language, "weigh_in"), None))

            if _due(reminders.daily_report, hhmm):
                if await self.ledger.contains(ReminderLedger.make_key(user.tg_id, "daily_report", minute)):
                    # sent already, don't build the report again
                    summary.suppressed += 1
                else:
                    result = await self.report_cards.get_today(user.tg_id, language)
                    if result.report is None:
                        summary.suppressed += 1
                    else:
                        premium = await self.subscriptions.is_premium(user.tg_id, self.clock.now())
                        due.append((
                            "daily_report",
                            format_report_message(result.report, language, premium),
                            "Markdown",
                        ))
        except Exception as e:
            summary.failed += 1
            logger.error(
                f"Reminder evaluation failed for {user.tg_id}: {e}",
                extra={"extra_fields": {"tg_id": user.tg_id}}
            )
        return due

    async def _dispatch(self, user: UserProfile, category: str, minute: str, text: str,
                        parse_mode: Optional[str], summary: TickSummary) -> None:
        key = ReminderLedger.make_key(user.tg_id, category, minute)
        if await self.ledger.contains(key):
            summary.suppressed += 1
            return
        # recorded before sending: a failed send is not retried
        await self.ledger.record(key)

        try:
            await self.bot.send_message(
                user.tg_id, text, reply_markup=self._keyboard(user.language), parse_mode=parse_mode
            )
            summary.sent += 1
        except Exception as e:
            # e.g. the user blocked the bot
            summary.failed += 1
            logger.warning(
                f"Failed to send {category} reminder to {user.tg_id}: {e}",
                extra={"extra_fields": {"tg_id": user.tg_id, "category": category}}
            )

    def _keyboard(self, language: str) -> Optional[Dict[str, Any]]:
        if not self.mini_app_url:
            return None
        return {"inline_keyboard": [[{"text": t(language, "open_app"), "web_app": {"url": self.mini_app_url}}]]}
