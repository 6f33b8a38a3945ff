"""
Service wiring - builds every repository and service once per application.

Routers get the container through the get_services dependency; tests swap it
with app.dependency_overrides.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import Request

from .channels.telegram import TelegramBot
from .config.settings import Settings
from .core.clock import Clock, TTLCache
from .core.food_analysis import FoodAnalyzer
from .core.gamification import GamificationService
from .core.meals import MealService
from .core.nutrition import NutritionAggregator
from .core.profile import ProfileService
from .core.reminders import ReminderScheduler
from .core.report_card import ReportCardGenerator
from .core.social import SocialService
from .llm.base import LLMProvider
from .llm.factory import create_provider_from_settings
from .services.transcription import TranscriptionService
from .storage import (
    FriendshipRepository,
    LocalStorage,
    MealRepository,
    ReminderLedger,
    StorageInterface,
    SubscriptionRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

# Telegram re-delivers an update until it gets a 200; remember ids for a while
UPDATE_DEDUP_TTL_SECONDS = 10 * 60
UPDATE_DEDUP_MAX_ENTRIES = 10000


@dataclass
class ServiceContainer:
    settings: Settings
    clock: Clock
    tz: ZoneInfo
    storage: StorageInterface
    users: UserRepository
    meals: MealRepository
    friendships: FriendshipRepository
    subscriptions: SubscriptionRepository
    ledger: ReminderLedger
    llm: Optional[LLMProvider]
    nutrition: NutritionAggregator
    gamification: GamificationService
    profiles: ProfileService
    meal_service: MealService
    analyzer: FoodAnalyzer
    report_cards: ReportCardGenerator
    social: SocialService
    transcription: TranscriptionService
    bot: Optional[TelegramBot]
    reminders: Optional[ReminderScheduler]
    processed_updates: TTLCache


def build_services(settings: Settings, clock: Optional[Clock] = None,
                   storage: Optional[StorageInterface] = None,
                   llm: Optional[LLMProvider] = None,
                   bot: Optional[TelegramBot] = None) -> ServiceContainer:
    """
    Wire the application. Arguments left as None are built from settings
    (the LLM provider and bot stay None when their keys are not configured).
    """
    clock = clock or Clock()
    tz = ZoneInfo(settings.reference_timezone)
    storage = storage or LocalStorage(settings.local_storage_path)

    users = UserRepository(storage)
    meals = MealRepository(storage)
    friendships = FriendshipRepository(storage)
    subscriptions = SubscriptionRepository(storage)
    ledger = ReminderLedger(storage)

    if llm is None:
        llm = create_provider_from_settings(settings)
    if bot is None and settings.telegram_bot_token:
        bot = TelegramBot(settings.telegram_bot_token, settings.telegram_webhook_secret)

    nutrition = NutritionAggregator(meals, clock, tz)
    gamification = GamificationService(users, meals, friendships, clock, tz)
    profiles = ProfileService(
        users, subscriptions, gamification, clock, tz,
        free_daily_scan_limit=settings.free_daily_scan_limit,
    )
    report_cards = ReportCardGenerator(users, nutrition, gamification, llm, clock, tz)
    social = SocialService(
        users, friendships, nutrition, gamification,
        TTLCache(settings.leaderboard_cache_ttl_seconds, clock), clock, settings.bot_username,
    )

    reminders = None
    if bot is not None:
        reminders = ReminderScheduler(
            users, nutrition, report_cards, subscriptions, ledger, bot, clock, tz,
            interval_seconds=settings.reminder_poll_interval_seconds,
            mini_app_url=settings.mini_app_url,
        )

    return ServiceContainer(
        settings=settings,
        clock=clock,
        tz=tz,
        storage=storage,
        users=users,
        meals=meals,
        friendships=friendships,
        subscriptions=subscriptions,
        ledger=ledger,
        llm=llm,
        nutrition=nutrition,
        gamification=gamification,
        profiles=profiles,
        meal_service=MealService(meals, nutrition, gamification, clock),
        analyzer=FoodAnalyzer(llm),
        report_cards=report_cards,
        social=social,
        transcription=TranscriptionService(settings.openai_api_key),
        bot=bot,
        reminders=reminders,
        processed_updates=TTLCache(UPDATE_DEDUP_TTL_SECONDS, clock, UPDATE_DEDUP_MAX_ENTRIES),
    )


def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the container built at startup."""
    return request.app.state.services
