"""API module."""

from .auth import router as auth_router
from .users import router as users_router
from .meals import router as meals_router
from .gamification import router as gamification_router
from .report_card import router as report_card_router
from .reminders import router as reminders_router
from .social import router as social_router
from .subscription import router as subscription_router
from .telegram_webhook import router as telegram_router

__all__ = [
    'auth_router', 'users_router', 'meals_router', 'gamification_router',
    'report_card_router', 'reminders_router', 'social_router',
    'subscription_router', 'telegram_router',
]
