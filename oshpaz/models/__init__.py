"""Models module."""

from .base import CamelModel
from .user import (
    UserProfile, ProfileUpdate, GoalUpdate, WeightLog, WeightEntry, Badge,
    ReminderSettings, ReminderSettingsUpdate, ReminderSlot, WeighInReminder,
    TelegramUser, TelegramAuthRequest, Token, TokenData, WeightLogResponse,
)
from .meal import (
    Meal, MealUpdate, FoodItem, NutritionData, DailyStats,
    MealAnalytics, DistributionSlice, MealAnalysisResponse, MealConfirmResponse,
)
from .gamification import GamificationResult, GamificationProfile, UnlockedBadge, BadgeView, BadgesSeenRequest
from .report_card import DailyReportCard, CalorieScore, MacroBalance, MacroStatus
from .social import (
    Friendship, FriendInfo, LeaderboardEntry, FriendRequestView, ReferralInfo,
    FriendRequestCreate, FriendRequestAccept, SocialActionResult,
)
from .subscription import Subscription, SubscriptionView, SubscriptionGrant

__all__ = [
    'CamelModel',
    'UserProfile', 'ProfileUpdate', 'GoalUpdate', 'WeightLog', 'WeightEntry', 'Badge',
    'ReminderSettings', 'ReminderSettingsUpdate', 'ReminderSlot', 'WeighInReminder',
    'TelegramUser', 'TelegramAuthRequest', 'Token', 'TokenData', 'WeightLogResponse',
    'Meal', 'MealUpdate', 'FoodItem', 'NutritionData', 'DailyStats',
    'MealAnalytics', 'DistributionSlice', 'MealAnalysisResponse', 'MealConfirmResponse',
    'GamificationResult', 'GamificationProfile', 'UnlockedBadge', 'BadgeView', 'BadgesSeenRequest',
    'DailyReportCard', 'CalorieScore', 'MacroBalance', 'MacroStatus',
    'Friendship', 'FriendInfo', 'LeaderboardEntry', 'FriendRequestView', 'ReferralInfo',
    'FriendRequestCreate', 'FriendRequestAccept', 'SocialActionResult',
    'Subscription', 'SubscriptionView', 'SubscriptionGrant',
]
