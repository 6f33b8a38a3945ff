"""Core module - domain services: nutrition, gamification, report cards, reminders, social."""

from .clock import Clock, FixedClock, TTLCache
from .nutrition import NutritionAggregator
from .gamification import GamificationService
from .profile import ProfileService, InvalidGoalError, resolve_daily_goal
from .meals import MealService
from .food_analysis import FoodAnalyzer, AnalysisResult
from .report_card import ReportCardGenerator, ReportCardResult
from .reminders import ReminderScheduler, TickSummary
from .social import SocialService

__all__ = [
    'Clock', 'FixedClock', 'TTLCache',
    'NutritionAggregator', 'GamificationService',
    'ProfileService', 'InvalidGoalError', 'resolve_daily_goal',
    'MealService', 'FoodAnalyzer', 'AnalysisResult',
    'ReportCardGenerator', 'ReportCardResult',
    'ReminderScheduler', 'TickSummary', 'SocialService',
]
