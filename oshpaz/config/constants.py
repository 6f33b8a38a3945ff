"""
Fixed domain tables: goal limits, XP rewards, level thresholds, badges, reminder defaults.
"""

from typing import Dict, List

CALORIE_GOAL_MIN = 1000
CALORIE_GOAL_MAX = 5000

# XP granted per event
XP_MEAL_LOGGED = 10
XP_WEIGHT_LOGGED = 15
XP_STREAK_BONUS_PER_DAY = 5
XP_STREAK_BONUS_CAP = 50

# LEVEL_THRESHOLDS[i] is the XP needed to reach level i + 1. Strictly increasing.
LEVEL_THRESHOLDS: List[int] = [
    0, 50, 150, 300, 500, 800, 1200, 1700, 2300, 3000,
    4000, 5200, 6600, 8200, 10000,
]

# XP span assumed past the last threshold
LEVEL_OVERFLOW_SPAN = 1000

WEIGHT_GOAL_TOLERANCE_KG = 0.5

BADGE_CATEGORIES = ("streak", "logging", "nutrition", "social", "milestone")

BADGE_DEFINITIONS: List[Dict] = [
    {
        "id": "first_meal",
        "icon": "utensils",
        "category": "logging",
        "name": {"en": "First Bite", "uz": "Birinchi luqma"},
        "description": {"en": "Logged your first meal", "uz": "Birinchi ovqatingizni kiritdingiz"},
    },
    {
        "id": "streak_3",
        "icon": "flame",
        "category": "streak",
        "name": {"en": "On Fire", "uz": "Olovdek"},
        "description": {"en": "3-day logging streak", "uz": "3 kunlik streak"},
    },
    {
        "id": "streak_7",
        "icon": "trophy",
        "category": "streak",
        "name": {"en": "Week Warrior", "uz": "Hafta qahramoni"},
        "description": {"en": "7-day logging streak", "uz": "7 kunlik streak"},
    },
    {
        "id": "streak_30",
        "icon": "crown",
        "category": "streak",
        "name": {"en": "Monthly Master", "uz": "Oy ustasi"},
        "description": {"en": "30-day logging streak", "uz": "30 kunlik streak"},
    },
    {
        "id": "streak_100",
        "icon": "star",
        "category": "streak",
        "name": {"en": "Centurion", "uz": "Yuzlik"},
        "description": {"en": "100-day logging streak", "uz": "100 kunlik streak"},
    },
    {
        "id": "meals_10",
        "icon": "zap",
        "category": "logging",
        "name": {"en": "Getting Started", "uz": "Boshlanish"},
        "description": {"en": "Logged 10 meals", "uz": "10 ta ovqat kiritildi"},
    },
    {
        "id": "meals_50",
        "icon": "book",
        "category": "logging",
        "name": {"en": "Dedicated Logger", "uz": "Sodiq kuzatuvchi"},
        "description": {"en": "Logged 50 meals", "uz": "50 ta ovqat kiritildi"},
    },
    {
        "id": "meals_200",
        "icon": "medal",
        "category": "logging",
        "name": {"en": "Logging Legend", "uz": "Afsonaviy kuzatuvchi"},
        "description": {"en": "Logged 200 meals", "uz": "200 ta ovqat kiritildi"},
    },
    {
        "id": "first_friend",
        "icon": "users",
        "category": "social",
        "name": {"en": "Social Butterfly", "uz": "Do'stona"},
        "description": {"en": "Added your first friend", "uz": "Birinchi do'stingizni qo'shdingiz"},
    },
    {
        "id": "weight_goal",
        "icon": "target",
        "category": "milestone",
        "name": {"en": "Goal Crusher", "uz": "Maqsadga erishdi"},
        "description": {"en": "Reached your target weight", "uz": "Maqsad vazningizga yetdingiz"},
    },
    {
        "id": "level_5",
        "icon": "star",
        "category": "milestone",
        "name": {"en": "Rising Star", "uz": "Ko'tarilayotgan yulduz"},
        "description": {"en": "Reached level 5", "uz": "5-darajaga yetdingiz"},
    },
    {
        "id": "level_10",
        "icon": "diamond",
        "category": "milestone",
        "name": {"en": "Elite", "uz": "Elita"},
        "description": {"en": "Reached level 10", "uz": "10-darajaga yetdingiz"},
    },
]

# Meal slot windows as [start_hour, end_hour) in the reference timezone
MEAL_WINDOWS: Dict[str, tuple] = {
    "breakfast": (5, 11),
    "lunch": (11, 16),
    "dinner": (17, 22),
}

ACTIVITY_MULTIPLIERS: Dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}

GOAL_CALORIE_ADJUSTMENT: Dict[str, int] = {
    "lose_weight": -500,
    "maintain": 0,
    "gain_muscle": 500,
}

GRADE_EMOJI: Dict[str, str] = {
    "A": "\U0001F170️",
    "B": "\U0001F171️",
    "C": "\U0001F172️",
    "D": "\U0001F173️",
    "F": "\U0001F4C9",
}
DEFAULT_GRADE_EMOJI = "\U0001F4CA"

SUPPORTED_LANGUAGES = ("uz", "en")
DEFAULT_LANGUAGE = "uz"
