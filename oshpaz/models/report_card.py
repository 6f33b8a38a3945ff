"""
Daily Report Card Models.
"""

from typing import List, Literal, Optional

from .base import CamelModel

Grade = Literal["A", "B", "C", "D", "F"]
CalorieStatus = Literal["over", "under", "on_target"]
MacroLevel = Literal["good", "low", "high"]


class CalorieScore(CamelModel):
    consumed: int
    goal: int
    status: CalorieStatus
    difference: int


class MacroStatus(CamelModel):
    consumed: float
    status: MacroLevel = "good"


class MacroBalance(CamelModel):
    protein: MacroStatus
    carbs: MacroStatus
    fats: MacroStatus


class DailyReportCard(CamelModel):
    """Once-per-day synthesized nutrition summary."""
    date: str  # YYYY-MM-DD in the reference timezone
    grade: Grade
    grade_emoji: str
    calorie_score: CalorieScore
    macro_balance: Optional[MacroBalance] = None
    highlights: List[str] = []
    improvements: List[str] = []
    tomorrow_tip: str = ""
    streak_ack: str = ""
    detailed_analysis: str = ""
