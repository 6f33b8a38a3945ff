"""
Badge Evaluator - fixed rule table of one-time achievements.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..config.constants import BADGE_DEFINITIONS, WEIGHT_GOAL_TOLERANCE_KG
from ..models.user import Badge


@dataclass(frozen=True)
class BadgeStats:
    """Totals the predicates are evaluated against."""
    confirmed_meals: int = 0
    current_streak: int = 0
    level: int = 1
    accepted_friends: int = 0
    weight: Optional[float] = None
    target_weight: Optional[float] = None


def _at_weight_goal(stats: BadgeStats) -> bool:
    if not stats.weight or not stats.target_weight:
        return False
    return abs(stats.weight - stats.target_weight) <= WEIGHT_GOAL_TOLERANCE_KG


BADGE_RULES: Dict[str, Callable[[BadgeStats], bool]] = {
    "first_meal": lambda s: s.confirmed_meals >= 1,
    "streak_3": lambda s: s.current_streak >= 3,
    "streak_7": lambda s: s.current_streak >= 7,
    "streak_30": lambda s: s.current_streak >= 30,
    "streak_100": lambda s: s.current_streak >= 100,
    "meals_10": lambda s: s.confirmed_meals >= 10,
    "meals_50": lambda s: s.confirmed_meals >= 50,
    "meals_200": lambda s: s.confirmed_meals >= 200,
    "first_friend": lambda s: s.accepted_friends >= 1,
    "weight_goal": _at_weight_goal,
    "level_5": lambda s: s.level >= 5,
    "level_10": lambda s: s.level >= 10,
}

_DEFINITIONS = {d["id"]: d for d in BADGE_DEFINITIONS}


def badge_text(badge_id: str, language: str = "en") -> Dict[str, str]:
    """Localized name and description of a badge definition."""
    definition = _DEFINITIONS[badge_id]
    return {
        "name": definition["name"].get(language, definition["name"]["en"]),
        "description": definition["description"].get(language, definition["description"]["en"]),
    }


def evaluate_badges(stats: BadgeStats, unlocked_ids: Iterable[str], now: datetime,
                    language: str = "en") -> List[Badge]:
    """
    Return unlock records for satisfied rules that are not unlocked yet.

    The result depends only on the stats and the unlocked set, never on rule
    order, so re-running with the same input yields nothing new.
    """
    unlocked: Set[str] = set(unlocked_ids)
    new_badges = []
    for definition in BADGE_DEFINITIONS:
        badge_id = definition["id"]
        if badge_id in unlocked or not BADGE_RULES[badge_id](stats):
            continue
        new_badges.append(Badge(
            id=badge_id,
            icon=definition["icon"],
            category=definition["category"],
            unlocked_at=now,
            seen=False,
            **badge_text(badge_id, language),
        ))
    return new_badges


def mark_badges_seen(badges: List[Badge], badge_ids: Iterable[str]) -> int:
    """Flip seen=True for the given ids. Returns how many records changed."""
    wanted = set(badge_ids)
    changed = 0
    for badge in badges:
        if badge.id in wanted and not badge.seen:
            badge.seen = True
            changed += 1
    return changed
