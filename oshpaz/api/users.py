"""
User API endpoints - profile, calorie goal, weight and today's stats.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..core.profile import resolve_daily_goal
from ..dependencies import ServiceContainer, get_services
from ..models import (
    DailyStats,
    GoalUpdate,
    ProfileUpdate,
    UserProfile,
    WeightEntry,
    WeightLog,
    WeightLogResponse,
)
from ..utils.auth import get_current_tg_id

router = APIRouter(prefix="/api/user", tags=["user"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("/me", response_model=UserProfile)
async def get_me(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    user = await services.profiles.get(tg_id)
    if user is None:
        raise _not_found()
    return user


@router.put("/me/profile", response_model=UserProfile)
async def update_profile(
    update: ProfileUpdate,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """
    Update profile fields. Once gender, age, height, weight, activity level and
    goal are all known the daily calorie goal is recalculated.
    """
    user = await services.profiles.update_profile(tg_id, update)
    if user is None:
        raise _not_found()
    return user


@router.put("/me/goal", response_model=UserProfile)
async def update_goal(
    body: GoalUpdate,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """Set the daily calorie goal explicitly (1000-5000 kcal)."""
    user = await services.profiles.update_daily_goal(tg_id, body.goal)
    if user is None:
        raise _not_found()
    return user


@router.post("/me/weight", response_model=WeightLogResponse)
async def log_weight(
    body: WeightLog,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    user, result = await services.profiles.log_weight(tg_id, body.weight)
    if user is None:
        raise _not_found()
    return WeightLogResponse(user=user, gamification=result)


@router.get("/me/weight-history", response_model=List[WeightEntry])
async def weight_history(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    return await services.profiles.get_weight_history(tg_id)


@router.get("/me/stats/today", response_model=DailyStats)
async def today_stats(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    user = await services.profiles.get(tg_id)
    if user is None:
        raise _not_found()
    return await services.nutrition.get_daily_stats(tg_id, resolve_daily_goal(user))
