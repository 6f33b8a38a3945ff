"""
Meal API endpoints - analysis, confirmation, editing and history.
"""

import base64
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from ..core import food_analysis
from ..core.profile import resolve_daily_goal
from ..dependencies import ServiceContainer, get_services
from ..models import (
    DailyStats,
    Meal,
    MealAnalysisResponse,
    MealAnalytics,
    MealConfirmResponse,
    MealUpdate,
)
from ..utils.auth import get_current_tg_id

router = APIRouter(prefix="/api/meals", tags=["meals"])

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/jpg", "image/webp"}

ANALYSIS_ERROR_STATUS = {
    food_analysis.NOT_FOOD: status.HTTP_422_UNPROCESSABLE_ENTITY,
    food_analysis.ANALYSIS_FAILED: status.HTTP_502_BAD_GATEWAY,
    food_analysis.LLM_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    food_analysis.NOT_CONFIGURED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _meal_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal not found")


async def _daily_goal(services: ServiceContainer, tg_id: str) -> int:
    return resolve_daily_goal(await services.profiles.get(tg_id))


@router.get("/today", response_model=List[Meal])
async def today_meals(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """Confirmed meals of today, newest first."""
    return await services.nutrition.get_day_meals(tg_id)


@router.get("/history", response_model=List[Meal])
async def meals_by_date(
    day: date = Query(..., alias="date"),
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """All meals of a day (YYYY-MM-DD), pending ones included."""
    return await services.meal_service.get_meals_by_date(tg_id, day)


@router.get("/stats/7days", response_model=List[DailyStats])
async def last_7_days(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    return await services.nutrition.get_last_7_days(tg_id, await _daily_goal(services, tg_id))


@router.get("/recent", response_model=List[Meal])
async def recent_meals(
    limit: int = Query(10, ge=1, le=50),
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    return await services.nutrition.get_recent_meals(tg_id, limit)


@router.get("/analytics", response_model=MealAnalytics)
async def analytics(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    return await services.nutrition.get_analytics(tg_id)


@router.post("/analyze", response_model=MealAnalysisResponse, status_code=status.HTTP_201_CREATED)
async def analyze_meal(
    image: Optional[UploadFile] = File(None),
    text: Optional[str] = Form(None),
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """
    Analyze a food photo or a text description and save it as a pending meal.

    Free users are limited to a few analyses per day.
    """
    user = await services.profiles.get(tg_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    allowance = await services.profiles.scan_allowance(user)
    if not allowance.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Daily scan limit reached"
        )

    if image is not None:
        if image.content_type not in ALLOWED_IMAGE_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported image type: {image.content_type}"
            )
        image_base64 = base64.b64encode(await image.read()).decode("utf-8")
        result = await services.analyzer.analyze_image(image_base64, image.content_type)
    elif text and text.strip():
        result = await services.analyzer.analyze_text(text.strip())
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either an image or a text description is required"
        )

    if not result.success:
        raise HTTPException(
            status_code=ANALYSIS_ERROR_STATUS.get(result.error, status.HTTP_502_BAD_GATEWAY),
            detail=result.error,
        )

    scans_left = await services.profiles.record_scan(user)
    meal = await services.meal_service.save_pending_meal(tg_id, result.data)
    return MealAnalysisResponse(meal=meal, nutrition=result.data, scans_left=scans_left)


@router.get("/{meal_id}", response_model=Meal)
async def get_meal(
    meal_id: str,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    meal = await services.meal_service.get_meal(tg_id, meal_id)
    if meal is None:
        raise _meal_not_found()
    return meal


@router.put("/{meal_id}", response_model=Meal)
async def update_meal(
    meal_id: str,
    update: MealUpdate,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    meal = await services.meal_service.update_meal(tg_id, meal_id, update)
    if meal is None:
        raise _meal_not_found()
    return meal


@router.delete("/{meal_id}")
async def delete_meal(
    meal_id: str,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    if not await services.meal_service.delete_meal(tg_id, meal_id):
        raise _meal_not_found()
    return {"success": True}


@router.post("/{meal_id}/confirm", response_model=MealConfirmResponse)
async def confirm_meal(
    meal_id: str,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """Confirm a pending meal; XP, streak and badges are applied once."""
    confirmed = await services.meal_service.confirm_meal(tg_id, meal_id)
    if confirmed is None:
        raise _meal_not_found()
    meal, result = confirmed
    stats = await services.nutrition.get_daily_stats(tg_id, await _daily_goal(services, tg_id))
    return MealConfirmResponse(meal=meal, stats=stats, gamification=result)
