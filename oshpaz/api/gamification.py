"""
Gamification API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import ServiceContainer, get_services
from ..models import BadgesSeenRequest, GamificationProfile
from ..utils.auth import get_current_tg_id

router = APIRouter(prefix="/api/gamification", tags=["gamification"])


@router.get("/profile", response_model=GamificationProfile)
async def get_profile(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """XP, level progress, streaks and badges."""
    profile = await services.gamification.get_profile(tg_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile


@router.post("/badges/seen")
async def mark_badges_seen(
    body: BadgesSeenRequest,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    updated = await services.gamification.mark_badges_seen(tg_id, body.badge_ids)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"success": True, "updated": updated}
