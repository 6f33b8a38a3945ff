"""
Social API endpoints - friends, requests, referral link and weekly leaderboard.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import ServiceContainer, get_services
from ..models import (
    FriendInfo,
    FriendRequestAccept,
    FriendRequestCreate,
    FriendRequestView,
    LeaderboardEntry,
    ReferralInfo,
    SocialActionResult,
)
from ..utils.auth import get_current_tg_id

router = APIRouter(prefix="/api/social", tags=["social"])


@router.get("/friends", response_model=List[FriendInfo])
async def list_friends(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    return await services.social.get_friends(tg_id)


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def leaderboard(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """Weekly ranking by percent of the calorie goal, cached for a few minutes."""
    return await services.social.get_leaderboard(tg_id)


@router.get("/requests", response_model=List[FriendRequestView])
async def pending_requests(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    return await services.social.get_pending_requests(tg_id)


@router.get("/referral", response_model=ReferralInfo)
async def referral_info(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    info = await services.social.get_referral_info(tg_id)
    if info is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return info


@router.post("/request", response_model=SocialActionResult)
async def send_request(
    body: FriendRequestCreate,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    if not body.referral_code and not body.username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="referralCode or username is required"
        )
    return await services.social.send_request(tg_id, body.referral_code, body.username)


@router.post("/accept")
async def accept_request(
    body: FriendRequestAccept,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    accepted, result = await services.social.accept_request(tg_id, body.from_tg_id)
    if not accepted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friend request not found")
    return {"success": True, "gamification": result.model_dump(by_alias=True)}


@router.delete("/friends/{friend_tg_id}")
async def remove_friend(
    friend_tg_id: str,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    removed = await services.social.remove_friend(tg_id, friend_tg_id)
    return {"success": removed}
