"""
Subscription API endpoints - premium status and admin grants.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import ServiceContainer, get_services
from ..models import SubscriptionGrant, SubscriptionView
from ..utils.auth import get_current_tg_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


@router.get("", response_model=SubscriptionView)
async def get_subscription(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    subscription = await services.subscriptions.get(tg_id)
    if subscription is None:
        return SubscriptionView(is_premium=False)
    return SubscriptionView(
        is_premium=subscription.is_premium(services.clock.now()),
        plan_type=subscription.plan_type,
        status=subscription.status,
        end_date=subscription.end_date,
    )


@router.post("/grant", response_model=SubscriptionView)
async def grant_subscription(
    body: SubscriptionGrant,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """Grant or extend premium for a user (admins only)."""
    if tg_id not in services.settings.admin_tg_ids:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    if await services.users.get(body.tg_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    subscription = await services.subscriptions.grant(body.tg_id, body.days, services.clock.now())
    logger.info(
        "Premium granted",
        extra={"extra_fields": {"admin": tg_id, "tg_id": body.tg_id, "days": body.days}}
    )
    return SubscriptionView(
        is_premium=subscription.is_premium(services.clock.now()),
        plan_type=subscription.plan_type,
        status=subscription.status,
        end_date=subscription.end_date,
    )
