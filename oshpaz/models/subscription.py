"""
Subscription Model - Premium plan state per user.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel

PlanType = Literal["free", "monthly", "yearly"]
SubscriptionStatus = Literal["active", "expired", "canceled"]


class Subscription(CamelModel):
    tg_id: str
    plan_type: PlanType = "free"
    status: SubscriptionStatus = "active"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def is_premium(self, now: Optional[datetime] = None) -> bool:
        """Premium means an active paid plan whose end date is still ahead."""
        if self.plan_type == "free" or self.status != "active" or self.end_date is None:
            return False
        now = now or datetime.now(timezone.utc)
        end = self.end_date
        if end.tzinfo is None:
            end = end.replace(tzinfo=timezone.utc)
        return end > now


class SubscriptionView(CamelModel):
    is_premium: bool
    plan_type: PlanType = "free"
    status: SubscriptionStatus = "active"
    end_date: Optional[datetime] = None


class SubscriptionGrant(CamelModel):
    tg_id: str
    days: int = Field(..., gt=0, le=3650)
