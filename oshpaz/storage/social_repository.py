"""
Friendship and Subscription Repositories.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, List

from ..models.social import Friendship, FriendshipStatus
from ..models.subscription import Subscription
from .repository import DocumentRepository


class FriendshipRepository(DocumentRepository):
    """Directed rows stored as friendships/{user_tg_id}/{friend_tg_id}.json."""

    friendships_dir = "friendships"

    def _path(self, user_tg_id: str, friend_tg_id: str) -> str:
        return f"{self.friendships_dir}/{user_tg_id}/{friend_tg_id}.json"

    async def get(self, user_tg_id: str, friend_tg_id: str) -> Optional[Friendship]:
        return await self._load_model(self._path(user_tg_id, friend_tg_id), Friendship)

    async def save(self, friendship: Friendship) -> Friendship:
        await self._save_model(self._path(friendship.user_tg_id, friendship.friend_tg_id), friendship)
        return friendship

    async def delete(self, user_tg_id: str, friend_tg_id: str) -> bool:
        return await self.storage.delete(self._path(user_tg_id, friend_tg_id))

    async def list_outgoing(self, user_tg_id: str, status: Optional[FriendshipStatus] = None) -> List[Friendship]:
        rows = await self._load_all(f"{self.friendships_dir}/{user_tg_id}", Friendship)
        return [r for r in rows if status is None or r.status == status]

    async def list_incoming(self, friend_tg_id: str, status: Optional[FriendshipStatus] = None) -> List[Friendship]:
        rows = await self._load_all(self.friendships_dir, Friendship, recursive=True)
        return [
            r for r in rows
            if r.friend_tg_id == friend_tg_id and (status is None or r.status == status)
        ]

    async def count_accepted(self, user_tg_id: str) -> int:
        return len(await self.list_outgoing(user_tg_id, status="accepted"))


class SubscriptionRepository(DocumentRepository):
    """One subscription document per user in subscriptions/."""

    subscriptions_dir = "subscriptions"

    def _path(self, tg_id: str) -> str:
        return f"{self.subscriptions_dir}/{tg_id}.json"

    async def get(self, tg_id: str) -> Optional[Subscription]:
        return await self._load_model(self._path(tg_id), Subscription)

    async def save(self, subscription: Subscription) -> Subscription:
        await self._save_model(self._path(subscription.tg_id), subscription)
        return subscription

    async def is_premium(self, tg_id: str, now: Optional[datetime] = None) -> bool:
        subscription = await self.get(tg_id)
        return subscription is not None and subscription.is_premium(now)

    async def grant(self, tg_id: str, days: int, now: Optional[datetime] = None) -> Subscription:
        """
        Grant or extend premium. An active premium period is extended from its
        end date, otherwise the new period starts now.
        """
        now = now or datetime.now(timezone.utc)
        current = await self.get(tg_id)
        if current is not None and current.is_premium(now):
            end = current.end_date
            if end.tzinfo is None:
                end = end.replace(tzinfo=timezone.utc)
            start = current.start_date or now
        else:
            end = now
            start = now
        plan_type = "yearly" if days >= 365 else "monthly"
        subscription = Subscription(
            tg_id=tg_id,
            plan_type=plan_type,
            status="active",
            start_date=start,
            end_date=end + timedelta(days=days),
        )
        return await self.save(subscription)
