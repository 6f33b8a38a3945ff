"""
User Repository - Persistent storage for user documents.
One JSON file per Telegram user in users/, plus lookup indexes for
usernames and referral codes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict

from ..models.user import UserProfile
from .repository import DocumentRepository

logger = logging.getLogger(__name__)


class UserRepository(DocumentRepository):
    """
    Manages persistent storage of user documents.
    Users are never hard-deleted.
    """

    users_dir = "users"
    username_index_path = "indexes/usernames.json"
    referral_index_path = "indexes/referral_codes.json"

    def _user_path(self, tg_id: str) -> str:
        return f"{self.users_dir}/{tg_id}.json"

    async def get(self, tg_id: str) -> Optional[UserProfile]:
        """Get a user by Telegram id, or None if not found."""
        return await self._load_model(self._user_path(str(tg_id)), UserProfile)

    async def save(self, user: UserProfile) -> UserProfile:
        """Write the whole user document and refresh the lookup indexes."""
        user.updated_at = datetime.now(timezone.utc)
        await self._save_model(self._user_path(user.tg_id), user)

        if user.username:
            await self._index_put(self.username_index_path, user.username.lower(), user.tg_id)
        if user.referral_code:
            await self._index_put(self.referral_index_path, user.referral_code.upper(), user.tg_id)
        return user

    async def get_by_username(self, username: str) -> Optional[UserProfile]:
        username = username.lstrip("@").lower()
        index = await self._load_json(self.username_index_path, {})
        tg_id = index.get(username)
        if tg_id is None:
            return None
        user = await self.get(tg_id)
        # The index can lag behind a username change
        if user is None or user.username.lower() != username:
            return None
        return user

    async def get_by_referral_code(self, code: str) -> Optional[UserProfile]:
        code = code.strip().upper()
        index = await self._load_json(self.referral_index_path, {})
        tg_id = index.get(code)
        if tg_id is None:
            return None
        return await self.get(tg_id)

    async def list_all(self) -> List[UserProfile]:
        """List every stored user."""
        return await self._load_all(self.users_dir, UserProfile)

    async def _index_put(self, path: str, key: str, tg_id: str) -> None:
        index: Dict[str, str] = await self._load_json(path, {})
        if index.get(key) == tg_id:
            return
        index[key] = tg_id
        await self._save_json(path, index)
