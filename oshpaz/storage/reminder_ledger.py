"""
Reminder Ledger - Persisted record of dispatched reminders.
Keys look like "{tg_id}:{category}:{YYYY-MM-DDTHH:MM}" and are grouped in one
file per local day under reminders/ledger/.
"""

from typing import Dict, Set

from .interface import StorageInterface
from .repository import DocumentRepository


class ReminderLedger(DocumentRepository):
    """A key recorded here is never dispatched again, across restarts too."""

    ledger_dir = "reminders/ledger"

    def __init__(self, storage: StorageInterface):
        super().__init__(storage)
        self._days: Dict[str, Set[str]] = {}

    @staticmethod
    def make_key(tg_id: str, category: str, minute: str) -> str:
        return f"{tg_id}:{category}:{minute}"

    @staticmethod
    def _day_of(key: str) -> str:
        # minute stamp is the last segment after the category: YYYY-MM-DDTHH:MM
        minute = key.split(":", 2)[2]
        return minute[:10]

    async def _keys_for_day(self, day: str) -> Set[str]:
        keys = self._days.get(day)
        if keys is None:
            keys = set(await self._load_json(f"{self.ledger_dir}/{day}.json", []))
            self._days = {day: keys}  # only the current day stays in memory
        return keys

    async def contains(self, key: str) -> bool:
        return key in await self._keys_for_day(self._day_of(key))

    async def record(self, key: str) -> None:
        day = self._day_of(key)
        keys = await self._keys_for_day(day)
        keys.add(key)
        await self._save_json(f"{self.ledger_dir}/{day}.json", sorted(keys))
