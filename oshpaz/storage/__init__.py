"""Storage module - provides interface and implementations for data persistence."""

from .interface import StorageInterface, StorageError
from .local_storage import LocalStorage
from .repository import DocumentRepository
from .user_repository import UserRepository
from .meal_repository import MealRepository
from .social_repository import FriendshipRepository, SubscriptionRepository
from .reminder_ledger import ReminderLedger

__all__ = [
    'StorageInterface', 'StorageError', 'LocalStorage', 'DocumentRepository',
    'UserRepository', 'MealRepository', 'FriendshipRepository',
    'SubscriptionRepository', 'ReminderLedger',
]
