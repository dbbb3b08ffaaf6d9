"""Models package - Import all models for SQLAlchemy registration."""
from walletpalz.models.user import User
from walletpalz.models.transaction import Transaction, TransactionType, TRANSACTION_CATEGORIES
from walletpalz.models.budget import Budget
from walletpalz.models.notification import Notification, NotificationType
from walletpalz.models.user_settings import UserSettings, DEFAULT_NOTIFICATION_PREFERENCES

__all__ = [
    "User",
    "Transaction",
    "TransactionType",
    "TRANSACTION_CATEGORIES",
    "Budget",
    "Notification",
    "NotificationType",
    "UserSettings",
    "DEFAULT_NOTIFICATION_PREFERENCES",
]
