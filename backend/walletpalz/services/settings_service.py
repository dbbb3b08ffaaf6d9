"""
User settings service with a read-through cache.

Settings are read by every page that aggregates money (base currency) and
by the notification path (alert toggles). ``SettingsCache`` keeps the last
loaded value per user and is invalidated whenever settings are saved.
"""
from sqlalchemy.orm import Session
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Optional
import logging
from walletpalz.core.config import settings as app_settings
from walletpalz.models.user_settings import UserSettings, DEFAULT_NOTIFICATION_PREFERENCES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserPreferences:
    """Snapshot of a user's settings handed to services as an explicit parameter."""
    currency: str
    theme: str = "light"
    notifications: Dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_NOTIFICATION_PREFERENCES))


def default_preferences() -> UserPreferences:
    return UserPreferences(currency=app_settings.DEFAULT_CURRENCY.upper())


def get_user_settings(db: Session, user_id: int) -> UserPreferences:
    """Load stored settings, falling back to defaults for users who never saved any."""
    row = db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
    if not row:
        return default_preferences()
    notifications = dict(DEFAULT_NOTIFICATION_PREFERENCES)
    notifications.update(row.notifications or {})
    return UserPreferences(
        currency=row.currency or app_settings.DEFAULT_CURRENCY.upper(),
        theme=row.theme or "light",
        notifications=notifications,
    )


def save_user_settings(db: Session, user_id: int, changes: Dict) -> UserPreferences:
    """Upsert settings on user_id. Notification toggles are merged, not replaced."""
    row = db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
    if not row:
        row = UserSettings(
            user_id=user_id,
            currency=app_settings.DEFAULT_CURRENCY.upper(),
            theme="light",
            notifications=dict(DEFAULT_NOTIFICATION_PREFERENCES),
        )
        db.add(row)

    if changes.get("currency"):
        row.currency = changes["currency"]
    if changes.get("theme"):
        row.theme = changes["theme"]
    if changes.get("notifications"):
        merged = dict(DEFAULT_NOTIFICATION_PREFERENCES)
        merged.update(row.notifications or {})
        merged.update(changes["notifications"])
        # Reassign so the JSON column is flagged as modified
        row.notifications = merged

    db.commit()
    db.refresh(row)
    logger.info(f"Saved settings for user {user_id}")
    return get_user_settings(db, user_id)


class SettingsCache:
    """Read-through cache of UserPreferences keyed by user id."""

    def __init__(self):
        self._entries: Dict[int, UserPreferences] = {}
        self._lock = Lock()

    def get(self, db: Session, user_id: int) -> UserPreferences:
        with self._lock:
            cached = self._entries.get(user_id)
        if cached is not None:
            return cached
        preferences = get_user_settings(db, user_id)
        with self._lock:
            self._entries[user_id] = preferences
        return preferences

    def save(self, db: Session, user_id: int, changes: Dict) -> UserPreferences:
        """Persist changes and invalidate the cached entry."""
        preferences = save_user_settings(db, user_id, changes)
        self.invalidate(user_id)
        return preferences

    def invalidate(self, user_id: Optional[int] = None):
        with self._lock:
            if user_id is None:
                self._entries.clear()
            else:
                self._entries.pop(user_id, None)
