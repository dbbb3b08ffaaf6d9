"""
Per-user preferences: display currency, theme and notification toggles.
"""
from sqlalchemy import Column, String, ForeignKey, Integer, JSON
from sqlalchemy.orm import relationship
from walletpalz.db.base import BaseModel

DEFAULT_NOTIFICATION_PREFERENCES = {
    "emailAlerts": True,
    "transactionAlerts": True,
    "budgetAlerts": True,
    "weeklyReport": False,
}


class UserSettings(BaseModel):
    """User settings row, upserted on user_id."""
    __tablename__ = "user_settings"

    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)
    currency = Column(String(3), nullable=False, default="USD")  # Base currency for aggregation
    theme = Column(String(20), nullable=False, default="light")
    notifications = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_NOTIFICATION_PREFERENCES))

    # Relationships
    user = relationship("User", back_populates="settings")
