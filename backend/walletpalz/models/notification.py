"""
Notification model for budget and transaction alerts.
"""
from sqlalchemy import Column, String, Boolean, ForeignKey, Integer, Text, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from walletpalz.db.base import BaseModel
import enum


class NotificationType(str, enum.Enum):
    """Notification kinds."""
    BUDGET_EXCEEDED = "budget_exceeded"
    BUDGET_WARNING = "budget_warning"
    BUDGET_MILESTONE = "budget_milestone"
    TRANSACTION_ALERT = "transaction_alert"


class Notification(BaseModel):
    """In-app notification shown in the user's notification bell."""
    __tablename__ = "notifications"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(30), nullable=False, index=True)
    budget_id = Column(Integer, ForeignKey("budgets.id", ondelete="SET NULL"), nullable=True, index=True)
    tier = Column(String(3), nullable=True)  # "100", "80", "75" or "50" for budget alerts
    meta = Column("metadata", JSON, nullable=False, default=dict)
    read = Column(Boolean, default=False, nullable=False)

    # Relationships
    user = relationship("User", back_populates="notifications")

    # One budget alert per budget and threshold tier; transaction alerts have NULL tier
    __table_args__ = (
        UniqueConstraint("user_id", "budget_id", "type", "tier", name="uq_notification_budget_tier"),
    )
