"""
Pydantic schemas for Notification entity.
"""
from pydantic import BaseModel, Field, AliasChoices
from typing import Any, Dict
from datetime import datetime


class NotificationResponse(BaseModel):
    """Schema for notification response."""
    id: int
    user_id: int
    title: str
    message: str
    type: str
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("meta", "metadata"))
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    count: int


class NotificationBulkResult(BaseModel):
    """Number of notifications affected by a bulk operation."""
    affected: int
