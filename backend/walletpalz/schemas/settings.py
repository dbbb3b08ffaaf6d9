"""
Pydantic schemas for user settings.
"""
from pydantic import BaseModel, field_validator
from typing import Dict, Optional
from walletpalz.services.fx_service import normalize_currency

THEMES = ("light", "dark")


class NotificationPreferences(BaseModel):
    """Notification toggles."""
    emailAlerts: bool = True
    transactionAlerts: bool = True
    budgetAlerts: bool = True
    weeklyReport: bool = False


class SettingsResponse(BaseModel):
    currency: str
    theme: str
    notifications: NotificationPreferences

    class Config:
        from_attributes = True


class SettingsUpdate(BaseModel):
    """Partial settings update. Omitted notification toggles keep their value."""
    currency: Optional[str] = None
    theme: Optional[str] = None
    notifications: Optional[Dict[str, bool]] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return normalize_currency(v) if v is not None else v

    @field_validator("theme")
    @classmethod
    def validate_theme(cls, v):
        if v is not None and v not in THEMES:
            raise ValueError(f"Theme must be one of: {', '.join(THEMES)}")
        return v

    @field_validator("notifications")
    @classmethod
    def validate_notifications(cls, v):
        if v is None:
            return v
        unknown = set(v) - set(NotificationPreferences.model_fields)
        if unknown:
            raise ValueError(f"Unknown notification preferences: {', '.join(sorted(unknown))}")
        return v
