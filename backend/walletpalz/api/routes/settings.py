"""
User settings routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from walletpalz.db.session import get_db
from walletpalz.models.user import User
from walletpalz.schemas.settings import SettingsResponse, SettingsUpdate
from walletpalz.api.dependencies import get_current_user, get_settings_cache, get_user_preferences
from walletpalz.services.settings_service import SettingsCache, UserPreferences

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SettingsResponse)
async def get_settings(preferences: UserPreferences = Depends(get_user_preferences)):
    """Get the current user's settings (defaults if never saved)."""
    return preferences


@router.put("", response_model=SettingsResponse)
async def update_settings(
    settings_data: SettingsUpdate,
    current_user: User = Depends(get_current_user),
    cache: SettingsCache = Depends(get_settings_cache),
    db: Session = Depends(get_db)
):
    """Save settings. Only provided fields change."""
    return cache.save(db, current_user.id, settings_data.model_dump(exclude_none=True))
