"""
Shared FastAPI dependencies.
"""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from walletpalz.core.security import decode_access_token
from walletpalz.db.session import get_db
from walletpalz.models.user import User
from walletpalz.services.settings_service import SettingsCache, UserPreferences

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the authenticated user from the bearer token."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise unauthorized

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise unauthorized

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise unauthorized
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )
    return user


def get_settings_cache(request: Request) -> SettingsCache:
    """The application's settings cache, created at startup."""
    return request.app.state.settings_cache


def get_user_preferences(
    current_user: User = Depends(get_current_user),
    cache: SettingsCache = Depends(get_settings_cache),
    db: Session = Depends(get_db)
) -> UserPreferences:
    """Current user's settings, read through the cache."""
    return cache.get(db, current_user.id)
