"""
User routes.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from walletpalz.db.session import get_db
from walletpalz.schemas.user import UserResponse, UserUpdate
from walletpalz.models.user import User
from walletpalz.api.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_current_user(
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update the current user's profile."""
    if user_data.full_name is not None:
        current_user.full_name = user_data.full_name
        db.commit()
        db.refresh(current_user)
        logger.info(f"Updated profile for user {current_user.id}")
    return current_user
