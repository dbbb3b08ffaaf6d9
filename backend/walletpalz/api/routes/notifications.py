"""
Notification bell routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from walletpalz.db.session import get_db
from walletpalz.models.user import User
from walletpalz.schemas.notification import NotificationResponse, UnreadCountResponse, NotificationBulkResult
from walletpalz.api.dependencies import get_current_user
from walletpalz.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    limit: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List notifications, newest first."""
    return notification_service.list_notifications(current_user.id, db, limit=limit)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"count": notification_service.unread_count(current_user.id, db)}


@router.post("/read-all", response_model=NotificationBulkResult)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark every unread notification as read."""
    return {"affected": notification_service.mark_all_as_read(current_user.id, db)}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark one notification as read."""
    try:
        return notification_service.mark_as_read(notification_id, current_user.id, db)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("", response_model=NotificationBulkResult)
async def clear_notifications(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete all notifications."""
    return {"affected": notification_service.clear_all(current_user.id, db)}
