"""Notification API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from bloodbridge.api.deps import ensure_authorized, get_current_user, get_db
from bloodbridge.models.notification import Notification
from bloodbridge.models.user import User
from bloodbridge.schemas.notification import MessageResponse, NotificationResponse
from bloodbridge.services import policy
from bloodbridge.services.notifications import (
    get_notifications_for_user,
    mark_all_read,
    mark_read,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _get_notification_or_404(db: Session, notification_id: str) -> Notification:
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("", response_model=list[NotificationResponse])
def get_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get user's notifications."""
    return get_notifications_for_user(db, current_user.id, unread_only=unread_only)


@router.patch("/read-all", response_model=MessageResponse)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark all of the user's notifications as read."""
    mark_all_read(db, current_user.id)
    return MessageResponse(message="All notifications marked as read")


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark a notification as read."""
    notification = _get_notification_or_404(db, notification_id)
    ensure_authorized(current_user, policy.READ_NOTIFICATION, notification)

    mark_read(notification)
    db.commit()
    db.refresh(notification)
    return notification


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a notification."""
    notification = _get_notification_or_404(db, notification_id)
    ensure_authorized(current_user, policy.DELETE_NOTIFICATION, notification)

    db.delete(notification)
    db.commit()
    return MessageResponse(message="Notification removed")
