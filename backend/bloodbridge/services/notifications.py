"""Notification creation, fan-out and read tracking."""
import logging
from collections.abc import Iterable
from datetime import datetime

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from bloodbridge.config import get_settings
from bloodbridge.models.notification import Notification

logger = logging.getLogger(__name__)


def default_expiry(now: datetime | None = None) -> str:
    """Expiry stamp for a new notification (configured TTL from now)."""
    if now is None:
        now = datetime.utcnow()
    return (now + relativedelta(days=get_settings().notification_ttl_days)).isoformat()


def create_notification(
    db: Session,
    user_id: str,
    notification_type: str,
    title: str,
    message: str,
    related_id: str | None = None,
    related_model: str | None = None,
    priority: str = "medium",
    expires_at: str | None = None,
) -> Notification:
    """Create a single in-app notification."""
    notification = Notification(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        related_id=related_id,
        related_model=related_model,
        priority=priority,
        expires_at=expires_at or default_expiry(),
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def fan_out_notifications(
    db: Session,
    user_ids: Iterable[str],
    notification_type: str,
    title: str,
    message: str,
    related_id: str | None = None,
    related_model: str | None = None,
    priority: str = "medium",
) -> list[Notification]:
    """Create one notification per recipient in a single batch write.

    Recipients are not de-duplicated across calls. A failed commit
    propagates to the caller; nothing already committed is rolled back.
    """
    expires_at = default_expiry()
    notifications = [
        Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            related_id=related_id,
            related_model=related_model,
            priority=priority,
            expires_at=expires_at,
        )
        for user_id in user_ids
    ]
    if not notifications:
        return []

    db.add_all(notifications)
    db.commit()
    logger.info(f"Created {len(notifications)} '{notification_type}' notifications")
    return notifications


def get_notifications_for_user(
    db: Session,
    user_id: str,
    unread_only: bool = False,
    limit: int | None = None,
) -> list[Notification]:
    """Most recent notifications for a user."""
    if limit is None:
        limit = get_settings().notification_page_size

    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read == 0)
    return query.order_by(Notification.created_at.desc()).limit(limit).all()


def mark_read(notification: Notification) -> Notification:
    """Flip a notification to read, stamping read_at the first time."""
    notification.read = 1
    if not notification.read_at:
        notification.read_at = datetime.utcnow().isoformat()
    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    """Mark every unread notification of a user as read. Returns the count."""
    now = datetime.utcnow().isoformat()
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read == 0,
    ).update(
        {"read": 1, "read_at": now},
        synchronize_session=False,
    )
    db.commit()
    return updated
