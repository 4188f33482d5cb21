"""Notification model."""
import uuid
from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text

from bloodbridge.database import Base


class Notification(Base):
    """In-app notification for donors and requesters."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_unread", "user_id", "read"),
        Index("ix_notifications_created", "user_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Notification type: blood_request, donor_response, request_closed, system, ...
    type = Column(String(50), nullable=False)

    # Content
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(10), default="medium")  # high, medium, low

    # Polymorphic reference to the triggering entity
    related_id = Column(String(36))
    related_model = Column(String(50))  # BloodRequest, Donor, Hospital

    # Status
    read = Column(Integer, default=0)  # SQLite boolean
    read_at = Column(String(26))

    # When notification is no longer relevant
    expires_at = Column(String(26))

    # Timestamps
    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
