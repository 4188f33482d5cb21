"""Notification schemas."""
from typing import Any

from pydantic import BaseModel, field_validator


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    priority: str | None
    related_id: str | None
    related_model: str | None
    read: bool
    read_at: str | None
    expires_at: str | None
    created_at: str

    @field_validator("read", mode="before")
    @classmethod
    def int_to_bool(cls, v: Any) -> bool:
        if isinstance(v, int):
            return bool(v)
        return v

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
