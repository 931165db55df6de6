# --- File: dormhub/schemas/notification.py ---
"""Notification inbox schemas."""

from __future__ import annotations

from typing import Optional

from dormhub.schemas.common.base import BaseResponseSchema, BaseSchema, TimestampMixin

__all__ = ["NotificationResponse", "UnreadCountResponse", "MarkAllReadResponse"]


class NotificationResponse(BaseResponseSchema, TimestampMixin):
    user_id: int
    type: str
    title: str
    message: str
    is_read: bool
    related_id: Optional[int] = None
    related_type: Optional[str] = None


class UnreadCountResponse(BaseSchema):
    unread_count: int


class MarkAllReadResponse(BaseSchema):
    updated: int
