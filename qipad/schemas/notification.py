"""Notification Schemas."""

from datetime import datetime
from uuid import UUID

from qipad.schemas.base import CamelModel


class NotificationResponse(CamelModel):
    id: UUID
    title: str
    message: str
    type: str
    is_read: bool
    created_at: datetime


class NotificationAck(CamelModel):
    message: str
