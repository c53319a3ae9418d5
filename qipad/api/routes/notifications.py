"""Notification Routes - list, mark read, delete (owner-scoped)."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.schemas.notification import NotificationAck, NotificationResponse
from qipad.services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    rows = await NotificationService(db).list_for(user.id)
    return [NotificationResponse.model_validate(r) for r in rows]


@router.put("/{notification_id}/read", response_model=NotificationAck)
async def mark_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await NotificationService(db).mark_read(notification_id, user.id)
    return NotificationAck(message="Notification marked as read")


@router.delete("/{notification_id}", response_model=NotificationAck)
async def delete_notification(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await NotificationService(db).delete(notification_id, user.id)
    return NotificationAck(message="Notification deleted")
