"""Notification Service - a user's inbox; every operation is owner-scoped."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.core.errors import ResourceNotFoundError
from qipad.models.notification import Notification


class NotificationService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for(self, user_id: UUID) -> list[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc()),
        )
        return list(result.scalars().all())

    async def _owned(self, notification_id: UUID, user_id: UUID) -> Notification:
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            ),
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            # another user's notification is indistinguishable from a missing one
            raise ResourceNotFoundError("Notification", str(notification_id))
        return notification

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        notification = await self._owned(notification_id, user_id)
        notification.is_read = True
        await self.db.commit()
        return notification

    async def delete(self, notification_id: UUID, user_id: UUID) -> None:
        notification = await self._owned(notification_id, user_id)
        await self.db.delete(notification)
        await self.db.commit()
