"""Connection Service - request, list and respond to member connections.

Invariants:
    - At most one pending request between two members per project, in
      either direction; answered requests never block a new one
    - Only the recipient may accept or reject, and only while pending
    - Requests to oneself are rejected
"""

import logging
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.core.domain_types import ConnectionStatus
from qipad.core.errors import (
    ConflictError, PermissionDeniedError, ResourceNotFoundError, ValidationError,
)
from qipad.models.connection import Connection
from qipad.models.notification import Notification
from qipad.models.user import User
from qipad.schemas.connection import ConnectionCreate

logger = logging.getLogger(__name__)


class ConnectionService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for(self, user_id: UUID) -> list[Connection]:
        result = await self.db.execute(
            select(Connection)
            .where(or_(
                Connection.requester_id == user_id,
                Connection.recipient_id == user_id,
            ))
            .order_by(Connection.created_at.desc()),
        )
        return list(result.scalars().all())

    async def request(self, requester: User, body: ConnectionCreate) -> Connection:
        if body.recipient_id == requester.id:
            raise ValidationError("Cannot connect to yourself", field="recipientId")
        recipient = await self.db.execute(
            select(User.id).where(User.id == body.recipient_id),
        )
        if recipient.scalar_one_or_none() is None:
            raise ResourceNotFoundError("User", str(body.recipient_id))

        query = select(Connection.id).where(
            Connection.status == ConnectionStatus.PENDING.value,
            or_(
                and_(
                    Connection.requester_id == requester.id,
                    Connection.recipient_id == body.recipient_id,
                ),
                and_(
                    Connection.requester_id == body.recipient_id,
                    Connection.recipient_id == requester.id,
                ),
            ),
        )
        if body.project_id is None:
            query = query.where(Connection.project_id.is_(None))
        else:
            query = query.where(Connection.project_id == body.project_id)
        if (await self.db.execute(query.limit(1))).scalar_one_or_none() is not None:
            raise ConflictError("A pending connection request already exists")

        connection = Connection(
            requester_id=requester.id,
            recipient_id=body.recipient_id,
            project_id=body.project_id,
            message=body.message,
        )
        self.db.add(connection)
        self.db.add(Notification(
            user_id=body.recipient_id,
            title="New connection request",
            message=f"{requester.first_name} {requester.last_name} wants to connect",
            type="connection",
        ))
        await self.db.commit()
        await self.db.refresh(connection)
        logger.info(
            f"Connection requested: {connection.id}",
            extra={"user_id": str(requester.id)},
        )
        return connection

    async def respond(
        self, connection_id: UUID, user: User, status: str,
    ) -> Connection:
        result = await self.db.execute(
            select(Connection).where(Connection.id == connection_id),
        )
        connection = result.scalar_one_or_none()
        if connection is None:
            raise ResourceNotFoundError("Connection", str(connection_id))
        if connection.recipient_id != user.id:
            raise PermissionDeniedError("Only the recipient can respond to this request")
        if connection.status != ConnectionStatus.PENDING.value:
            raise ConflictError(f"Connection already {connection.status}")

        connection.status = ConnectionStatus(status).value
        self.db.add(Notification(
            user_id=connection.requester_id,
            title=f"Connection {connection.status}",
            message=f"{user.first_name} {user.last_name} {connection.status} your request",
            type="connection",
        ))
        await self.db.commit()
        await self.db.refresh(connection)
        return connection
