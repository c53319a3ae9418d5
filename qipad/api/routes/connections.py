"""Connection Routes."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.schemas.connection import (
    ConnectionCreate, ConnectionResponse, ConnectionUpdate,
)
from qipad.services.connection_service import ConnectionService

router = APIRouter(prefix="/api/connections", tags=["connections"])


@router.get("", response_model=list[ConnectionResponse])
async def list_connections(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    rows = await ConnectionService(db).list_for(user.id)
    return [ConnectionResponse.model_validate(r) for r in rows]


@router.post("", response_model=ConnectionResponse)
async def request_connection(
    body: ConnectionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    connection = await ConnectionService(db).request(user, body)
    return ConnectionResponse.model_validate(connection)


@router.put("/{connection_id}", response_model=ConnectionResponse)
async def respond_to_connection(
    connection_id: UUID,
    body: ConnectionUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    connection = await ConnectionService(db).respond(connection_id, user, body.status)
    return ConnectionResponse.model_validate(connection)
