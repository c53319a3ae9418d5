"""Event Routes - listing by start time and KYC-gated creation."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.schemas.marketplace import EventCreate, EventResponse
from qipad.services.marketplace_service import EventService

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=list[EventResponse])
async def list_events(db: AsyncSession = Depends(get_db)):
    return await EventService(db).list_events()


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: UUID, db: AsyncSession = Depends(get_db)):
    return await EventService(db).get(event_id)


@router.post("", response_model=EventResponse)
async def create_event(
    body: EventCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EventService(db).create(user, body)
