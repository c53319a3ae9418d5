"""Connection Schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from qipad.schemas.base import CamelModel


class ConnectionCreate(CamelModel):
    recipient_id: UUID
    project_id: UUID | None = None
    message: str | None = Field(None, max_length=1000)


class ConnectionUpdate(CamelModel):
    status: Literal["accepted", "rejected"]


class ConnectionResponse(CamelModel):
    id: UUID
    requester_id: UUID
    recipient_id: UUID
    project_id: UUID | None = None
    status: str
    message: str | None = None
    created_at: datetime
