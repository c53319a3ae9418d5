"""Community Schemas - listing, transactional creation and membership."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from qipad.core.domain_types import CommunityCategory
from qipad.schemas.base import CamelModel


class CommunityCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(None, max_length=2000)
    category: CommunityCategory = CommunityCategory.NETWORKING
    is_private: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class CommunityResponse(CamelModel):
    id: UUID
    name: str
    description: str | None = None
    category: str
    creator_id: UUID
    is_private: bool
    member_count: int = 0
    created_at: datetime


class CommunityCreateResponse(CommunityResponse):
    """Created community plus the wallet effect of the creation charge."""
    credits_deducted: float
    new_balance: float


class MembershipResponse(CamelModel):
    community_id: UUID
    role: str
    joined_at: datetime
    community: CommunityResponse


class JoinResponse(CamelModel):
    message: str = "Joined community successfully"
    role: str
    credits_deducted: float
    new_balance: float


class LeaveResponse(CamelModel):
    message: str = "Left community successfully"
