"""Marketplace Schemas - innovation projects, bidding, companies and events.

Money fields are accepted as decimals and leave the API as floats.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal
from uuid import UUID

from pydantic import AfterValidator, Field, field_serializer

from qipad.schemas.base import CamelModel


def _not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


Text = Annotated[str, AfterValidator(_not_blank)]


# --- Innovation projects -----------------------------------------

class ProjectCreate(CamelModel):
    title: Text = Field(min_length=1, max_length=200)
    description: Text = Field(min_length=1)
    industry: Text = Field(min_length=1, max_length=100)
    funding_goal: Decimal = Field(gt=0)
    minimum_investment: Decimal = Field(gt=0)
    campaign_duration: int = Field(30, ge=1, le=365)


class ProjectUpdate(CamelModel):
    """Partial update; omitted fields keep their value."""
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1)
    industry: str | None = Field(None, min_length=1, max_length=100)
    funding_goal: Decimal | None = Field(None, gt=0)
    minimum_investment: Decimal | None = Field(None, gt=0)
    campaign_duration: int | None = Field(None, ge=1, le=365)


class ProjectResponse(CamelModel):
    id: UUID
    user_id: UUID
    title: str
    description: str
    industry: str
    funding_goal: Decimal
    minimum_investment: Decimal
    current_funding: Decimal
    campaign_duration: int
    status: str
    created_at: datetime

    @field_serializer("funding_goal", "minimum_investment", "current_funding")
    def money_as_float(self, v: Decimal) -> float:
        return float(v)


class ProjectStatusUpdate(CamelModel):
    status: Literal["approved", "rejected"]


# --- Service-provider bidding ------------------------------------

class BiddingProjectCreate(CamelModel):
    title: Text = Field(min_length=1, max_length=200)
    description: Text = Field(min_length=1)
    category: Text = Field(min_length=1, max_length=100)
    budget: Decimal = Field(gt=0)
    timeline: str = Field(min_length=1, max_length=100)


class BiddingProjectResponse(CamelModel):
    id: UUID
    user_id: UUID
    title: str
    description: str
    category: str
    budget: Decimal
    timeline: str
    status: str
    selected_bid_id: UUID | None = None
    created_at: datetime

    @field_serializer("budget")
    def money_as_float(self, v: Decimal) -> float:
        return float(v)


class BidCreate(CamelModel):
    project_id: UUID
    amount: Decimal = Field(gt=0)
    timeline: str = Field(min_length=1, max_length=100)
    proposal: Text = Field(min_length=1, max_length=5000)


class BidResponse(CamelModel):
    id: UUID
    project_id: UUID
    user_id: UUID
    amount: Decimal
    timeline: str
    proposal: str
    status: str
    created_at: datetime

    @field_serializer("amount")
    def money_as_float(self, v: Decimal) -> float:
        return float(v)


# --- Companies ---------------------------------------------------

class CompanyCreate(CamelModel):
    name: Text = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    industry: str | None = Field(None, max_length=100)


class CompanyResponse(CamelModel):
    id: UUID
    owner_id: UUID
    name: str
    description: str | None = None
    industry: str | None = None
    status: str
    created_at: datetime


# --- Events ------------------------------------------------------

class EventCreate(CamelModel):
    title: Text = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    location: str | None = Field(None, max_length=300)
    starts_at: datetime
    ticket_price: Decimal = Field(Decimal("0"), ge=0)
    max_participants: int | None = Field(None, ge=1)


class EventResponse(CamelModel):
    id: UUID
    organizer_id: UUID
    title: str
    description: str | None = None
    location: str | None = None
    starts_at: datetime
    ticket_price: Decimal
    max_participants: int | None = None
    status: str
    created_at: datetime

    @field_serializer("ticket_price")
    def money_as_float(self, v: Decimal) -> float:
        return float(v)
