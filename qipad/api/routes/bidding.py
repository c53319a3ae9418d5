"""Bidding Routes - service projects open for bids, and the bids themselves."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.schemas.marketplace import (
    BidCreate, BidResponse, BiddingProjectCreate, BiddingProjectResponse,
)
from qipad.services.marketplace_service import BiddingService

router = APIRouter(prefix="/api", tags=["bidding"])


@router.get("/bidding-projects", response_model=list[BiddingProjectResponse])
async def list_bidding_projects(db: AsyncSession = Depends(get_db)):
    return await BiddingService(db).list_projects()


@router.get("/bidding-projects/{project_id}", response_model=BiddingProjectResponse)
async def get_bidding_project(project_id: UUID, db: AsyncSession = Depends(get_db)):
    return await BiddingService(db).get_project(project_id)


@router.post("/bidding-projects", response_model=BiddingProjectResponse)
async def create_bidding_project(
    body: BiddingProjectCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await BiddingService(db).create_project(user, body)


@router.get("/project-bids/{project_id}", response_model=list[BidResponse])
async def list_bids(project_id: UUID, db: AsyncSession = Depends(get_db)):
    return await BiddingService(db).list_bids(project_id)


@router.post("/project-bids", response_model=BidResponse)
async def submit_bid(
    body: BidCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await BiddingService(db).submit_bid(user, body)
