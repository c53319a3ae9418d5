"""Community Routes - list, transactional create, memberships, join and leave.

Invariants:
    - POST /api/communities is the only write path for creation; KYC, credit
      deduction, insert and creator membership commit together or not at all
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user
from qipad.infrastructure.database import get_db
from qipad.models.community import Community
from qipad.models.user import User
from qipad.schemas.community import (
    CommunityCreate, CommunityCreateResponse, CommunityResponse,
    JoinResponse, LeaveResponse, MembershipResponse,
)
from qipad.services.community_service import CommunityService

router = APIRouter(prefix="/api", tags=["communities"])


async def _to_response(
    service: CommunityService, community: Community,
) -> CommunityResponse:
    return CommunityResponse(
        id=community.id,
        name=community.name,
        description=community.description,
        category=community.category,
        creator_id=community.creator_id,
        is_private=community.is_private,
        member_count=await service.member_count(community.id),
        created_at=community.created_at,
    )


@router.get("/communities", response_model=list[CommunityResponse])
async def list_communities(db: AsyncSession = Depends(get_db)):
    service = CommunityService(db)
    return [
        await _to_response(service, c)
        for c in await service.list_communities()
    ]


@router.post("/communities", response_model=CommunityCreateResponse)
async def create_community(
    body: CommunityCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = CommunityService(db)
    community, cost, new_balance = await service.create_community(user, body)
    base = await _to_response(service, community)
    return CommunityCreateResponse(
        **base.model_dump(),
        credits_deducted=float(cost),
        new_balance=float(new_balance),
    )


@router.get("/communities/{community_id}", response_model=CommunityResponse)
async def get_community(community_id: UUID, db: AsyncSession = Depends(get_db)):
    service = CommunityService(db)
    return await _to_response(service, await service.get_community(community_id))


@router.get("/user/communities", response_model=list[MembershipResponse])
async def my_communities(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    service = CommunityService(db)
    memberships = []
    for member in await service.list_memberships(user.id):
        community = await service.get_community(member.community_id)
        memberships.append(MembershipResponse(
            community_id=member.community_id,
            role=member.role,
            joined_at=member.joined_at,
            community=await _to_response(service, community),
        ))
    return memberships


@router.post("/communities/{community_id}/join", response_model=JoinResponse)
async def join_community(
    community_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    member, cost, new_balance = await CommunityService(db).join(community_id, user)
    return JoinResponse(
        role=member.role,
        credits_deducted=float(cost),
        new_balance=float(new_balance),
    )


@router.post("/communities/{community_id}/leave", response_model=LeaveResponse)
async def leave_community(
    community_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CommunityService(db).leave(community_id, user)
    return LeaveResponse()
