"""Community Service - transactional creation, join and leave.

Invariants:
    - create_community is all-or-nothing: KYC check, cost lookup, wallet lock,
      deduction, community insert and creator membership share one transaction
    - Any failure after the deduction rolls the whole transaction back, so the
      wallet balance is unchanged
    - A user is a member of a community at most once (ConflictError otherwise)
    - The creator cannot leave their own community

Design Decisions:
    - KYC is checked before the wallet is read: an unverified user never has
      credits touched, not even a lazily created wallet
    - join charges community_join credits in the same transaction as the insert
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.core.domain_types import CreditAction, MemberRole
from qipad.core.errors import (
    ConflictError, KycRequiredError, PermissionDeniedError, ResourceNotFoundError,
)
from qipad.models.community import Community, CommunityMember
from qipad.models.user import User
from qipad.schemas.community import CommunityCreate
from qipad.services.credit_ledger import CreditLedger

logger = logging.getLogger(__name__)


class CommunityService:
    """Community writes that touch the wallet."""

    def __init__(self, db: AsyncSession, ledger: CreditLedger | None = None):
        self.db = db
        self.ledger = ledger or CreditLedger(db)

    async def create_community(
        self, user: User, body: CommunityCreate,
    ) -> tuple[Community, Decimal, Decimal]:
        """Create a community charged to ``user``.

        Returns (community, credits_deducted, new_balance). Raises
        KycRequiredError, InsufficientCreditsError or any persistence error;
        in every failure case nothing is committed.
        """
        if not user.is_kyc_complete:
            raise KycRequiredError("create communities")

        try:
            cost = await self.ledger.cost_of(CreditAction.COMMUNITY_CREATE.value)
            community = Community(
                name=body.name,
                description=body.description,
                category=body.category.value,
                creator_id=user.id,
                is_private=body.is_private,
            )
            self.db.add(community)
            await self.db.flush()

            wallet = None
            if cost > 0:
                wallet = await self.ledger.deduct(
                    user.id, cost,
                    description=f"Created community: {body.name}",
                    reference_type=CreditAction.COMMUNITY_CREATE.value,
                    reference_id=str(community.id),
                    commit=False,
                )
            self.db.add(CommunityMember(
                community_id=community.id,
                user_id=user.id,
                role=MemberRole.CREATOR.value,
            ))
            await self.db.flush()
            if wallet is None:
                wallet = await self.ledger.get_or_create_wallet(user.id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(community)
        logger.info(
            f"Community created: {community.id}",
            extra={"user_id": str(user.id), "amount": str(cost)},
        )
        return community, cost, Decimal(wallet.balance)

    async def get_community(self, community_id: UUID) -> Community:
        result = await self.db.execute(
            select(Community).where(Community.id == community_id),
        )
        community = result.scalar_one_or_none()
        if community is None:
            raise ResourceNotFoundError("Community", str(community_id))
        return community

    async def list_communities(self) -> list[Community]:
        result = await self.db.execute(
            select(Community).order_by(Community.created_at.desc()),
        )
        return list(result.scalars().all())

    async def list_memberships(self, user_id: UUID) -> list[CommunityMember]:
        result = await self.db.execute(
            select(CommunityMember)
            .where(CommunityMember.user_id == user_id)
            .order_by(CommunityMember.joined_at.desc()),
        )
        return list(result.scalars().all())

    async def member_count(self, community_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(CommunityMember.id))
            .where(CommunityMember.community_id == community_id),
        )
        return int(result.scalar_one())

    async def _membership(
        self, community_id: UUID, user_id: UUID,
    ) -> CommunityMember | None:
        result = await self.db.execute(
            select(CommunityMember).where(
                CommunityMember.community_id == community_id,
                CommunityMember.user_id == user_id,
            ),
        )
        return result.scalar_one_or_none()

    async def join(
        self, community_id: UUID, user: User,
    ) -> tuple[CommunityMember, Decimal, Decimal]:
        """Join and pay the community_join cost; returns (member, cost, new_balance)."""
        await self.get_community(community_id)
        if await self._membership(community_id, user.id) is not None:
            raise ConflictError("Already a member of this community")

        try:
            cost = await self.ledger.cost_of(CreditAction.COMMUNITY_JOIN.value)
            if cost > 0:
                wallet = await self.ledger.deduct(
                    user.id, cost,
                    description="Joined community",
                    reference_type=CreditAction.COMMUNITY_JOIN.value,
                    reference_id=str(community_id),
                    commit=False,
                )
            else:
                wallet = await self.ledger.get_or_create_wallet(user.id)
            member = CommunityMember(
                community_id=community_id,
                user_id=user.id,
                role=MemberRole.MEMBER.value,
            )
            self.db.add(member)
            await self.db.flush()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        return member, cost, Decimal(wallet.balance)

    async def leave(self, community_id: UUID, user: User) -> None:
        member = await self._membership(community_id, user.id)
        if member is None:
            raise ResourceNotFoundError("Membership", str(community_id))
        if member.role == MemberRole.CREATOR.value:
            raise PermissionDeniedError("The creator cannot leave their own community")
        await self.db.delete(member)
        await self.db.commit()
