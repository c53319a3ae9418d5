"""Account Service - registration, credential checks, token issue and KYC review.

Invariants:
    - Registration creates the user, its wallet and the joining-bonus ledger row
      in one commit
    - Login failures never reveal whether the email exists ("Invalid credentials")
    - Setting KYC to "verified" flips is_kyc_complete, approves the user's
      documents and grants the verification bonus once per transition
    - Admin credentials come from settings; the admin principal has no users row

Design Decisions:
    - Tokens carry {"sub": <user id>} for members and {"sub": "admin",
      "is_admin": true} for the platform admin
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.config import Settings
from qipad.core.domain_types import KycStatus
from qipad.core.errors import (
    AuthenticationError, ConflictError, ResourceNotFoundError,
)
from qipad.core.security import (
    create_access_token, hash_password, verify_password,
)
from qipad.models.project import Document
from qipad.models.user import User
from qipad.schemas.auth import RegisterRequest
from qipad.services.credit_ledger import CreditLedger

logger = logging.getLogger(__name__)

ADMIN_SUBJECT = "admin"


def issue_token(settings: Settings, subject: str, **claims) -> str:
    return create_access_token(
        {"sub": subject, **claims},
        settings.jwt_secret,
        settings.access_token_expire_minutes * 60,
    )


class AccountService:
    """Member accounts and admin KYC moderation."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings
        self.ledger = CreditLedger(db)

    async def get_user(self, user_id: UUID) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise ResourceNotFoundError("User", str(user_id))
        return user

    async def register(self, body: RegisterRequest) -> tuple[User, str]:
        existing = await self.db.execute(
            select(User.id).where(User.email == body.email),
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("User already exists with this email")

        user = User(
            email=body.email,
            first_name=body.first_name,
            last_name=body.last_name,
            phone=body.phone,
            user_type=body.user_type,
            password_hash=hash_password(body.password),
        )
        self.db.add(user)
        await self.db.flush()

        if self.settings.joining_bonus > 0:
            await self.ledger.add(
                user.id, Decimal(self.settings.joining_bonus),
                description="Joining bonus - Welcome to Qipad!",
                reference_type="joining_bonus",
                reference_id=f"registration-{user.id}",
                commit=False,
            )
        else:
            await self.ledger.get_or_create_wallet(user.id)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info("User registered", extra={"user_id": str(user.id)})
        return user, issue_token(self.settings, str(user.id))

    async def authenticate(self, email: str, password: str) -> tuple[User, str]:
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return user, issue_token(self.settings, str(user.id))

    def authenticate_admin(self, username: str, password: str) -> str:
        if not (
            username == self.settings.admin_username
            and password == self.settings.admin_password
        ):
            logger.warning("Rejected admin login", extra={"action": "admin_login"})
            raise AuthenticationError("Invalid admin credentials")
        return issue_token(self.settings, ADMIN_SUBJECT, is_admin=True)

    async def set_kyc_status(
        self, user_id: UUID, kyc_status: str,
    ) -> tuple[User, Decimal]:
        """Apply an admin KYC decision; returns (user, bonus credited)."""
        user = await self.get_user(user_id)
        was_verified = user.kyc_status == KycStatus.VERIFIED.value
        verified = kyc_status == KycStatus.VERIFIED.value

        user.kyc_status = kyc_status
        user.is_kyc_complete = verified

        bonus = Decimal("0")
        if verified and not was_verified:
            await self.db.execute(
                update(Document)
                .where(Document.user_id == user_id)
                .values(status="approved", is_verified=True),
            )
            if self.settings.kyc_verification_bonus > 0:
                bonus = Decimal(self.settings.kyc_verification_bonus)
                await self.ledger.add(
                    user_id, bonus,
                    description="Account verification bonus - Thank you for completing KYC!",
                    reference_type="verification_bonus",
                    reference_id=str(user_id),
                    commit=False,
                )
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(
            f"KYC status set to {kyc_status}",
            extra={"user_id": str(user_id), "action": "kyc_review"},
        )
        return user, bonus
