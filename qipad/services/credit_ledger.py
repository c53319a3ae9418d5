"""Credit Ledger - wallet reads, cost lookup, balance checks, deductions and grants.

Invariants:
    - Every balance change writes exactly one WalletTransaction (before/after)
    - balance never goes negative: deduct() raises InsufficientCreditsError instead
    - Amount <= 0 raises InvalidAmountError before the wallet is touched
    - Wallets are created lazily (first read, check, deduct or grant)

Design Decisions:
    - commit flag on writes: callers composing a larger transaction
      (community creation, KYC approval) pass commit=False and commit once
    - lock=True reads the wallet with SELECT ... FOR UPDATE; dialects without
      row locks (SQLite) compile it away
    - Costs come from credit_configs when an active row exists, else
      DEFAULT_CREDIT_COSTS; unknown actions cost 0
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.core.domain_types import (
    CreditAction, TransactionType, DEFAULT_CREDIT_COSTS,
)
from qipad.core.errors import InsufficientCreditsError, InvalidAmountError
from qipad.models.credit_config import CreditConfig
from qipad.models.wallet import Wallet, WalletTransaction

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class CreditLedger:
    """Per-request facade over wallets, ledger rows and credit costs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_create_wallet(
        self, user_id: UUID, lock: bool = False,
    ) -> Wallet:
        query = select(Wallet).where(Wallet.user_id == user_id)
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        wallet = result.scalar_one_or_none()
        if wallet is None:
            wallet = Wallet(
                user_id=user_id, balance=_ZERO,
                total_earned=_ZERO, total_spent=_ZERO,
            )
            self.db.add(wallet)
            await self.db.flush()
        return wallet

    async def cost_of(self, action: str) -> Decimal:
        """Configured cost for an action; falls back to the built-in table."""
        result = await self.db.execute(
            select(CreditConfig).where(
                CreditConfig.action == action,
                CreditConfig.is_active.is_(True),
            ),
        )
        config = result.scalar_one_or_none()
        if config is not None:
            return Decimal(config.cost)
        try:
            return DEFAULT_CREDIT_COSTS[CreditAction(action)]
        except ValueError:
            return _ZERO

    async def resolve_amount(
        self, action: str, amount: Decimal | None = None,
    ) -> Decimal:
        # an explicit non-zero amount overrides the action's cost
        if amount:
            return Decimal(amount)
        return await self.cost_of(action)

    async def check(
        self, user_id: UUID, action: str, amount: Decimal | None = None,
    ) -> dict:
        """Pre-flight: can the user afford the action right now?"""
        required = await self.resolve_amount(action, amount)
        wallet = await self.get_or_create_wallet(user_id)
        balance = Decimal(wallet.balance)
        has_enough = balance >= required
        return {
            "has_enough_credits": has_enough,
            "current_balance": balance,
            "required_credits": required,
            "shortfall": _ZERO if has_enough else required - balance,
        }

    async def deduct(
        self,
        user_id: UUID,
        amount: Decimal,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
        commit: bool = True,
    ) -> Wallet:
        """Spend credits. Locks the wallet row for the rest of the transaction."""
        if amount is None or Decimal(amount) <= _ZERO:
            raise InvalidAmountError(amount)
        amount = Decimal(amount)

        wallet = await self.get_or_create_wallet(user_id, lock=True)
        before = Decimal(wallet.balance)
        if before < amount:
            raise InsufficientCreditsError(amount, before)

        wallet.balance = before - amount
        wallet.total_spent = Decimal(wallet.total_spent) + amount
        self.db.add(WalletTransaction(
            user_id=user_id,
            type=TransactionType.SPEND.value,
            amount=amount,
            balance_before=before,
            balance_after=wallet.balance,
            description=description,
            reference_type=reference_type,
            reference_id=reference_id,
        ))
        await self.db.flush()
        if commit:
            await self.db.commit()

        logger.info(
            f"Deducted {amount} credits",
            extra={
                "user_id": str(user_id), "amount": str(amount),
                "action": reference_type,
            },
        )
        return wallet

    async def add(
        self,
        user_id: UUID,
        amount: Decimal,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
        commit: bool = True,
    ) -> Wallet:
        """Grant credits (joining and verification bonuses, refunds)."""
        if amount is None or Decimal(amount) <= _ZERO:
            raise InvalidAmountError(amount)
        amount = Decimal(amount)

        wallet = await self.get_or_create_wallet(user_id, lock=True)
        before = Decimal(wallet.balance)
        wallet.balance = before + amount
        wallet.total_earned = Decimal(wallet.total_earned) + amount
        self.db.add(WalletTransaction(
            user_id=user_id,
            type=TransactionType.EARN.value,
            amount=amount,
            balance_before=before,
            balance_after=wallet.balance,
            description=description,
            reference_type=reference_type,
            reference_id=reference_id,
        ))
        await self.db.flush()
        if commit:
            await self.db.commit()

        logger.info(
            f"Granted {amount} credits",
            extra={
                "user_id": str(user_id), "amount": str(amount),
                "action": reference_type,
            },
        )
        return wallet

    async def transactions(
        self, user_id: UUID, limit: int = 50,
    ) -> list[WalletTransaction]:
        result = await self.db.execute(
            select(WalletTransaction)
            .where(WalletTransaction.user_id == user_id)
            .order_by(WalletTransaction.created_at.desc())
            .limit(limit),
        )
        return list(result.scalars().all())
