"""Wallet & Credit Routes - balance, history, pre-flight check and deduction.

Invariants:
    - /credits/check never mutates the balance (it may create an empty wallet)
    - /credits/deduct with a resolved amount <= 0 -> 400 "Invalid credit amount"
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.schemas.credits import (
    CreditCheckRequest, CreditCheckResponse, CreditDeductRequest,
    CreditDeductResponse, WalletResponse, WalletTransactionResponse,
)
from qipad.services.credit_ledger import CreditLedger

router = APIRouter(prefix="/api", tags=["credits"])


@router.get("/wallet", response_model=WalletResponse)
async def get_wallet(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    wallet = await CreditLedger(db).get_or_create_wallet(user.id)
    await db.commit()
    return WalletResponse(
        balance=float(wallet.balance),
        total_earned=float(wallet.total_earned),
        total_spent=float(wallet.total_spent),
    )


@router.get(
    "/wallet/transactions", response_model=list[WalletTransactionResponse],
)
async def list_transactions(
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await CreditLedger(db).transactions(user.id, limit)
    return [WalletTransactionResponse.model_validate(r) for r in rows]


@router.post("/credits/check", response_model=CreditCheckResponse)
async def check_credits(
    body: CreditCheckRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await CreditLedger(db).check(user.id, body.action, body.amount)
    await db.commit()
    return CreditCheckResponse(
        has_enough_credits=result["has_enough_credits"],
        current_balance=float(result["current_balance"]),
        required_credits=float(result["required_credits"]),
        shortfall=float(result["shortfall"]),
    )


@router.post("/credits/deduct", response_model=CreditDeductResponse)
async def deduct_credits(
    body: CreditDeductRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ledger = CreditLedger(db)
    amount = await ledger.resolve_amount(body.action, body.amount)
    wallet = await ledger.deduct(
        user.id, amount,
        description=body.description or f"Credits deducted for {body.action}",
        reference_type=body.reference_type or body.action,
        reference_id=body.reference_id,
    )
    return CreditDeductResponse(
        new_balance=float(wallet.balance), deducted_amount=float(amount),
    )
