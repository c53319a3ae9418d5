"""Credit and Wallet Schemas - balance reads, pre-flight checks and deductions.

Invariants:
    - action is free text: unknown actions cost 0 unless an explicit amount is sent
    - shortfall is 0 whenever has_enough_credits is true
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field

from qipad.schemas.base import CamelModel


class WalletResponse(CamelModel):
    balance: float
    total_earned: float
    total_spent: float


class WalletTransactionResponse(CamelModel):
    id: UUID
    type: str
    amount: float
    balance_before: float
    balance_after: float
    description: str | None = None
    reference_type: str | None = None
    reference_id: str | None = None
    status: str
    created_at: datetime


class CreditCheckRequest(CamelModel):
    action: str = Field(min_length=1, max_length=50)
    amount: Decimal | None = None


class CreditCheckResponse(CamelModel):
    has_enough_credits: bool
    current_balance: float
    required_credits: float
    shortfall: float


class CreditDeductRequest(CamelModel):
    action: str = Field(min_length=1, max_length=50)
    amount: Decimal | None = None
    description: str | None = Field(None, max_length=500)
    reference_type: str | None = Field(None, max_length=50)
    reference_id: str | None = Field(None, max_length=100)


class CreditDeductResponse(CamelModel):
    success: bool = True
    new_balance: float
    deducted_amount: float
