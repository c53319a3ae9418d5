"""Admin Routes - KYC moderation (admin principal only)."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import require_admin
from qipad.config import Settings, get_settings
from qipad.infrastructure.database import get_db
from qipad.schemas.auth import KycUpdateRequest, KycUpdateResponse, UserResponse
from qipad.services.account_service import AccountService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.put("/users/{user_id}/kyc", response_model=KycUpdateResponse)
async def update_kyc(
    user_id: UUID,
    body: KycUpdateRequest,
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user, bonus = await AccountService(db, settings).set_kyc_status(
        user_id, body.kyc_status,
    )
    return KycUpdateResponse(
        user=UserResponse.model_validate(user), bonus_credited=float(bonus),
    )
