"""Company Routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.schemas.marketplace import CompanyCreate, CompanyResponse
from qipad.services.marketplace_service import CompanyService

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("", response_model=list[CompanyResponse])
async def list_companies(db: AsyncSession = Depends(get_db)):
    return await CompanyService(db).list_companies()


@router.post("", response_model=CompanyResponse)
async def create_company(
    body: CompanyCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await CompanyService(db).create(user, body)
