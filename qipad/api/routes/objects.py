"""Object Routes - signed upload URLs and ACL recording for uploaded images."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user
from qipad.config import Settings, get_settings
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.schemas.upload import (
    ObjectAclRequest, ObjectAclResponse, UploadUrlResponse,
)
from qipad.services.object_storage import ObjectStorageService

router = APIRouter(prefix="/api/objects", tags=["objects"])


@router.post("/upload", response_model=UploadUrlResponse)
async def create_upload_url(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    issued = ObjectStorageService(db, settings).create_upload_url()
    return UploadUrlResponse(**issued)


@router.post("/acl", response_model=ObjectAclResponse)
async def set_object_acl(
    body: ObjectAclRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    acl = await ObjectStorageService(db, settings).set_acl(
        body.image_url, body.visibility, user.id,
    )
    return ObjectAclResponse(
        object_path=f"/objects/{acl.object_path}", visibility=acl.visibility,
    )
