"""Object Upload Schemas - signed upload URL issue and ACL recording.

Invariants:
    - image_url may be the full signed URL (query string included) or an
      already-normalized "/objects/uploads/<id>" path
"""

from typing import Literal

from pydantic import Field

from qipad.schemas.base import CamelModel


class UploadUrlResponse(CamelModel):
    # wire name is "uploadURL", not the generated "uploadUrl"
    upload_url: str = Field(alias="uploadURL")
    object_path: str
    expires_at: int


class ObjectAclRequest(CamelModel):
    image_url: str = Field(min_length=1, max_length=2048)
    visibility: Literal["public", "private"] = "public"


class ObjectAclResponse(CamelModel):
    object_path: str
    visibility: str
