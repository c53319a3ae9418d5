"""Object Storage - signed upload URLs and visibility (ACL) records.

Invariants:
    - Upload URLs are <base>/uploads/<uuid>?X-Qipad-Expires=<ts>&X-Qipad-Signature=<hex>
    - The signature is HMAC-SHA256 over "PUT\\n<object path>\\n<expires>"
    - normalize_object_path maps a signed URL (query stripped) or an
      "/objects/..." path to "uploads/<id>"; anything else is rejected
    - One ACL row per object path; recording again overwrites the visibility

Design Decisions:
    - The API never receives file bytes: the storage backend verifies the
      signature, this module only signs and records policy
"""

import hashlib
import hmac
import logging
import time
import uuid
from urllib.parse import parse_qs, urlsplit, urlencode
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.config import Settings
from qipad.core.errors import PermissionDeniedError, ValidationError
from qipad.models.object_acl import ObjectAcl

logger = logging.getLogger(__name__)

UPLOAD_DIR = "uploads"


def normalize_object_path(image_url: str) -> str:
    """Reduce an upload URL or /objects/ path to "uploads/<id>"."""
    path = urlsplit(image_url).path
    segments = [s for s in path.split("/") if s]
    if len(segments) < 2 or segments[-2] != UPLOAD_DIR:
        raise ValidationError(
            f"Not an uploaded object URL: {image_url}", field="imageUrl",
        )
    return "/".join(segments[-2:])


def sign_object_path(
    secret: str, object_path: str, expires_at: int, method: str = "PUT",
) -> str:
    message = f"{method}\n{object_path}\n{expires_at}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_upload_url(
    secret: str, upload_url: str, now: float | None = None,
) -> bool:
    """Storage-side check of a signed URL (signature and expiry)."""
    parts = urlsplit(upload_url)
    params = {k: v[0] for k, v in parse_qs(parts.query).items()}
    try:
        expires_at = int(params["X-Qipad-Expires"])
        signature = params["X-Qipad-Signature"]
        object_path = normalize_object_path(upload_url)
    except (KeyError, ValueError, ValidationError):
        return False
    if expires_at < int(now if now is not None else time.time()):
        return False
    expected = sign_object_path(secret, object_path, expires_at)
    return hmac.compare_digest(expected, signature)


class ObjectStorageService:
    """Issues upload URLs and records object visibility."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    def create_upload_url(self, now: float | None = None) -> dict:
        object_path = f"{UPLOAD_DIR}/{uuid.uuid4()}"
        expires_at = int(now if now is not None else time.time()) + (
            self.settings.upload_url_ttl_seconds
        )
        signature = sign_object_path(
            self.settings.jwt_secret, object_path, expires_at,
        )
        query = urlencode({
            "X-Qipad-Expires": expires_at,
            "X-Qipad-Signature": signature,
        })
        base = self.settings.object_storage_base_url.rstrip("/")
        return {
            "upload_url": f"{base}/{object_path}?{query}",
            "object_path": f"/objects/{object_path}",
            "expires_at": expires_at,
        }

    async def set_acl(
        self, image_url: str, visibility: str, owner_id: UUID | None,
    ) -> ObjectAcl:
        object_path = normalize_object_path(image_url)
        result = await self.db.execute(
            select(ObjectAcl).where(ObjectAcl.object_path == object_path),
        )
        acl = result.scalar_one_or_none()
        if acl is None:
            acl = ObjectAcl(object_path=object_path, owner_id=owner_id)
            self.db.add(acl)
        elif acl.owner_id is not None and acl.owner_id != owner_id:
            raise PermissionDeniedError("Object belongs to another user")
        acl.visibility = visibility
        await self.db.commit()
        logger.info(
            f"ACL recorded for {object_path}",
            extra={"action": "object_acl", "user_id": str(owner_id) if owner_id else None},
        )
        return acl
