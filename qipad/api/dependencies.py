"""Request Dependencies - bearer-token principal resolution for protected routes.

Invariants:
    - Missing bearer token -> AuthenticationError (401)
    - Malformed, forged or expired token -> PermissionDeniedError (403)
    - Token for a deleted or suspended user -> AuthenticationError (401)
    - require_admin accepts only the settings-defined admin principal
"""

import logging
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.config import Settings, get_settings
from qipad.core.errors import AuthenticationError, PermissionDeniedError
from qipad.core.security import decode_access_token
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.services.account_service import ADMIN_SUBJECT

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _decode(
    credentials: HTTPAuthorizationCredentials | None, settings: Settings,
) -> dict:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")
    claims = decode_access_token(credentials.credentials, settings.jwt_secret)
    if claims is None:
        raise PermissionDeniedError("Invalid or expired token")
    return claims


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    claims = _decode(credentials, settings)
    try:
        user_id = UUID(str(claims.get("sub")))
    except ValueError:
        raise PermissionDeniedError("Invalid or expired token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or user.status != "active":
        raise AuthenticationError("User not found or inactive")
    return user


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> dict:
    claims = _decode(credentials, settings)
    if claims.get("sub") != ADMIN_SUBJECT or claims.get("is_admin") is not True:
        logger.warning("Non-admin token on admin route", extra={"action": "admin"})
        raise PermissionDeniedError("Admin access required")
    return claims
