"""Auth Routes - register, login, current user and admin login.

Invariants:
    - Responses never include password hashes (UserResponse has no such field)
    - Admin login is checked against settings, never the users table
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user
from qipad.config import Settings, get_settings
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.schemas.auth import (
    AdminAuthResponse, AdminLoginRequest, AdminUser, AuthResponse,
    LoginRequest, RegisterRequest, UserResponse,
)
from qipad.services.account_service import AccountService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/auth/register", response_model=AuthResponse)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user, token = await AccountService(db, settings).register(body)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/auth/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user, token = await AccountService(db, settings).authenticate(
        body.email, body.password,
    )
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/user", response_model=UserResponse)
async def current_user(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)


@router.post("/admin/login", response_model=AdminAuthResponse)
async def admin_login(
    body: AdminLoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    token = AccountService(db, settings).authenticate_admin(
        body.username, body.password,
    )
    logger.info("Admin logged in", extra={"action": "admin_login"})
    return AdminAuthResponse(token=token, user=AdminUser(username=body.username))
