"""Service test fixtures - async DB, FastAPI test client, seeded members.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test session factory
    - db_manager patched so readiness checks and scripts see the test engine
    - make_user seeds a user plus wallet in one commit

Design Decisions:
    - SQLite in-memory: fast, no external dependency; row locks (FOR UPDATE)
      compile away, which the ledger tolerates
"""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from qipad.config import get_settings
from qipad.core.security import hash_password
from qipad.db.base import Base
from qipad.infrastructure.database import get_db, DatabaseSessionManager
import qipad.infrastructure.database as db_module
import qipad.models  # noqa: F401
from qipad.models.user import User
from qipad.models.wallet import Wallet
from qipad.main import app
from qipad.services.account_service import issue_token

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_db):
    """Factory: insert a user with a wallet holding ``balance`` credits."""
    counter = {"n": 0}

    async def _make(
        email: str | None = None,
        *,
        kyc: bool = False,
        balance: int | str = 0,
        user_type: str = "individual",
        first_name: str = "Test",
    ) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"member{counter['n']}@example.com",
            first_name=first_name,
            last_name="Member",
            user_type=user_type,
            password_hash=hash_password(DEFAULT_PASSWORD),
            is_kyc_complete=kyc,
            kyc_status="verified" if kyc else "pending",
        )
        test_db.add(user)
        await test_db.flush()
        test_db.add(Wallet(
            user_id=user.id,
            balance=Decimal(str(balance)),
            total_earned=Decimal(str(balance)),
            total_spent=Decimal("0"),
        ))
        await test_db.commit()
        await test_db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers(settings):
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(settings, str(user.id))}"}
    return _headers


@pytest.fixture
def admin_headers(settings):
    token = issue_token(settings, "admin", is_admin=True)
    return {"Authorization": f"Bearer {token}"}
