"""Auth and admin routes - register, login, current user, KYC review.

Invariants:
    - Registration grants the joining bonus in the same commit
    - Missing token -> 401, invalid token -> 403
    - Only the admin principal may review KYC; approval grants the bonus once
"""

from decimal import Decimal

from sqlalchemy import select

from qipad.models.project import Document
from qipad.models.wallet import Wallet, WalletTransaction

DEFAULT_PASSWORD = "secret123"


async def test_register_returns_token_and_user(client, test_db):
    response = await client.post("/api/auth/register", json={
        "email": "  Ada@Example.com ",
        "password": "secret123",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "userType": "investor",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["token"]
    assert body["user"]["email"] == "ada@example.com"
    assert body["user"]["userType"] == "investor"
    assert body["user"]["isKycComplete"] is False
    assert "passwordHash" not in body["user"]

    rows = (await test_db.execute(select(WalletTransaction))).scalars().all()
    assert [r.reference_type for r in rows] == ["joining_bonus"]
    balance = (await test_db.execute(select(Wallet.balance))).scalar_one()
    assert Decimal(balance) == Decimal("10")


async def test_register_duplicate_email_conflicts(client, make_user):
    await make_user("taken@example.com")

    response = await client.post("/api/auth/register", json={
        "email": "taken@example.com", "password": "secret123",
        "firstName": "A", "lastName": "B",
    })

    assert response.status_code == 409
    assert response.json()["message"] == "User already exists with this email"


async def test_register_rejects_admin_user_type(client):
    response = await client.post("/api/auth/register", json={
        "email": "x@example.com", "password": "secret123",
        "firstName": "A", "lastName": "B", "userType": "admin",
    })
    assert response.status_code == 400
    assert "message" in response.json()


async def test_login_and_current_user(client, make_user):
    user = await make_user("ada@example.com")

    login = await client.post("/api/auth/login", json={
        "email": "ada@example.com", "password": DEFAULT_PASSWORD,
    })
    assert login.status_code == 200
    token = login.json()["token"]

    me = await client.get("/api/user", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == str(user.id)


async def test_login_wrong_password_is_generic(client, make_user):
    await make_user("ada@example.com")

    wrong = await client.post("/api/auth/login", json={
        "email": "ada@example.com", "password": "nope",
    })
    unknown = await client.post("/api/auth/login", json={
        "email": "nobody@example.com", "password": "nope",
    })

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["message"] == unknown.json()["message"] == "Invalid credentials"


async def test_missing_and_invalid_tokens(client):
    missing = await client.get("/api/user")
    invalid = await client.get("/api/user", headers={"Authorization": "Bearer garbage"})

    assert missing.status_code == 401
    assert missing.json()["message"] == "Access token required"
    assert invalid.status_code == 403
    assert invalid.json()["message"] == "Invalid or expired token"


async def test_admin_login(client, settings):
    ok = await client.post("/api/admin/login", json={
        "username": settings.admin_username, "password": settings.admin_password,
    })
    bad = await client.post("/api/admin/login", json={
        "username": settings.admin_username, "password": "wrong",
    })

    assert ok.status_code == 200
    assert ok.json()["user"]["isAdmin"] is True
    assert bad.status_code == 401


async def test_kyc_requires_admin(client, make_user, auth_headers):
    user = await make_user()

    response = await client.put(
        f"/api/admin/users/{user.id}/kyc",
        json={"kycStatus": "verified"},
        headers=auth_headers(user),
    )

    assert response.status_code == 403
    assert response.json()["message"] == "Admin access required"


async def test_kyc_approval_grants_bonus_once(client, test_db, make_user, admin_headers):
    user = await make_user(balance=0)
    test_db.add(Document(
        user_id=user.id, document_type="identity",
        file_name="id.png", file_path="/objects/uploads/id",
    ))
    await test_db.commit()

    first = await client.put(
        f"/api/admin/users/{user.id}/kyc",
        json={"kycStatus": "verified"}, headers=admin_headers,
    )
    second = await client.put(
        f"/api/admin/users/{user.id}/kyc",
        json={"kycStatus": "verified"}, headers=admin_headers,
    )

    assert first.status_code == 200
    assert first.json()["user"]["isKycComplete"] is True
    assert first.json()["bonusCredited"] == 20
    assert second.json()["bonusCredited"] == 0
    balance = (await test_db.execute(
        select(Wallet.balance).where(Wallet.user_id == user.id),
    )).scalar_one()
    assert Decimal(balance) == Decimal("20")
    status = (await test_db.execute(
        select(Document.status).where(Document.user_id == user.id),
    )).scalar_one()
    assert status == "approved"


async def test_kyc_unknown_user_is_404(client, admin_headers):
    response = await client.put(
        "/api/admin/users/00000000-0000-4000-8000-000000000000/kyc",
        json={"kycStatus": "verified"}, headers=admin_headers,
    )
    assert response.status_code == 404
