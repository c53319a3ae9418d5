"""Community routes - the transactional create endpoint and memberships.

Invariants:
    - POST /api/communities charges and creates in one step; 403 without KYC,
      400 without credits, and neither failure changes the wallet
    - Created communities appear in listings with their creator as member
"""

from decimal import Decimal
from uuid import uuid4

from sqlalchemy import select, func

from qipad.models.community import Community
from qipad.models.wallet import Wallet

BODY = {"name": "Founders", "description": "Early-stage", "category": "technology"}


async def _balance(db, user_id) -> Decimal:
    result = await db.execute(select(Wallet.balance).where(Wallet.user_id == user_id))
    return Decimal(result.scalar_one())


async def test_create_returns_community_and_new_balance(client, make_user, auth_headers):
    user = await make_user(kyc=True, balance=150)

    response = await client.post("/api/communities", json=BODY, headers=auth_headers(user))

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Founders"
    assert body["creatorId"] == str(user.id)
    assert body["memberCount"] == 1
    assert body["creditsDeducted"] == 100.0
    assert body["newBalance"] == 50.0


async def test_create_without_kyc_is_403_and_free(client, test_db, make_user, auth_headers):
    user = await make_user(kyc=False, balance=150)

    response = await client.post("/api/communities", json=BODY, headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "KYC_REQUIRED"
    assert await _balance(test_db, user.id) == Decimal("150")


async def test_create_without_credits_is_400(client, test_db, make_user, auth_headers):
    user = await make_user(kyc=True, balance=99)

    response = await client.post("/api/communities", json=BODY, headers=auth_headers(user))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INSUFFICIENT_CREDITS"
    assert await _balance(test_db, user.id) == Decimal("99")
    count = (await test_db.execute(select(func.count(Community.id)))).scalar_one()
    assert count == 0


async def test_create_validates_name(client, make_user, auth_headers):
    user = await make_user(kyc=True, balance=150)

    response = await client.post(
        "/api/communities", json={"name": "   "}, headers=auth_headers(user),
    )

    assert response.status_code == 400


async def test_list_detail_and_memberships(client, make_user, auth_headers):
    creator = await make_user(kyc=True, balance=150)
    joiner = await make_user(balance=20)
    created = await client.post(
        "/api/communities", json=BODY, headers=auth_headers(creator),
    )
    community_id = created.json()["id"]

    join = await client.post(
        f"/api/communities/{community_id}/join", headers=auth_headers(joiner),
    )
    listing = await client.get("/api/communities")
    detail = await client.get(f"/api/communities/{community_id}")
    mine = await client.get("/api/user/communities", headers=auth_headers(joiner))

    assert join.status_code == 200
    assert join.json()["newBalance"] == 10.0
    assert [c["id"] for c in listing.json()] == [community_id]
    assert detail.json()["memberCount"] == 2
    assert mine.json()[0]["role"] == "member"
    assert mine.json()[0]["community"]["name"] == "Founders"


async def test_join_twice_is_409(client, make_user, auth_headers):
    creator = await make_user(kyc=True, balance=150)
    created = await client.post(
        "/api/communities", json=BODY, headers=auth_headers(creator),
    )

    response = await client.post(
        f"/api/communities/{created.json()['id']}/join", headers=auth_headers(creator),
    )

    assert response.status_code == 409


async def test_leave_and_creator_guard(client, make_user, auth_headers):
    creator = await make_user(kyc=True, balance=150)
    joiner = await make_user(balance=20)
    created = await client.post(
        "/api/communities", json=BODY, headers=auth_headers(creator),
    )
    community_id = created.json()["id"]
    await client.post(f"/api/communities/{community_id}/join", headers=auth_headers(joiner))

    creator_leave = await client.post(
        f"/api/communities/{community_id}/leave", headers=auth_headers(creator),
    )
    joiner_leave = await client.post(
        f"/api/communities/{community_id}/leave", headers=auth_headers(joiner),
    )

    assert creator_leave.status_code == 403
    assert joiner_leave.status_code == 200


async def test_unknown_community_is_404(client):
    response = await client.get(f"/api/communities/{uuid4()}")
    assert response.status_code == 404
