"""Marketplace routes - projects, bidding, companies and events.

Invariants:
    - Project, bid and event creation is KYC-gated (403 KYC_REQUIRED)
    - New projects are pending: listed for their owner, public after approval
    - Only the owner edits or deletes a project
    - One bid per bidder, never on one's own project; the owner is notified
"""

from uuid import uuid4

PROJECT = {
    "title": "Solar Kiosk",
    "description": "Off-grid charging for markets",
    "industry": "energy",
    "fundingGoal": 50000,
    "minimumInvestment": 500,
}
BIDDING_PROJECT = {
    "title": "Landing page",
    "description": "Marketing site for launch",
    "category": "web",
    "budget": 1200,
    "timeline": "2 weeks",
}


async def test_project_requires_kyc(client, make_user, auth_headers):
    user = await make_user(kyc=False)

    response = await client.post("/api/projects", json=PROJECT, headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "KYC_REQUIRED"


async def test_project_listed_publicly_after_approval(
    client, make_user, auth_headers, admin_headers,
):
    owner = await make_user(kyc=True)

    created = await client.post("/api/projects", json=PROJECT, headers=auth_headers(owner))
    assert created.status_code == 200
    project = created.json()
    assert project["status"] == "pending"
    assert project["fundingGoal"] == 50000.0

    assert (await client.get("/api/projects")).json() == []
    mine = await client.get("/api/projects/my", headers=auth_headers(owner))
    assert [p["id"] for p in mine.json()] == [project["id"]]

    approved = await client.put(
        f"/api/admin/projects/{project['id']}/status",
        json={"status": "approved"}, headers=admin_headers,
    )
    assert approved.json()["status"] == "approved"
    public = await client.get("/api/projects")
    assert [p["id"] for p in public.json()] == [project["id"]]

    inbox = await client.get("/api/notifications", headers=auth_headers(owner))
    assert inbox.json()[0]["title"] == "Project approved"


async def test_moderation_is_admin_only(client, make_user, auth_headers):
    owner = await make_user(kyc=True)
    project = (await client.post(
        "/api/projects", json=PROJECT, headers=auth_headers(owner),
    )).json()

    response = await client.put(
        f"/api/admin/projects/{project['id']}/status",
        json={"status": "approved"}, headers=auth_headers(owner),
    )

    assert response.status_code == 403


async def test_minimum_investment_cannot_exceed_goal(client, make_user, auth_headers):
    owner = await make_user(kyc=True)

    response = await client.post(
        "/api/projects", json={**PROJECT, "minimumInvestment": 60000},
        headers=auth_headers(owner),
    )

    assert response.status_code == 400


async def test_only_owner_updates_and_deletes(client, make_user, auth_headers):
    owner = await make_user(kyc=True)
    other = await make_user(kyc=True)
    project = (await client.post(
        "/api/projects", json=PROJECT, headers=auth_headers(owner),
    )).json()
    path = f"/api/projects/{project['id']}"

    foreign_update = await client.put(path, json={"title": "Mine now"}, headers=auth_headers(other))
    foreign_delete = await client.delete(path, headers=auth_headers(other))
    updated = await client.put(path, json={"title": "Solar Kiosk v2"}, headers=auth_headers(owner))
    deleted = await client.delete(path, headers=auth_headers(owner))
    missing = await client.get(path)

    assert foreign_update.status_code == 403
    assert foreign_delete.status_code == 403
    assert updated.json()["title"] == "Solar Kiosk v2"
    assert updated.json()["industry"] == "energy"
    assert deleted.json() == {"message": "Project deleted successfully"}
    assert missing.status_code == 404


async def test_bid_flow_notifies_owner(client, make_user, auth_headers):
    owner = await make_user(first_name="Olu")
    bidder = await make_user(kyc=True, first_name="Bea")
    project = (await client.post(
        "/api/bidding-projects", json=BIDDING_PROJECT, headers=auth_headers(owner),
    )).json()
    assert project["status"] == "open"
    bid_body = {
        "projectId": project["id"], "amount": 900,
        "timeline": "10 days", "proposal": "Static site plus CMS",
    }

    bid = await client.post("/api/project-bids", json=bid_body, headers=auth_headers(bidder))
    again = await client.post("/api/project-bids", json=bid_body, headers=auth_headers(bidder))
    listed = await client.get(f"/api/project-bids/{project['id']}")
    inbox = await client.get("/api/notifications", headers=auth_headers(owner))

    assert bid.status_code == 200
    assert bid.json()["amount"] == 900.0
    assert again.status_code == 409
    assert [b["id"] for b in listed.json()] == [bid.json()["id"]]
    assert inbox.json()[0]["title"] == "New bid received"


async def test_bid_rules(client, make_user, auth_headers):
    owner = await make_user(kyc=True)
    unverified = await make_user(kyc=False)
    project = (await client.post(
        "/api/bidding-projects", json=BIDDING_PROJECT, headers=auth_headers(owner),
    )).json()
    bid_body = {
        "projectId": project["id"], "amount": 900,
        "timeline": "10 days", "proposal": "Proposal",
    }

    own = await client.post("/api/project-bids", json=bid_body, headers=auth_headers(owner))
    no_kyc = await client.post("/api/project-bids", json=bid_body, headers=auth_headers(unverified))
    unknown = await client.post(
        "/api/project-bids", json={**bid_body, "projectId": str(uuid4())},
        headers=auth_headers(owner),
    )

    assert own.status_code == 400
    assert no_kyc.status_code == 403
    assert unknown.status_code == 404


async def test_companies_list_and_create(client, make_user, auth_headers):
    owner = await make_user()

    created = await client.post(
        "/api/companies", json={"name": "  Qipad Labs ", "industry": "fintech"},
        headers=auth_headers(owner),
    )
    listed = await client.get("/api/companies")

    assert created.status_code == 200
    assert created.json()["name"] == "Qipad Labs"
    assert created.json()["ownerId"] == str(owner.id)
    assert created.json()["status"] == "pending"
    assert [c["id"] for c in listed.json()] == [created.json()["id"]]


async def test_blank_company_name_rejected(client, make_user, auth_headers):
    owner = await make_user()

    response = await client.post(
        "/api/companies", json={"name": "   "}, headers=auth_headers(owner),
    )

    assert response.status_code == 400


async def test_events_sorted_by_start_and_kyc_gated(client, make_user, auth_headers):
    organizer = await make_user(kyc=True)
    unverified = await make_user(kyc=False)
    later = {"title": "Demo Day", "startsAt": "2030-05-01T10:00:00Z", "ticketPrice": 20}
    sooner = {"title": "Founder Meetup", "startsAt": "2030-03-01T18:00:00Z"}

    denied = await client.post("/api/events", json=later, headers=auth_headers(unverified))
    first = await client.post("/api/events", json=later, headers=auth_headers(organizer))
    await client.post("/api/events", json=sooner, headers=auth_headers(organizer))
    listed = await client.get("/api/events")
    detail = await client.get(f"/api/events/{first.json()['id']}")

    assert denied.status_code == 403
    assert first.json()["ticketPrice"] == 20.0
    assert [e["title"] for e in listed.json()] == ["Founder Meetup", "Demo Day"]
    assert detail.json()["status"] == "upcoming"


async def test_writes_require_login(client):
    for path, body in (
        ("/api/projects", PROJECT),
        ("/api/bidding-projects", BIDDING_PROJECT),
        ("/api/companies", {"name": "Nope"}),
    ):
        response = await client.post(path, json=body)
        assert response.status_code == 401
