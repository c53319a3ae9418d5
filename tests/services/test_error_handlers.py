"""Error envelope - every failure carries a toastable top-level message.

Invariants:
    - 401 advertises the bearer scheme
    - Validation errors are 400 and name the first bad field by its wire name
"""


async def test_missing_token_is_401_with_bearer_challenge(client):
    response = await client.get("/api/wallet")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["message"] == "Access token required"
    assert response.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_bad_token_is_403_without_challenge(client):
    response = await client.get(
        "/api/wallet", headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 403
    assert "www-authenticate" not in response.headers
    assert response.json()["message"] == "Invalid or expired token"


async def test_validation_error_names_the_field(client, make_user, auth_headers):
    user = await make_user(kyc=True)

    response = await client.post(
        "/api/projects",
        json={
            "title": "Solar Kiosk", "description": "Charging", "industry": "energy",
            "fundingGoal": -5, "minimumInvestment": 1,
        },
        headers=auth_headers(user),
    )

    body = response.json()
    assert response.status_code == 400
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["message"].startswith("Invalid request data: fundingGoal")
    assert [d["field"] for d in body["error"]["details"]] == ["fundingGoal"]


async def test_unknown_resource_is_404_envelope(client):
    response = await client.get("/api/events/00000000-0000-4000-8000-000000000000")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert "not found" in response.json()["message"]
