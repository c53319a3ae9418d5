"""API Request Helper - auth header, error mapping, transport failures.

Invariants:
    - Bearer header present only when a token is stored and authenticated=True
    - Non-2xx raises ApiRequestError with the server's message
    - Transport failures surface as status 0
"""

import httpx
import pytest

from qipad.client.api_request import (
    ApiClient, build_async_client, extract_error_message, parse_json,
)
from qipad.client.token_store import TokenStore
from qipad.config import get_settings
from qipad.core.errors import ApiRequestError


async def test_attaches_bearer_token_when_stored(api, server, tokens):
    server.on("GET", "/api/wallet", json={"balance": 10})
    tokens.set("tok-1")

    await api.get_json("/api/wallet")

    assert server.requests[0].headers["Authorization"] == "Bearer tok-1"


async def test_no_authorization_header_without_token(api, server):
    server.on("GET", "/api/communities", json=[])

    assert await api.get_json("/api/communities") == []
    assert "Authorization" not in server.requests[0].headers


async def test_unauthenticated_request_skips_token(api, server, tokens):
    server.on("POST", "/api/auth/login", json={"token": "t"})
    tokens.set("stale")

    await api.request("POST", "/api/auth/login", json={}, authenticated=False)

    assert "Authorization" not in server.requests[0].headers


async def test_error_uses_json_message(api, server):
    server.on("POST", "/api/communities", 400, json={"message": "Insufficient credits"})

    with pytest.raises(ApiRequestError) as exc:
        await api.request("POST", "/api/communities", json={})

    assert exc.value.status == 400
    assert exc.value.server_message == "Insufficient credits"
    assert exc.value.payload == {"message": "Insufficient credits"}


async def test_error_falls_back_to_body_text(api, server):
    server.on("GET", "/api/user", 502, text="upstream down")

    with pytest.raises(ApiRequestError) as exc:
        await api.request("GET", "/api/user")

    assert exc.value.server_message == "upstream down"
    assert str(exc.value) == "502: upstream down"


async def test_transport_failure_is_status_zero(tokens):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(base_url="http://test", transport=httpx.MockTransport(refuse))
    api = ApiClient(http, tokens)

    with pytest.raises(ApiRequestError) as exc:
        await api.request("GET", "/api/user")
    await api.aclose()

    assert exc.value.status == 0


def test_extract_error_message_variants():
    nested = httpx.Response(500, json={"error": {"message": "db down"}})
    empty = httpx.Response(503)
    assert extract_error_message(nested) == "db down"
    assert extract_error_message(empty) == "Service Unavailable"


def test_parse_json_empty_body_is_none():
    assert parse_json(httpx.Response(204)) is None
    assert parse_json(httpx.Response(200, json={"ok": True})) == {"ok": True}


async def test_build_async_client_uses_settings_base_url():
    http = build_async_client(get_settings())
    assert str(http.base_url).rstrip("/") == get_settings().api_base_url
    await ApiClient(http, TokenStore()).aclose()
