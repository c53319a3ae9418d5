"""Client test fixtures - scripted HTTP server behind httpx.MockTransport.

Invariants:
    - Unscripted routes answer 404 {"message": "Not found"}
    - Every request is recorded in order for assertions on what was (not) sent
"""

import json as jsonlib

import httpx
import pytest

from qipad.client.api_request import ApiClient
from qipad.client.auth_context import AuthContext
from qipad.client.notifier import Notifier
from qipad.client.query_client import QueryClient, api_fetcher
from qipad.client.token_store import TokenStore


class ScriptedServer:
    """Callable MockTransport handler with per-route canned responses."""

    def __init__(self):
        self.routes: dict[tuple[str, str], object] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, json=None, text=None):
        def respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json)
        self.routes[(method, path)] = respond

    def on_call(self, method: str, path: str, handler):
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "Not found"})
        return handler(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path == path
        ]

    @staticmethod
    def body(request: httpx.Request):
        return jsonlib.loads(request.content) if request.content else None


@pytest.fixture
def server():
    return ScriptedServer()


@pytest.fixture
def tokens():
    return TokenStore()


@pytest.fixture
async def api(server, tokens):
    http = httpx.AsyncClient(
        base_url="http://test", transport=httpx.MockTransport(server),
    )
    yield ApiClient(http, tokens)
    await http.aclose()


@pytest.fixture
def queries(api):
    return QueryClient(default_fetcher=api_fetcher(api))


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def auth(api, queries, tokens):
    return AuthContext(api, queries, tokens)
