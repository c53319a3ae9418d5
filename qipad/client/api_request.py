"""API Request Helper - every outgoing HTTP call from the client core.

Invariants:
    - Authorization: Bearer <token> is attached whenever the store holds a token
    - Non-2xx responses raise ApiRequestError(status, message); the message is
      the body's "message" (or "error") field when JSON, else the body text,
      else the reason phrase
    - Transport failures (connect, timeout, protocol) raise ApiRequestError
      with status 0
    - No retries, no backoff

Design Decisions:
    - build_async_client centralizes base URL and timeout so tests can inject
      an httpx transport (MockTransport, ASGITransport) and nothing else changes
    - Callers get the raw httpx.Response and parse it themselves
"""

import logging
from typing import Any

import httpx

from qipad.client.token_store import TokenStore
from qipad.config import Settings, get_settings
from qipad.core.errors import ApiRequestError

logger = logging.getLogger(__name__)


def build_async_client(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    base_url: str | None = None,
) -> httpx.AsyncClient:
    """Create the httpx.AsyncClient used by ApiClient."""
    settings = settings or get_settings()
    return httpx.AsyncClient(
        base_url=base_url or settings.api_base_url,
        timeout=httpx.Timeout(settings.api_timeout_seconds),
        headers={"Accept": "application/json"},
        transport=transport,
    )


def extract_error_message(response: httpx.Response) -> str:
    """Best human-readable message for a failed response."""
    text = response.text or ""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for field in ("message", "error"):
            value = body.get(field)
            if isinstance(value, dict):
                value = value.get("message")
            if isinstance(value, str) and value:
                return value
    if text.strip():
        return text.strip()
    return response.reason_phrase or "Request failed"


def throw_if_not_ok(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        payload = response.json()
    except ValueError:
        payload = None
    raise ApiRequestError(
        response.status_code, extract_error_message(response), payload,
    )


class ApiClient:
    """Thin authenticated wrapper over httpx.AsyncClient."""

    def __init__(self, http: httpx.AsyncClient, tokens: TokenStore):
        self.http = http
        self.tokens = tokens

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        token = self.tokens.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        *,
        files: dict | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        """Send one request; return the response or raise ApiRequestError."""
        send_headers = self._headers(headers) if authenticated else dict(headers or {})
        try:
            response = await self.http.request(
                method.upper(), path,
                json=json, files=files, content=content,
                headers=send_headers,
            )
        except httpx.HTTPError as e:
            logger.warning(
                f"Transport failure on {method.upper()} {path}: {e}",
                extra={"method": method.upper(), "path": path},
            )
            raise ApiRequestError(0, str(e) or e.__class__.__name__)

        if not response.is_success:
            logger.info(
                f"{method.upper()} {path} -> {response.status_code}",
                extra={
                    "method": method.upper(), "path": path,
                    "status_code": response.status_code,
                },
            )
        throw_if_not_ok(response)
        return response

    async def get_json(self, path: str) -> Any:
        response = await self.request("GET", path)
        return parse_json(response)

    async def aclose(self) -> None:
        await self.http.aclose()


def parse_json(response: httpx.Response) -> Any:
    """Body as JSON; None for empty bodies."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
