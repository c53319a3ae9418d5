"""Auth Context - session state (current user, loading flag) for route guards.

Invariants:
    - is_loading is True from construction until initialize() completes
    - login/register/admin_login store the token, set user and seed the
      ("/api/user",) cache entry in that order
    - logout clears the token, the user and the entire query cache
    - A 401/403 while restoring the session clears the stored token

Design Decisions:
    - The current-user query uses RETURN_NULL: a logged-out user is a None
      value in the cache, not a query error
"""

import logging
from typing import Any

from qipad.client.api_request import ApiClient, parse_json
from qipad.client.query_client import QueryClient, UnauthorizedBehavior
from qipad.client.token_store import TokenStore
from qipad.core.errors import ApiRequestError

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = ("/api/user",)


class AuthContext:
    """Owns the client session for one QipadClient."""

    def __init__(self, api: ApiClient, queries: QueryClient, tokens: TokenStore):
        self.api = api
        self.queries = queries
        self.tokens = tokens
        self.user: dict | None = None
        self.is_loading = True

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.get("isAdmin"))

    async def initialize(self) -> dict | None:
        """Restore the session from the stored token, if any."""
        self.is_loading = True
        try:
            if not self.tokens.get():
                self.user = None
                return None
            try:
                self.user = await self.queries.get(
                    CURRENT_USER_KEY,
                    on_unauthorized=UnauthorizedBehavior.RETURN_NULL,
                )
            except ApiRequestError as e:
                if e.status not in (401, 403):
                    raise
                self.user = None
            if self.user is None:
                logger.info("Stored token rejected; clearing session")
                self.tokens.clear()
                self.queries.remove(CURRENT_USER_KEY)
            return self.user
        finally:
            self.is_loading = False

    def _establish(self, token: str, user: dict) -> dict:
        self.tokens.set(token)
        self.user = user
        self.queries.set_query_data(CURRENT_USER_KEY, user)
        return user

    async def _post_credentials(self, path: str, body: dict) -> dict:
        response = await self.api.request("POST", path, json=body, authenticated=False)
        payload: Any = parse_json(response)
        return self._establish(payload["token"], payload["user"])

    async def login(self, email: str, password: str) -> dict:
        return await self._post_credentials(
            "/api/auth/login", {"email": email, "password": password},
        )

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        user_type: str = "individual",
        phone: str | None = None,
    ) -> dict:
        body = {
            "email": email,
            "password": password,
            "firstName": first_name,
            "lastName": last_name,
            "userType": user_type,
        }
        if phone:
            body["phone"] = phone
        return await self._post_credentials("/api/auth/register", body)

    async def admin_login(self, username: str, password: str) -> dict:
        return await self._post_credentials(
            "/api/admin/login", {"username": username, "password": password},
        )

    async def refresh_user(self) -> dict | None:
        """Re-read /api/user (after KYC approval or a wallet change)."""
        await self.queries.invalidate(CURRENT_USER_KEY)
        self.user = await self.queries.get(
            CURRENT_USER_KEY, on_unauthorized=UnauthorizedBehavior.RETURN_NULL,
        )
        return self.user

    def logout(self) -> None:
        self.tokens.clear()
        self.user = None
        self.queries.clear()
        logger.info("Logged out")
