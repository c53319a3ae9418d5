"""QipadClient - wires one client session: tokens, request helper, cache, auth.

Invariants:
    - All collaborators share one TokenStore and one QueryClient
    - start() restores the session; close() releases the HTTP connection pool
"""

import httpx

from qipad.client.api_request import ApiClient, build_async_client
from qipad.client.auth_context import AuthContext
from qipad.client.community_flow import CommunityCreationFlow
from qipad.client.mutations import Mutation, build_mutation
from qipad.client.notifier import Notifier
from qipad.client.query_client import QueryClient, api_fetcher
from qipad.client.routes import Router
from qipad.client.token_store import TokenStore
from qipad.client.uploads import ObjectUploader, SimpleImageUploader
from qipad.config import Settings, get_settings


class QipadClient:

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        tokens: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        base_url: str | None = None,
    ):
        self.settings = settings or get_settings()
        self.tokens = tokens or TokenStore()
        self.api = ApiClient(
            build_async_client(self.settings, transport=transport, base_url=base_url),
            self.tokens,
        )
        self.queries = QueryClient(default_fetcher=api_fetcher(self.api))
        self.notifier = Notifier()
        self.auth = AuthContext(self.api, self.queries, self.tokens)
        self.router = Router(self.auth)

    def mutation(self, name: str, **callbacks) -> Mutation:
        return build_mutation(name, self.api, self.queries, self.notifier, **callbacks)

    def community_flow(self) -> CommunityCreationFlow:
        return CommunityCreationFlow(self.api, self.queries, self.notifier, self.auth)

    def object_uploader(self) -> ObjectUploader:
        return ObjectUploader(self.api, self.notifier, self.settings)

    def image_uploader(self) -> SimpleImageUploader:
        return SimpleImageUploader(self.api, self.notifier, self.settings)

    async def start(self) -> "QipadClient":
        await self.auth.initialize()
        return self

    async def close(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "QipadClient":
        try:
            return await self.start()
        except BaseException:
            await self.close()
            raise

    async def __aexit__(self, *exc) -> None:
        await self.close()
