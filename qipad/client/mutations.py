"""Mutation Hooks - one write, then a fixed cache invalidation set.

Invariants:
    - mutate() issues exactly one request
    - On success each key in spec.invalidates is invalidated exactly once,
      before the success callback and the success toast
    - On failure nothing is invalidated, an error toast carries the server
      message (or a generic one) and the error is returned on the result
    - No optimistic updates, no rollback

Design Decisions:
    - The feature catalogue is data (MUTATIONS), so which write invalidates which
      key is reviewable in one place and testable without a UI
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from qipad.client.api_request import ApiClient, parse_json
from qipad.client.notifier import Notifier
from qipad.client.query_client import QueryClient, QueryKey
from qipad.core.errors import ApiRequestError

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong. Please try again."


@dataclass(frozen=True)
class MutationSpec:
    name: str
    method: str
    path: str
    invalidates: tuple[QueryKey, ...]
    success_title: str | None = None
    error_title: str = "Error"


@dataclass
class MutationResult:
    ok: bool
    data: Any = None
    error: ApiRequestError | None = None
    invalidated: list[QueryKey] = field(default_factory=list)

    def raise_for_error(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.data


def _spec(name, method, path, *keys, success=None, error="Error") -> MutationSpec:
    return MutationSpec(
        name=name, method=method, path=path,
        invalidates=tuple((k,) for k in keys),
        success_title=success, error_title=error,
    )


MUTATIONS: dict[str, MutationSpec] = {s.name: s for s in (
    _spec("create_connection", "POST", "/api/connections",
          "/api/connections",
          success="Connection request sent",
          error="Failed to send connection request"),
    _spec("respond_connection", "PUT", "/api/connections/{id}",
          "/api/connections",
          success="Connection updated",
          error="Failed to update connection"),
    _spec("create_community", "POST", "/api/communities",
          "/api/communities", "/api/wallet",
          success="Community created successfully!",
          error="Failed to create community"),
    _spec("join_community", "POST", "/api/communities/{id}/join",
          "/api/communities", "/api/user/communities", "/api/wallet",
          success="Joined community",
          error="Failed to join community"),
    _spec("leave_community", "POST", "/api/communities/{id}/leave",
          "/api/communities", "/api/user/communities",
          success="Left community",
          error="Failed to leave community"),
    _spec("mark_notification_read", "PUT", "/api/notifications/{id}/read",
          "/api/notifications",
          error="Failed to mark notification as read"),
    _spec("delete_notification", "DELETE", "/api/notifications/{id}",
          "/api/notifications",
          success="Notification deleted",
          error="Failed to delete notification"),
    _spec("create_project", "POST", "/api/projects",
          "/api/projects",
          success="Project created successfully!",
          error="Failed to create project"),
    _spec("update_project", "PUT", "/api/projects/{id}",
          "/api/projects",
          success="Project updated successfully!",
          error="Failed to update project"),
    _spec("delete_project", "DELETE", "/api/projects/{id}",
          "/api/projects",
          success="Project deleted",
          error="Failed to delete project"),
    _spec("create_bidding_project", "POST", "/api/bidding-projects",
          "/api/bidding-projects",
          success="Project posted for bidding",
          error="Failed to post project"),
    _spec("submit_bid", "POST", "/api/project-bids",
          "/api/project-bids", "/api/bidding-projects",
          success="Bid submitted successfully!",
          error="Failed to submit bid"),
    _spec("create_company", "POST", "/api/companies",
          "/api/companies",
          success="Company created successfully!",
          error="Failed to create company"),
    _spec("create_event", "POST", "/api/events",
          "/api/events",
          success="Event created successfully!",
          error="Failed to create event"),
    _spec("deduct_credits", "POST", "/api/credits/deduct",
          "/api/wallet",
          error="Failed to deduct credits"),
)}


class Mutation:
    """A configured write: request, then invalidate, then callbacks and toast."""

    def __init__(
        self,
        spec: MutationSpec,
        api: ApiClient,
        queries: QueryClient,
        notifier: Notifier,
        on_success: Callable[[Any], Any] | None = None,
        on_error: Callable[[ApiRequestError], Any] | None = None,
    ):
        self.spec = spec
        self.api = api
        self.queries = queries
        self.notifier = notifier
        self.on_success = on_success
        self.on_error = on_error
        self.is_pending = False

    async def mutate(self, body: Any = None, **path_params) -> MutationResult:
        path = self.spec.path.format(**path_params)
        self.is_pending = True
        try:
            response = await self.api.request(self.spec.method, path, json=body)
        except ApiRequestError as e:
            logger.info(
                f"Mutation {self.spec.name} failed: {e}",
                extra={"action": self.spec.name, "status_code": e.status},
            )
            self.notifier.error(
                self.spec.error_title, e.server_message or GENERIC_ERROR,
            )
            if self.on_error is not None:
                await _maybe_await(self.on_error(e))
            return MutationResult(ok=False, error=e)
        finally:
            self.is_pending = False

        data = parse_json(response)
        invalidated: list[QueryKey] = []
        for key in self.spec.invalidates:
            invalidated.extend(await self.queries.invalidate(key))
        if self.on_success is not None:
            await _maybe_await(self.on_success(data))
        if self.spec.success_title:
            self.notifier.success(self.spec.success_title)
        return MutationResult(ok=True, data=data, invalidated=invalidated)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def build_mutation(
    name: str,
    api: ApiClient,
    queries: QueryClient,
    notifier: Notifier,
    **callbacks,
) -> Mutation:
    """Mutation for a catalogue entry; KeyError for unknown names."""
    return Mutation(MUTATIONS[name], api, queries, notifier, **callbacks)
