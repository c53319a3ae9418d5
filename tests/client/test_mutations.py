"""Mutation Hooks - one request, fixed invalidation set, toasts.

Invariants:
    - Success invalidates each configured key exactly once, before
      on_success and the success toast
    - Failure invalidates nothing and toasts the server message
"""

import pytest

from qipad.client.mutations import MUTATIONS, build_mutation


async def test_create_community_invalidates_communities_and_wallet(
    api, queries, notifier, server,
):
    server.on("POST", "/api/communities", 201, json={"id": "c1", "name": "Founders"})
    queries.set_query_data("/api/communities", [])
    queries.set_query_data("/api/wallet", {"balance": 100})
    queries.set_query_data("/api/notifications", [])
    seen_stale = {}

    def on_success(data):
        seen_stale["communities"] = queries.get_entry("/api/communities").is_stale
        seen_stale["wallet"] = queries.get_entry("/api/wallet").is_stale

    mutation = build_mutation(
        "create_community", api, queries, notifier, on_success=on_success,
    )
    result = await mutation.mutate({"name": "Founders"})

    assert result.ok
    assert result.data["id"] == "c1"
    assert set(result.invalidated) == {("/api/communities",), ("/api/wallet",)}
    assert seen_stale == {"communities": True, "wallet": True}
    assert not queries.get_entry("/api/notifications").is_stale
    assert notifier.last.title == "Community created successfully!"
    assert len(server.calls("POST", "/api/communities")) == 1


async def test_each_key_invalidated_once(api, queries, notifier, server, monkeypatch):
    server.on("POST", "/api/communities/c1/join", json={"message": "ok"})
    calls = []
    original = queries.invalidate

    async def spy(*prefixes):
        calls.append(prefixes)
        return await original(*prefixes)

    monkeypatch.setattr(queries, "invalidate", spy)
    await build_mutation("join_community", api, queries, notifier).mutate(id="c1")

    assert calls == [
        (("/api/communities",),),
        (("/api/user/communities",),),
        (("/api/wallet",),),
    ]


async def test_failure_skips_invalidation_and_toasts_server_message(
    api, queries, notifier, server,
):
    server.on("POST", "/api/communities", 400, json={"message": "Insufficient credits"})
    queries.set_query_data("/api/wallet", {"balance": 0})
    errors = []

    mutation = build_mutation(
        "create_community", api, queries, notifier, on_error=errors.append,
    )
    result = await mutation.mutate({"name": "x"})

    assert not result.ok
    assert result.error.status == 400
    assert result.invalidated == []
    assert not queries.get_entry("/api/wallet").is_stale
    assert notifier.last.variant == "destructive"
    assert notifier.last.title == "Failed to create community"
    assert notifier.last.description == "Insufficient credits"
    assert errors == [result.error]
    with pytest.raises(Exception):
        result.raise_for_error()


async def test_path_params_fill_template(api, queries, notifier, server):
    server.on("PUT", "/api/connections/k9", json={"id": "k9", "status": "accepted"})

    result = await build_mutation(
        "respond_connection", api, queries, notifier,
    ).mutate({"status": "accepted"}, id="k9")

    assert result.ok
    assert server.body(server.requests[0]) == {"status": "accepted"}


async def test_silent_mutation_raises_no_success_toast(api, queries, notifier, server):
    server.on("PUT", "/api/notifications/n1/read", json={"message": "ok"})

    await build_mutation("mark_notification_read", api, queries, notifier).mutate(id="n1")

    assert notifier.toasts == []


def test_unknown_mutation_name_raises(api, queries, notifier):
    with pytest.raises(KeyError):
        build_mutation("launch_rocket", api, queries, notifier)


def test_catalogue_invalidation_sets():
    assert MUTATIONS["create_community"].invalidates == (
        ("/api/communities",), ("/api/wallet",),
    )
    assert MUTATIONS["submit_bid"].invalidates == (
        ("/api/project-bids",), ("/api/bidding-projects",),
    )
    assert MUTATIONS["deduct_credits"].invalidates == (("/api/wallet",),)
