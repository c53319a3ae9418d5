"""Route guard - protected views resolve to loading/auth until a user exists.

Invariants:
    - Loading session -> "loading" for protected routes
    - No user -> "auth", keeping the requested path
    - Public routes resolve regardless of session
    - Unmatched paths -> "not_found"
"""

from types import SimpleNamespace

from qipad.client.routes import (
    AUTH_VIEW, LOADING_VIEW, NOT_FOUND_VIEW, Route, Router, match_route,
)


def session(user=None, loading=False):
    return SimpleNamespace(user=user, is_loading=loading)


def test_loading_session_shows_loading():
    resolution = Router(session(loading=True)).resolve("/dashboard")
    assert resolution.view == LOADING_VIEW


def test_anonymous_user_sees_login_view():
    resolution = Router(session()).resolve("/wallet")
    assert resolution.view == AUTH_VIEW
    assert resolution.requested_path == "/wallet"


def test_authenticated_user_reaches_target_with_params():
    resolution = Router(session(user={"id": "u1"})).resolve("/communities/c42")
    assert resolution.view == "community_detail"
    assert resolution.params == {"id": "c42"}


def test_public_routes_skip_guard():
    router = Router(session(loading=True))
    assert router.resolve("/auth").view == "auth"
    assert router.resolve("/admin/login").view == "admin_login"
    assert router.resolve("/admin/dashboard").view == "admin_dashboard"


def test_root_and_aliases():
    router = Router(session(user={"id": "u1"}))
    assert router.resolve("/").view == "dashboard"
    assert router.resolve("/community").view == "community"
    assert router.resolve("/communities").view == "community"
    assert router.resolve("/projects?tab=mine").view == "projects"


def test_unknown_path_is_not_found():
    assert Router(session(user={"id": "u1"})).resolve("/nope/deeper").view == NOT_FOUND_VIEW


def test_first_match_wins():
    routes = (Route("/x/:id", "first"), Route("/x/1", "second"))
    route, params = match_route("/x/1", routes)
    assert route.view == "first"
    assert params == {"id": "1"}
