"""Route Table & Protected-Route Guard - URL path -> view resolution.

Invariants:
    - Patterns are tried in table order; the first match wins
    - ":name" segments capture one path segment into params
    - Unmatched paths resolve to the "not_found" view
    - Protected routes: while the session is loading the guard yields
      "loading"; with no user it yields "auth" (the login view) in place of
      the target, keeping the requested path for redirect after login
"""

from dataclasses import dataclass, field

from qipad.client.auth_context import AuthContext

LOADING_VIEW = "loading"
AUTH_VIEW = "auth"
NOT_FOUND_VIEW = "not_found"


@dataclass(frozen=True)
class Route:
    pattern: str
    view: str
    protected: bool = True

    def match(self, path: str) -> dict[str, str] | None:
        want = [s for s in self.pattern.split("/") if s]
        got = [s for s in path.split("?", 1)[0].split("/") if s]
        if len(want) != len(got):
            return None
        params: dict[str, str] = {}
        for w, g in zip(want, got):
            if w.startswith(":"):
                params[w[1:]] = g
            elif w != g:
                return None
        return params


@dataclass(frozen=True)
class Resolution:
    view: str
    params: dict[str, str] = field(default_factory=dict)
    requested_path: str | None = None
    route: Route | None = None


ROUTES: tuple[Route, ...] = (
    Route("/auth", "auth", protected=False),
    Route("/dashboard", "dashboard"),
    Route("/projects/:id", "project_details"),
    Route("/projects", "projects"),
    Route("/my-projects", "my_projects"),
    Route("/investors", "investors"),
    Route("/network", "network"),
    Route("/documents", "documents"),
    Route("/investments", "investments"),
    Route("/communities/:id", "community_detail"),
    Route("/community", "community"),
    Route("/communities", "community"),
    Route("/jobs", "jobs"),
    Route("/bidding", "bidding"),
    Route("/tenders", "tenders"),
    Route("/company-formation", "company_formation"),
    Route("/companies", "companies"),
    Route("/events", "events"),
    Route("/profile-settings", "profile_settings"),
    Route("/billing-settings", "billing_settings"),
    Route("/general-settings", "general_settings"),
    Route("/wallet", "wallet"),
    Route("/admin/login", "admin_login", protected=False),
    Route("/admin/dashboard", "admin_dashboard", protected=False),
    Route("/", "dashboard"),
)


def match_route(path: str, routes: tuple[Route, ...] = ROUTES) -> tuple[Route, dict] | None:
    for route in routes:
        params = route.match(path)
        if params is not None:
            return route, params
    return None


class Router:
    """Resolves paths against the route table, guarding protected views."""

    def __init__(self, auth: AuthContext, routes: tuple[Route, ...] = ROUTES):
        self.auth = auth
        self.routes = routes

    def resolve(self, path: str) -> Resolution:
        found = match_route(path, self.routes)
        if found is None:
            return Resolution(view=NOT_FOUND_VIEW, requested_path=path)
        route, params = found
        if route.protected:
            if self.auth.is_loading:
                return Resolution(view=LOADING_VIEW, requested_path=path, route=route)
            if self.auth.user is None:
                return Resolution(view=AUTH_VIEW, requested_path=path, route=route)
        return Resolution(view=route.view, params=params, requested_path=path, route=route)
