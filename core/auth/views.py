# =============================================================================
# core/auth/views.py - View Access Table
# =============================================================================
# Which policy protects which view, and where a denied visitor is sent.
#
# Paths are matched by longest prefix on whole path segments:
# "/admin" covers "/admin/users" but not "/administrators".
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum


class AccessPolicy(str, Enum):
    """
    Access predicate applied by a guard.

    - public: always allowed
    - authenticated: an identity is signed in
    - admin: an identity is signed in and its profile has the admin role
    - guest_only: nobody is signed in (login / register pages)
    """
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    GUEST_ONLY = "guest_only"


@dataclass(frozen=True)
class ViewPaths:
    """The three navigation targets the auth layer can send a visitor to."""
    login: str = "/auth/login"
    home: str = "/"
    landing: str = "/dashboard"

    @classmethod
    def from_settings(cls, settings) -> "ViewPaths":
        return cls(
            login=settings.LOGIN_PATH,
            home=settings.HOME_PATH,
            landing=settings.LANDING_PATH,
        )


@dataclass(frozen=True)
class ViewRule:
    """A path prefix, its policy and an optional explicit failure target."""
    prefix: str
    policy: AccessPolicy
    failure_target: str | None = None

    def matches(self, path: str) -> bool:
        if self.prefix == "/":
            return True
        return path == self.prefix or path.startswith(self.prefix.rstrip("/") + "/")


PUBLIC_RULE = ViewRule("/", AccessPolicy.PUBLIC)


def normalize_path(path: str) -> str:
    """Strip query/fragment and trailing slashes: '/admin/?tab=1' -> '/admin'."""
    path = path.split("?", 1)[0].split("#", 1)[0] or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


@dataclass
class ViewTable:
    """
    Ordered set of view rules.

    Example:
        table = ViewTable.default(ViewPaths())
        table.resolve("/admin/users").policy  # AccessPolicy.ADMIN
        table.is_protected("/about")          # False
    """
    rules: list[ViewRule] = field(default_factory=list)

    def resolve(self, path: str) -> ViewRule:
        path = normalize_path(path)
        best = PUBLIC_RULE
        for rule in self.rules:
            if rule.matches(path) and len(rule.prefix) > len(best.prefix):
                best = rule
        return best

    def is_protected(self, path: str | None) -> bool:
        if path is None:
            return False
        return self.resolve(path).policy in (AccessPolicy.AUTHENTICATED, AccessPolicy.ADMIN)

    @classmethod
    def default(cls, paths: ViewPaths) -> "ViewTable":
        """
        The portal's views.

        The two admin areas deliberately send non-admins to different
        places: the management console back to the dashboard, the club
        console to the public home page.
        """
        return cls(rules=[
            ViewRule("/auth", AccessPolicy.GUEST_ONLY, failure_target=paths.landing),
            ViewRule(paths.landing, AccessPolicy.AUTHENTICATED),
            ViewRule("/profile", AccessPolicy.AUTHENTICATED),
            ViewRule("/teams/create", AccessPolicy.AUTHENTICATED),
            ViewRule("/teams/my-team", AccessPolicy.AUTHENTICATED),
            ViewRule("/setup-admin", AccessPolicy.AUTHENTICATED),
            ViewRule("/admin", AccessPolicy.ADMIN, failure_target=paths.landing),
            ViewRule("/diuec/dashboard", AccessPolicy.ADMIN, failure_target=paths.home),
        ])
