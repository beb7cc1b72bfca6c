"""
Guestbook Backend: HTTP Authorization Policy
============================================

What:  URL-level access rules and the middleware that enforces them.
How:   A SecurityPolicy is an ordered list of AccessRule(path_prefix,
       requirement); the first rule whose prefix matches decides. A request
       no rule matches is permitted.

The application policy is `SecurityPolicy.permit_all()`: every request is
allowed at this layer. Endpoints that need a login or a role declare it
themselves with the dependencies in `guestbook.security.method`.

CSRF protection is not part of the chain; state-changing requests need no
token.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from guestbook.security.principal import save_request
from guestbook.templating import render_error

logger = logging.getLogger(__name__)


class Decision(str, enum.Enum):
    PERMIT = "permit"
    LOGIN_REQUIRED = "login_required"
    DENY = "deny"


@dataclass(frozen=True)
class AccessRule:
    """
    requirement is one of:
        "permit_all"      anyone
        "authenticated"   any signed-in user
        "has_role:ADMIN"  signed-in user holding the role
    """
    path_prefix: str
    requirement: str = "permit_all"

    def __post_init__(self):
        if self.requirement in ("permit_all", "authenticated"):
            return
        if self.requirement.startswith("has_role:") and self.requirement[len("has_role:"):]:
            return
        raise ValueError(f"Unknown access requirement '{self.requirement}'")

    def matches(self, path: str) -> bool:
        prefix = self.path_prefix.rstrip("/")
        return not prefix or path == prefix or path.startswith(prefix + "/")

    def decide(self, user) -> Decision:
        if self.requirement == "permit_all":
            return Decision.PERMIT
        if not getattr(user, "is_authenticated", False):
            return Decision.LOGIN_REQUIRED
        if self.requirement == "authenticated":
            return Decision.PERMIT
        role = self.requirement[len("has_role:"):]
        return Decision.PERMIT if user.has_role(role) else Decision.DENY


class SecurityPolicy:
    """Ordered, first-match list of access rules."""

    def __init__(self, rules: Iterable[AccessRule] = ()):
        self.rules: List[AccessRule] = list(rules)

    @classmethod
    def permit_all(cls) -> "SecurityPolicy":
        return cls([AccessRule("/", "permit_all")])

    def rule_for(self, path: str) -> Optional[AccessRule]:
        for rule in self.rules:
            if rule.matches(path):
                return rule
        return None

    def decide(self, path: str, user) -> Decision:
        rule = self.rule_for(path)
        if rule is None:
            return Decision.PERMIT
        return rule.decide(user)


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """
    Applies the SecurityPolicy to every request.

    Must sit inside AuthenticationMiddleware (needs request.user) and
    SessionMiddleware (saves the requested path before redirecting to login).
    """

    def __init__(self, app, policy: SecurityPolicy, login_path: str = "/login"):
        super().__init__(app)
        self.policy = policy
        self.login_path = login_path

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        decision = self.policy.decide(request.url.path, request.user)

        if decision is Decision.LOGIN_REQUIRED:
            save_request(request)
            return RedirectResponse(self.login_path, status_code=302)

        if decision is Decision.DENY:
            logger.warning(
                "Access denied to %s for user '%s'",
                request.url.path,
                request.user.display_name,
            )
            return render_error(request, 403, "You are not allowed to view this page")

        return await call_next(request)
