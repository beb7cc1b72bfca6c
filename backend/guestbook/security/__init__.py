# Security package init
"""
Guestbook Backend: Security
===========================

Request path through the security layers (outermost first):

    SessionMiddleware         signed cookie → request.session
    AuthenticationMiddleware  SessionAuthBackend → request.user
    AuthorizationMiddleware   SecurityPolicy (permit-all) decides
    route dependencies        require_authenticated / require_role

Login and logout views live in guestbook.routes.auth.
"""

from guestbook.security.method import require_authenticated, require_role
from guestbook.security.policy import AccessRule, AuthorizationMiddleware, SecurityPolicy
from guestbook.security.principal import Principal, SessionAuthBackend
from guestbook.security.users import AuthenticationManager, build_user_store

__all__ = [
    "AccessRule",
    "AuthenticationManager",
    "AuthorizationMiddleware",
    "Principal",
    "SecurityPolicy",
    "SessionAuthBackend",
    "build_user_store",
    "require_authenticated",
    "require_role",
]
