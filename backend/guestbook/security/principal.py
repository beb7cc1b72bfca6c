"""
Guestbook Backend: Session Authentication
=========================================

What:  The authenticated principal, and the Starlette authentication backend
       that restores it from the signed session cookie on every request.

Session state machine (per browser session):

    Anonymous ──(valid credentials at POST /login)──▶ Authenticated
    Authenticated ──(/logout)──▶ Anonymous   (session cleared)

The session itself is Starlette's SessionMiddleware (itsdangerous-signed
cookie); this module only reads and writes one key in it.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from starlette.authentication import AuthCredentials, AuthenticationBackend, BaseUser
from starlette.requests import HTTPConnection
from starlette.routing import Match

SESSION_PRINCIPAL_KEY = "principal"
SESSION_SAVED_REQUEST_KEY = "saved_request"


@dataclass(frozen=True)
class Principal(BaseUser):
    """A signed-in user as stored in the session."""
    username: str
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self.username

    @property
    def identity(self) -> str:
        return self.username

    def has_role(self, role: str) -> bool:
        return role.upper() in self.roles

    def to_session(self) -> dict:
        return {"username": self.username, "roles": sorted(self.roles)}

    @classmethod
    def from_session(cls, data: object) -> Optional["Principal"]:
        if not isinstance(data, dict) or not data.get("username"):
            return None
        roles = data.get("roles") or []
        return cls(username=str(data["username"]), roles=frozenset(str(r).upper() for r in roles))


def scopes_for(principal: Principal) -> list:
    return ["authenticated"] + [f"ROLE_{role}" for role in sorted(principal.roles)]


class SessionAuthBackend(AuthenticationBackend):
    """Restores request.user from the session; anonymous when absent."""

    async def authenticate(
        self, conn: HTTPConnection
    ) -> Optional[Tuple[AuthCredentials, BaseUser]]:
        principal = Principal.from_session(conn.session.get(SESSION_PRINCIPAL_KEY))
        if principal is None:
            return None
        return AuthCredentials(scopes_for(principal)), principal


def sign_in(conn: HTTPConnection, principal: Principal) -> str:
    """
    Store the principal in a fresh session.

    Returns:
        Where to send the user next: the request that triggered the login,
        or "/"
    """
    target = conn.session.get(SESSION_SAVED_REQUEST_KEY) or "/"
    conn.session.clear()
    conn.session[SESSION_PRINCIPAL_KEY] = principal.to_session()
    return target


def sign_out(conn: HTTPConnection) -> None:
    """Drop the authentication together with everything else in the session."""
    conn.session.clear()


def _answers_get(conn: HTTPConnection, path: str) -> bool:
    """True when some route serves GET at `path`."""
    router = getattr(conn.app, "router", None)
    if router is None:
        return False
    get_scope = {"type": "http", "path": path, "root_path": "", "method": "GET"}
    return any(route.matches(get_scope)[0] is Match.FULL for route in router.routes)


def save_request(conn: HTTPConnection) -> None:
    """
    Remember where login should return to.

    GET requests are saved with their query string. Any other method is
    replayed as a GET after login, so only its path is kept, and only when a
    GET route answers there (POST /guestbook → /guestbook). Otherwise the
    saved target is cleared and login falls back to "/".
    """
    path = conn.url.path
    if conn.scope.get("method") == "GET":
        if conn.url.query:
            path = f"{path}?{conn.url.query}"
        conn.session[SESSION_SAVED_REQUEST_KEY] = path
    elif _answers_get(conn, path):
        conn.session[SESSION_SAVED_REQUEST_KEY] = path
    else:
        conn.session.pop(SESSION_SAVED_REQUEST_KEY, None)
