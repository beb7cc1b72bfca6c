"""
Guestbook Backend: User Store & Credential Check
================================================

What:  In-memory user accounts with bcrypt password hashes, and the
       AuthenticationManager that form login delegates to.
How:   One account is built from settings. If USER_PASSWORD is empty a random
       password is generated; the lifespan logs it once after logging is
       configured so it can be used to sign in.
"""

import logging
import secrets
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional

import bcrypt

from guestbook.config import Settings
from guestbook.security.principal import Principal

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash password using bcrypt."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash. Malformed input never matches."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


@dataclass(frozen=True)
class UserAccount:
    username: str
    password_hash: str
    roles: FrozenSet[str] = field(default_factory=frozenset)

    def to_principal(self) -> Principal:
        return Principal(username=self.username, roles=self.roles)


class InMemoryUserStore:
    """Username → UserAccount lookup."""

    def __init__(self, accounts: Iterable[UserAccount] = (), generated_password: Optional[str] = None):
        self._accounts: Dict[str, UserAccount] = {a.username: a for a in accounts}
        # Set only when the password came from secrets, not from settings
        self.generated_password = generated_password

    def get(self, username: str) -> Optional[UserAccount]:
        return self._accounts.get(username)


def build_user_store(settings: Settings) -> InMemoryUserStore:
    """Create the store holding the single configured account."""
    password = settings.user_password
    generated = None
    if not password:
        password = generated = secrets.token_hex(16)

    account = UserAccount(
        username=settings.user_name,
        password_hash=hash_password(password),
        roles=frozenset(settings.user_roles_list),
    )
    return InMemoryUserStore([account], generated_password=generated)


class AuthenticationManager:
    """Checks submitted credentials against the user store."""

    def __init__(self, user_store: InMemoryUserStore):
        self.user_store = user_store
        # Compared against for unknown usernames so both paths cost one bcrypt check
        self._dummy_hash = hash_password(secrets.token_hex(8))

    def authenticate(self, username: str, password: str) -> Optional[Principal]:
        """
        Returns:
            The principal for valid credentials, None otherwise
        """
        account = self.user_store.get(username)
        if account is None:
            verify_password(password, self._dummy_hash)
            logger.warning("Login failed: unknown user '%s'", username)
            return None
        if not verify_password(password, account.password_hash):
            logger.warning("Login failed: bad credentials for '%s'", username)
            return None
        logger.info("User '%s' signed in", username)
        return account.to_principal()
