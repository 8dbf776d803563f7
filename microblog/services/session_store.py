"""In-memory session store for the authoring endpoints.

Sessions map an opaque hex token to the time it was created. Nothing is
persisted; a restart logs everybody out.
"""

import logging
import threading
import time
from collections.abc import Callable, Mapping

from microblog.services.auth import calc_hash, random_bytes

logger = logging.getLogger(__name__)

SESSION_COOKIE = "microblog_h"
TOKEN_SEED_BYTES = 4


class SessionStore:
    """Thread-safe token -> creation-time map with TTL sweeping.

    Usage::

        sessions = SessionStore()
        token = sessions.create(config.password_hash)
        sessions.exists(token)   # True
        sessions.sweep(ttl=3600) # drops entries older than an hour
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, float] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self, seed_secret: str) -> str:
        """Create a session and return its token.

        Raises:
            CryptoUnavailableError: if no random bytes could be read.
        """
        token = calc_hash(seed_secret, random_bytes(TOKEN_SEED_BYTES))
        self.add(token, self._clock())
        return token

    def add(self, token: str, created_at: float) -> None:
        """Insert *token* with an explicit creation time."""
        with self._lock:
            self._sessions[token] = created_at

    def exists(self, token: str | None) -> bool:
        if not token:
            return False
        with self._lock:
            return token in self._sessions

    def discard(self, token: str | None) -> bool:
        """Remove a session; return whether it existed."""
        if not token:
            return False
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def sweep(self, ttl: float) -> int:
        """Remove every session older than *ttl* seconds.

        Expired keys are collected first and then deleted by key, so an
        entry inserted after the scan is never touched.
        """
        with self._lock:
            now = self._clock()
            expired = [
                token
                for token, created_at in self._sessions.items()
                if now - created_at > ttl
            ]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.info("Expired %d sessions", len(expired))
        return len(expired)


def check_session(
    cookies: Mapping[str, str], sessions: SessionStore
) -> tuple[bool, str | None]:
    """Resolve the session cookie to an authenticated flag.

    Returns ``(ok, reason)``; *reason* explains a failed check for logging
    and is never shown to the client.
    """
    try:
        token = cookies.get(SESSION_COOKIE)
    except Exception as e:
        return False, f"couldn't read session cookie: {e}"
    if token is None:
        return False, "couldn't find session cookie"
    if not sessions.exists(token):
        return False, "invalid session"
    return True, None
