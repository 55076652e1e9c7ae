"""Session store — maps opaque login tokens to user ids."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


@dataclass(frozen=True)
class Session:
    """One authenticated login."""

    token: str
    user_id: str
    created_at: float
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


class SessionStore:
    """In-memory, lock-guarded session store keyed by session token.

    One instance is created at application startup and shared by all
    requests. Sessions do not survive a restart. With ``ttl_seconds``
    left as ``None`` a session lives until logout.
    """

    def __init__(
        self,
        ttl_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, user_id: str) -> str:
        """Open a session for *user_id* and return its fresh token."""
        if self._ttl is not None:
            self.purge_expired()
        now = self._clock()
        expires_at = now + self._ttl if self._ttl is not None else None
        with self._lock:
            token = secrets.token_urlsafe(TOKEN_BYTES)
            while token in self._sessions:
                token = secrets.token_urlsafe(TOKEN_BYTES)
            self._sessions[token] = Session(
                token=token, user_id=user_id, created_at=now, expires_at=expires_at
            )
        logger.info("Session created for user %s", user_id)
        return token

    def resolve(self, token: str | None) -> str | None:
        """Return the user id behind *token*, or ``None`` if unknown or expired."""
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired(self._clock()):
                del self._sessions[token]
                logger.info("Session expired for user %s", session.user_id)
                return None
            return session.user_id

    def destroy(self, token: str | None) -> None:
        """Remove a session (logout). Unknown tokens are ignored."""
        if not token:
            return
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is not None:
            logger.info("Session destroyed for user %s", session.user_id)

    def purge_expired(self) -> int:
        """Remove all expired sessions. Return count of removed sessions."""
        now = self._clock()
        with self._lock:
            expired = [t for t, s in self._sessions.items() if s.is_expired(now)]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)

    @property
    def active_count(self) -> int:
        """Number of live sessions (useful for monitoring)."""
        with self._lock:
            return len(self._sessions)
