"""
Caller Session Authentication

Tracks which front-end senders hold an authenticated session. The
authentication stage consults an Authenticator before any protected channel
handler runs; SessionAuthenticator is the in-process implementation, keyed by
sender id, with an optional idle timeout.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, runtime_checkable

import structlog

from validation_engine.middleware.chain import CallerIdentity

logger = structlog.get_logger("auth.session")


@runtime_checkable
class Authenticator(Protocol):
    """Capability consulted by the authentication stage."""

    def is_authenticated(self, caller: CallerIdentity) -> bool:
        ...


@dataclass
class CallerSession:
    """Authenticated session of one sender."""

    sender_id: str
    user_id: str
    created_at: float
    last_activity: float


class SessionAuthenticator:
    """
    In-process session store.

    Args:
        max_idle_seconds: Idle time after which a session expires; None disables expiry
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        max_idle_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._sessions: Dict[str, CallerSession] = {}
        self._max_idle_seconds = max_idle_seconds
        self._clock = clock

    def login(self, sender_id: str, user_id: str) -> CallerSession:
        """Create or replace the session for ``sender_id``."""
        now = self._clock()
        session = CallerSession(
            sender_id=sender_id,
            user_id=user_id,
            created_at=now,
            last_activity=now,
        )
        self._sessions[sender_id] = session
        logger.info("Caller session created", sender_id=sender_id, user_id=user_id)
        return session

    def logout(self, sender_id: str) -> bool:
        """Destroy the session for ``sender_id``; returns whether one existed."""
        session = self._sessions.pop(sender_id, None)
        if session is None:
            return False
        logger.info("Caller session destroyed", sender_id=sender_id, user_id=session.user_id)
        return True

    def get_session(self, sender_id: str) -> Optional[CallerSession]:
        session = self._sessions.get(sender_id)
        if session is None:
            return None

        now = self._clock()
        if self._max_idle_seconds is not None and now - session.last_activity > self._max_idle_seconds:
            del self._sessions[sender_id]
            logger.info("Caller session expired", sender_id=sender_id, user_id=session.user_id)
            return None

        session.last_activity = now
        return session

    def is_authenticated(self, caller: CallerIdentity) -> bool:
        session = self.get_session(caller.sender_id)
        if session is None:
            return False
        return caller.user_id is None or caller.user_id == session.user_id

    @property
    def active_sessions(self) -> int:
        return len(self._sessions)


__all__ = [
    "Authenticator",
    "CallerSession",
    "SessionAuthenticator",
]
