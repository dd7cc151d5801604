# =============================================================================
# GitHub MCP SSE Gateway - Session Manager
# =============================================================================
"""
Registry of live SSE sessions.

A session exists from the moment a client opens `/sse` until its stream
closes. The manager is the only owner of sessions; everything else looks
them up by identifier. Each session's channel calls back into `destroy`
when it closes, so disconnects, write failures and shutdown all deregister
the session the same way.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, Optional

from .transport import TransportChannel

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    """
    Raised when a session identifier does not match a live session.

    Attributes:
        session_id: The identifier that was looked up.
    """

    def __init__(self, session_id: str) -> None:
        super().__init__(f"No active session: {session_id}")
        self.session_id = session_id


@dataclass
class Session:
    """
    One client connection.

    Attributes:
        id: Opaque identifier, unique among live sessions.
        channel: The session's outbound SSE channel.
        created_at: When the stream was opened (UTC).
    """

    id: str
    channel: TransportChannel
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionManager:
    """
    Create, look up and destroy sessions.

    Attributes:
        endpoint: Path clients POST their messages to.
        keepalive_interval: Heartbeat interval given to every channel.
    """

    def __init__(self, endpoint: str = "/message", keepalive_interval: float = 10.0) -> None:
        self.endpoint = endpoint
        self.keepalive_interval = keepalive_interval
        self._sessions: dict[str, Session] = {}

    def _new_id(self) -> str:
        session_id = uuid.uuid4().hex
        while session_id in self._sessions:
            session_id = uuid.uuid4().hex
        return session_id

    def create(self) -> Session:
        """
        Register a new session and open its channel.

        Must be called from a running event loop (the channel starts its
        keep-alive task).

        Returns:
            The new, open session.
        """
        session_id = self._new_id()
        channel = TransportChannel(
            session_id,
            endpoint=f"{self.endpoint}?sessionId={session_id}",
            keepalive_interval=self.keepalive_interval,
            on_close=self.destroy,
        )
        session = Session(id=session_id, channel=channel)
        self._sessions[session_id] = session
        channel.open()

        logger.info(f"Session {session_id} opened ({len(self._sessions)} active)")
        return session

    def lookup(self, session_id: Optional[str]) -> Optional[Session]:
        """Return the live session for `session_id`, or None."""
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def get(self, session_id: str) -> Session:
        """
        Return the live session for `session_id`.

        Raises:
            SessionNotFoundError: If no such session is live.
        """
        session = self.lookup(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def destroy(self, session_id: str) -> bool:
        """
        Deregister a session and close its channel. Idempotent.

        Returns:
            True if a live session was removed.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        session.channel.close()
        logger.info(f"Session {session_id} closed ({len(self._sessions)} active)")
        return True

    def close_all(self) -> None:
        """Destroy every live session (server shutdown)."""
        for session_id in list(self._sessions):
            self.destroy(session_id)

    def ids(self) -> list[str]:
        return list(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)
