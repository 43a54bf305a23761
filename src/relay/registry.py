"""Session name to live connection set bookkeeping."""

from __future__ import annotations

import threading

from src.relay.connection import Connection


class ConnectionRegistry:
    """Track open connections per session; empty sessions are dropped."""

    def __init__(self) -> None:
        self._sessions: dict[str, set[Connection]] = {}
        self._membership: dict[Connection, str] = {}
        self._lock = threading.Lock()

    def register(self, session_name: str, connection: Connection) -> None:
        """Add a connection to a session, creating the session if absent."""
        with self._lock:
            self._sessions.setdefault(session_name, set()).add(connection)
            self._membership[connection] = session_name

    def unregister(self, session_name: str, connection: Connection) -> None:
        """Remove a connection; unknown pairs are ignored."""
        with self._lock:
            members = self._sessions.get(session_name)
            if members is None:
                return
            members.discard(connection)
            if self._membership.get(connection) == session_name:
                del self._membership[connection]
            if not members:
                del self._sessions[session_name]

    def members_of(self, session_name: str) -> frozenset[Connection]:
        """Return a snapshot of a session's members (empty when unknown)."""
        with self._lock:
            return frozenset(self._sessions.get(session_name, ()))

    def session_of(self, connection: Connection) -> str | None:
        with self._lock:
            return self._membership.get(connection)

    def session_sizes(self) -> dict[str, int]:
        with self._lock:
            return {name: len(members) for name, members in self._sessions.items()}

    def __contains__(self, session_name: object) -> bool:
        with self._lock:
            return session_name in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
