"""Map relay upgrade request paths to session names."""

from __future__ import annotations

from src.relay.connection import Connection
from src.relay.registry import ConnectionRegistry

DEFAULT_RELAY_PREFIX = "/api/ws"


class InvalidSessionPathError(ValueError):
    """Raised when an upgrade path does not name exactly one session."""


class SessionRouter:
    """Extract session names from upgrade paths and join the registry."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        prefix: str = DEFAULT_RELAY_PREFIX,
        max_session_name_length: int | None = None,
    ) -> None:
        self._registry = registry
        self.prefix = "/" + prefix.strip("/")
        self.max_session_name_length = max_session_name_length

    def route(self, path: str) -> str:
        """Return the session name for ``<prefix>/<session>``.

        The trailing segment is taken verbatim (case-sensitive, no
        normalization). Empty, missing or nested segments are rejected.
        """
        head = self.prefix + "/"
        if not path.startswith(head):
            raise InvalidSessionPathError(f"path '{path}' is outside relay prefix '{self.prefix}'")
        session_name = path[len(head) :]
        if not session_name:
            raise InvalidSessionPathError(f"path '{path}' has an empty session segment")
        if "/" in session_name:
            raise InvalidSessionPathError(f"path '{path}' must contain exactly one session segment")
        if (
            self.max_session_name_length is not None
            and len(session_name) > self.max_session_name_length
        ):
            raise InvalidSessionPathError(
                f"session name exceeds {self.max_session_name_length} characters"
            )
        return session_name

    def join(self, path: str, connection: Connection) -> str:
        """Route the path and subscribe the connection; nothing is registered on rejection."""
        session_name = self.route(path)
        self._registry.register(session_name, connection)
        return session_name
