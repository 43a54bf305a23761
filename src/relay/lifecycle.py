"""Connection close handling for the relay."""

from __future__ import annotations

import logging

from src.relay.connection import Connection
from src.relay.registry import ConnectionRegistry

LOGGER = logging.getLogger(__name__)


class LifecycleManager:
    """Unregister closed connections and let empty sessions be reclaimed."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    def on_close(self, connection: Connection) -> str | None:
        """Drop the connection from its session; repeated calls are no-ops."""
        session_name = self._registry.session_of(connection)
        if session_name is None:
            return None
        self._registry.unregister(session_name, connection)
        if session_name in self._registry:
            LOGGER.info("Connection left session %r", session_name)
        else:
            LOGGER.info("Session %r closed (no members left)", session_name)
        return session_name
