"""Best-effort fan-out of inbound messages to session peers."""

from __future__ import annotations

import logging

from src.relay.connection import Connection, Payload
from src.relay.registry import ConnectionRegistry

LOGGER = logging.getLogger(__name__)


class BroadcastEngine:
    """Deliver each message to every other open member of the sender's session."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    async def on_message(self, connection: Connection, payload: Payload) -> int:
        """Send ``payload`` unmodified to the sender's peers.

        Closed peers are skipped and a failed send never stops delivery to
        the rest. Returns the number of peers the payload was written to.
        """
        session_name = self._registry.session_of(connection)
        if session_name is None:
            return 0

        delivered = 0
        for member in self._registry.members_of(session_name):
            if member is connection or not member.is_open:
                continue
            try:
                await member.send(payload)
            except Exception as exc:  # noqa: BLE001
                LOGGER.debug("Dropped message to %r in session %r: %s", member, session_name, exc)
                continue
            delivered += 1
        return delivered
