"""WebSocket relay service wiring routing, fan-out, and cleanup."""

from __future__ import annotations

import logging

from fastapi import WebSocket, WebSocketDisconnect, status

from src.relay.broadcast import BroadcastEngine
from src.relay.connection import WebSocketConnection
from src.relay.lifecycle import LifecycleManager
from src.relay.registry import ConnectionRegistry
from src.relay.router import DEFAULT_RELAY_PREFIX, InvalidSessionPathError, SessionRouter

LOGGER = logging.getLogger(__name__)


class RelayService:
    """Serve relay websockets grouped into named sessions."""

    def __init__(
        self,
        registry: ConnectionRegistry | None = None,
        prefix: str = DEFAULT_RELAY_PREFIX,
        max_session_name_length: int | None = None,
    ) -> None:
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.router = SessionRouter(
            self.registry,
            prefix=prefix,
            max_session_name_length=max_session_name_length,
        )
        self.engine = BroadcastEngine(self.registry)
        self.lifecycle = LifecycleManager(self.registry)

    def sessions(self) -> dict[str, int]:
        return self.registry.session_sizes()

    async def serve(self, socket: WebSocket, session_path: str) -> None:
        """Run one relay connection from upgrade to close.

        ``session_path`` is the part of the request path after the relay
        prefix, as matched by the application router (independent of any
        ``root_path`` the app is mounted under).
        """
        connection = WebSocketConnection(socket)
        path = f"{self.router.prefix}/{session_path}"
        try:
            session_name = self.router.join(path, connection)
        except InvalidSessionPathError as exc:
            LOGGER.warning("Rejected relay upgrade for %r: %s", path, exc)
            await socket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        try:
            await socket.accept()
            LOGGER.info("Connection joined session %r", session_name)
            while True:
                message = await socket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                payload = message.get("text")
                if payload is None:
                    payload = message.get("bytes")
                if payload is None:
                    continue
                await self.engine.on_message(connection, payload)
        except WebSocketDisconnect:
            pass
        except Exception:  # noqa: BLE001
            LOGGER.exception("Relay connection in session %r failed", session_name)
        finally:
            self.lifecycle.on_close(connection)
