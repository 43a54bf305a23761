"""Duplex connection handle consumed by the relay."""

from __future__ import annotations

from typing import Protocol

from fastapi import WebSocket
from starlette.websockets import WebSocketState

Payload = str | bytes


class Connection(Protocol):
    """What the relay needs from a transport connection."""

    @property
    def is_open(self) -> bool: ...

    async def send(self, payload: Payload) -> None: ...


class WebSocketConnection:
    """Adapt a FastAPI websocket to the relay ``Connection`` protocol."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.application_state == WebSocketState.CONNECTED
            and self.websocket.client_state == WebSocketState.CONNECTED
        )

    async def send(self, payload: Payload) -> None:
        if isinstance(payload, bytes):
            await self.websocket.send_bytes(payload)
        else:
            await self.websocket.send_text(payload)

    def __repr__(self) -> str:
        client = self.websocket.client
        peer = f"{client.host}:{client.port}" if client else "unknown"
        return f"WebSocketConnection(peer={peer})"
