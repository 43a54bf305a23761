"""Session-scoped broadcast relay for CopyAnywhere."""

from src.relay.broadcast import BroadcastEngine
from src.relay.connection import Connection, Payload, WebSocketConnection
from src.relay.lifecycle import LifecycleManager
from src.relay.registry import ConnectionRegistry
from src.relay.router import InvalidSessionPathError, SessionRouter
from src.relay.ws import RelayService

__all__ = [
    "BroadcastEngine",
    "Connection",
    "ConnectionRegistry",
    "InvalidSessionPathError",
    "LifecycleManager",
    "Payload",
    "RelayService",
    "SessionRouter",
    "WebSocketConnection",
]
