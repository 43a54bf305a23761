from __future__ import annotations

import asyncio
from typing import Any

from src.relay.registry import ConnectionRegistry
from src.relay.ws import RelayService


class _Conn:
    is_open = True

    async def send(self, payload) -> None:  # noqa: ANN001
        del payload


class _FakeSocket:
    """Minimal websocket that records what the relay did while it was open."""

    def __init__(self, registry: ConnectionRegistry, scope: dict[str, Any]) -> None:
        self.scope = scope
        self.client = None
        self.accepted = False
        self.closed_code: int | None = None
        self.sizes_while_open: dict[str, int] | None = None
        self._registry = registry

    async def accept(self) -> None:
        self.accepted = True

    async def close(self, code: int = 1000) -> None:
        self.closed_code = code

    async def receive(self) -> dict[str, Any]:
        self.sizes_while_open = self._registry.session_sizes()
        return {"type": "websocket.disconnect", "code": 1000}


def test_injected_registry_is_used_even_when_empty() -> None:
    registry = ConnectionRegistry()
    service = RelayService(registry=registry)

    assert service.registry is registry
    service.router.join("/api/ws/room", _Conn())

    assert registry.session_sizes() == {"room": 1}
    assert service.sessions() == {"room": 1}


def test_serve_joins_injected_registry_and_cleans_up() -> None:
    registry = ConnectionRegistry()
    service = RelayService(registry=registry)
    socket = _FakeSocket(registry, {"path": "/hub/api/ws/room", "root_path": "/hub"})

    asyncio.run(service.serve(socket, "room"))

    assert socket.accepted
    assert socket.sizes_while_open == {"room": 1}
    assert registry.session_sizes() == {}


def test_serve_rejects_empty_session_without_accepting() -> None:
    registry = ConnectionRegistry()
    service = RelayService(registry=registry)
    socket = _FakeSocket(registry, {"path": "/api/ws/", "root_path": ""})

    asyncio.run(service.serve(socket, ""))

    assert not socket.accepted
    assert socket.closed_code == 1008
    assert socket.sizes_while_open is None
    assert len(registry) == 0
