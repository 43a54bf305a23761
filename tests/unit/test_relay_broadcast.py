from __future__ import annotations

import asyncio

from src.relay.broadcast import BroadcastEngine
from src.relay.lifecycle import LifecycleManager
from src.relay.registry import ConnectionRegistry


class _FakeConnection:
    def __init__(self, *, is_open: bool = True, fail: bool = False) -> None:
        self.is_open = is_open
        self.fail = fail
        self.received: list[str | bytes] = []

    async def send(self, payload: str | bytes) -> None:
        if self.fail:
            raise RuntimeError("peer went away")
        self.received.append(payload)


def _join(registry: ConnectionRegistry, session: str, count: int) -> list[_FakeConnection]:
    members = [_FakeConnection() for _ in range(count)]
    for member in members:
        registry.register(session, member)
    return members


def test_message_reaches_peer_but_not_sender() -> None:
    registry = ConnectionRegistry()
    engine = BroadcastEngine(registry)
    a, b = _join(registry, "standup", 2)

    delivered = asyncio.run(engine.on_message(a, "hello"))

    assert delivered == 1
    assert b.received == ["hello"]
    assert a.received == []


def test_message_fans_out_to_every_other_member() -> None:
    registry = ConnectionRegistry()
    engine = BroadcastEngine(registry)
    a, b, c = _join(registry, "room1", 3)

    asyncio.run(engine.on_message(b, "x"))

    assert a.received == ["x"]
    assert c.received == ["x"]
    assert b.received == []


def test_sessions_are_isolated() -> None:
    registry = ConnectionRegistry()
    engine = BroadcastEngine(registry)
    (alpha,) = _join(registry, "alpha", 1)
    (beta,) = _join(registry, "beta", 1)

    asyncio.run(engine.on_message(alpha, "secret"))

    assert beta.received == []


def test_solo_member_send_is_a_quiet_no_op() -> None:
    registry = ConnectionRegistry()
    engine = BroadcastEngine(registry)
    (solo,) = _join(registry, "solo", 1)

    assert asyncio.run(engine.on_message(solo, "anyone?")) == 0
    assert registry.members_of("solo") == frozenset({solo})


def test_payload_is_forwarded_unmodified() -> None:
    registry = ConnectionRegistry()
    engine = BroadcastEngine(registry)
    a, b = _join(registry, "blob", 2)
    text = '{"text": "copy me", "timestamp": "2024-01-01T00:00:00Z"}'
    raw = b"\x00\xffnot-json"

    asyncio.run(engine.on_message(a, text))
    asyncio.run(engine.on_message(a, raw))

    assert b.received == [text, raw]


def test_failing_or_closed_peer_does_not_block_others() -> None:
    registry = ConnectionRegistry()
    engine = BroadcastEngine(registry)
    sender = _FakeConnection()
    broken = _FakeConnection(fail=True)
    closed = _FakeConnection(is_open=False)
    healthy = _FakeConnection()
    for conn in (sender, broken, closed, healthy):
        registry.register("r", conn)

    delivered = asyncio.run(engine.on_message(sender, "ping"))

    assert delivered == 1
    assert healthy.received == ["ping"]
    assert closed.received == []
    assert registry.members_of("r") == frozenset({sender, broken, closed, healthy})


def test_departed_member_stops_receiving_and_rejoin_starts_fresh() -> None:
    registry = ConnectionRegistry()
    engine = BroadcastEngine(registry)
    lifecycle = LifecycleManager(registry)
    a, b = _join(registry, "r", 2)

    lifecycle.on_close(a)
    assert asyncio.run(engine.on_message(b, "ping")) == 0
    assert a.received == []

    rejoined = _FakeConnection()
    registry.register("r", rejoined)
    asyncio.run(engine.on_message(rejoined, "back"))

    assert b.received == ["back"]
    assert registry.members_of("r") == frozenset({b, rejoined})


def test_unregistered_sender_is_ignored() -> None:
    registry = ConnectionRegistry()
    engine = BroadcastEngine(registry)
    (member,) = _join(registry, "r", 1)

    assert asyncio.run(engine.on_message(_FakeConnection(), "stray")) == 0
    assert member.received == []
