from __future__ import annotations

from src.relay.lifecycle import LifecycleManager
from src.relay.registry import ConnectionRegistry


class _Conn:
    is_open = True

    async def send(self, payload) -> None:  # noqa: ANN001
        del payload


def test_on_close_reclaims_empty_session() -> None:
    registry = ConnectionRegistry()
    lifecycle = LifecycleManager(registry)
    a, b = _Conn(), _Conn()
    registry.register("standup", a)
    registry.register("standup", b)

    assert lifecycle.on_close(a) == "standup"
    assert registry.session_sizes() == {"standup": 1}

    assert lifecycle.on_close(b) == "standup"
    assert "standup" not in registry


def test_on_close_twice_matches_once() -> None:
    registry = ConnectionRegistry()
    lifecycle = LifecycleManager(registry)
    a, b = _Conn(), _Conn()
    registry.register("r", a)
    registry.register("r", b)

    lifecycle.on_close(a)
    assert lifecycle.on_close(a) is None
    assert registry.members_of("r") == frozenset({b})


def test_session_name_reused_after_all_members_leave() -> None:
    registry = ConnectionRegistry()
    lifecycle = LifecycleManager(registry)
    old = _Conn()
    registry.register("r", old)
    lifecycle.on_close(old)

    fresh = _Conn()
    registry.register("r", fresh)

    assert registry.members_of("r") == frozenset({fresh})
