"""Smoke check for the CopyAnywhere relay against a running server."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from datetime import UTC, datetime
from uuid import uuid4

import httpx
import websockets


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a relay fan-out smoke test")
    parser.add_argument("--base-url", default="http://127.0.0.1:5000")
    parser.add_argument("--relay-prefix", default="/api/ws")
    parser.add_argument("--session", default=None)
    parser.add_argument("--startup-timeout-s", type=float, default=30.0)
    parser.add_argument("--recv-timeout-s", type=float, default=5.0)
    parser.add_argument("--poll-interval-s", type=float, default=0.5)
    return parser.parse_args(argv)


def _relay_ws_url(base_url: str, prefix: str, session: str) -> str:
    path = f"/{prefix.strip('/')}/{session}"
    if base_url.startswith("https://"):
        return f"wss://{base_url.removeprefix('https://').rstrip('/')}{path}"
    if base_url.startswith("http://"):
        return f"ws://{base_url.removeprefix('http://').rstrip('/')}{path}"
    raise ValueError("base-url must start with http:// or https://")


def _wait_for_http_health(*, base_url: str, timeout_s: float, poll_interval_s: float) -> None:
    deadline = time.monotonic() + timeout_s
    last_error: Exception | None = None
    with httpx.Client(timeout=5.0) as client:
        while time.monotonic() < deadline:
            try:
                if client.get(f"{base_url.rstrip('/')}/health").status_code == 200:
                    return
            except httpx.HTTPError as exc:
                last_error = exc
            time.sleep(poll_interval_s)
    if last_error is not None:
        raise TimeoutError(f"Timed out waiting for health: {last_error}") from last_error
    raise TimeoutError("Timed out waiting for health")


async def _assert_peer_fan_out(*, ws_url: str, recv_timeout_s: float) -> None:
    message = json.dumps(
        {"text": f"smoke-{uuid4()}", "timestamp": datetime.now(UTC).isoformat()}
    )
    async with websockets.connect(ws_url) as sender, websockets.connect(ws_url) as receiver:
        # Both joins complete before the handshake returns.
        await sender.send(message)
        received = await asyncio.wait_for(receiver.recv(), timeout=recv_timeout_s)
        if received != message:
            raise RuntimeError(f"peer received {received!r}, expected {message!r}")
        try:
            echoed = await asyncio.wait_for(sender.recv(), timeout=0.5)
        except TimeoutError:
            return
        raise RuntimeError(f"sender received its own message back: {echoed!r}")


async def _assert_session_isolation(
    *,
    base_url: str,
    prefix: str,
    session: str,
    recv_timeout_s: float,
) -> None:
    other_url = _relay_ws_url(base_url, prefix, f"{session}-other")
    ws_url = _relay_ws_url(base_url, prefix, session)
    async with websockets.connect(ws_url) as sender, websockets.connect(other_url) as outsider:
        await sender.send("isolated")
        try:
            leaked = await asyncio.wait_for(outsider.recv(), timeout=min(recv_timeout_s, 1.0))
        except TimeoutError:
            return
        raise RuntimeError(f"message leaked across sessions: {leaked!r}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    session = args.session or f"smoke-{int(time.time())}"
    _wait_for_http_health(
        base_url=args.base_url,
        timeout_s=args.startup_timeout_s,
        poll_interval_s=args.poll_interval_s,
    )
    asyncio.run(
        _assert_peer_fan_out(
            ws_url=_relay_ws_url(args.base_url, args.relay_prefix, session),
            recv_timeout_s=args.recv_timeout_s,
        )
    )
    asyncio.run(
        _assert_session_isolation(
            base_url=args.base_url,
            prefix=args.relay_prefix,
            session=session,
            recv_timeout_s=args.recv_timeout_s,
        )
    )
    print(f"relay-smoke: ok (session={session})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
