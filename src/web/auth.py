"""Password gate issuing in-memory session tokens."""

from __future__ import annotations

import secrets
import threading
from typing import Literal

from fastapi import HTTPException, Request
from pydantic import BaseModel, ConfigDict

AuthScope = Literal["files", "music"]
SESSION_COOKIE = "sharehub_session"


class PasswordGate:
    """Check shared passwords and remember which scopes a token unlocked."""

    def __init__(self, password: str, music_password: str | None = None) -> None:
        self._passwords: dict[AuthScope, str] = {
            "files": password,
            "music": music_password if music_password is not None else password,
        }
        self._tokens: dict[str, set[AuthScope]] = {}
        self._lock = threading.Lock()

    def login(self, password: str, scope: AuthScope, token: str | None = None) -> str | None:
        """Return a token unlocking ``scope``, or None on a wrong password.

        An existing valid token is extended rather than replaced.
        """
        expected = self._passwords[scope]
        if not secrets.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
            return None
        with self._lock:
            if token is None or token not in self._tokens:
                token = secrets.token_urlsafe(32)
                self._tokens[token] = set()
            self._tokens[token].add(scope)
        return token

    def is_authenticated(self, token: str | None, scope: AuthScope = "files") -> bool:
        if not token:
            return False
        with self._lock:
            return scope in self._tokens.get(token, set())

    def logout(self, token: str | None) -> None:
        if not token:
            return
        with self._lock:
            self._tokens.pop(token, None)


def _gate(request: Request) -> PasswordGate:
    return request.app.state.auth


def require_auth(request: Request) -> None:
    """FastAPI dependency rejecting callers without the files scope."""
    if not _gate(request).is_authenticated(request.cookies.get(SESSION_COOKIE), "files"):
        raise HTTPException(status_code=401, detail="Unauthorized")


def require_music_auth(request: Request) -> None:
    """FastAPI dependency rejecting callers without the music scope."""
    if not _gate(request).is_authenticated(request.cookies.get(SESSION_COOKIE), "music"):
        raise HTTPException(status_code=401, detail="Unauthorized")


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    password: str
