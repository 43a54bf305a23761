"""Application configuration, YAML overrides, and CLI parsing."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

_PATH_FIELDS = {"upload_dir", "database_path"}
_INT_FIELDS = {"port", "max_session_name_length"}


class ConfigValidationError(ValueError):
    """Raised when a configuration file is invalid."""


def _default_password() -> str:
    return os.environ.get("SHAREHUB_PASSWORD", "admin")


@dataclass(frozen=True)
class AppConfig:
    """Resolved settings for the web application."""

    host: str = "0.0.0.0"
    port: int = 5000
    upload_dir: Path = Path("uploads")
    database_path: Path = Path("data/notes.db")
    password: str = "admin"
    music_password: str | None = None
    relay_prefix: str = "/api/ws"
    max_session_name_length: int | None = None
    log_level: str = "INFO"

    @property
    def effective_music_password(self) -> str:
        """Music gate falls back to the main password when unset."""
        return self.music_password if self.music_password is not None else self.password


def _coerce(key: str, value: Any) -> Any:
    if value is None:
        return None
    if key in _PATH_FIELDS:
        return Path(value)
    if key in _INT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigValidationError(f"config key '{key}' must be an integer")
        return value
    return str(value)


def load_config_file(path: Path, base: AppConfig | None = None) -> AppConfig:
    """Overlay a YAML mapping onto ``base`` (defaults when omitted)."""
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigValidationError(f"config file must contain a mapping: {path}")

    known = {field.name for field in fields(AppConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigValidationError(f"unknown config keys in {path}: {unknown}")

    overrides = {key: _coerce(key, value) for key, value in raw.items()}
    return replace(base or AppConfig(), **overrides)


def parse_args(argv: list[str] | None = None) -> AppConfig:
    """Parse CLI args into a resolved config; explicit flags beat the config file."""
    parser = argparse.ArgumentParser(
        prog="sharehub",
        description="ShareHub file sharing, notes, music and CopyAnywhere relay",
    )
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--upload-dir", type=Path, default=None)
    parser.add_argument("--database-path", type=Path, default=None)
    parser.add_argument("--relay-prefix", default=None)
    parser.add_argument("--max-session-name-length", type=int, default=None)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    config = AppConfig(
        password=_default_password(),
        music_password=os.environ.get("SHAREHUB_MUSIC_PASSWORD"),
    )
    if args.config is not None:
        config = load_config_file(args.config, base=config)

    flag_overrides = {
        "host": args.host,
        "port": args.port,
        "upload_dir": args.upload_dir,
        "database_path": args.database_path,
        "relay_prefix": args.relay_prefix,
        "max_session_name_length": args.max_session_name_length,
        "log_level": args.log_level,
    }
    return replace(config, **{key: value for key, value in flag_overrides.items() if value is not None})
