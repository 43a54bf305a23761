from __future__ import annotations

from pathlib import Path

import pytest

from src.web.config import AppConfig, ConfigValidationError, load_config_file, parse_args


def test_parse_args_defaults_read_password_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHAREHUB_PASSWORD", "hunter2")
    monkeypatch.delenv("SHAREHUB_MUSIC_PASSWORD", raising=False)

    cfg = parse_args([])

    assert cfg.port == 5000
    assert cfg.relay_prefix == "/api/ws"
    assert cfg.password == "hunter2"
    assert cfg.effective_music_password == "hunter2"
    assert cfg.max_session_name_length is None


def test_config_file_overrides_defaults_and_flags_override_file(tmp_path: Path) -> None:
    path = tmp_path / "sharehub.yaml"
    path.write_text(
        "port: 8000\nupload_dir: /srv/uploads\nmusic_password: tunes\nmax_session_name_length: 64\n",
        encoding="utf-8",
    )

    cfg = parse_args(["--config", str(path), "--port", "9001"])

    assert cfg.port == 9001
    assert cfg.upload_dir == Path("/srv/uploads")
    assert cfg.effective_music_password == "tunes"
    assert cfg.max_session_name_length == 64


def test_config_file_rejects_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("colour: blue\n", encoding="utf-8")

    with pytest.raises(ConfigValidationError):
        load_config_file(path)


def test_config_file_rejects_non_mapping_and_bad_ints(tmp_path: Path) -> None:
    listing = tmp_path / "list.yaml"
    listing.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigValidationError):
        load_config_file(listing)

    bad_port = tmp_path / "port.yaml"
    bad_port.write_text("port: eighty\n", encoding="utf-8")
    with pytest.raises(ConfigValidationError):
        load_config_file(bad_port)


def test_empty_config_file_keeps_base(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    base = AppConfig(password="x")
    assert load_config_file(path, base=base) == base
