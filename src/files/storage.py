"""Filesystem-backed store for uploaded files."""

from __future__ import annotations

import logging
import mimetypes
import shutil
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from src.files.schema import FileInfo

LOGGER = logging.getLogger(__name__)

_COPY_CHUNK_BYTES = 1024 * 1024


class InvalidFileNameError(ValueError):
    """Raised when a file name is empty or escapes the upload directory."""


def _check_name(filename: str) -> str:
    if not filename or filename in {".", ".."}:
        raise InvalidFileNameError("file name must not be empty")
    if "/" in filename or "\\" in filename or "\x00" in filename:
        raise InvalidFileNameError(f"file name '{filename}' must not contain path separators")
    return filename


class FileStore:
    """Store uploads as ``<epoch-millis>-<original name>`` in one directory."""

    def __init__(self, upload_dir: Path) -> None:
        self.upload_dir = upload_dir
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def save(self, original_name: str | None, stream: BinaryIO) -> Path:
        """Copy an upload stream to disk and return the stored path."""
        base_name = Path((original_name or "").replace("\\", "/")).name
        _check_name(base_name)
        target = self.upload_dir / f"{int(time.time() * 1000)}-{base_name}"
        with target.open("wb") as handle:
            shutil.copyfileobj(stream, handle, _COPY_CHUNK_BYTES)
        LOGGER.info("Stored upload %s (%d bytes)", target.name, target.stat().st_size)
        return target

    def list_files(self) -> list[FileInfo]:
        """Return stored files, newest first."""
        files: list[FileInfo] = []
        for path in self.upload_dir.iterdir():
            if not path.is_file():
                continue
            stats = path.stat()
            files.append(
                FileInfo(
                    name=path.name,
                    size=stats.st_size,
                    upload_date=datetime.fromtimestamp(stats.st_mtime, tz=UTC),
                )
            )
        files.sort(key=lambda item: (item.upload_date, item.name), reverse=True)
        return files

    def list_audio(self) -> list[FileInfo]:
        return [item for item in self.list_files() if media_type_for(item.name).startswith("audio/")]

    def resolve(self, filename: str) -> Path:
        """Return the on-disk path for a stored file name."""
        path = self.upload_dir / _check_name(filename)
        if not path.is_file():
            raise FileNotFoundError(filename)
        return path


def media_type_for(filename: str) -> str:
    media_type, _ = mimetypes.guess_type(filename)
    return media_type or "application/octet-stream"
