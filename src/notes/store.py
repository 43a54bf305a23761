"""Notes and folders data access."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from src.notes.db import (
    FolderRecord,
    NoteRecord,
    create_session_factory,
    sqlite_url_from_path,
    utc_now,
)
from src.notes.schema import Folder, FolderCreate, Note, NoteCreate, NoteUpdate


class NoteNotFoundError(LookupError):
    """Raised when a note id does not exist."""


class FolderNotFoundError(LookupError):
    """Raised when a folder id does not exist."""


class DuplicateFolderError(ValueError):
    """Raised when a folder name is already taken."""


def _to_note(record: NoteRecord) -> Note:
    return Note(
        id=record.id,
        content=record.content,
        folder_id=record.folder_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class NoteStore:
    """SQLite-backed notes and folders store."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_sqlite_path(cls, path: Path) -> NoteStore:
        session_factory = create_session_factory(sqlite_url_from_path(path))
        return cls(session_factory)

    def create_note(self, payload: NoteCreate) -> Note:
        """Persist a new note, optionally inside a folder."""
        with self._session_factory() as session:
            if payload.folder_id is not None and session.get(FolderRecord, payload.folder_id) is None:
                raise FolderNotFoundError(f"folder {payload.folder_id} not found")
            now = utc_now()
            record = NoteRecord(
                content=payload.content,
                folder_id=payload.folder_id,
                created_at=now,
                updated_at=now,
            )
            session.add(record)
            session.commit()
            return _to_note(record)

    def list_notes(self, folder_id: int | None = None) -> list[Note]:
        """Return notes newest first, optionally limited to one folder."""
        query = select(NoteRecord).order_by(NoteRecord.created_at.desc(), NoteRecord.id.desc())
        if folder_id is not None:
            query = query.where(NoteRecord.folder_id == folder_id)
        with self._session_factory() as session:
            rows = session.scalars(query).all()
        return [_to_note(row) for row in rows]

    def get_note(self, note_id: int) -> Note:
        with self._session_factory() as session:
            record = session.get(NoteRecord, note_id)
            if record is None:
                raise NoteNotFoundError(f"note {note_id} not found")
            return _to_note(record)

    def update_note(self, note_id: int, payload: NoteUpdate) -> Note:
        """Apply the fields present in ``payload``; ``folder_id=None`` unfiles the note."""
        changes = payload.model_dump(exclude_unset=True)
        with self._session_factory() as session:
            record = session.get(NoteRecord, note_id)
            if record is None:
                raise NoteNotFoundError(f"note {note_id} not found")
            if "folder_id" in changes:
                folder_id = changes["folder_id"]
                if folder_id is not None and session.get(FolderRecord, folder_id) is None:
                    raise FolderNotFoundError(f"folder {folder_id} not found")
                record.folder_id = folder_id
            if changes.get("content") is not None:
                record.content = changes["content"]
            record.updated_at = utc_now()
            session.commit()
            return _to_note(record)

    def delete_note(self, note_id: int) -> None:
        with self._session_factory() as session:
            record = session.get(NoteRecord, note_id)
            if record is None:
                raise NoteNotFoundError(f"note {note_id} not found")
            session.delete(record)
            session.commit()

    def create_folder(self, payload: FolderCreate) -> Folder:
        with self._session_factory() as session:
            record = FolderRecord(name=payload.name, created_at=utc_now())
            session.add(record)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateFolderError(f"folder '{payload.name}' already exists") from exc
            return Folder(id=record.id, name=record.name, created_at=record.created_at)

    def list_folders(self) -> list[Folder]:
        """Return folders by name with their note counts."""
        query = (
            select(FolderRecord, func.count(NoteRecord.id))
            .outerjoin(NoteRecord, NoteRecord.folder_id == FolderRecord.id)
            .group_by(FolderRecord.id)
            .order_by(FolderRecord.name)
        )
        with self._session_factory() as session:
            rows = session.execute(query).all()
        return [
            Folder(id=folder.id, name=folder.name, created_at=folder.created_at, note_count=count)
            for folder, count in rows
        ]

    def delete_folder(self, folder_id: int) -> None:
        """Delete a folder; its notes are kept and become unfiled."""
        with self._session_factory() as session:
            record = session.get(FolderRecord, folder_id)
            if record is None:
                raise FolderNotFoundError(f"folder {folder_id} not found")
            session.execute(
                update(NoteRecord).where(NoteRecord.folder_id == folder_id).values(folder_id=None)
            )
            session.delete(record)
            session.commit()
