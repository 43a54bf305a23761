"""Request and response schemas for notes and folders."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class _NotesModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoteCreate(_NotesModel):
    """Payload for saving a new note."""

    model_config = ConfigDict(extra="forbid")

    content: str
    folder_id: int | None = None

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be blank")
        return value


class NoteUpdate(_NotesModel):
    """Partial note edit; omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    content: str | None = None
    folder_id: int | None = None

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("content must not be blank")
        return value


class Note(_NotesModel):
    id: int
    content: str
    folder_id: int | None = None
    created_at: datetime
    updated_at: datetime


class FolderCreate(_NotesModel):
    model_config = ConfigDict(extra="forbid")

    name: str

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class Folder(_NotesModel):
    id: int
    name: str
    created_at: datetime
    note_count: int = 0
