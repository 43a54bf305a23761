"""Response schemas for file endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FileInfo(BaseModel):
    """One stored file as listed to clients."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    size: int
    upload_date: datetime = Field(alias="uploadDate")


class UploadResponse(BaseModel):
    success: bool = True
    filename: str
