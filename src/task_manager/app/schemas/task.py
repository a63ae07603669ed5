"""Task-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

TASK_READ_EXAMPLE = {
    "id": "6f1c2a8e-3f1d-4f6b-9c1e-2d7a4b0e9f10",
    "title": "Buy milk",
    "details": "Two litres, semi-skimmed.",
    "done": False,
    "image_url": None,
    "user_id": "0b8e7d9a-1c2f-4e3d-8a5b-6c7d8e9f0a1b",
    "created_at": "2024-01-01T12:00:00Z",
    "updated_at": "2024-01-01T12:00:00Z",
}


class TaskRead(BaseModel):
    """Public representation of a task."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: UUID
    title: str
    details: str
    done: bool
    image_url: str | None = None
    user_id: UUID
    created_at: datetime
    updated_at: datetime


class TaskWithOwnerRead(TaskRead):
    """Task joined with the owner's e-mail for administrative listings."""

    email: str


class UploadResponse(BaseModel):
    message: str = "Image uploaded"
    url: str


__all__ = ["TaskRead", "TaskWithOwnerRead", "UploadResponse"]
