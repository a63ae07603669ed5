"""Administrative response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AdminStats(BaseModel):
    total_users: int = Field(ge=0)
    admins: int = Field(ge=0)
    total_tasks: int = Field(ge=0)


__all__ = ["AdminStats"]
