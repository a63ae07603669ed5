"""User-facing Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import UserRole


class UserPublic(BaseModel):
    """Public representation of a user; never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: UserRole
    banned: bool
    created_at: datetime | None = None


class RoleUpdateRequest(BaseModel):
    """Body of ``PUT /users/{id}/role``.

    ``role`` is kept as a plain string so that unsupported values reach the
    service and are rejected there with a 400 before any storage access.
    """

    role: str = Field(examples=["admin"])


class BanUpdateRequest(BaseModel):
    banned: bool


__all__ = ["BanUpdateRequest", "RoleUpdateRequest", "UserPublic"]
