"""User account model."""

from __future__ import annotations

from enum import Enum
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin

NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 320


class UserRole(str, Enum):
    """Roles recognised by the authorization layer."""

    USER = "user"
    ADMIN = "admin"


class UserBase(SQLModel, table=False):
    """Attributes that may be exposed outside the service."""

    name: str = Field(
        max_length=NAME_MAX_LENGTH,
        sa_column=sa.Column(sa.String(length=NAME_MAX_LENGTH), nullable=False),
    )
    email: str = Field(
        max_length=EMAIL_MAX_LENGTH,
        sa_column=sa.Column(sa.String(length=EMAIL_MAX_LENGTH), nullable=False, unique=True),
    )
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=sa.Column(
            sa.Enum(
                UserRole,
                name="user_role",
                native_enum=False,
                values_callable=lambda roles: [role.value for role in roles],
            ),
            nullable=False,
            server_default=UserRole.USER.value,
        ),
    )
    banned: bool = Field(
        default=False,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.false()),
    )


class User(UserBase, TimestampMixin, table=True):
    """Persistent user; the password hash never leaves the service."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    hashed_password: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


__all__ = ["User", "UserBase", "UserRole"]
