"""Task model."""

from __future__ import annotations

from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin

TITLE_MAX_LENGTH = 255


class TaskBase(SQLModel, table=False):
    """Shared attributes for task models."""

    title: str = Field(
        max_length=TITLE_MAX_LENGTH,
        sa_column=sa.Column(sa.String(length=TITLE_MAX_LENGTH), nullable=False),
    )
    details: str = Field(
        default="",
        sa_column=sa.Column(sa.Text(), nullable=False, server_default=""),
    )
    done: bool = Field(
        default=False,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    image_url: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=2048), nullable=True),
    )
    user_id: UUID = Field(
        sa_column=sa.Column(
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )


class Task(TaskBase, TimestampMixin, table=True):
    """Persistent task owned by exactly one user."""

    __tablename__ = "tasks"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
        sa.Index("ix_tasks_user_id", "user_id"),
        sa.Index("ix_tasks_created_at", "created_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.user_id == user_id


__all__ = ["Task", "TaskBase"]
