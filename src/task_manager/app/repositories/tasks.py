"""Repository for tasks."""

from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Task, User
from .base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` persistence operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    async def list(self, *, user_id: UUID | None = None) -> list[Task]:
        """Return tasks oldest first, optionally restricted to one owner."""
        query = select(Task)
        if user_id is not None:
            query = query.where(Task.user_id == user_id)
        result = await self.session.execute(query.order_by(Task.created_at))
        return list(result.scalars().all())

    async def list_with_owner_email(self) -> list[tuple[Task, str]]:
        """Return every task paired with its owner's e-mail, newest first."""
        query = (
            select(Task, User.email)
            .join(User, Task.user_id == User.id)
            .order_by(Task.created_at.desc())
        )
        result = await self.session.execute(query)
        return [(task, email) for task, email in result.all()]

    async def delete(self, instance: Task) -> None:
        await self.session.delete(instance)
        await self.session.flush()

    async def delete_for_user(self, user_id: UUID) -> int:
        """Delete every task owned by ``user_id`` and return how many went."""
        result = await self.session.execute(sa.delete(Task).where(Task.user_id == user_id))
        return int(result.rowcount or 0)
