"""Aggregate, read-only views for administrators."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ServerError
from ..models import Task, UserRole
from ..repositories import TaskRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StatsResult:
    total_users: int
    admins: int
    total_tasks: int


class AdminService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._users = UserRepository(session)
        self._tasks = TaskRepository(session)

    async def stats(self) -> StatsResult:
        """Count users, admins and tasks inside one transaction.

        A failure of any of the three counts fails the whole call.
        """
        try:
            result = StatsResult(
                total_users=await self._users.count(),
                admins=await self._users.count_by_role(UserRole.ADMIN),
                total_tasks=await self._tasks.count(),
            )
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise ServerError("Could not compute statistics.") from exc
        return result

    async def list_tasks_with_owners(self) -> list[tuple[Task, str]]:
        return await self._tasks.list_with_owner_email()


__all__ = ["AdminService", "StatsResult"]
