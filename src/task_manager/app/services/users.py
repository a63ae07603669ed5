"""Administrative user management."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import BadRequestError, NotFoundError
from ..models import User, UserRole
from ..repositories import TaskRepository, UserRepository

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found."


def parse_role(value: str) -> UserRole:
    """Accept exactly ``"admin"`` or ``"user"``; no trimming, no case folding."""
    for role in UserRole:
        if value == role.value:
            return role
    raise BadRequestError(
        "Role must be either 'admin' or 'user'.",
        details={"role": value},
    )


class UserService:
    """Operations backing the admin-only ``/users`` routes."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)
        self._task_repository = TaskRepository(session)

    @property
    def repository(self) -> UserRepository:
        return self._repository

    async def list_users(
        self,
        *,
        role: UserRole | None = None,
        email: str | None = None,
    ) -> list[User]:
        return await self._repository.search(role=role, email_fragment=email)

    async def get_user(self, user_id: UUID) -> User:
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    async def update_role(self, user_id: UUID, role: str) -> None:
        """Change a user's role.

        The value is validated before any statement reaches the database.
        """
        new_role = parse_role(role)
        if not await self._repository.set_role(user_id, new_role):
            await self._session.rollback()
            raise NotFoundError(USER_NOT_FOUND)
        await self._session.commit()
        logger.info("Changed role of user %s to %s", user_id, new_role.value)

    async def set_banned(self, user_id: UUID, banned: bool) -> None:
        if not await self._repository.set_banned(user_id, banned):
            await self._session.rollback()
            raise NotFoundError(USER_NOT_FOUND)
        await self._session.commit()
        logger.info("Set banned=%s for user %s", banned, user_id)

    async def delete_user(self, user_id: UUID) -> None:
        """Delete a user and every task they own in a single transaction."""
        removed_tasks = await self._task_repository.delete_for_user(user_id)
        if not await self._repository.delete_by_id(user_id):
            await self._session.rollback()
            raise NotFoundError(USER_NOT_FOUND)
        await self._session.commit()
        logger.info("Deleted user %s and %d task(s)", user_id, removed_tasks)


__all__ = ["USER_NOT_FOUND", "UserService", "parse_role"]
