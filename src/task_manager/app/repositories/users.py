"""Repository for user accounts."""

from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import User, UserRole
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Concrete repository for ``User`` rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def search(
        self,
        *,
        role: UserRole | None = None,
        email_fragment: str | None = None,
    ) -> list[User]:
        """Return users matching ``role`` exactly and containing ``email_fragment``.

        The e-mail match is a case-insensitive substring search; wildcard
        characters in the fragment are matched literally.
        """
        query = select(User)
        if role is not None:
            query = query.where(User.role == role)
        if email_fragment:
            query = query.where(User.email.icontains(email_fragment, autoescape=True))
        result = await self.session.execute(query.order_by(User.created_at))
        return list(result.scalars().all())

    async def count_by_role(self, role: UserRole) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(User).where(User.role == role)
        )
        return int(result.scalar_one())

    async def set_role(self, user_id: UUID, role: UserRole) -> bool:
        result = await self.session.execute(
            sa.update(User).where(User.id == user_id).values(role=role)
        )
        return result.rowcount > 0

    async def set_banned(self, user_id: UUID, banned: bool) -> bool:
        result = await self.session.execute(
            sa.update(User).where(User.id == user_id).values(banned=banned)
        )
        return result.rowcount > 0

    async def delete_by_id(self, user_id: UUID) -> bool:
        result = await self.session.execute(sa.delete(User).where(User.id == user_id))
        return result.rowcount > 0
