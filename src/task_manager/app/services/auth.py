"""Authentication service encapsulating registration, login and refresh."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.concurrency import run_in_threadpool

from ..core.config import Settings
from ..core.security import (
    GeneratedToken,
    InvalidTokenError,
    create_access_token,
    get_password_hash,
    refresh_access_token,
    verify_password,
)
from ..errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    PermissionDeniedError,
    ServerError,
)
from ..models import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH, User, UserRole
from ..repositories import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials."


class AuthService:
    """High-level authentication workflows."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._repository = UserRepository(session)

    async def signup(self, *, name: str, email: str, password: str) -> User:
        """Register a new account with the ``user`` role.

        Name and e-mail are trimmed; uniqueness of the e-mail is left to the
        database constraint so concurrent signups cannot both succeed.
        """

        name = name.strip()
        email = email.strip()
        if not name or not email or not password:
            raise BadRequestError("Name, email and password are required.")
        if len(name) > NAME_MAX_LENGTH or len(email) > EMAIL_MAX_LENGTH:
            raise BadRequestError("Name or email is too long.")

        hashed_password = await run_in_threadpool(
            get_password_hash,
            password,
            rounds=self._settings.password_hash_rounds,
        )
        user = User(name=name, email=email, hashed_password=hashed_password, role=UserRole.USER)
        try:
            await self._repository.add(user)
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError("Email is already registered.") from exc
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise ServerError("Could not create user.") from exc
        await self._repository.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    async def authenticate(self, *, email: str, password: str) -> User:
        """Return the user owning ``email`` when ``password`` matches.

        A banned account is refused before the password is looked at.
        """

        user = await self._repository.get_by_email(email.strip())
        if user is None:
            raise AuthenticationError(INVALID_CREDENTIALS)
        if user.banned:
            raise PermissionDeniedError("Account is banned.")
        matches = await run_in_threadpool(verify_password, password, user.hashed_password)
        if not matches:
            raise AuthenticationError(INVALID_CREDENTIALS)
        return user

    async def login(self, *, email: str, password: str) -> GeneratedToken:
        user = await self.authenticate(email=email, password=password)
        return create_access_token(subject=user.id, role=user.role, settings=self._settings)

    def refresh(self, token: str) -> GeneratedToken:
        """Exchange a still-valid token for one with a full lifetime."""

        try:
            return refresh_access_token(token, self._settings)
        except InvalidTokenError as exc:
            raise AuthenticationError(exc.reason) from exc


__all__ = ["AuthService", "INVALID_CREDENTIALS"]
