"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.security import InvalidTokenError, Principal, verify_token
from .db.session import Database
from .errors import AuthenticationError, PermissionDeniedError
from .services.storage import ImageStorage

SettingsDependency = Annotated[Settings, Depends(get_settings)]

_bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by /login")


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db_session(
    database: Annotated[Database, Depends(get_database)],
) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a request-scoped database session."""

    async with database.session() as session:
        yield session


DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> str:
    """Return the raw token from ``Authorization: Bearer <token>``.

    A missing header, another scheme or an empty credential all yield 401.
    """

    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError("Missing bearer token.")
    return credentials.credentials.strip()


BearerTokenDependency = Annotated[str, Depends(get_bearer_token)]


def get_principal(token: BearerTokenDependency, settings: SettingsDependency) -> Principal:
    """Verify the bearer token and expose the caller's identity."""

    try:
        claims = verify_token(token, settings)
    except InvalidTokenError as exc:
        raise AuthenticationError(exc.reason) from exc
    return Principal.from_claims(claims)


PrincipalDependency = Annotated[Principal, Depends(get_principal)]


def require_admin(principal: PrincipalDependency) -> Principal:
    if not principal.is_admin:
        raise PermissionDeniedError("Administrator role required.")
    return principal


AdminDependency = Annotated[Principal, Depends(require_admin)]


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage


ImageStorageDependency = Annotated[ImageStorage, Depends(get_image_storage)]


__all__ = [
    "AdminDependency",
    "BearerTokenDependency",
    "DatabaseSessionDependency",
    "ImageStorageDependency",
    "PrincipalDependency",
    "SettingsDependency",
    "get_bearer_token",
    "get_database",
    "get_db_session",
    "get_image_storage",
    "get_principal",
    "require_admin",
]
