"""Persistence gateway: connection pool and request-scoped sessions."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings
from .base import metadata

logger = logging.getLogger(__name__)


def _engine_options(settings: Settings) -> dict[str, Any]:
    url = make_url(settings.database_url)
    options: dict[str, Any] = {"echo": settings.db_echo, "pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        return options
    options["pool_size"] = settings.db_pool_size
    options["pool_timeout"] = settings.db_pool_timeout
    if url.get_driver_name() == "asyncpg":
        # Bounds every statement issued on a pooled connection.
        options["connect_args"] = {"command_timeout": settings.db_command_timeout}
    return options


class Database:
    """Own the engine (connection pool) and hand out sessions.

    One instance is created by the application factory and stored on
    ``app.state.database``; handlers receive sessions through dependency
    injection rather than importing a module-level engine.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine = create_async_engine(settings.database_url, **_engine_options(settings))
        return cls(engine)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session, rolling back whatever was left uncommitted."""
        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create all tables (tests and local development only)."""
        async with self._engine.begin() as connection:
            await connection.run_sync(metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()
        logger.info("Database connection pool disposed")


__all__ = ["Database"]
