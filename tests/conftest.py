from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

from collections.abc import AsyncIterator, Awaitable, Callable  # noqa: E402
from dataclasses import dataclass, field  # noqa: E402
from itertools import count  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from task_manager.app.core.config import Settings, get_settings  # noqa: E402
from task_manager.app.core.jobs import close_job_connection  # noqa: E402
from task_manager.app.core.security import create_access_token, get_password_hash  # noqa: E402
from task_manager.app.db.session import Database  # noqa: E402
from task_manager.app.deps import get_image_storage  # noqa: E402
from task_manager.app.errors import StorageError  # noqa: E402
from task_manager.app.main import create_app  # noqa: E402
from task_manager.app.models import Task, User, UserRole  # noqa: E402
from task_manager.app.services.storage import ImagePayload  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "pw123"


@dataclass(slots=True)
class FakeImageStorage:
    """Records uploads instead of talking to Cloudinary."""

    uploads: list[ImagePayload] = field(default_factory=list)
    fail: bool = False

    async def upload(self, image: ImagePayload) -> str:
        if self.fail:
            raise StorageError()
        self.uploads.append(image)
        return f"https://cdn.example.test/tasks/{len(self.uploads)}/{image.filename}"


@dataclass(slots=True)
class AuthenticatedUser:
    user: User
    password: str
    token: str

    @property
    def id(self):
        return self.user.id

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        environment="test",
        database_url=TEST_DATABASE_URL,
        jwt_secret_key="test-secret",
        password_hash_rounds=4,
        notifications_enabled=False,
        upload_max_bytes=1024,
    )


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def database(engine: AsyncEngine) -> AsyncIterator[Database]:
    database = Database(engine)
    await database.create_all()
    yield database


@pytest.fixture()
def storage() -> FakeImageStorage:
    return FakeImageStorage()


@pytest_asyncio.fixture
async def app(
    settings: Settings,
    database: Database,
    storage: FakeImageStorage,
) -> AsyncIterator[FastAPI]:
    get_settings.cache_clear()
    application = create_app(settings, database=database)
    application.dependency_overrides[get_image_storage] = lambda: storage
    try:
        yield application
    finally:
        application.dependency_overrides.clear()
        close_job_connection()
        get_settings.cache_clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def create_user(
    database: Database,
    settings: Settings,
) -> Callable[..., Awaitable[AuthenticatedUser]]:
    counter = count()

    async def _factory(
        *,
        name: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        role: UserRole = UserRole.USER,
        banned: bool = False,
    ) -> AuthenticatedUser:
        index = next(counter)
        user = User(
            name=name or f"User {index}",
            email=email or f"user-{index}@example.com",
            hashed_password=get_password_hash(password, rounds=4),
            role=role,
            banned=banned,
        )
        async with database.session() as session:
            session.add(user)
            await session.commit()
            await session.refresh(user)
        token = create_access_token(subject=user.id, role=user.role, settings=settings).token
        return AuthenticatedUser(user=user, password=password, token=token)

    return _factory


@pytest_asyncio.fixture
async def create_task(database: Database) -> Callable[..., Awaitable[Task]]:
    async def _factory(owner: AuthenticatedUser, **fields) -> Task:
        fields.setdefault("title", "Existing task")
        task = Task(user_id=owner.id, **fields)
        async with database.session() as session:
            session.add(task)
            await session.commit()
            await session.refresh(task)
        return task

    return _factory
