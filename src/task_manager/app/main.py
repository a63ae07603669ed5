"""Entry point for the task manager FastAPI application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.jobs import close_job_connection
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db.session import Database
from .deps import SettingsDependency
from .errors import register_exception_handlers
from .schemas.system import RootResponse
from .services.storage import CloudinaryStorage

logger = logging.getLogger(__name__)


def _normalise_prefix(raw_prefix: str) -> str:
    router_prefix = raw_prefix.strip()
    if router_prefix and not router_prefix.startswith("/"):
        router_prefix = f"/{router_prefix}"
    router_prefix = router_prefix.rstrip("/")
    if router_prefix == "/":
        router_prefix = ""
    return router_prefix


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    logger.info("Starting %s", application.title)
    try:
        yield
    finally:
        await application.state.database.dispose()
        close_job_connection()


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
) -> FastAPI:
    """Instantiate and configure the FastAPI application.

    ``database`` lets callers supply their own persistence gateway; by default
    one is built from ``settings.database_url``. Engines connect lazily so no
    connection is opened here.
    """

    explicit_settings = settings is not None
    settings = settings or get_settings()
    configure_logging(settings)

    router_prefix = _normalise_prefix(settings.api_prefix)
    openapi_url = "/openapi.json" if not router_prefix else f"{router_prefix}/openapi.json"

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Task management API with JWT authentication and role-based administration.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=openapi_url,
        lifespan=lifespan,
    )

    application.state.settings = settings
    application.state.database = database or Database.from_settings(settings)
    application.state.image_storage = CloudinaryStorage(settings)
    if explicit_settings:
        application.dependency_overrides[get_settings] = lambda: settings

    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    if router_prefix:
        application.include_router(api_router, prefix=router_prefix)
    else:
        application.include_router(api_router)

    application.include_router(health_router)

    register_exception_handlers(application)

    @application.get("/", response_model=RootResponse, summary="Service metadata")
    async def read_root(settings: SettingsDependency) -> RootResponse:
        """Expose minimal service metadata at the root endpoint."""
        return RootResponse(
            name=settings.project_name,
            environment=settings.environment,
            version=settings.version,
            api_prefix=settings.api_prefix,
        )

    return application


app = create_app()


def run() -> None:
    """Convenience entry point for ``task-manager-api``."""
    settings: Settings = get_settings()
    uvicorn.run(
        "task_manager.app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )


if __name__ == "__main__":  # pragma: no cover - script entry point
    run()
