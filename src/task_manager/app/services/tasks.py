"""Service layer encapsulating task-related operations."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import UploadFile
from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.concurrency import run_in_threadpool

from ..core.config import Settings
from ..core.context import current_request_id
from ..core.jobs import enqueue_task_created_notification
from ..core.security import Principal
from ..errors import BadRequestError, NotFoundError, PermissionDeniedError
from ..models import TITLE_MAX_LENGTH, Task
from ..repositories import TaskRepository, UserRepository
from .storage import ImageStorage, has_image, read_image_upload

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found."


def _clean_title(title: str) -> str:
    cleaned = title.strip()
    if not cleaned:
        raise BadRequestError("Title is required.")
    if len(cleaned) > TITLE_MAX_LENGTH:
        raise BadRequestError("Title is too long.", details={"max_length": TITLE_MAX_LENGTH})
    return cleaned


class TaskService:
    """High-level business orchestration for ``Task`` entities."""

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        storage: ImageStorage | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._storage = storage
        self._repository = TaskRepository(session)
        self._user_repository = UserRepository(session)

    @property
    def repository(self) -> TaskRepository:
        """Expose the underlying repository for advanced scenarios."""
        return self._repository

    async def _store_image(self, image: UploadFile) -> str:
        if self._storage is None:
            raise RuntimeError("TaskService was created without image storage.")
        payload = await read_image_upload(image, max_bytes=self._settings.upload_max_bytes)
        return await self._storage.upload(payload)

    async def list_tasks(self, *, user_id: UUID | None = None) -> list[Task]:
        """Return all tasks in creation order, optionally for one owner."""
        return await self._repository.list(user_id=user_id)

    async def get_task(self, task_id: UUID) -> Task:
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return task

    async def create_task(
        self,
        *,
        actor: Principal,
        title: str,
        details: str = "",
        done: bool = False,
        image: UploadFile | None = None,
    ) -> Task:
        """Create a task owned by ``actor``.

        When an image is attached it is uploaded before the row is written; a
        failed upload aborts the whole operation. The owner's notification is
        queued only after the commit and its failure is never raised here.
        """
        title = _clean_title(title)
        owner = await self._user_repository.get(actor.user_id)
        if owner is None:
            raise NotFoundError("Task owner does not exist.")

        image_url = await self._store_image(image) if has_image(image) else None

        task = Task(
            title=title,
            details=details,
            done=done,
            image_url=image_url,
            user_id=owner.id,
        )
        await self._repository.add(task)
        await self._session.commit()
        await self._repository.refresh(task)
        logger.info("Created task %s for user %s", task.id, owner.id)

        await run_in_threadpool(
            enqueue_task_created_notification,
            recipient=owner.email,
            recipient_name=owner.name,
            task_id=task.id,
            task_title=task.title,
            settings=self._settings,
            request_id=current_request_id(),
        )
        return task

    async def update_task(
        self,
        task_id: UUID,
        *,
        actor: Principal,
        title: str,
        details: str = "",
        done: bool = False,
        image: UploadFile | None = None,
    ) -> Task:
        """Replace a task's fields; the stored image is kept unless a new one is sent."""
        task = await self.get_task(task_id)
        if not actor.may_modify(task.user_id):
            raise PermissionDeniedError("You are not permitted to modify this task.")
        title = _clean_title(title)

        if has_image(image):
            task.image_url = await self._store_image(image)
        task.title = title
        task.details = details
        task.done = done
        await self._session.commit()
        await self._repository.refresh(task)
        return task

    async def delete_task(self, task_id: UUID, *, actor: Principal) -> None:
        task = await self.get_task(task_id)
        if not actor.may_modify(task.user_id):
            raise PermissionDeniedError("You are not permitted to delete this task.")
        await self._repository.delete(task)
        await self._session.commit()
        logger.info("Deleted task %s", task_id)


__all__ = ["TASK_NOT_FOUND", "TaskService"]
