"""Routes handling task CRUD operations."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, File, Form, Query, Response, UploadFile, status

from ...deps import (
    DatabaseSessionDependency,
    ImageStorageDependency,
    PrincipalDependency,
    SettingsDependency,
)
from ...models import TITLE_MAX_LENGTH, Task
from ...schemas import TaskRead
from ...services import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])

TitleForm = Annotated[
    str,
    Form(max_length=TITLE_MAX_LENGTH, description="Task title; surrounding whitespace is ignored."),
]
DetailsForm = Annotated[str, Form(description="Free-form task details.")]
DoneForm = Annotated[bool, Form(description="Whether the task is complete.")]
ImageFile = Annotated[
    UploadFile | None,
    File(description="Optional image attachment (image/* only)."),
]
OwnerQuery = Annotated[
    UUID | None,
    Query(description="Restrict results to tasks owned by the provided user id."),
]


def _map_task(task: Task) -> TaskRead:
    return TaskRead.model_validate(task)


@router.get(
    "",
    response_model=list[TaskRead],
    summary="List tasks in creation order",
)
async def list_tasks(
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    user_id: OwnerQuery = None,
) -> list[TaskRead]:
    service = TaskService(session, settings)
    tasks = await service.list_tasks(user_id=user_id)
    return [_map_task(task) for task in tasks]


@router.get(
    "/{task_id}",
    response_model=TaskRead,
    summary="Retrieve a task by id",
)
async def get_task(
    task_id: UUID,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> TaskRead:
    service = TaskService(session, settings)
    return _map_task(await service.get_task(task_id))


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    title: TitleForm,
    principal: PrincipalDependency,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    storage: ImageStorageDependency,
    details: DetailsForm = "",
    done: DoneForm = False,
    image: ImageFile = None,
) -> TaskRead:
    service = TaskService(session, settings, storage)
    task = await service.create_task(
        actor=principal,
        title=title,
        details=details,
        done=done,
        image=image,
    )
    return _map_task(task)


@router.put(
    "/{task_id}",
    response_model=TaskRead,
    summary="Replace a task's fields",
)
async def update_task(
    task_id: UUID,
    title: TitleForm,
    principal: PrincipalDependency,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    storage: ImageStorageDependency,
    details: DetailsForm = "",
    done: DoneForm = False,
    image: ImageFile = None,
) -> TaskRead:
    service = TaskService(session, settings, storage)
    task = await service.update_task(
        task_id,
        actor=principal,
        title=title,
        details=details,
        done=done,
        image=image,
    )
    return _map_task(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
)
async def delete_task(
    task_id: UUID,
    principal: PrincipalDependency,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> Response:
    service = TaskService(session, settings)
    await service.delete_task(task_id, actor=principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
