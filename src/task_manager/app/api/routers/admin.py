"""Administrative overview routes."""

from __future__ import annotations

from fastapi import APIRouter

from ...deps import AdminDependency, DatabaseSessionDependency
from ...schemas import AdminStats, TaskRead, TaskWithOwnerRead
from ...services import AdminService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStats, summary="Aggregate user and task counts")
async def read_stats(_: AdminDependency, session: DatabaseSessionDependency) -> AdminStats:
    stats = await AdminService(session).stats()
    return AdminStats(
        total_users=stats.total_users,
        admins=stats.admins,
        total_tasks=stats.total_tasks,
    )


@router.get(
    "/tasks",
    response_model=list[TaskWithOwnerRead],
    summary="List every task with its owner's e-mail, newest first",
)
async def list_tasks_with_owners(
    _: AdminDependency,
    session: DatabaseSessionDependency,
) -> list[TaskWithOwnerRead]:
    rows = await AdminService(session).list_tasks_with_owners()
    return [
        TaskWithOwnerRead(**TaskRead.model_validate(task).model_dump(), email=email)
        for task, email in rows
    ]
