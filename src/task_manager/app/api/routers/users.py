"""Administrative routes for managing user accounts."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from ...deps import AdminDependency, DatabaseSessionDependency
from ...models import UserRole
from ...schemas import BanUpdateRequest, RoleUpdateRequest, UserPublic
from ...services import UserService

router = APIRouter(prefix="/users", tags=["users"])

RoleQuery = Annotated[
    UserRole | None,
    Query(description="Only return users holding exactly this role."),
]
EmailQuery = Annotated[
    str | None,
    Query(description="Case-insensitive substring the e-mail must contain."),
]


@router.get(
    "",
    response_model=list[UserPublic],
    summary="List users with optional role and e-mail filters",
)
async def list_users(
    _: AdminDependency,
    session: DatabaseSessionDependency,
    role: RoleQuery = None,
    email: EmailQuery = None,
) -> list[UserPublic]:
    service = UserService(session)
    users = await service.list_users(role=role, email=email)
    return [UserPublic.model_validate(user) for user in users]


@router.get(
    "/{user_id}",
    response_model=UserPublic,
    summary="Retrieve a user by id",
)
async def get_user(
    user_id: UUID,
    _: AdminDependency,
    session: DatabaseSessionDependency,
) -> UserPublic:
    service = UserService(session)
    return UserPublic.model_validate(await service.get_user(user_id))


@router.put(
    "/{user_id}/role",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change a user's role",
)
async def update_user_role(
    user_id: UUID,
    payload: RoleUpdateRequest,
    _: AdminDependency,
    session: DatabaseSessionDependency,
) -> Response:
    service = UserService(session)
    await service.update_role(user_id, payload.role)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{user_id}/ban",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Ban or unban a user",
)
async def update_user_ban(
    user_id: UUID,
    payload: BanUpdateRequest,
    _: AdminDependency,
    session: DatabaseSessionDependency,
) -> Response:
    service = UserService(session)
    await service.set_banned(user_id, payload.banned)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user together with their tasks",
)
async def delete_user(
    user_id: UUID,
    _: AdminDependency,
    session: DatabaseSessionDependency,
) -> Response:
    service = UserService(session)
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
