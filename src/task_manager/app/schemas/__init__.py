"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .admin import AdminStats
from .auth import LoginRequest, SignupRequest, TokenResponse
from .system import ErrorResponse, HealthCheckResponse, RootResponse
from .task import TaskRead, TaskWithOwnerRead, UploadResponse
from .user import BanUpdateRequest, RoleUpdateRequest, UserPublic

__all__ = [
    "AdminStats",
    "BanUpdateRequest",
    "ErrorResponse",
    "HealthCheckResponse",
    "LoginRequest",
    "RoleUpdateRequest",
    "RootResponse",
    "SignupRequest",
    "TaskRead",
    "TaskWithOwnerRead",
    "TokenResponse",
    "UploadResponse",
    "UserPublic",
]
