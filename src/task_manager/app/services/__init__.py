"""Service layer orchestrating repositories and external collaborators."""

from __future__ import annotations

from .admin import AdminService, StatsResult
from .auth import AuthService
from .notifications import Mailer, MailerNotConfiguredError
from .storage import CloudinaryStorage, ImagePayload, ImageStorage
from .tasks import TaskService
from .users import UserService

__all__ = [
    "AdminService",
    "AuthService",
    "CloudinaryStorage",
    "ImagePayload",
    "ImageStorage",
    "Mailer",
    "MailerNotConfiguredError",
    "StatsResult",
    "TaskService",
    "UserService",
]
