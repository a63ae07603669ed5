"""Domain models."""

from __future__ import annotations

from .common import TimestampMixin
from .task import TITLE_MAX_LENGTH, Task, TaskBase
from .user import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH, User, UserBase, UserRole

__all__ = [
    "EMAIL_MAX_LENGTH",
    "NAME_MAX_LENGTH",
    "TITLE_MAX_LENGTH",
    "Task",
    "TaskBase",
    "TimestampMixin",
    "User",
    "UserBase",
    "UserRole",
]
