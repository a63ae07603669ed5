"""Database related helpers."""

from __future__ import annotations

from .base import SQLModel, metadata
from .session import Database

__all__ = ["Database", "SQLModel", "metadata"]
