"""Metadata registry shared by the application and Alembic."""

from __future__ import annotations

from sqlmodel import SQLModel

from .. import models  # noqa: F401  # register tables on SQLModel.metadata

metadata = SQLModel.metadata

__all__ = ["SQLModel", "metadata"]
