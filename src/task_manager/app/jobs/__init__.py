"""Functions executed by the RQ worker."""

from __future__ import annotations

from .notifications import send_task_created_email

__all__ = ["send_task_created_email"]
