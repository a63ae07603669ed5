"""Background jobs delivering user notifications."""

from __future__ import annotations

import logging
from typing import Any

from ..core.config import get_settings
from ..core.context import request_id_scope
from ..services.notifications import Mailer, task_created_message

logger = logging.getLogger(__name__)


def send_task_created_email(
    recipient: str,
    recipient_name: str,
    task_id: str,
    task_title: str,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Deliver the "task created" e-mail.

    SMTP failures propagate so RQ can apply the configured retry policy.
    """

    with request_id_scope(request_id):
        mailer = Mailer(get_settings())
        if not mailer.configured:
            logger.warning(
                "SMTP relay not configured; dropping task notification",
                extra={"task_id": task_id},
            )
            return {"task_id": task_id, "recipient": recipient, "sent": False}

        subject, body = task_created_message(recipient_name=recipient_name, task_title=task_title)
        mailer.send(to=recipient, subject=subject, body=body)
        logger.info("Delivered task notification", extra={"task_id": task_id})
        return {"task_id": task_id, "recipient": recipient, "sent": True}


__all__ = ["send_task_created_email"]
