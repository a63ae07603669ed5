"""Outbound e-mail through the configured SMTP relay."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from ..core.config import Settings

logger = logging.getLogger(__name__)


class MailerNotConfiguredError(RuntimeError):
    """Raised when no SMTP relay has been configured."""


class Mailer:
    """Thin wrapper around :mod:`smtplib` bound to the application settings."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @property
    def configured(self) -> bool:
        return self._settings.mail_configured

    def build_message(self, *, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._settings.email_from
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def send(self, *, to: str, subject: str, body: str) -> None:
        if not self.configured:
            raise MailerNotConfiguredError("SMTP relay is not configured.")
        settings = self._settings
        message = self.build_message(to=to, subject=subject, body=body)
        with smtplib.SMTP(
            settings.smtp_host,
            settings.smtp_port,
            timeout=settings.smtp_timeout_seconds,
        ) as client:
            if settings.smtp_use_tls:
                client.starttls()
            if settings.email_password:
                client.login(settings.email_from, settings.email_password)
            client.send_message(message)
        logger.info("Sent e-mail", extra={"recipient": to, "subject": subject})


def task_created_message(*, recipient_name: str, task_title: str) -> tuple[str, str]:
    """Return the subject and body announcing a newly created task."""

    subject = f"New task created: {task_title}"
    body = (
        f"Hi {recipient_name},\n\n"
        f'Your task "{task_title}" has been created successfully.\n'
    )
    return subject, body


__all__ = ["Mailer", "MailerNotConfiguredError", "task_created_message"]
