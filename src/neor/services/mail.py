"""Outgoing email.

``get_mailer`` is a FastAPI dependency so tests can swap in a recorder.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import parseaddr
from typing import Protocol

from neor.core.errors import ExternalServiceError
from neor.core.settings import settings

logger = logging.getLogger(__name__)

FAILED_TO_SEND_EMAIL = "Failed to send email"


class Mailer(Protocol):
    def send(self, to: str, subject: str, body: str) -> None:
        """Deliver a plain text message or raise ``ExternalServiceError``."""


class SmtpMailer:
    """Send mail through an implicit-TLS SMTP relay."""

    def __init__(
        self,
        relay: str,
        port: int,
        sender: str,
        password: str | None,
        timeout: float = 10.0,
    ) -> None:
        self.relay = relay
        self.port = port
        self.sender = sender
        self.password = password
        self.timeout = timeout

    def send(self, to: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP_SSL(self.relay, self.port, timeout=self.timeout) as smtp:
                if self.password:
                    smtp.login(parseaddr(self.sender)[1], self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Failed to send email", extra={"to": to, "error": str(exc)})
            raise ExternalServiceError(FAILED_TO_SEND_EMAIL) from exc


class LogMailer:
    """Write messages to the log instead of sending them."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Email delivery disabled", extra={"to": to, "subject": subject, "body": body})


def get_mailer() -> Mailer:
    """Return the mailer configured by settings."""
    if not settings.email_enabled:
        return LogMailer()
    return SmtpMailer(
        relay=settings.email_relay,
        port=settings.email_port,
        sender=settings.email_from,
        password=settings.email_password,
        timeout=settings.email_timeout_seconds,
    )


def verification_email(domain: str, code: str) -> tuple[str, str]:
    return (
        "neor registration",
        f"Your registration verification code is {code}.\n\n"
        f"To proceed go to https://{domain}/email-verification\n\n"
        f"If you didn't sign up at https://{domain} ignore this message.",
    )


def password_reset_email(domain: str, code: str) -> tuple[str, str]:
    return (
        "neor password reset",
        f"Your password change verification code is {code}.\n\n"
        f"To proceed go to https://{domain}/password-change\n\n"
        "If you didn't change your password ignore this message.",
    )


def password_changed_email(domain: str) -> tuple[str, str]:
    return (
        "neor password reset",
        "Your password has been successfully changed!\n\n"
        "If you did not change your password IMMEDIATELY reset your password at "
        f"https://{domain}/password-reset in order to secure your account",
    )
