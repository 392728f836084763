"""
ditup_api.services.mailer

Outgoing mail.

Responsibilities:
- Deliver plain-text mails over SMTP from the configured sender address.
- Compose the mails the service sends (email verification, password reset,
  contact request notification).
"""

from __future__ import annotations

import asyncio
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from ditup_api.observability.logging import get_logger
from ditup_api.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Mail:
    to: str
    subject: str
    text: str


class Mailer:
    """SMTP mailer; the blocking smtplib call runs in a worker thread."""

    def __init__(self, *, settings: Settings) -> None:
        self._host = settings.mailer_host
        self._port = settings.mailer_port
        self._sender = settings.mailer_from

    async def send(self, mail: Mail) -> None:
        await asyncio.to_thread(self._send_sync, mail)
        log.info("mail_sent", to=mail.to, subject=mail.subject)

    def _send_sync(self, mail: Mail) -> None:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = mail.to
        msg["Subject"] = mail.subject
        msg.set_content(mail.text)
        with smtplib.SMTP(self._host, self._port, timeout=10) as smtp:
            smtp.send_message(msg)


async def deliver(mailer: Mailer, mail: Mail) -> None:
    """
    Background-task entrypoint: the response is already sent, so a delivery
    failure can only be logged.
    """
    try:
        await mailer.send(mail)
    except (OSError, smtplib.SMTPException):
        log.exception("mail_failed", to=mail.to, subject=mail.subject)


def verify_email_mail(*, settings: Settings, username: str, email: str, code: str) -> Mail:
    link = settings.verify_email_link(username, code)
    return Mail(
        to=email,
        subject="email verification for ditup.org",
        text=(
            f"Hello {username},\n\n"
            "please verify your email address by following this link:\n"
            f"{link}\n\n"
            f"The link is valid for {settings.verify_email_ttl_hours} hours.\n"
        ),
    )


def reset_password_mail(*, settings: Settings, username: str, email: str, code: str) -> Mail:
    link = settings.reset_password_link(username, code)
    return Mail(
        to=email,
        subject="reset your password for ditup.org",
        text=(
            f"Hello {username},\n\n"
            "somebody asked to reset the password of your account. "
            "If it was you, follow this link to choose a new one:\n"
            f"{link}\n\n"
            f"The link is valid for {settings.reset_password_ttl_minutes} minutes. "
            "Otherwise you can ignore this mail.\n"
        ),
    )


def contact_request_mail(
    *, settings: Settings, from_username: str, to_username: str, email: str, message: str
) -> Mail:
    return Mail(
        to=email,
        subject=f"{from_username} would like to create a contact with you on ditup.org",
        text=(
            f"Hello {to_username},\n\n"
            f"{from_username} would like to create a contact with you.\n\n"
            f"{message}\n\n"
            f"You can confirm or refuse the request at {settings.app_url}/user/{to_username}/contacts\n"
        ),
    )
