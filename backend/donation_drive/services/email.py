"""
Email senders used by the notification dispatcher.

The sender is an injected capability rather than a nullable global:

- ResendEmailSender posts to the Resend HTTP API.
- LogEmailSender writes emails to a file and the console (development).
- NullEmailSender is the explicit "not configured" variant.

``get_email_sender()`` builds the process-wide sender once from settings.
"""
import logging
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Optional

import httpx

from donation_drive.core.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """The provider did not accept a message."""


class EmailSender:
    """Base class for email senders."""
    configured: bool = True

    async def send(self, to: str, subject: str, html_body: str) -> None:
        """Send one message. Raises EmailDeliveryError (or a transport error) on failure."""
        raise NotImplementedError


class NullEmailSender(EmailSender):
    """Stands in when no provider credentials are configured."""
    configured = False

    async def send(self, to: str, subject: str, html_body: str) -> None:
        raise EmailDeliveryError("Email provider is not configured")


class LogEmailSender(EmailSender):
    """
    Development sender.

    Emails are appended to a log file and summarized on the logger instead
    of being delivered.
    """

    def __init__(self, log_path: Optional[str] = None, from_email: Optional[str] = None):
        self.log_path = Path(log_path or settings.EMAIL_LOG_PATH)
        self.from_email = from_email or settings.EMAIL_FROM

    async def send(self, to: str, subject: str, html_body: str) -> None:
        timestamp = datetime.now().isoformat()
        log_entry = f"""
================================================================================
EMAIL SENT: {timestamp}
================================================================================
TO: {to}
FROM: {self.from_email}
SUBJECT: {subject}
--------------------------------------------------------------------------------
HTML:
{html_body}
--------------------------------------------------------------------------------
"""
        with open(self.log_path, "a") as f:
            f.write(log_entry)

        logger.info(f"Email logged: to={to}, subject={subject}")


class ResendEmailSender(EmailSender):
    """Sends through the Resend API, one recipient per request."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        api_url: str = "https://api.resend.com",
        reply_to: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.url = api_url.rstrip("/") + "/emails"
        self.reply_to = reply_to
        self.timeout = timeout
        self.transport = transport

    async def send(self, to: str, subject: str, html_body: str) -> None:
        payload: dict[str, object] = {
            "from": self.from_email,
            "to": [to],
            "subject": subject,
            "html": html_body,
        }
        if self.reply_to:
            payload["reply_to"] = self.reply_to

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(self.url, headers=headers, json=payload)

        if response.status_code >= 400:
            logger.warning(
                f"Resend email failed: to={to}, status={response.status_code}, body={response.text[:200]}"
            )
            raise EmailDeliveryError(f"Provider returned HTTP {response.status_code}")

        logger.info(f"Resend email sent: to={to}, subject={subject}")


def build_email_sender() -> EmailSender:
    """Pick the sender variant from settings."""
    if settings.RESEND_API_KEY:
        return ResendEmailSender(
            api_key=settings.RESEND_API_KEY,
            from_email=settings.EMAIL_FROM,
            api_url=settings.RESEND_API_URL,
            reply_to=settings.EMAIL_REPLY_TO,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
        )
    if settings.DEBUG:
        return LogEmailSender()
    logger.warning("No email provider configured; notifications are disabled")
    return NullEmailSender()


@lru_cache()
def get_email_sender() -> EmailSender:
    """Process-wide sender, created on first use."""
    return build_email_sender()
