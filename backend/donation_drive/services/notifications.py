"""
Notification dispatcher.

Sends one email per subscriber for a triggering event. Sends run strictly
one after another with a fixed pause in between so the provider's rate
limit is respected, and a failure for one recipient never stops the batch.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Optional

from donation_drive.core.config import settings
from donation_drive.core.errors import ConfigurationError, RecipientDispatchError
from donation_drive.schemas.common import normalize_email
from donation_drive.services.donors import Subscriber
from donation_drive.services.email import EmailSender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationEvent:
    """A fully rendered notification: the same subject and body for every recipient."""
    kind: str
    subject: str
    html_body: str


@dataclass
class DispatchResult:
    successful: int = 0
    failed: int = 0
    errors: list[RecipientDispatchError] = field(default_factory=list)
    skipped: int = 0
    cancelled: bool = False

    def record_failure(self, recipient: str, reason: str) -> None:
        self.failed += 1
        self.errors.append(RecipientDispatchError(recipient, reason))


class NotificationDispatcher:
    """
    Sequential, failure-tolerant fan-out over an email sender.

    Args:
        sender: email collaborator; a NullEmailSender makes every
            non-empty dispatch fail with ConfigurationError
        delay_seconds: pause between consecutive sends
        sleep: awaitable used for the pause
    """

    def __init__(
        self,
        sender: EmailSender,
        delay_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.sender = sender
        self.delay_seconds = settings.NOTIFICATION_SEND_DELAY_SECONDS if delay_seconds is None else delay_seconds
        self.sleep = sleep

    async def dispatch(
        self,
        subscribers: Iterable[Subscriber],
        event: NotificationEvent,
        exclude_email: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> DispatchResult:
        """
        Notify each subscriber once, in the order given.

        Subscribers whose email matches ``exclude_email`` (case-insensitive)
        are skipped without an attempt and never appear in ``errors``.
        Setting ``cancel_event`` stops the batch before the next send; the
        result then reports what was done so far with ``cancelled=True``.
        """
        subscribers = list(subscribers)
        result = DispatchResult()
        if not subscribers:
            return result

        if not self.sender.configured:
            raise ConfigurationError("Email provider is not configured")

        excluded = normalize_email(exclude_email)
        attempted = 0

        for subscriber in subscribers:
            if excluded and normalize_email(subscriber.email) == excluded:
                result.skipped += 1
                continue

            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                break

            if attempted > 0 and self.delay_seconds > 0:
                await self.sleep(self.delay_seconds)
                if cancel_event is not None and cancel_event.is_set():
                    result.cancelled = True
                    break

            attempted += 1
            try:
                await self.sender.send(subscriber.email, event.subject, event.html_body)
            except Exception as e:
                reason = str(e) or e.__class__.__name__
                logger.warning(f"Notification failed: kind={event.kind}, to={subscriber.email}, reason={reason}")
                result.record_failure(subscriber.email, reason)
            else:
                result.successful += 1

        logger.info(
            f"Notification batch done: kind={event.kind}, successful={result.successful}, "
            f"failed={result.failed}, skipped={result.skipped}, cancelled={result.cancelled}"
        )
        return result
