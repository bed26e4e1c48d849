"""
Payment capture adapter.

Turns a payment the gateway has already captured into a donation ledger
entry. The amount reported by the gateway is trusted as-is; this module
only validates shape, campaign eligibility and currency.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import pydantic

from donation_drive.core.config import settings
from donation_drive.core.errors import ConfigurationError, DuplicateTransactionError, ValidationError
from donation_drive.models.donation import DonationEntry
from donation_drive.schemas.donation import DonationCapture
from donation_drive.services.ledger import LedgerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureResult:
    """The persisted entry, and whether it was recorded by an earlier call."""
    entry: DonationEntry
    duplicate: bool = False


@dataclass(frozen=True)
class PaymentConfig:
    client_id: str
    environment: str


def get_payment_config() -> PaymentConfig:
    """Public checkout configuration. Raises if payments are not set up."""
    if not settings.PAYPAL_CLIENT_ID:
        raise ConfigurationError("Payment gateway is not configured")
    return PaymentConfig(client_id=settings.PAYPAL_CLIENT_ID, environment=settings.PAYPAL_ENVIRONMENT)


def _validation_details(exc: pydantic.ValidationError) -> dict:
    details = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        details[field] = {"message": error["msg"]}
    return details


class PaymentCaptureAdapter:
    """Records captured payments with idempotent retry semantics."""

    def __init__(self, ledger: LedgerStore):
        self.ledger = ledger

    async def capture(
        self,
        campaign_id: str,
        external_transaction_id: str,
        amount: Decimal,
        donor_email: str,
        donor_name: Optional[str] = None,
        message: Optional[str] = None,
        is_anonymous: bool = False,
        notify_on_updates: bool = False,
        currency: Optional[str] = None,
    ) -> CaptureResult:
        """
        Record a captured payment against a campaign.

        Returns the new entry, or the existing one with ``duplicate=True`` if
        this transaction was already recorded (e.g. a retry after a timeout).

        Raises:
            ValidationError: bad amount/email, not a donation drive, currency mismatch
            NotFoundError: unknown campaign
        """
        try:
            data = DonationCapture(
                external_transaction_id=external_transaction_id,
                amount=amount,
                currency=currency,
                donor_email=(donor_email or "").strip(),
                donor_name=donor_name,
                message=message,
                is_anonymous=is_anonymous,
                notify_on_updates=notify_on_updates,
            )
        except pydantic.ValidationError as e:
            raise ValidationError("Invalid donation", _validation_details(e)) from e

        campaign = await self.ledger.get_campaign(campaign_id)
        if not campaign.is_donation_drive:
            raise ValidationError("Campaign is not accepting donations")
        if data.currency and data.currency.upper() != campaign.currency.upper():
            raise ValidationError(
                "Currency mismatch",
                {"currency": {"message": f"Expected {campaign.currency}, got {data.currency.upper()}"}},
            )

        entry = DonationEntry(
            campaign_id=campaign.id,
            donor_name=(data.donor_name or "").strip() or "Anonymous",
            donor_email=str(data.donor_email),
            amount=data.amount,
            currency=campaign.currency,
            message=(data.message or "").strip() or None,
            is_anonymous=data.is_anonymous,
            notify_on_updates=data.notify_on_updates,
            external_transaction_id=data.external_transaction_id.strip(),
        )

        try:
            recorded = await self.ledger.append_donation(entry)
        except DuplicateTransactionError as e:
            logger.info(f"Duplicate capture ignored: tx={e.external_transaction_id}")
            return CaptureResult(entry=e.existing, duplicate=True)

        return CaptureResult(entry=recorded)
