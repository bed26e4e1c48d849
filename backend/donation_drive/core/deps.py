"""
FastAPI dependencies: admin auth and service wiring.
"""
import secrets
from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from donation_drive.core.config import settings
from donation_drive.db.base import get_db
from donation_drive.services.donors import DonorRegistry
from donation_drive.services.email import EmailSender, get_email_sender
from donation_drive.services.ledger import LedgerStore
from donation_drive.services.notifications import NotificationDispatcher
from donation_drive.services.payments import PaymentCaptureAdapter
from donation_drive.services.stats import StatsAggregator


async def require_admin(x_admin_key: Optional[str] = Header(None)) -> None:
    """Admin routes need X-Admin-Key to match ADMIN_SECRET_KEY."""
    expected = settings.ADMIN_SECRET_KEY
    if not expected or not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )


def get_ledger(db: AsyncSession = Depends(get_db)) -> LedgerStore:
    return LedgerStore(db)


def get_stats(ledger: LedgerStore = Depends(get_ledger)) -> StatsAggregator:
    return StatsAggregator(ledger)


def get_donor_registry(ledger: LedgerStore = Depends(get_ledger)) -> DonorRegistry:
    return DonorRegistry(ledger)


def get_capture_adapter(ledger: LedgerStore = Depends(get_ledger)) -> PaymentCaptureAdapter:
    return PaymentCaptureAdapter(ledger)


def get_sender() -> EmailSender:
    return get_email_sender()


def get_dispatcher(sender: EmailSender = Depends(get_sender)) -> NotificationDispatcher:
    return NotificationDispatcher(sender)
