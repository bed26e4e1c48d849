"""
Donor registry: who has given to a campaign.
"""
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import select

from donation_drive.models.donation import DonationEntry
from donation_drive.schemas.common import normalize_email
from donation_drive.services.ledger import LedgerStore


@dataclass(frozen=True)
class Subscriber:
    """A person eligible for a notification. Derived, never stored."""
    email: str
    name: Optional[str] = None


class DonorRegistry:
    """
    Answers donor questions from the ledger.

    Any past donation qualifies, regardless of amount. Anonymity only
    changes the displayed name, never access. Emails are compared against
    the normalized form the ledger stores, so case folding happens in
    Python only and non-ASCII addresses match the same way everywhere.
    """

    def __init__(self, ledger: LedgerStore):
        self.ledger = ledger

    async def is_donor(self, campaign_id: str, email: Optional[str]) -> bool:
        normalized = normalize_email(email)
        if not normalized:
            return False
        result = await self.ledger.db.execute(
            select(DonationEntry.id).where(
                DonationEntry.campaign_id == campaign_id,
                DonationEntry.donor_email == normalized,
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_update_subscribers(self, campaign_id: str) -> list[Subscriber]:
        """
        Donors who opted into campaign updates, in first-donation order.

        A donor who gave several times is notified once; an opt-in on any of
        their donations counts.
        """
        result = await self.ledger.db.execute(
            select(DonationEntry.donor_email, DonationEntry.donor_name)
            .where(
                DonationEntry.campaign_id == campaign_id,
                DonationEntry.notify_on_updates.is_(True),
            )
            .order_by(DonationEntry.created.asc())
        )
        seen: set[str] = set()
        subscribers: list[Subscriber] = []
        for email, name in result.all():
            key = normalize_email(email)
            if not key or key in seen:
                continue
            seen.add(key)
            subscribers.append(Subscriber(email=email.strip(), name=name))
        return subscribers
