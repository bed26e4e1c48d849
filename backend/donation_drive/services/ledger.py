"""
Ledger store for campaign donations and expenses.

The ledger is append-only: entries are inserted once and never updated or
deleted. Corrections are modelled as new entries.
"""
import logging
from typing import Optional, Sequence
from datetime import date
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select

from donation_drive.core.config import settings
from donation_drive.core.errors import DuplicateTransactionError, NotFoundError, ValidationError
from donation_drive.models.campaign import Campaign
from donation_drive.models.donation import DonationEntry
from donation_drive.models.expense import ExpenseEntry
from donation_drive.schemas.common import normalize_email

logger = logging.getLogger(__name__)


class LedgerStore:
    """Append-only persistence of ledger entries, scoped to one DB session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Campaigns
    # ------------------------------------------------------------------

    async def create_campaign(
        self,
        slug: str,
        title: str,
        donation_goal: Decimal,
        currency: Optional[str] = None,
        is_donor_gated: bool = True,
    ) -> Campaign:
        """Publish a donation drive. Slugs are unique and goals positive."""
        if donation_goal is None or Decimal(donation_goal) <= 0:
            raise ValidationError("Donation goal must be positive", {"donation_goal": {"message": "Must be greater than 0"}})

        existing = await self.db.execute(select(Campaign.id).where(Campaign.slug == slug))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError("Slug already in use", {"slug": {"message": "Slug already in use"}})

        campaign = Campaign(
            slug=slug,
            title=title,
            donation_goal=Decimal(donation_goal),
            currency=(currency or settings.DEFAULT_CURRENCY).upper(),
            is_donation_drive=True,
            is_donor_gated=is_donor_gated,
        )
        self.db.add(campaign)
        await self.db.flush()
        logger.info(f"Campaign created: slug={slug}, goal={campaign.donation_goal} {campaign.currency}")
        return campaign

    async def get_campaign(self, campaign_id: str) -> Campaign:
        result = await self.db.execute(select(Campaign).where(Campaign.id == campaign_id))
        campaign = result.scalar_one_or_none()
        if campaign is None:
            raise NotFoundError("Campaign not found")
        return campaign

    async def get_campaign_by_slug(self, slug: str) -> Campaign:
        result = await self.db.execute(select(Campaign).where(Campaign.slug == slug))
        campaign = result.scalar_one_or_none()
        if campaign is None:
            raise NotFoundError("Campaign not found")
        return campaign

    # ------------------------------------------------------------------
    # Donations
    # ------------------------------------------------------------------

    async def find_donation_by_transaction(self, external_transaction_id: str) -> Optional[DonationEntry]:
        result = await self.db.execute(
            select(DonationEntry).where(
                DonationEntry.external_transaction_id == external_transaction_id
            )
        )
        return result.scalar_one_or_none()

    async def append_donation(self, entry: DonationEntry) -> DonationEntry:
        """
        Append a donation entry.

        Raises DuplicateTransactionError if the external transaction id is
        already recorded for any campaign. The unique constraint is the real
        guard; the lookup only spares the common retry a failed insert.
        Donor emails are stored normalized (trimmed, lowercased).
        """
        existing = await self.find_donation_by_transaction(entry.external_transaction_id)
        if existing is not None:
            raise DuplicateTransactionError(entry.external_transaction_id, existing)

        entry.donor_email = normalize_email(entry.donor_email)
        try:
            # Savepoint: a failed insert must not discard the caller's pending work
            async with self.db.begin_nested():
                self.db.add(entry)
                await self.db.flush()
        except IntegrityError:
            # Lost a race against a concurrent capture of the same transaction
            existing = await self.find_donation_by_transaction(entry.external_transaction_id)
            if existing is None:
                raise
            raise DuplicateTransactionError(entry.external_transaction_id, existing)

        logger.info(
            f"Donation recorded: campaign={entry.campaign_id}, amount={entry.amount} {entry.currency}, "
            f"tx={entry.external_transaction_id}"
        )
        return entry

    async def list_donations(self, campaign_id: str) -> Sequence[DonationEntry]:
        """Donations for a campaign, newest first."""
        result = await self.db.execute(
            select(DonationEntry)
            .where(DonationEntry.campaign_id == campaign_id)
            .order_by(DonationEntry.created.desc())
        )
        return result.scalars().all()

    async def donation_amounts_and_emails(self, campaign_id: str) -> list[tuple[Decimal, str]]:
        """(amount, donor email) pairs for aggregation."""
        result = await self.db.execute(
            select(DonationEntry.amount, DonationEntry.donor_email)
            .where(DonationEntry.campaign_id == campaign_id)
        )
        return [(row.amount, row.donor_email) for row in result.all()]

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    async def append_expense(self, entry: ExpenseEntry) -> ExpenseEntry:
        """Append an expense entry."""
        self.db.add(entry)
        await self.db.flush()
        logger.info(f"Expense recorded: campaign={entry.campaign_id}, amount={entry.amount} {entry.currency}")
        return entry

    async def record_expense(
        self,
        campaign: Campaign,
        title: str,
        amount: Decimal,
        description: str,
        expense_date: date,
        beneficiaries: Optional[str] = None,
        receipts: Optional[list[str]] = None,
    ) -> ExpenseEntry:
        """Build and append an expense in the campaign's currency."""
        if amount is None or Decimal(amount) <= 0:
            raise ValidationError("Expense amount must be positive", {"amount": {"message": "Must be greater than 0"}})
        entry = ExpenseEntry(
            campaign_id=campaign.id,
            title=title,
            amount=Decimal(amount),
            currency=campaign.currency,
            description=description,
            beneficiaries=beneficiaries,
            receipts=list(receipts or []),
            expense_date=expense_date,
        )
        return await self.append_expense(entry)

    async def get_expense(self, campaign_id: str, expense_id: str) -> ExpenseEntry:
        result = await self.db.execute(
            select(ExpenseEntry).where(
                ExpenseEntry.id == expense_id,
                ExpenseEntry.campaign_id == campaign_id,
            )
        )
        expense = result.scalar_one_or_none()
        if expense is None:
            raise NotFoundError("Expense not found")
        return expense

    async def list_expenses(self, campaign_id: str) -> Sequence[ExpenseEntry]:
        """Expenses for a campaign, newest first."""
        result = await self.db.execute(
            select(ExpenseEntry)
            .where(ExpenseEntry.campaign_id == campaign_id)
            .order_by(ExpenseEntry.expense_date.desc(), ExpenseEntry.created.desc())
        )
        return result.scalars().all()

    async def expense_amounts(self, campaign_id: str) -> list[Decimal]:
        result = await self.db.execute(
            select(ExpenseEntry.amount).where(ExpenseEntry.campaign_id == campaign_id)
        )
        return list(result.scalars().all())
