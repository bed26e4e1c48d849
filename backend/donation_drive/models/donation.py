"""
Donation ledger entry.
"""
from typing import Optional
from decimal import Decimal
from sqlalchemy import String, Text, Boolean, ForeignKey, Numeric, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from donation_drive.models.base import BaseModel


class DonationEntry(BaseModel):
    """
    One recorded contribution.

    Written exactly once per captured payment and never updated or deleted.
    The unique external transaction id is what makes capture retries safe.
    """
    __tablename__ = "donation_entries"
    __table_args__ = (
        CheckConstraint("amount > 0", name="positive_amount"),
    )

    campaign_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("campaigns.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Donor
    donor_name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Stored trimmed and lowercased
    donor_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Amount
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notify_on_updates: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Gateway reference (PayPal capture id)
    external_transaction_id: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False
    )

    @property
    def display_name(self) -> str:
        return "Anonymous" if self.is_anonymous else self.donor_name

    def __repr__(self) -> str:
        return f"<DonationEntry {self.amount} {self.currency} ({self.external_transaction_id})>"
