"""
Expense ledger entry: a recorded distribution of campaign funds.
"""
from typing import Optional
from datetime import date
from decimal import Decimal
from sqlalchemy import String, Text, ForeignKey, Numeric, Date, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from donation_drive.models.base import BaseModel


class ExpenseEntry(BaseModel):
    """Distribution report shown on the transparency page. Never mutated."""
    __tablename__ = "expense_entries"
    __table_args__ = (
        CheckConstraint("amount > 0", name="positive_amount"),
    )

    campaign_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("campaigns.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    beneficiaries: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Receipt image URLs ("proof of distribution")
    receipts: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)

    def __repr__(self) -> str:
        return f"<ExpenseEntry {self.title!r} {self.amount} {self.currency}>"
