"""
Campaign model: a blog post published as a donation drive.
"""
from decimal import Decimal
from sqlalchemy import String, Boolean, Numeric, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from donation_drive.models.base import BaseModel


class Campaign(BaseModel):
    """
    Campaign model.

    The slug, currency and goal are fixed once the campaign exists; only the
    title is informational and may change without affecting ledger math.
    """
    __tablename__ = "campaigns"
    __table_args__ = (
        CheckConstraint("donation_goal > 0", name="positive_goal"),
    )

    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    donation_goal: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False
    )
    is_donation_drive: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # Transparency page comments are restricted to donors
    is_donor_gated: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Campaign {self.slug} goal={self.donation_goal} {self.currency}>"
