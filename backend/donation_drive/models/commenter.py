"""
Commenter registration for a campaign comment thread.
"""
from typing import Optional
import enum
from sqlalchemy import String, Boolean, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from donation_drive.models.base import BaseModel


class CommentType(str, enum.Enum):
    """Comment thread type."""
    PUBLIC = "public"
    DONOR_GATED = "donor_gated"


class Commenter(BaseModel):
    """Registered commenter profile. Comment bodies live elsewhere."""
    __tablename__ = "commenters"
    __table_args__ = (
        UniqueConstraint("campaign_id", "comment_type", "email", name="uq_commenters_thread_email"),
    )

    campaign_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    comment_type: Mapped[CommentType] = mapped_column(
        Enum(CommentType, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=CommentType.PUBLIC
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notify_on_replies: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Commenter {self.name} ({self.comment_type.value})>"
