"""
Base model with common fields.

Ledger rows are append-only, so models carry a creation timestamp but no
``updated`` column.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from donation_drive.db.base import Base


def generate_id() -> str:
    """Generate a 15-character hex ID."""
    return uuid.uuid4().hex[:15]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreatedMixin:
    """Mixin for the creation timestamp."""
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True
    )


class BaseModel(Base, CreatedMixin):
    """Abstract base model with id and creation timestamp."""
    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(15),
        primary_key=True,
        default=generate_id
    )
