"""
Commenter registrations and the reply subscribers derived from them.
"""
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from donation_drive.models.commenter import Commenter, CommentType
from donation_drive.schemas.common import normalize_email
from donation_drive.services.donors import Subscriber

logger = logging.getLogger(__name__)


async def find_commenter(
    db: AsyncSession,
    campaign_id: str,
    comment_type: CommentType,
    email: Optional[str],
) -> Optional[Commenter]:
    normalized = normalize_email(email)
    if not normalized:
        return None
    result = await db.execute(
        select(Commenter).where(
            Commenter.campaign_id == campaign_id,
            Commenter.comment_type == comment_type,
            Commenter.email == normalized,
        )
    )
    return result.scalars().first()


async def register_commenter(
    db: AsyncSession,
    campaign_id: str,
    comment_type: CommentType,
    name: Optional[str],
    email: Optional[str] = None,
    website: Optional[str] = None,
    notify_on_replies: bool = False,
) -> tuple[Commenter, bool]:
    """
    Register a commenter for a thread.

    Returns (commenter, created). An email already registered on the thread
    returns the existing profile unchanged.
    """
    existing = await find_commenter(db, campaign_id, comment_type, email)
    if existing is not None:
        return existing, False

    email = normalize_email(email) or None
    commenter = Commenter(
        campaign_id=campaign_id,
        comment_type=comment_type,
        name=(name or "").strip() or (email.split("@")[0] if email else "Guest"),
        email=email,
        website=website,
        notify_on_replies=bool(notify_on_replies and email),
    )
    db.add(commenter)
    await db.flush()
    logger.info(f"Commenter registered: campaign={campaign_id}, type={comment_type.value}")
    return commenter, True


async def list_reply_subscribers(
    db: AsyncSession,
    campaign_id: str,
    comment_type: CommentType,
) -> list[Subscriber]:
    """Commenters on a thread who want reply notifications, in registration order."""
    result = await db.execute(
        select(Commenter.email, Commenter.name)
        .where(
            Commenter.campaign_id == campaign_id,
            Commenter.comment_type == comment_type,
            Commenter.notify_on_replies.is_(True),
            Commenter.email.is_not(None),
        )
        .order_by(Commenter.created.asc())
    )
    return [Subscriber(email=email, name=name) for email, name in result.all() if email]
