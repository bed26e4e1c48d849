"""
Pydantic schemas for notification dispatch.
"""
from typing import Optional
from enum import Enum
from pydantic import BaseModel, EmailStr, Field


class NotificationKind(str, Enum):
    """Events that fan out to subscribers."""
    EXPENSE_POSTED = "expense_posted"
    COMMENT_POSTED = "comment_posted"


class NotifyRequest(BaseModel):
    """Manually trigger a notification batch for a campaign."""
    kind: NotificationKind
    # Expense notifications: id of the expense entry to announce
    expense_id: Optional[str] = None
    # Comment notifications: thread, author and excerpt of the new comment
    comment_type: Optional[str] = None
    author_name: Optional[str] = Field(None, max_length=200)
    comment_excerpt: Optional[str] = Field(None, max_length=2000)
    exclude_email: Optional[EmailStr] = None


class DispatchErrorResponse(BaseModel):
    recipient: str
    reason: str


class DispatchResultResponse(BaseModel):
    """Per-batch accounting of a notification dispatch."""
    successful: int
    failed: int
    errors: list[DispatchErrorResponse]
    skipped: int = 0
    cancelled: bool = False
