"""
Pydantic schemas for comment gating and commenter registration.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, HttpUrl, model_validator

from donation_drive.models.commenter import CommentType


class CommentAccessRequest(BaseModel):
    """Ask what a visitor may do in a campaign's comment thread."""
    transparency: bool = False
    email: Optional[EmailStr] = None


class CommentAccessResponse(BaseModel):
    comment_type: CommentType
    state: str
    can_comment: bool
    can_view_comments: bool


class CommenterRegister(BaseModel):
    """Register a commenter profile for a thread."""
    transparency: bool = False
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
    website: Optional[HttpUrl] = None
    notify_on_replies: bool = False

    @model_validator(mode="after")
    def check_identity(self):
        if not self.name and not self.email:
            raise ValueError("Please provide at least a name or email")
        if self.notify_on_replies and not self.email:
            raise ValueError("An email is required for reply notifications")
        return self


class CommenterCheck(BaseModel):
    transparency: bool = False
    email: EmailStr


class CommenterResponse(BaseModel):
    id: str
    campaign_id: str
    comment_type: CommentType
    name: str
    email: Optional[str] = None
    website: Optional[str] = None
    notify_on_replies: bool
    created: datetime

    class Config:
        from_attributes = True


class CommenterCheckResponse(BaseModel):
    exists: bool
    commenter: Optional[CommenterResponse] = None
