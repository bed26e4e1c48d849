"""
Comment gate: decides whether a visitor may read and write comments.

Public threads are always open. Donor-gated threads (the transparency page
of a donor-gated campaign) stay closed, including the existing comment
list, until the visitor proves they are a donor.
"""
import enum
from typing import Optional

from donation_drive.models.campaign import Campaign
from donation_drive.models.commenter import CommentType
from donation_drive.services.donors import DonorRegistry


class GateState(str, enum.Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"


class CommentGate:
    """
    Per (visitor, campaign, comment type) gate.

    VERIFIED is sticky for the lifetime of the instance; keeping it across
    requests is up to the caller's session handling.
    """

    def __init__(self, registry: DonorRegistry, campaign_id: str, comment_type: CommentType):
        self.registry = registry
        self.campaign_id = campaign_id
        self.comment_type = comment_type
        self.verified_email: Optional[str] = None
        if comment_type == CommentType.PUBLIC:
            self.state = GateState.VERIFIED
        else:
            self.state = GateState.UNVERIFIED

    @classmethod
    def for_campaign(cls, registry: DonorRegistry, campaign: Campaign, transparency: bool) -> "CommentGate":
        """Only the transparency thread of a donor-gated campaign is gated."""
        if transparency and campaign.is_donor_gated:
            comment_type = CommentType.DONOR_GATED
        else:
            comment_type = CommentType.PUBLIC
        return cls(registry, campaign.id, comment_type)

    async def verify(self, email: Optional[str]) -> GateState:
        if self.state == GateState.VERIFIED:
            return self.state
        if await self.registry.is_donor(self.campaign_id, email):
            self.state = GateState.VERIFIED
            self.verified_email = email
        return self.state

    @property
    def can_comment(self) -> bool:
        return self.state == GateState.VERIFIED

    @property
    def can_view_comments(self) -> bool:
        return self.state == GateState.VERIFIED
