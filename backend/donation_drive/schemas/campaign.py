"""
Pydantic schemas for campaigns, statistics and the transparency report.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from donation_drive.schemas.donation import PublicDonationResponse
from donation_drive.schemas.expense import ExpenseResponse


class CampaignCreate(BaseModel):
    """Publish a blog post as a donation drive."""
    slug: str = Field(..., min_length=1, max_length=200, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    title: str = Field(..., min_length=1, max_length=300)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    donation_goal: Decimal = Field(..., gt=0, decimal_places=2)
    is_donor_gated: bool = True


class CampaignResponse(BaseModel):
    """Campaign response."""
    id: str
    slug: str
    title: str
    currency: str
    donation_goal: Decimal
    is_donation_drive: bool
    is_donor_gated: bool
    created: datetime

    class Config:
        from_attributes = True


class CampaignStatsResponse(BaseModel):
    """Derived campaign statistics, rounded for display."""
    total_donations: Decimal
    total_expenses: Decimal
    remaining_balance: Decimal
    donor_count: int
    percent_complete: int
    currency: str


class TransparencyReport(BaseModel):
    """Everything the transparency page renders in one payload."""
    campaign: CampaignResponse
    summary: CampaignStatsResponse
    donations: list[PublicDonationResponse]
    expenses: list[ExpenseResponse]
