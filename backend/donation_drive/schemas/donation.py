"""
Pydantic schemas for donation capture and donation listings.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, EmailStr


class DonationCapture(BaseModel):
    """
    A payment the gateway has already captured.

    Used both as the capture callback body and to validate direct calls to
    the capture adapter.
    """
    external_transaction_id: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    donor_email: EmailStr
    donor_name: Optional[str] = Field(None, max_length=200)
    message: Optional[str] = Field(None, max_length=1000)
    is_anonymous: bool = False
    notify_on_updates: bool = False


class DonationResponse(BaseModel):
    """Full donation entry (admin view)."""
    id: str
    campaign_id: str
    donor_name: str
    donor_email: str
    amount: Decimal
    currency: str
    message: Optional[str] = None
    is_anonymous: bool
    notify_on_updates: bool
    external_transaction_id: str
    created: datetime

    class Config:
        from_attributes = True


class CaptureResponse(BaseModel):
    """Result of recording a captured payment."""
    duplicate: bool
    donation: DonationResponse


class PublicDonationResponse(BaseModel):
    """Donation as shown on the transparency page. No email exposed."""
    id: str
    donor_name: str
    amount: Decimal
    currency: str
    message: Optional[str] = None
    date: datetime


class DonorCheckRequest(BaseModel):
    """Donor verification request."""
    email: EmailStr


class DonorCheckResponse(BaseModel):
    """Donor verification result."""
    is_donor: bool
