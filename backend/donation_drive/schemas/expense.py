"""
Pydantic schemas for expense (distribution) entries.
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field, HttpUrl


class ExpenseCreate(BaseModel):
    """Record a distribution of funds."""
    title: str = Field(..., min_length=1, max_length=300)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: str = Field(..., min_length=1)
    beneficiaries: Optional[str] = None
    receipts: list[HttpUrl] = Field(default_factory=list)
    expense_date: date
    notify_donors: bool = True


class ExpenseResponse(BaseModel):
    """Expense response."""
    id: str
    campaign_id: str
    title: str
    amount: Decimal
    currency: str
    description: str
    beneficiaries: Optional[str] = None
    receipts: list[str] = Field(default_factory=list)
    expense_date: date
    created: datetime

    class Config:
        from_attributes = True


class ExpenseCreatedResponse(BaseModel):
    """Recorded expense plus whether donor notifications were queued."""
    expense: ExpenseResponse
    notifications_queued: bool
