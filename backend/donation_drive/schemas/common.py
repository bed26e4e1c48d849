"""
Common schemas used across the application.
"""
from typing import Optional
from decimal import Decimal, ROUND_HALF_UP
from pydantic import BaseModel

CENT = Decimal("0.01")


def money(value: Decimal) -> Decimal:
    """Round a ledger sum to 2 decimal places for presentation."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_email(email: Optional[str]) -> str:
    """Comparison key for emails: trimmed and lowercased."""
    return (email or "").strip().lower()


class HealthResponse(BaseModel):
    """Health check response."""
    code: int = 200
    message: str = "API is healthy."
