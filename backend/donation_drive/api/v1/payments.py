"""
Payment gateway configuration for the client-side checkout.
"""
from fastapi import APIRouter
from pydantic import BaseModel

from donation_drive.services.payments import get_payment_config

router = APIRouter()


class PaymentConfigResponse(BaseModel):
    client_id: str
    environment: str


@router.get("/config", response_model=PaymentConfigResponse)
async def payment_config():
    """PayPal client id for the checkout button. 503 when payments are not set up."""
    config = get_payment_config()
    return PaymentConfigResponse(client_id=config.client_id, environment=config.environment)
