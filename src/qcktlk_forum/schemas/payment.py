"""Payment-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import ApiModel


class PaymentIntentCreate(ApiModel):
    """Schema for requesting a payment intent from the processor."""

    amount: int = Field(..., gt=0, description="Amount in minor currency units")


class PaymentIntentResponse(ApiModel):
    client_secret: str
    payment_intent_id: str


class PaymentRecordCreate(ApiModel):
    """Payment confirmation reported by the client after checkout."""

    email: str | None = Field(
        None,
        description="Optional; must match the authenticated identity when supplied",
    )
    amount: int = Field(..., gt=0)
    status: str = Field(..., min_length=1, max_length=32)
    payment_intent_id: str = Field(..., min_length=1, max_length=255)
    membership_type: Literal["free", "premium"] = "premium"
    date: datetime | None = None


class PaymentRecordResponse(ApiModel):
    """Outcome of recording a payment."""

    message: str
    membership_updated: bool
    duplicate: bool = False


class PaymentResponse(ApiModel):
    id: int
    email: str
    amount: int
    currency: str
    status: str
    payment_intent_id: str
    membership_type: str
    date: datetime
