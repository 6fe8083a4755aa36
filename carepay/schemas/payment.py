"""Request and response bodies for the payment endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from carepay.fsm.states import PaymentPurpose


class CreatePaymentOrderRequest(BaseModel):
    """Request body for creating a Razorpay order."""
    amount_paise: int
    currency: str = "INR"
    purpose: PaymentPurpose
    vertical: Optional[str] = None
    plan_id: Optional[str] = None
    intake_response_id: Optional[str] = None
    lab_order_id: Optional[str] = None

    def to_metadata(self) -> dict:
        """Purpose-specific context stored on the payment for fulfillment."""
        metadata = {
            "vertical": self.vertical,
            "planId": self.plan_id,
            "intakeResponseId": self.intake_response_id,
            "labOrderId": self.lab_order_id,
        }
        return {key: value for key, value in metadata.items() if value is not None}


class PaymentOrderResponse(BaseModel):
    payment_id: uuid.UUID
    razorpay_order_id: str
    amount_paise: int
    currency: str


class VerifyPaymentRequest(BaseModel):
    """Checkout callback fields returned by Razorpay Checkout."""
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class VerifyPaymentResponse(BaseModel):
    status: str = "ok"
    payment_id: uuid.UUID
    already_processed: bool


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    amount_paise: int
    currency: str
    purpose: str
    status: str
    razorpay_order_id: str
    razorpay_payment_id: Optional[str] = None
    method: Optional[str] = None
    failure_reason: Optional[str] = None
    created_at: datetime


class PricingValidationResponse(BaseModel):
    valid: bool
    expected_price: int = Field(description="Catalogue price in paise, 0 when unknown")
