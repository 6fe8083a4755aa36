"""
Payment Endpoints.
Order creation, checkout verification and payment history.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from carepay.api.deps import get_current_user_id, get_payment_service
from carepay.schemas.payment import (
    CreatePaymentOrderRequest,
    PaymentOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
    PaymentResponse,
    PricingValidationResponse,
)
from carepay.services.payment_service import PaymentService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/payments/orders", response_model=PaymentOrderResponse)
async def create_payment_order(
    request: CreatePaymentOrderRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Create a Razorpay order for the client to open Checkout with."""
    order = await payment_service.create_payment_order(
        user_id=user_id,
        amount_paise=request.amount_paise,
        currency=request.currency,
        purpose=request.purpose,
        metadata=request.to_metadata(),
    )
    return PaymentOrderResponse(
        payment_id=order.payment_id,
        razorpay_order_id=order.razorpay_order_id,
        amount_paise=order.amount_paise,
        currency=order.currency,
    )


@router.post("/payments/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    request: VerifyPaymentRequest,
    _: uuid.UUID = Depends(get_current_user_id),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Verify the signed Checkout callback and settle the payment."""
    result = await payment_service.verify_payment(
        razorpay_order_id=request.razorpay_order_id,
        razorpay_payment_id=request.razorpay_payment_id,
        razorpay_signature=request.razorpay_signature,
    )
    return VerifyPaymentResponse(
        payment_id=result.payment_id,
        already_processed=result.already_processed,
    )


@router.get("/payments", response_model=List[PaymentResponse])
async def my_payments(
    status: Optional[str] = Query(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Payment history for the authenticated user."""
    return await payment_service.get_payments_by_user(user_id, status)


@router.get("/payments/methods", response_model=List[str])
async def supported_payment_methods():
    return PaymentService.get_supported_payment_methods()


@router.get("/payments/pricing/validate", response_model=PricingValidationResponse)
async def validate_pricing(
    vertical: str,
    plan_type: str,
    amount_paise: int,
):
    result = PaymentService.validate_pricing(vertical, plan_type, amount_paise)
    return PricingValidationResponse(valid=result.valid, expected_price=result.expected_price)


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    payment_service: PaymentService = Depends(get_payment_service),
):
    payment = await payment_service.get_payment(payment_id)
    # Other users' payments are reported as missing
    if payment.user_id != user_id:
        raise HTTPException(status_code=404, detail="Payment record not found")
    return payment
