"""
Razorpay Webhook Handler.
Verifies signatures and reconciles payment events.
"""

import json
import logging

from fastapi import APIRouter, Request, HTTPException, Depends

from carepay.api.deps import get_payment_service
from carepay.services.payment_service import PaymentService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/razorpay")
async def razorpay_webhook(
    request: Request,
    payment_service: PaymentService = Depends(get_payment_service),
):
    """
    Handle Razorpay webhook events.

    Key events:
    - payment.captured: payment settled, run fulfillment
    - payment.failed: payment failed, record reason

    Always 200 for handled and redelivered events so Razorpay stops
    retrying; 400 for bad signatures and malformed payloads.
    """
    # Raw body for signature verification
    body = await request.body()
    signature = request.headers.get("X-Razorpay-Signature", "")

    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Malformed webhook payload")

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Malformed webhook payload")

    event_type = payload.get("event") or ""
    logger.info(f"Razorpay webhook received: {event_type}")

    result = await payment_service.process_webhook(
        event_type=event_type,
        payload=payload.get("payload") or {},
        webhook_signature=signature,
        raw_body=body,
    )

    return {"status": "ok", "already_processed": result.already_processed}
