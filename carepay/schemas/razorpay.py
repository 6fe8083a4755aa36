"""
Razorpay webhook payload parsing.

The gateway sends a loosely typed nested document
(payload.payment.entity.*). It is parsed once here into one of three
internal event records so the reconciler never touches the wire shape.
"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from carepay.exceptions import MalformedWebhookPayload
from carepay.fsm.states import WebhookEventType


class PaymentEntity(BaseModel):
    """payload.payment.entity as sent by Razorpay."""

    model_config = ConfigDict(extra="ignore")

    id: str
    order_id: str
    amount: Optional[int] = None
    currency: Optional[str] = None
    method: Optional[str] = None
    status: Optional[str] = None
    error_code: Optional[str] = None
    error_description: Optional[str] = None


class PaymentCapturedEvent(BaseModel):
    kind: Literal["captured"] = "captured"
    razorpay_order_id: str
    razorpay_payment_id: str
    method: Optional[str] = None
    amount: Optional[int] = None


class PaymentFailedEvent(BaseModel):
    kind: Literal["failed"] = "failed"
    razorpay_order_id: str
    razorpay_payment_id: str
    error_code: Optional[str] = None
    error_description: Optional[str] = None

    @property
    def failure_reason(self) -> str:
        return self.error_description or self.error_code or "Payment failed"


class UnhandledEvent(BaseModel):
    kind: Literal["other"] = "other"
    event: str


WebhookEvent = Union[PaymentCapturedEvent, PaymentFailedEvent, UnhandledEvent]


def _payment_entity(payload: Dict[str, Any]) -> PaymentEntity:
    try:
        entity = payload["payment"]["entity"]
    except (KeyError, TypeError):
        raise MalformedWebhookPayload("Webhook payload has no payment entity")

    try:
        return PaymentEntity.model_validate(entity)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise MalformedWebhookPayload(f"Invalid payment entity: {fields}") from e


def parse_webhook_event(event_type: str, payload: Optional[Dict[str, Any]]) -> WebhookEvent:
    """Turn a Razorpay (event, payload) pair into a typed event."""
    if event_type == WebhookEventType.PAYMENT_CAPTURED.value:
        entity = _payment_entity(payload or {})
        return PaymentCapturedEvent(
            razorpay_order_id=entity.order_id,
            razorpay_payment_id=entity.id,
            method=entity.method,
            amount=entity.amount,
        )

    if event_type == WebhookEventType.PAYMENT_FAILED.value:
        entity = _payment_entity(payload or {})
        return PaymentFailedEvent(
            razorpay_order_id=entity.order_id,
            razorpay_payment_id=entity.id,
            error_code=entity.error_code,
            error_description=entity.error_description,
        )

    return UnhandledEvent(event=event_type or "")
