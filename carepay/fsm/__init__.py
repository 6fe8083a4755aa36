"""Payment lifecycle states and shared enums."""

from carepay.fsm.states import (
    PaymentStatus,
    PaymentPurpose,
    PaymentMethod,
    WebhookEventType,
    Vertical,
    PlanType,
    ConsultationStatus,
    SubscriptionStatus,
    PRICING,
)

__all__ = [
    "PaymentStatus",
    "PaymentPurpose",
    "PaymentMethod",
    "WebhookEventType",
    "Vertical",
    "PlanType",
    "ConsultationStatus",
    "SubscriptionStatus",
    "PRICING",
]
