"""
State Definitions.
Payment lifecycle states and the enums shared by payments and fulfillment.
"""

from enum import Enum


class PaymentStatus(str, Enum):
    """
    Payment lifecycle.
    PENDING moves to exactly one terminal state and never leaves it.
    """

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (PaymentStatus.COMPLETED, PaymentStatus.FAILED)

    def can_transition_to(self, target: "PaymentStatus") -> bool:
        """Only PENDING -> COMPLETED and PENDING -> FAILED are allowed."""
        return self == PaymentStatus.PENDING and target.is_terminal


class PaymentPurpose(str, Enum):
    """What a payment pays for. Fulfillment dispatches on this value."""

    CONSULTATION = "CONSULTATION"
    SUBSCRIPTION = "SUBSCRIPTION"
    INTAKE_PAYMENT = "INTAKE_PAYMENT"
    LAB_ORDER = "LAB_ORDER"
    ORDER = "ORDER"


class PaymentMethod(str, Enum):
    """Checkout methods offered through Razorpay (order matters for display)."""

    UPI = "upi"
    CARD = "card"
    NETBANKING = "netbanking"
    WALLET = "wallet"


class WebhookEventType(str, Enum):
    """Razorpay webhook events the reconciler acts on."""

    PAYMENT_CAPTURED = "payment.captured"
    PAYMENT_FAILED = "payment.failed"


class Vertical(str, Enum):
    """Treatment verticals offered on the platform."""

    HAIR_LOSS = "HAIR_LOSS"
    SEXUAL_HEALTH = "SEXUAL_HEALTH"
    WEIGHT_MANAGEMENT = "WEIGHT_MANAGEMENT"
    PCOS = "PCOS"

    @property
    def display_name(self) -> str:
        names = {
            self.HAIR_LOSS: "Hair Loss",
            self.SEXUAL_HEALTH: "Sexual Health",
            self.WEIGHT_MANAGEMENT: "Weight Management",
            self.PCOS: "PCOS",
        }
        return names.get(self, self.value)


class PlanType(str, Enum):
    """Subscription billing periods."""

    MONTHLY = "MONTHLY"
    MONTHLY_PREMIUM = "MONTHLY_PREMIUM"  # GLP-1 programme
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"

    @property
    def duration_months(self) -> int:
        durations = {
            self.MONTHLY: 1,
            self.MONTHLY_PREMIUM: 1,
            self.QUARTERLY: 3,
            self.ANNUAL: 12,
        }
        return durations.get(self, 1)


class ConsultationStatus(str, Enum):
    """Initial consultation state created by payment fulfillment."""

    PENDING_ASSESSMENT = "PENDING_ASSESSMENT"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"


# Plan prices in paise, per vertical and plan type.
PRICING = {
    Vertical.HAIR_LOSS: {
        PlanType.MONTHLY: 99900,
        PlanType.QUARTERLY: 249900,
        PlanType.ANNUAL: 899900,
    },
    Vertical.SEXUAL_HEALTH: {
        PlanType.MONTHLY: 129900,
        PlanType.QUARTERLY: 329900,
        PlanType.ANNUAL: 1199900,
    },
    Vertical.WEIGHT_MANAGEMENT: {
        PlanType.MONTHLY: 299900,
        PlanType.QUARTERLY: 799900,
        PlanType.MONTHLY_PREMIUM: 999900,
        PlanType.ANNUAL: 2799900,
    },
    Vertical.PCOS: {
        PlanType.MONTHLY: 149900,
        PlanType.QUARTERLY: 379900,
        PlanType.ANNUAL: 1399900,
    },
}
