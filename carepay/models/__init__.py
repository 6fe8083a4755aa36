"""Models package for database models."""

from carepay.models.user import User
from carepay.models.payment import Payment
from carepay.models.consultation import Consultation
from carepay.models.subscription import SubscriptionPlan, Subscription

__all__ = [
    "User",
    "Payment",
    "Consultation",
    "SubscriptionPlan",
    "Subscription",
]
