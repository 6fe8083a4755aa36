"""
Payment error taxonomy.
Each request-level error carries the HTTP status it maps to at the API boundary.
"""

from typing import Optional


class ConfigurationError(RuntimeError):
    """Required configuration is missing. Raised at startup, never per request."""


class PaymentError(Exception):
    """Base class for payment workflow errors."""

    status_code: int = 400
    default_message: str = "Payment request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidAmount(PaymentError):
    status_code = 400
    default_message = "Amount must be at least 100 paise"


class UserNotFound(PaymentError):
    status_code = 404
    default_message = "User not found"


class PaymentNotFound(PaymentError):
    status_code = 404
    default_message = "Payment record not found"


class VerificationFailed(PaymentError):
    status_code = 400
    default_message = "Payment could not be verified"


class InvalidWebhookSignature(PaymentError):
    status_code = 400
    default_message = "Invalid webhook signature"


class MalformedWebhookPayload(PaymentError):
    status_code = 400
    default_message = "Malformed webhook payload"


class GatewayError(PaymentError):
    status_code = 502
    default_message = "Payment gateway error"


class GatewayTimeout(GatewayError):
    status_code = 504
    default_message = "Payment gateway timed out"
