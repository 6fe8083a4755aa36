"""
Signature Service - Razorpay checkout and webhook signature verification.
"""

import hmac
import hashlib
import logging
from typing import Optional, Union

from carepay.config import Settings
from carepay.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Payment ids with this prefix are accepted without a signature outside production
STUB_PAYMENT_PREFIX = "stub_pay_"


class SignatureVerifier:
    """
    HMAC-SHA256 verification for the two Razorpay trust boundaries:
    the checkout callback (key secret) and the webhook (webhook secret).
    """

    def __init__(self, settings: Settings):
        self.is_production = settings.is_production

        if self.is_production:
            if not settings.razorpay_key_secret:
                raise ConfigurationError("RAZORPAY_KEY_SECRET is required in production")
            if not settings.razorpay_webhook_secret:
                raise ConfigurationError("RAZORPAY_WEBHOOK_SECRET is required in production")

        # Used as-is, an empty secret stays empty
        self._key_secret = settings.razorpay_key_secret
        self._webhook_secret = settings.razorpay_webhook_secret

    @staticmethod
    def compute_signature(message: Union[str, bytes], secret: str) -> str:
        """Hex HMAC-SHA256 of message keyed by secret."""
        if isinstance(message, str):
            message = message.encode("utf-8")
        return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()

    def verify_payment_signature(
        self,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        signature: str,
    ) -> bool:
        """
        Verify the signature Razorpay Checkout hands back to the client.

        Expected value is HMAC-SHA256("{order_id}|{payment_id}", key_secret).
        Outside production, stub payment ids pass so flows can be exercised
        without a live gateway.
        """
        if not self.is_production and razorpay_payment_id.startswith(STUB_PAYMENT_PREFIX):
            logger.warning(f"Accepting stub payment {razorpay_payment_id} (non-production)")
            return True

        expected = self.compute_signature(
            f"{razorpay_order_id}|{razorpay_payment_id}",
            self._key_secret,
        )
        return self._matches(expected, signature)

    def verify_webhook_signature(self, body: Union[str, bytes], signature: str) -> bool:
        """Verify X-Razorpay-Signature against the raw webhook body."""
        expected = self.compute_signature(body, self._webhook_secret)
        return self._matches(expected, signature)

    @staticmethod
    def _matches(expected: str, signature: Optional[str]) -> bool:
        # Compared as bytes so non-ASCII input is a mismatch, not a TypeError
        return hmac.compare_digest(
            expected.encode("utf-8"),
            (signature or "").encode("utf-8", errors="replace"),
        )
