"""
Razorpay Gateway - order creation through the Razorpay SDK.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import razorpay

from carepay.config import Settings
from carepay.exceptions import GatewayError, GatewayTimeout

logger = logging.getLogger(__name__)


class RazorpayGateway:
    """Thin async wrapper over the (blocking) Razorpay client."""

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.timeout = settings.razorpay_timeout_seconds
        self.client = client or razorpay.Client(
            auth=(settings.razorpay_key_id, settings.razorpay_key_secret)
        )

    async def create_order(
        self,
        amount_paise: int,
        currency: str,
        receipt: str,
        notes: Dict[str, str],
    ) -> Dict[str, Any]:
        """
        Create a Razorpay order for an exact amount in paise.

        Returns the gateway order ({id, amount, currency, status}).
        Not retried: a retry could create a second order for the same intent.
        """
        data = {
            "amount": amount_paise,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
        }

        try:
            order = await asyncio.wait_for(
                asyncio.to_thread(self.client.order.create, data),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Razorpay order creation timed out after {self.timeout}s (receipt {receipt})")
            raise GatewayTimeout(f"Payment gateway timed out (receipt {receipt})")
        except Exception as e:
            logger.error(f"Razorpay order creation failed (receipt {receipt}): {type(e).__name__}")
            raise GatewayError(f"Failed to create payment order (receipt {receipt})") from e

        if not isinstance(order, dict) or not order.get("id"):
            raise GatewayError(f"Payment gateway returned no order id (receipt {receipt})")

        logger.info(f"Created Razorpay order {order['id']} for {amount_paise} {currency}")
        return order
