"""
Payment Service - Razorpay order issuing, verification and webhook reconciliation.
"""

import json
import uuid
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from carepay.config import Settings
from carepay.exceptions import (
    InvalidAmount,
    UserNotFound,
    PaymentNotFound,
    VerificationFailed,
    InvalidWebhookSignature,
)
from carepay.fsm.states import (
    PaymentStatus,
    PaymentPurpose,
    PaymentMethod,
    PRICING,
    Vertical,
    PlanType,
)
from carepay.models.payment import Payment
from carepay.models.user import User
from carepay.schemas.razorpay import (
    PaymentCapturedEvent,
    PaymentFailedEvent,
    parse_webhook_event,
)
from carepay.services.fulfillment_service import FulfillmentService
from carepay.services.razorpay_gateway import RazorpayGateway
from carepay.services.signature_service import SignatureVerifier

logger = logging.getLogger(__name__)


@dataclass
class PaymentOrder:
    payment_id: uuid.UUID
    razorpay_order_id: str
    amount_paise: int
    currency: str


@dataclass
class WebhookResult:
    already_processed: bool


@dataclass
class VerificationResult:
    payment_id: uuid.UUID
    already_processed: bool


@dataclass
class PricingValidation:
    valid: bool
    expected_price: int


def _as_uuid(value: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class PaymentService:
    """
    Service for the Razorpay payment workflow.

    Payment state is only ever changed through _settle(), a conditional
    UPDATE guarded on status = PENDING. Whichever caller (webhook or
    checkout verification) wins that update runs fulfillment; every other
    caller sees already_processed.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        gateway: Optional[RazorpayGateway] = None,
        verifier: Optional[SignatureVerifier] = None,
        fulfillment: Optional[FulfillmentService] = None,
    ):
        self.db = db
        self.settings = settings
        self.verifier = verifier or SignatureVerifier(settings)
        self.gateway = gateway or RazorpayGateway(settings)
        self.fulfillment = fulfillment or FulfillmentService(db)

    # ==========================================
    # ORDER ISSUER
    # ==========================================

    async def create_payment_order(
        self,
        user_id: Union[str, uuid.UUID],
        amount_paise: int,
        currency: Optional[str] = None,
        purpose: Union[str, PaymentPurpose] = PaymentPurpose.CONSULTATION,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> PaymentOrder:
        """
        Create a Razorpay order and a PENDING payment row for it.

        1. Validate amount (integer paise, >= minimum)
        2. Validate user exists
        3. Create gateway order with a fresh receipt id
        4. Persist PENDING payment with the gateway order id
        """
        currency = currency or self.settings.default_currency
        purpose = getattr(purpose, "value", purpose)

        # bool is an int subclass and must not pass as an amount
        if (
            not isinstance(amount_paise, int)
            or isinstance(amount_paise, bool)
            or amount_paise < self.settings.min_amount_paise
        ):
            raise InvalidAmount(
                f"Amount must be an integer of at least {self.settings.min_amount_paise} paise"
            )

        user_uuid = _as_uuid(user_id)
        user = None
        if user_uuid:
            result = await self.db.execute(select(User).where(User.id == user_uuid))
            user = result.scalar_one_or_none()
        if not user:
            raise UserNotFound(f"User not found: {user_id}")

        receipt = f"rcpt_{uuid.uuid4().hex[:24]}"
        order = await self.gateway.create_order(
            amount_paise=amount_paise,
            currency=currency,
            receipt=receipt,
            notes={"userId": str(user.id), "purpose": purpose},
        )

        payment = Payment(
            user_id=user.id,
            amount_paise=amount_paise,
            currency=currency,
            purpose=purpose,
            status=PaymentStatus.PENDING.value,
            razorpay_order_id=order["id"],
            payment_metadata={**(metadata or {}), "purpose": purpose},
        )
        self.db.add(payment)
        await self.db.flush()

        logger.info(
            f"Payment order {order['id']} created for user {user.id}: {amount_paise} {currency} ({purpose})",
            extra={"payment_id": str(payment.id), "razorpay_order_id": order["id"]},
        )

        return PaymentOrder(
            payment_id=payment.id,
            razorpay_order_id=payment.razorpay_order_id,
            amount_paise=payment.amount_paise,
            currency=payment.currency,
        )

    # ==========================================
    # CHECKOUT VERIFICATION
    # ==========================================

    async def verify_payment_signature(
        self,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str,
    ) -> bool:
        return self.verifier.verify_payment_signature(
            razorpay_order_id, razorpay_payment_id, razorpay_signature
        )

    async def verify_payment(
        self,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str,
    ) -> VerificationResult:
        """
        Verify the checkout callback and settle the payment.

        Shares the guarded transition with the webhook, so verification
        and webhook can arrive in either order and fulfil exactly once.
        """
        is_valid = await self.verify_payment_signature(
            razorpay_order_id, razorpay_payment_id, razorpay_signature
        )
        if not is_valid:
            logger.warning(f"Checkout signature mismatch for order {razorpay_order_id}")
            raise VerificationFailed()

        payment = await self.get_payment_by_razorpay_order_id(razorpay_order_id)
        if not payment:
            logger.warning(f"Checkout verification for unknown order {razorpay_order_id}")
            raise PaymentNotFound(f"No payment for order {razorpay_order_id}")

        if payment.is_terminal:
            logger.info(f"Payment {payment.id} already {payment.status}, verification is a no-op")
            return VerificationResult(payment_id=payment.id, already_processed=True)

        settled = await self._settle(
            payment,
            PaymentStatus.COMPLETED,
            razorpay_payment_id=razorpay_payment_id,
            razorpay_signature=razorpay_signature,
        )
        if not settled:
            return VerificationResult(payment_id=payment.id, already_processed=True)

        await self.handle_payment_success(payment)
        return VerificationResult(payment_id=payment.id, already_processed=False)

    # ==========================================
    # WEBHOOK RECONCILER
    # ==========================================

    async def process_webhook(
        self,
        event_type: str,
        payload: Dict[str, Any],
        webhook_signature: str,
        raw_body: Optional[Union[str, bytes]] = None,
    ) -> WebhookResult:
        """
        Reconcile a Razorpay webhook delivery.

        raw_body must be the exact request body when called from HTTP.
        Without it, the signature is checked over the compact JSON of
        {"event": ..., "payload": ...}.

        Redeliveries of an already settled payment return
        already_processed=True and write nothing.
        """
        if raw_body is None:
            raw_body = json.dumps(
                {"event": event_type, "payload": payload},
                separators=(",", ":"),
            )

        if not self.verifier.verify_webhook_signature(raw_body, webhook_signature):
            logger.warning(f"Rejected Razorpay webhook '{event_type}': invalid signature (possible tampering)")
            raise InvalidWebhookSignature()

        event = parse_webhook_event(event_type, payload)

        if not isinstance(event, (PaymentCapturedEvent, PaymentFailedEvent)):
            logger.info(f"Unhandled Razorpay event: {event_type}")
            return WebhookResult(already_processed=False)

        payment = await self.get_payment_by_razorpay_order_id(event.razorpay_order_id)
        if not payment:
            logger.warning(f"Webhook for unknown order {event.razorpay_order_id}")
            raise PaymentNotFound(f"No payment for order {event.razorpay_order_id}")

        # Idempotency gate
        if payment.is_terminal:
            logger.info(f"Duplicate {event_type} for payment {payment.id} ({payment.status}) ignored")
            return WebhookResult(already_processed=True)

        if isinstance(event, PaymentCapturedEvent):
            settled = await self._settle(
                payment,
                PaymentStatus.COMPLETED,
                razorpay_payment_id=event.razorpay_payment_id,
                method=event.method,
            )
            if not settled:
                return WebhookResult(already_processed=True)

            await self.handle_payment_success(payment)
        else:
            settled = await self._settle(
                payment,
                PaymentStatus.FAILED,
                razorpay_payment_id=event.razorpay_payment_id,
                failure_reason=event.failure_reason,
            )
            if not settled:
                return WebhookResult(already_processed=True)

            await self.handle_payment_failure(payment)

        return WebhookResult(already_processed=False)

    async def handle_payment_success(self, payment: Payment):
        return await self.fulfillment.handle_payment_success(payment)

    async def handle_payment_failure(self, payment: Payment):
        return await self.fulfillment.handle_payment_failure(payment)

    async def _settle(self, payment: Payment, target: PaymentStatus, **values: Any) -> bool:
        """
        Move a PENDING payment to a terminal state.

        Single conditional UPDATE; returns False when another delivery
        already moved it (zero rows affected).
        """
        if not PaymentStatus(payment.status).can_transition_to(target):
            logger.warning(f"Refusing transition {payment.status} -> {target.value} for payment {payment.id}")
            return False

        stmt = (
            update(Payment)
            .where(
                Payment.id == payment.id,
                Payment.status == PaymentStatus.PENDING.value,
            )
            .values(status=target.value, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        if result.rowcount == 0:
            logger.info(f"Payment {payment.id} was settled concurrently; skipping")
            return False

        await self.db.refresh(payment)
        logger.info(
            f"Payment {payment.id} -> {target.value}",
            extra={"payment_id": str(payment.id), "razorpay_order_id": payment.razorpay_order_id},
        )
        return True

    # ==========================================
    # QUERIES
    # ==========================================

    async def get_payment(self, payment_id: Union[str, uuid.UUID]) -> Payment:
        payment_uuid = _as_uuid(payment_id)
        payment = None
        if payment_uuid:
            result = await self.db.execute(select(Payment).where(Payment.id == payment_uuid))
            payment = result.scalar_one_or_none()
        if not payment:
            raise PaymentNotFound(f"Payment not found: {payment_id}")
        return payment

    async def get_payment_by_razorpay_order_id(self, razorpay_order_id: str) -> Optional[Payment]:
        result = await self.db.execute(
            select(Payment).where(Payment.razorpay_order_id == razorpay_order_id)
        )
        return result.scalar_one_or_none()

    async def get_payments_by_user(
        self,
        user_id: Union[str, uuid.UUID],
        status: Optional[str] = None,
    ) -> List[Payment]:
        """Payment history for a user, newest first."""
        user_uuid = _as_uuid(user_id)
        if not user_uuid:
            return []

        query = select(Payment).where(Payment.user_id == user_uuid)
        if status:
            query = query.where(Payment.status == status)
        query = query.order_by(Payment.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    def get_supported_payment_methods() -> List[str]:
        return [method.value for method in PaymentMethod]

    @staticmethod
    def validate_pricing(vertical: str, plan_type: str, amount_paise: int) -> PricingValidation:
        """Check an amount against the plan catalogue. Unknown plans are invalid with price 0."""
        try:
            expected = PRICING[Vertical(vertical)][PlanType(plan_type)]
        except (ValueError, KeyError):
            return PricingValidation(valid=False, expected_price=0)

        return PricingValidation(valid=amount_paise == expected, expected_price=expected)
