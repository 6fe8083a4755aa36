"""
Fulfillment Service - what a captured payment buys.

Dispatch is keyed on the purpose stored in the payment's own metadata.
Clinical routing data (vertical, intake response) always comes from that
metadata, never from the gateway's webhook payload.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carepay.fsm.states import PaymentPurpose, ConsultationStatus, SubscriptionStatus
from carepay.models.consultation import Consultation
from carepay.models.payment import Payment
from carepay.models.subscription import Subscription, SubscriptionPlan

logger = logging.getLogger(__name__)


@dataclass
class FulfillmentResult:
    consultation_id: Optional[str] = None
    subscription_id: Optional[str] = None
    reconciliation_required: bool = False


@dataclass
class FailureAck:
    logged: bool
    reason: Optional[str]


def add_months(start: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamping to the last day (Jan 31 + 1 -> Feb 28/29)."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


class FulfillmentService:
    """Creates consultations / subscriptions for completed payments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def handle_payment_success(self, payment: Payment) -> FulfillmentResult:
        """
        Run the fulfillment action for a COMPLETED payment.

        Safe to re-run: an existing consultation or subscription for the
        payment is returned instead of creating a second one.
        """
        metadata = payment.payment_metadata or {}
        purpose = payment.metadata_purpose

        if purpose == PaymentPurpose.CONSULTATION.value:
            return await self._create_consultation(payment, metadata)

        if purpose == PaymentPurpose.SUBSCRIPTION.value:
            return await self._activate_subscription(payment, metadata)

        logger.info(f"No fulfillment for payment {payment.id} with purpose {purpose}")
        return FulfillmentResult()

    async def handle_payment_failure(self, payment: Payment) -> FailureAck:
        """Record a failed payment for analytics. No clinical or billing side effects."""
        reason = payment.failure_reason
        logger.info(
            f"Payment {payment.id} failed: {reason}",
            extra={"payment_id": str(payment.id), "razorpay_order_id": payment.razorpay_order_id},
        )
        return FailureAck(logged=True, reason=reason)

    async def _create_consultation(self, payment: Payment, metadata: dict) -> FulfillmentResult:
        existing = await self.db.execute(
            select(Consultation).where(Consultation.payment_id == payment.id)
        )
        consultation = existing.scalar_one_or_none()
        if consultation:
            return FulfillmentResult(consultation_id=str(consultation.id))

        vertical = metadata.get("vertical")
        if not vertical:
            logger.error(f"Consultation payment {payment.id} has no vertical in metadata")
            payment.requires_reconciliation = True
            return FulfillmentResult(reconciliation_required=True)

        consultation = Consultation(
            patient_id=payment.user_id,
            vertical=vertical,
            intake_response_id=metadata.get("intakeResponseId"),
            payment_id=payment.id,
            status=ConsultationStatus.PENDING_ASSESSMENT.value,
        )
        self.db.add(consultation)
        await self.db.flush()

        logger.info(f"Created consultation {consultation.id} for payment {payment.id}")
        return FulfillmentResult(consultation_id=str(consultation.id))

    async def _activate_subscription(self, payment: Payment, metadata: dict) -> FulfillmentResult:
        existing = await self.db.execute(
            select(Subscription).where(Subscription.payment_id == payment.id)
        )
        subscription = existing.scalar_one_or_none()
        if subscription:
            return FulfillmentResult(subscription_id=str(subscription.id))

        plan_id = metadata.get("planId")
        plan = None
        if plan_id:
            result = await self.db.execute(
                select(SubscriptionPlan).where(SubscriptionPlan.id == plan_id)
            )
            plan = result.scalar_one_or_none()

        if not plan:
            logger.error(f"Subscription plan {plan_id} not found for payment {payment.id}; needs reconciliation")
            payment.requires_reconciliation = True
            return FulfillmentResult(reconciliation_required=True)

        if not plan.is_active:
            logger.error(f"Subscription plan {plan.id} is retired; payment {payment.id} needs reconciliation")
            payment.requires_reconciliation = True
            return FulfillmentResult(reconciliation_required=True)

        # Paid amount must equal the plan's current price; neither side wins a mismatch
        if plan.price_in_paise != payment.amount_paise:
            logger.error(
                f"Price mismatch for payment {payment.id}: paid {payment.amount_paise} paise, "
                f"plan {plan.id} costs {plan.price_in_paise} paise; needs reconciliation"
            )
            payment.requires_reconciliation = True
            return FulfillmentResult(reconciliation_required=True)

        now = datetime.now(timezone.utc)
        subscription = Subscription(
            user_id=payment.user_id,
            plan_id=plan.id,
            payment_id=payment.id,
            status=SubscriptionStatus.ACTIVE.value,
            current_period_start=now,
            current_period_end=add_months(now, plan.duration_months),
        )
        self.db.add(subscription)
        await self.db.flush()

        logger.info(f"Activated subscription {subscription.id} on plan {plan.id} for payment {payment.id}")
        return FulfillmentResult(subscription_id=str(subscription.id))
