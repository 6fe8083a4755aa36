"""Payment model - Razorpay order/payment records and their lifecycle."""

import uuid
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from sqlalchemy import String, DateTime, ForeignKey, Integer, Boolean, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from carepay.database import Base
from carepay.fsm.states import PaymentStatus


class Payment(Base):
    """
    Payment record created PENDING when a Razorpay order is issued.
    razorpay_order_id is unique so every webhook maps to exactly one row.
    Rows are never deleted; they are the financial audit trail.
    """

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Minor units (paise), never rupees
    amount_paise: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        default="INR",
        nullable=False,
    )

    purpose: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=PaymentStatus.PENDING.value,
        nullable=False,
        index=True,
    )

    # Set at order creation
    razorpay_order_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )

    # Set at settlement
    razorpay_payment_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    razorpay_signature: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    method: Mapped[Optional[str]] = mapped_column(
        String(30),
        nullable=True,
    )

    # Purpose-specific context (purpose, vertical, planId, intakeResponseId, labOrderId)
    payment_metadata: Mapped[Dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        default=dict,
        nullable=False,
    )

    failure_reason: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    # Money was captured but fulfillment could not be honoured
    requires_reconciliation: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Payment {self.razorpay_order_id} {self.status}>"

    @property
    def is_terminal(self) -> bool:
        """Check if payment has reached COMPLETED or FAILED."""
        return PaymentStatus(self.status).is_terminal

    @property
    def metadata_purpose(self) -> Optional[str]:
        return (self.payment_metadata or {}).get("purpose")
