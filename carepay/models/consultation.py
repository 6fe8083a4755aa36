"""Consultation model - created once a consultation payment is captured."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from carepay.database import Base
from carepay.fsm.states import ConsultationStatus


class Consultation(Base):
    """
    Consultation awaiting clinical review.
    payment_id is unique: one consultation per payment.
    """

    __tablename__ = "consultations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    patient_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    vertical: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    intake_response_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    payment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("payments.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(30),
        default=ConsultationStatus.PENDING_ASSESSMENT.value,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Consultation {self.id} {self.vertical} {self.status}>"
