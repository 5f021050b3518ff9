"""
Payment ledger model.
"""

from sqlalchemy import String, Text, Numeric, DateTime, Uuid, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column
from property_portal.database import Base
from property_portal.models.user import enum_values
from datetime import datetime
from decimal import Decimal
import enum
import uuid
from typing import Optional


class PaymentType(str, enum.Enum):
    RENT = "rent"
    SECURITY_DEPOSIT = "security_deposit"
    FEE = "fee"
    LATE_FEE = "late_fee"
    MAINTENANCE = "maintenance"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    ACH = "ach"
    CARD = "card"


class Payment(Base):
    """A single charge against a tenant, linked to the processor's charge or intent id."""

    __tablename__ = "payments"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)

    user_email: Mapped[str] = mapped_column(String(255), nullable=False)

    rental_application_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True, index=True)

    property_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    property_name: Mapped[str] = mapped_column(String(255), nullable=False)

    type: Mapped[PaymentType] = mapped_column(
        SQLEnum(PaymentType, values_callable=enum_values, native_enum=False),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)

    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus, values_callable=enum_values, native_enum=False),
        nullable=False,
        default=PaymentStatus.PENDING,
    )

    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod, values_callable=enum_values, native_enum=False),
        nullable=False,
    )

    stripe_payment_intent_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        Index("idx_payment_email_status", "user_email", "status"),
    )

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, type={self.type}, amount={self.amount}, status={self.status})>"
