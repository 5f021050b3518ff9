"""
Maintenance bill raised against a property owner once the work on a
manager request has been costed.
"""

from sqlalchemy import String, Text, Numeric, DateTime, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from property_portal.database import Base
from property_portal.models.user import enum_values
from datetime import datetime
from decimal import Decimal
import enum
import uuid
from typing import Optional


class PaymentRequestStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"


class PaymentRequest(Base):
    """One bill per manager request. Re-costing the request updates it in place."""

    __tablename__ = "payment_requests"

    manager_request_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), unique=True, nullable=False, index=True
    )

    property_name: Mapped[str] = mapped_column(String(500), nullable=False)
    property_owner_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    property_owner_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    actual_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=12, scale=2), nullable=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[PaymentRequestStatus] = mapped_column(
        SQLEnum(PaymentRequestStatus, values_callable=enum_values, native_enum=False),
        nullable=False,
        default=PaymentRequestStatus.PENDING,
        index=True,
    )

    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<PaymentRequest(id={self.id}, amount={self.amount}, status={self.status})>"
