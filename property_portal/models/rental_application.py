"""
Rental application model. Carries the payment-setup flags the tenant
wizard resumes from.
"""

from sqlalchemy import String, Text, Boolean, Numeric, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from property_portal.database import Base
from property_portal.models.user import enum_values
from decimal import Decimal
import enum
from typing import Optional


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class RentalApplication(Base):
    """Tenant application for a listing."""

    __tablename__ = "rental_applications"

    listing_name: Mapped[str] = mapped_column(String(255), nullable=False)
    listing_type: Mapped[str] = mapped_column(String(50), nullable=False)

    user_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_phone: Mapped[str] = mapped_column(String(50), nullable=False)

    employment: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    employer: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    monthly_income: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    move_in_date: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    additional_info: Mapped[str] = mapped_column(Text, nullable=False, default="")

    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, values_callable=enum_values, native_enum=False),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )
    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Lease details set by an admin after approval
    property_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    monthly_rent: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    # Payment setup progress
    has_checking_account: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    security_deposit_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_credit_card: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ach_payment_method_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    security_deposit_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    security_deposit_charge_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<RentalApplication(id={self.id}, listing={self.listing_name}, status={self.status})>"
