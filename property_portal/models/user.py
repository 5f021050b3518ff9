"""
User model with authentication, role and verification state.
Covers tenants, property owners and managers; admins are users with the admin role.
"""

from sqlalchemy import String, Boolean, DateTime, Numeric, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from property_portal.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
from datetime import datetime
from decimal import Decimal
import enum
from typing import Any, Dict, List, Optional

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def enum_values(enum_cls):
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    ADMIN = "admin"
    USER = "user"


class UserType(str, enum.Enum):
    TENANT = "tenant"
    PROPERTY_OWNER = "property-owner"
    MANAGER = "manager"


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class OwnerVerificationStatus(str, enum.Enum):
    """Admin review of a property-owner signup. Rejected signups are deleted, not kept."""
    PENDING = "pending"
    APPROVED = "approved"


class User(Base):
    """
    User account.

    Password is optional since OAuth-only accounts never set one.
    Address and verification documents are embedded as JSON.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    hashed_password: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Bcrypt hashed password, empty for OAuth accounts"
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, values_callable=enum_values, native_enum=False),
        nullable=False,
        default=UserRole.USER,
        index=True,
    )

    user_type: Mapped[UserType] = mapped_column(
        SQLEnum(UserType, values_callable=enum_values, native_enum=False),
        nullable=False,
        default=UserType.TENANT,
        index=True,
    )

    owner_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Owner aggregate a property-owner account belongs to"
    )

    # Property-owner review, null for accounts created before review existed
    owner_verification_status: Mapped[Optional[OwnerVerificationStatus]] = mapped_column(
        SQLEnum(OwnerVerificationStatus, values_callable=enum_values, native_enum=False),
        nullable=True,
        index=True,
    )
    owner_verified_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner_verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Identity verification
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    verification_status: Mapped[VerificationStatus] = mapped_column(
        SQLEnum(VerificationStatus, values_callable=enum_values, native_enum=False),
        nullable=False,
        default=VerificationStatus.PENDING,
    )

    verification_session_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    verification_documents: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    address: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Payment processor references
    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    ach_payment_method_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    card_payment_method_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    has_checking_account: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_credit_card: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    security_deposit_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    security_deposit_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    security_deposit_paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Password reset
    reset_token_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    reset_token_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Raises:
            ValueError: If the password is shorter than 8 characters
        """
        if not password or len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash. OAuth accounts never match."""
        if not self.hashed_password:
            return False
        return pwd_context.verify(password, self.hashed_password)

    def set_password(self, password: str) -> None:
        self.hashed_password = self.hash_password(password)

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    @property
    def is_property_owner(self) -> bool:
        return self.user_type == UserType.PROPERTY_OWNER

    @property
    def is_tenant(self) -> bool:
        return self.user_type == UserType.TENANT
