"""
Manager request model: a maintenance or service ticket with two status
dimensions (workflow status and owner approval), a conversation log and
soft-delete bookkeeping.
"""

from sqlalchemy import String, Text, Boolean, DateTime, JSON, Numeric, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column
from property_portal.database import Base
from property_portal.models.user import enum_values
from datetime import datetime
from decimal import Decimal
import enum
from typing import Any, Dict, List, Optional


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    WORKING = "working"
    FINISHED = "finished"
    REJECTED = "rejected"


class ApprovalStatus(str, enum.Enum):
    APPROVED = "approved"
    DECLINED = "declined"


class ConversationSender(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class ManagerRequest(Base):
    """
    Maintenance ticket.

    ``conversation_log`` holds dicts with sender, senderName, senderEmail,
    message, timestamp and isInternal. It is append-only.
    """

    __tablename__ = "manager_requests"

    # Requester
    fullname: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    user_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Ticket
    address: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    project_description: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[RequestStatus] = mapped_column(
        SQLEnum(RequestStatus, values_callable=enum_values, native_enum=False),
        nullable=False,
        default=RequestStatus.PENDING,
        index=True,
    )

    # Owner approval
    approval_status: Mapped[Optional[ApprovalStatus]] = mapped_column(
        SQLEnum(ApprovalStatus, values_callable=enum_values, native_enum=False),
        nullable=True,
    )
    approved_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    approval_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    problem_image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    finished_image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    # Costing
    actual_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    amount_to_bill: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    conversation_log: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("idx_manager_request_deleted", "is_deleted", "deleted_at"),
    )

    def __repr__(self) -> str:
        return f"<ManagerRequest(id={self.id}, status={self.status}, address={self.address})>"
