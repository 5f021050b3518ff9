"""
Pydantic schemas for manager request intake, updates and listings.
"""

from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import re
import uuid

from property_portal.models.manager_request import RequestStatus, ApprovalStatus, ConversationSender
from property_portal.schemas.common import CamelModel, require_text

EMAIL_PATTERN = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s-]{10,}$")

REQUIRED_INTAKE_FIELDS = ("fullname", "email", "phone", "address", "project_description", "message")


class ManagerRequestCreate(CamelModel):
    """Maintenance request submission."""

    fullname: str = Field(..., max_length=255, description="Requester's full name", examples=["Jane Doe"])
    email: str = Field(..., max_length=255, description="Requester's email", examples=["jane@example.com"])
    phone: str = Field(..., max_length=50, description="Requester's phone", examples=["555-123-4567"])
    address: str = Field(..., max_length=500, description="Property address", examples=["1 Main St"])
    project_description: str = Field(..., description="Short summary of the problem", examples=["Leaky faucet"])
    message: str = Field(..., description="Details", examples=["Kitchen sink drips constantly"])
    problem_image_url: Optional[str] = Field(None, description="Photo of the problem")
    user_type: Optional[str] = Field(None, description="Requester's user type")

    @field_validator(*REQUIRED_INTAKE_FIELDS, mode="before")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if not PHONE_PATTERN.match(v):
            raise ValueError("Invalid phone number")
        return v

    @field_validator("problem_image_url", "user_type")
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class ManagerRequestUpdate(CamelModel):
    """
    PATCH body: either an approval decision or a status update.

    Enum values are checked in the service so an unknown value is reported
    the same way for both shapes.
    """

    approval_status: Optional[str] = None
    approved_by: Optional[str] = None
    approval_date: Optional[datetime] = None

    status: Optional[str] = None
    admin_notes: Optional[str] = None
    finished_image_url: Optional[str] = None

    @property
    def is_approval(self) -> bool:
        return self.approval_status is not None


class ConversationMessageCreate(CamelModel):
    message: str = Field(..., description="Message text")
    is_internal: bool = Field(False, description="Admin-only note, not emailed")

    @field_validator("message", mode="before")
    @classmethod
    def validate_message(cls, v):
        try:
            return require_text(v, "message")
        except ValueError:
            raise ValueError("Message is required")


class ConversationMessageResponse(CamelModel):
    sender: ConversationSender
    sender_name: str
    sender_email: str
    message: str
    timestamp: datetime
    is_internal: bool = False


class ManagerRequestResponse(CamelModel):
    """Manager request as returned by the API."""

    id: uuid.UUID
    fullname: str
    email: str
    phone: str
    user_type: Optional[str] = None
    address: str
    project_description: str
    message: str
    status: RequestStatus
    approval_status: Optional[ApprovalStatus] = None
    approved_by: Optional[str] = None
    approval_date: Optional[datetime] = None
    admin_notes: str = ""
    problem_image_url: Optional[str] = None
    finished_image_url: Optional[str] = None
    actual_cost: Optional[float] = None
    amount_to_bill: Optional[float] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    conversation_log: List[ConversationMessageResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ManagerRequestEnvelope(CamelModel):
    request: ManagerRequestResponse


class ManagerRequestSubmitResponse(CamelModel):
    message: str = "Request submitted successfully"
    request: ManagerRequestResponse


class ManagerRequestListResponse(CamelModel):
    requests: List[ManagerRequestResponse]


class ConversationLogResponse(CamelModel):
    success: Optional[bool] = None
    conversation_log: List[ConversationMessageResponse]


class SoftDeleteResponse(CamelModel):
    success: bool = True
    message: str
    deleted_at: datetime


class RecoverResponse(CamelModel):
    success: bool = True
    message: str
    request: ManagerRequestResponse


class DeletedRequestSummary(CamelModel):
    id: uuid.UUID
    address: str
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    days_deleted: Optional[int] = None


class CleanupPreviewResponse(CamelModel):
    count: int
    expired_requests: List[DeletedRequestSummary]


class CleanupResultResponse(CamelModel):
    success: bool = True
    message: str
    deleted_count: int
    deleted_requests: List[DeletedRequestSummary]



class ManagerRequestCostUpdate(CamelModel):
    """
    Admin costing. Only the fields present in the body are changed; an
    explicit null clears the figure.
    """

    actual_cost: Optional[Decimal] = Field(None, description="What the work cost, in USD")
    amount_to_bill: Optional[Decimal] = Field(None, description="What the owner is billed, in USD")


class ManagerRequestCostResponse(CamelModel):
    success: bool = True
    request: ManagerRequestResponse
    payment_request_id: Optional[uuid.UUID] = None
