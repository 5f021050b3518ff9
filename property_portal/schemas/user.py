"""
Pydantic schemas for user profile, address and verification documents.
"""

from pydantic import Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime
import re
import uuid

from property_portal.models.user import UserRole, UserType, VerificationStatus, OwnerVerificationStatus
from property_portal.schemas.common import CamelModel, require_text

ZIP_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")


class Address(CamelModel):
    """US mailing address."""

    street: str = Field(..., description="Street line", examples=["1 Main St"])
    city: str = Field(..., description="City", examples=["Springfield"])
    state: str = Field(..., description="Two-letter state code", examples=["IL"])
    zip: str = Field(..., description="ZIP or ZIP+4", examples=["62701"])

    @field_validator("street", "city", mode="before")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name.capitalize())

    @field_validator("state")
    @classmethod
    def validate_state(cls, v):
        v = v.strip().upper()
        if len(v) != 2:
            raise ValueError("State must be a 2-letter code")
        return v

    @field_validator("zip")
    @classmethod
    def validate_zip(cls, v):
        v = v.strip()
        if not ZIP_PATTERN.match(v):
            raise ValueError("ZIP code must be 5 digits or ZIP+4")
        return v


class AddressUpdate(CamelModel):
    address: Address


class AddressResponse(CamelModel):
    message: str = "Address updated"
    address: Address


class VerificationDocumentCreate(CamelModel):
    document_url: str = Field(..., description="Public URL returned by /upload-image")

    @field_validator("document_url", mode="before")
    @classmethod
    def validate_url(cls, v):
        return require_text(v, "documentUrl")


class VerificationDocumentsResponse(CamelModel):
    message: str = "Document added successfully"
    documents: List[str]


class IdentityVerificationRequest(CamelModel):
    document_type: Literal["passport", "id_card", "driving_license"] = Field(
        ..., description="Document the tenant will present"
    )


class IdentityVerificationResponse(CamelModel):
    client_secret: str
    verification_session_id: str
    url: Optional[str] = None


class UserResponse(CamelModel):
    """User as exposed by the API. Never includes hashes or reset tokens."""

    id: uuid.UUID
    email: str
    name: str
    phone: Optional[str] = None
    role: UserRole
    user_type: UserType
    owner_name: Optional[str] = None
    owner_verification_status: Optional[OwnerVerificationStatus] = None
    is_verified: bool
    verification_status: VerificationStatus
    stripe_customer_id: Optional[str] = None
    address: Optional[Address] = None
    verification_documents: List[str] = Field(default_factory=list)
    has_checking_account: bool = False
    has_credit_card: bool = False
    security_deposit_paid: bool = False
    created_at: datetime


class PendingOwnerResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    owner_name: Optional[str] = None
    owner_verification_status: Optional[OwnerVerificationStatus] = None
    verification_documents: List[str] = Field(default_factory=list)
    created_at: datetime


class PendingOwnersResponse(CamelModel):
    pending_users: List[PendingOwnerResponse]


class OwnerApprovalRequest(CamelModel):
    phone: Optional[str] = Field(None, description="Contact phone confirmed during review")


class OwnerRejectionRequest(CamelModel):
    reason: Optional[str] = Field(None, description="Sent to the applicant")


class OwnerSummary(CamelModel):
    id: uuid.UUID
    name: str


class OwnerApprovalResponse(CamelModel):
    message: str = "Property owner approved successfully"
    user: UserResponse
    property_owner: OwnerSummary


class OwnerRejectionResponse(CamelModel):
    message: str = "Property owner application rejected and user account deleted"
    user_name: str
    user_email: str
