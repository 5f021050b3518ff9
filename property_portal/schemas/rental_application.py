"""
Pydantic schemas for rental applications.
"""

from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
import uuid

from property_portal.models.rental_application import ApplicationStatus
from property_portal.schemas.common import CamelModel, require_text


class RentalApplicationCreate(CamelModel):
    listing_name: str = Field(..., description="Listing applied for")
    listing_type: str = Field(..., description="Listing type, e.g. residential")
    user_name: str
    user_phone: str
    employment: str = ""
    employer: str = ""
    monthly_income: str = ""
    move_in_date: str = ""
    additional_info: str = ""

    @field_validator("listing_name", "listing_type", "user_name", "user_phone", mode="before")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name)


class RentalApplicationAdminUpdate(CamelModel):
    """Admin decision and lease details. Absent fields are left untouched."""

    status: Optional[ApplicationStatus] = None
    property_id: Optional[str] = None
    monthly_rent: Optional[Decimal] = Field(None, gt=0)
    admin_notes: Optional[str] = None


class RentalApplicationResponse(CamelModel):
    id: uuid.UUID
    listing_name: str
    listing_type: str
    user_email: str
    user_name: str
    user_phone: str
    employment: str
    employer: str
    monthly_income: str
    move_in_date: str
    additional_info: str
    status: ApplicationStatus
    admin_notes: str
    property_id: Optional[str] = None
    monthly_rent: Optional[float] = None
    has_checking_account: bool
    security_deposit_paid: bool
    has_credit_card: bool
    security_deposit_amount: Optional[float] = None
    created_at: datetime
