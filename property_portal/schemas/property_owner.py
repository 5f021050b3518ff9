"""
Pydantic schemas for property owners, their embedded properties and users.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from property_portal.models.property_owner import PropertyType, PropertyStatus
from property_portal.models.user import UserType, VerificationStatus
from property_portal.schemas.common import CamelModel, require_text


class PropertyAddress(CamelModel):
    """Property location. State and ZIP are optional on embedded properties."""

    street: str
    city: str
    state: str = ""
    zip: str = ""

    @field_validator("street", "city", mode="before")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name.capitalize())


class PropertyOwnerCreate(CamelModel):
    name: str = Field(..., max_length=255, description="Unique owner name", examples=["Acme Rentals"])
    email: Optional[EmailStr] = Field(None, description="Owner contact email")
    phone: Optional[str] = Field(None, description="Owner contact phone")

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        try:
            return require_text(v, "name")
        except ValueError:
            raise ValueError("Property owner name is required")


class PropertyCreate(CamelModel):
    """Embedded property appended to an owner."""

    name: str = Field(..., description="Listing name", examples=["Maple Duplex A"])
    type: PropertyType
    sqft: int = Field(..., gt=0)
    description: str
    rent: Decimal = Field(..., ge=0, description="Monthly rent in USD")
    extra_adult: Decimal = Field(Decimal("0"), ge=0)
    amenities: str = ""
    status: PropertyStatus = PropertyStatus.AVAILABLE
    picture: Optional[str] = None
    address: PropertyAddress

    @field_validator("name", "description", mode="before")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name)


class PropertyResponse(CamelModel):
    id: str
    name: str
    type: PropertyType
    sqft: int
    description: str
    rent: float
    extra_adult: float = 0
    amenities: str = ""
    status: PropertyStatus
    picture: Optional[str] = None
    address: PropertyAddress
    created_at: datetime
    updated_at: datetime


class PropertyListing(PropertyResponse):
    """Embedded property flattened with its owner."""

    owner_name: str
    owner_id: uuid.UUID


class PropertyOwnerUserCreate(CamelModel):
    name: str
    email: EmailStr
    password: Optional[str] = Field(None, description="Optional, OAuth users have none")
    user_type: UserType = UserType.TENANT
    selected_property: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "name")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator("user_type")
    @classmethod
    def validate_user_type(cls, v):
        if v not in (UserType.TENANT, UserType.PROPERTY_OWNER):
            raise ValueError("userType must be tenant or property-owner")
        return v


class PropertyOwnerUserResponse(CamelModel):
    """Embedded owner user. The password hash is never returned."""

    id: str
    name: str
    email: str
    user_type: UserType
    selected_property: Optional[str] = None
    is_verified: bool = False
    identity_verification_status: VerificationStatus = VerificationStatus.PENDING
    created_at: datetime
    updated_at: datetime


class PropertyOwnerResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    phone: str
    properties: List[PropertyResponse] = Field(default_factory=list)
    users: List[PropertyOwnerUserResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
