"""
Pydantic schemas for signup, login and password reset.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional

from property_portal.models.user import UserType
from property_portal.schemas.common import CamelModel, require_text
from property_portal.schemas.user import UserResponse


class SignupRequest(CamelModel):
    """Account creation request."""

    name: Optional[str] = Field(None, description="Display name", examples=["Jane Doe"])
    email: Optional[EmailStr] = Field(None, description="Login email", examples=["jane@example.com"])
    password: Optional[str] = Field(None, description="Password (minimum 8 characters)")
    user_type: UserType = Field(UserType.TENANT, description="tenant, property-owner or manager")
    owner_name: Optional[str] = Field(None, description="Owner aggregate to create or join (property owners)")
    phone: Optional[str] = Field(None, description="Contact phone")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip() if v else v


class SignupResponse(CamelModel):
    message: str = "User created successfully"
    user_id: str


class LoginRequest(CamelModel):
    """Login request schema."""

    email: EmailStr = Field(..., description="User's email address", examples=["jane@example.com"])
    password: str = Field(..., min_length=1, description="User's password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class GoogleLoginRequest(CamelModel):
    id_token: str = Field(..., description="Google ID token from the client")

    @field_validator("id_token", mode="before")
    @classmethod
    def validate_token(cls, v):
        return require_text(v, "idToken")


class TokenResponse(CamelModel):
    """Session token plus the signed-in user."""

    access_token: str = Field(..., description="JWT session token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserResponse


class ForgotPasswordRequest(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., description="New password (minimum 8 characters)")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long")
        return v


class PromoteUserRequest(CamelModel):
    email: EmailStr
    admin_key: str = Field(..., description="Shared admin setup key")


class PromoteUserResponse(CamelModel):
    message: str = "User promoted to admin successfully"
    user: UserResponse
