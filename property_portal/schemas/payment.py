"""
Pydantic schemas for the payment ledger and the tenant payment-setup wizard.
"""

from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from property_portal.models.payment import PaymentType, PaymentStatus, PaymentMethod
from property_portal.models.payment_request import PaymentRequestStatus
from property_portal.schemas.common import CamelModel, require_text


class BankAccountDetails(CamelModel):
    """US checking account details. Sent to the processor, never stored."""

    routing_number: str = Field(..., description="9-digit ABA routing number", examples=["110000000"])
    account_number: str = Field(..., description="Account number", examples=["000123456789"])
    account_holder_name: str = Field(..., description="Name on the account")
    account_type: str = Field("individual", description="individual or company")

    @field_validator("routing_number", "account_number", "account_holder_name", mode="before")
    @classmethod
    def validate_required(cls, v, info):
        try:
            return require_text(v, info.field_name)
        except ValueError:
            raise ValueError("All bank account details are required")

    @field_validator("routing_number")
    @classmethod
    def validate_routing_number(cls, v):
        if not (v.isdigit() and len(v) == 9):
            raise ValueError("Routing number must be 9 digits")
        return v

    @field_validator("account_type")
    @classmethod
    def validate_account_type(cls, v):
        if v not in ("individual", "company"):
            raise ValueError("accountType must be individual or company")
        return v


class AddCheckingAccountRequest(BankAccountDetails):
    application_id: uuid.UUID


class AddCheckingAccountResponse(CamelModel):
    message: str
    ach_payment_method_id: str
    already_exists: bool = False
    step: int


class SecurityDepositRequest(CamelModel):
    application_id: uuid.UUID
    amount: Optional[Decimal] = Field(
        None, gt=0, description="Optional confirmation of the deposit; must equal the monthly rent"
    )
    payment_method_id: Optional[str] = Field(None, description="ACH source id, defaults to the stored one")


class SecurityDepositResponse(CamelModel):
    message: str
    charge_id: str
    status: str
    payment_record_id: uuid.UUID
    step: int


class AddCreditCardRequest(CamelModel):
    application_id: uuid.UUID
    token_id: str = Field(..., description="Client-side card token; raw card data never reaches the server")

    @field_validator("token_id", mode="before")
    @classmethod
    def validate_token(cls, v):
        return require_text(v, "tokenId")


class AddCreditCardResponse(CamelModel):
    message: str
    card_payment_method_id: str
    step: int


class PaymentSetupStatus(CamelModel):
    application_id: uuid.UUID
    listing_name: str
    monthly_rent: Optional[float] = None
    has_checking_account: bool
    security_deposit_paid: bool
    has_credit_card: bool
    step: int
    complete: bool


class AutoBankSetupResponse(CamelModel):
    """Bank capture followed by the automatic deposit charge."""

    step: int
    ach_payment_method_id: str
    already_exists: bool = False
    deposit_charged: bool
    charge_id: Optional[str] = None
    message: str


class PaymentResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    user_email: str
    rental_application_id: Optional[uuid.UUID] = None
    property_id: Optional[str] = None
    property_name: str
    type: PaymentType
    amount: float
    status: PaymentStatus
    payment_method: PaymentMethod
    stripe_payment_intent_id: str
    due_date: datetime
    paid_date: Optional[datetime] = None
    description: str
    admin_notes: str = ""
    created_at: datetime


class PaymentRequestResponse(CamelModel):
    """Maintenance bill sent to a property owner."""

    id: uuid.UUID
    manager_request_id: uuid.UUID
    property_name: str
    property_owner_email: str
    property_owner_name: Optional[str] = None
    amount: float
    actual_cost: Optional[float] = None
    description: str
    status: PaymentRequestStatus
    due_date: datetime
    paid_date: Optional[datetime] = None
    created_by: str
    created_at: datetime


class PaymentRequestListResponse(CamelModel):
    success: bool = True
    payment_requests: List[PaymentRequestResponse]
