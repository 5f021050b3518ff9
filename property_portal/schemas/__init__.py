"""
Pydantic schemas for request/response validation.
"""

from .common import CamelModel, MessageResponse
from .auth import (
    SignupRequest,
    SignupResponse,
    LoginRequest,
    GoogleLoginRequest,
    TokenResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    PromoteUserRequest,
    PromoteUserResponse,
)
from .user import (
    Address,
    AddressUpdate,
    AddressResponse,
    UserResponse,
    VerificationDocumentCreate,
    VerificationDocumentsResponse,
    IdentityVerificationRequest,
    IdentityVerificationResponse,
)
from .manager_request import (
    ManagerRequestCreate,
    ManagerRequestUpdate,
    ManagerRequestResponse,
    ManagerRequestEnvelope,
    ManagerRequestSubmitResponse,
    ManagerRequestListResponse,
    ConversationMessageCreate,
    ConversationLogResponse,
    SoftDeleteResponse,
    RecoverResponse,
    CleanupPreviewResponse,
    CleanupResultResponse,
)
from .property_owner import (
    PropertyOwnerCreate,
    PropertyOwnerResponse,
    PropertyCreate,
    PropertyListing,
    PropertyOwnerUserCreate,
)
from .payment import (
    AddCheckingAccountRequest,
    AddCheckingAccountResponse,
    SecurityDepositRequest,
    SecurityDepositResponse,
    AddCreditCardRequest,
    AddCreditCardResponse,
    BankAccountDetails,
    PaymentSetupStatus,
    AutoBankSetupResponse,
    PaymentResponse,
)
from .rental_application import (
    RentalApplicationCreate,
    RentalApplicationAdminUpdate,
    RentalApplicationResponse,
)
from .upload import UploadResponse

__all__ = [
    "CamelModel",
    "MessageResponse",
    "SignupRequest",
    "SignupResponse",
    "LoginRequest",
    "GoogleLoginRequest",
    "TokenResponse",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "PromoteUserRequest",
    "PromoteUserResponse",
    "Address",
    "AddressUpdate",
    "AddressResponse",
    "UserResponse",
    "VerificationDocumentCreate",
    "VerificationDocumentsResponse",
    "IdentityVerificationRequest",
    "IdentityVerificationResponse",
    "ManagerRequestCreate",
    "ManagerRequestUpdate",
    "ManagerRequestResponse",
    "ManagerRequestEnvelope",
    "ManagerRequestSubmitResponse",
    "ManagerRequestListResponse",
    "ConversationMessageCreate",
    "ConversationLogResponse",
    "SoftDeleteResponse",
    "RecoverResponse",
    "CleanupPreviewResponse",
    "CleanupResultResponse",
    "PropertyOwnerCreate",
    "PropertyOwnerResponse",
    "PropertyCreate",
    "PropertyListing",
    "PropertyOwnerUserCreate",
    "AddCheckingAccountRequest",
    "AddCheckingAccountResponse",
    "SecurityDepositRequest",
    "SecurityDepositResponse",
    "AddCreditCardRequest",
    "AddCreditCardResponse",
    "BankAccountDetails",
    "PaymentSetupStatus",
    "AutoBankSetupResponse",
    "PaymentResponse",
    "RentalApplicationCreate",
    "RentalApplicationAdminUpdate",
    "RentalApplicationResponse",
    "UploadResponse",
]
