"""
Database models for the Property Portal API.
"""

from property_portal.models.user import User, UserRole, UserType, VerificationStatus, OwnerVerificationStatus
from property_portal.models.property_owner import PropertyOwner, PropertyType, PropertyStatus
from property_portal.models.payment import Payment, PaymentType, PaymentStatus, PaymentMethod
from property_portal.models.manager_request import (
    ManagerRequest,
    RequestStatus,
    ApprovalStatus,
    ConversationSender,
)
from property_portal.models.rental_application import RentalApplication, ApplicationStatus
from property_portal.models.payment_request import PaymentRequest, PaymentRequestStatus

__all__ = [
    "User",
    "UserRole",
    "UserType",
    "VerificationStatus",
    "OwnerVerificationStatus",
    "PropertyOwner",
    "PropertyType",
    "PropertyStatus",
    "Payment",
    "PaymentType",
    "PaymentStatus",
    "PaymentMethod",
    "ManagerRequest",
    "RequestStatus",
    "ApprovalStatus",
    "ConversationSender",
    "RentalApplication",
    "ApplicationStatus",
    "PaymentRequest",
    "PaymentRequestStatus",
]
