"""
Service layer for business logic implementation.
Contains services for authentication, manager requests, property owners,
payments, uploads, notifications and error handling.
"""

from .auth import AuthService
from .cleanup import RequestCleanupService
from .error_handler import ErrorHandlerService
from .manager_request import ManagerRequestService
from .notifications import NotificationService
from .payment import PaymentService
from .property_owner import PropertyOwnerService
from .rental_application import RentalApplicationService
from .upload import UploadService
from .user_profile import UserProfileService
from .webhook import WebhookService

__all__ = [
    "AuthService",
    "RequestCleanupService",
    "ErrorHandlerService",
    "ManagerRequestService",
    "NotificationService",
    "PaymentService",
    "PropertyOwnerService",
    "RentalApplicationService",
    "UploadService",
    "UserProfileService",
    "WebhookService",
]
