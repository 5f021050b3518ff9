"""
FastAPI dependency injection utilities for authentication, database sessions,
services and the third-party clients they use.

Clients are created once per process; tests replace them through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Optional
import secrets

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.config import get_settings
from property_portal.database import get_db
from property_portal.models.user import User
from property_portal.services.auth import AuthService
from property_portal.services.blob_storage import BlobStorage, LocalBlobStorage, VercelBlobStorage
from property_portal.services.cleanup import RequestCleanupService
from property_portal.services.email_service import EmailSender
from property_portal.services.google_oauth import GoogleTokenVerifier
from property_portal.services.manager_request import ManagerRequestService
from property_portal.services.notifications import NotificationService
from property_portal.services.payment import PaymentService
from property_portal.services.payment_gateway import StripeGateway
from property_portal.services.property_owner import PropertyOwnerService
from property_portal.services.rental_application import RentalApplicationService
from property_portal.services.upload import UploadService
from property_portal.services.user_profile import UserProfileService
from property_portal.services.webhook import WebhookService
from property_portal.utils.exceptions import (
    UnauthorizedError,
    InvalidTokenError,
    TokenExpiredError,
    InsufficientPermissionsError,
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


# Third-party clients

@lru_cache()
def get_payment_gateway() -> StripeGateway:
    settings = get_settings()
    return StripeGateway(settings.stripe_secret_key, settings.stripe_webhook_secret)


@lru_cache()
def get_email_sender() -> EmailSender:
    settings = get_settings()
    return EmailSender(settings.sendgrid_api_key, settings.email_from)


@lru_cache()
def get_blob_storage() -> BlobStorage:
    settings = get_settings()
    if settings.blob_backend == "vercel":
        return VercelBlobStorage(settings.blob_read_write_token, settings.blob_api_url)
    return LocalBlobStorage(settings.upload_dir, settings.public_upload_base_url)


@lru_cache()
def get_google_verifier() -> GoogleTokenVerifier:
    settings = get_settings()
    return GoogleTokenVerifier(settings.google_client_id, settings.google_tokeninfo_url)


def get_notification_service(sender: EmailSender = Depends(get_email_sender)) -> NotificationService:
    return NotificationService(sender)


# Services

async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
    notifications: NotificationService = Depends(get_notification_service),
) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session
        gateway: Payment processor used to create tenant customers
        notifications: Used for password reset emails

    Returns:
        AuthService instance
    """
    return AuthService(db, gateway=gateway, notifications=notifications)


async def get_upload_service(storage: BlobStorage = Depends(get_blob_storage)) -> UploadService:
    return UploadService(storage)


async def get_manager_request_service(
    db: AsyncSession = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
    upload_service: UploadService = Depends(get_upload_service),
) -> ManagerRequestService:
    return ManagerRequestService(db, notifications, upload_service)


async def get_cleanup_service(db: AsyncSession = Depends(get_db)) -> RequestCleanupService:
    return RequestCleanupService(db)


async def get_payment_service(
    db: AsyncSession = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
) -> PaymentService:
    return PaymentService(db, gateway)


async def get_property_owner_service(
    db: AsyncSession = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> PropertyOwnerService:
    return PropertyOwnerService(db, notifications)


async def get_rental_application_service(db: AsyncSession = Depends(get_db)) -> RentalApplicationService:
    return RentalApplicationService(db)


async def get_user_profile_service(
    db: AsyncSession = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
) -> UserProfileService:
    return UserProfileService(db, gateway)


async def get_webhook_service(db: AsyncSession = Depends(get_db)) -> WebhookService:
    return WebhookService(db)


# Authentication

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the session token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except (InvalidTokenError, TokenExpiredError):
        raise
    except Exception as e:
        raise UnauthorizedError(f"Authentication failed: {str(e)}")


async def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current user with admin role.

    Raises:
        InsufficientPermissionsError: If user is not an admin
    """
    if not current_user.is_admin:
        raise InsufficientPermissionsError("access admin resources")

    return current_user


async def require_cron_secret(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> None:
    """Scheduled jobs authenticate with ``Authorization: Bearer <CRON_SECRET>``."""
    expected = get_settings().cron_secret
    if (
        not credentials
        or not expected
        or not secrets.compare_digest(credentials.credentials.encode(), expected.encode())
    ):
        raise UnauthorizedError("Unauthorized - Invalid cron secret")
