"""
Authentication service for signup, login, Google sign-in, session tokens,
password reset and admin promotion.
"""

from datetime import timedelta
from typing import Optional, Tuple
import logging
import secrets
import uuid

from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.config import get_settings
from property_portal.database import utcnow, as_utc
from property_portal.models.user import User, UserRole, UserType, OwnerVerificationStatus
from property_portal.repositories.property_owner import PropertyOwnerRepository
from property_portal.repositories.user import UserRepository
from property_portal.schemas.auth import SignupRequest
from property_portal.services.google_oauth import GoogleTokenVerifier, OAuthVerificationError
from property_portal.services.notifications import NotificationService
from property_portal.services.payment_gateway import StripeGateway, PaymentGatewayError
from property_portal.services.property_owner import owner_user_entry
from property_portal.utils.auth import (
    create_access_token,
    verify_token,
    generate_reset_token,
    hash_reset_token,
)
from property_portal.utils.exceptions import (
    DuplicateResourceError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    UserNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for account creation and session management.
    Payment-customer creation at signup is best-effort; the wizard creates
    a missing customer on first use.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        gateway: Optional[StripeGateway] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.owner_repo = PropertyOwnerRepository(db_session)
        self.gateway = gateway
        self.notifications = notifications

    # Signup and login

    async def signup(self, data: SignupRequest) -> User:
        """
        Create an account.

        Property-owner signups create or join their owner aggregate and wait
        for admin review; tenants get a payment-processor customer.

        Args:
            data: Signup payload

        Returns:
            Created user

        Raises:
            ValidationError: If name, email or password is missing or too short
            DuplicateResourceError: If the email is already registered
        """
        name = (data.name or "").strip()
        if not name or not data.email or not data.password:
            raise ValidationError("Name, email, and password are required")

        if await self.user_repo.email_exists(data.email):
            raise DuplicateResourceError("User", data.email, detail="User with this email already exists")

        try:
            hashed_password = User.hash_password(data.password)
        except ValueError as e:
            raise ValidationError(str(e), field_errors=[{"field": "password", "message": str(e)}])

        owner_name = None
        if data.user_type == UserType.PROPERTY_OWNER:
            owner_name = (data.owner_name or "").strip() or name
            await self._join_owner(owner_name, name, data.email, data.phone, hashed_password)

        user = await self.user_repo.create({
            "email": data.email,
            "hashed_password": hashed_password,
            "name": name,
            "phone": data.phone,
            "role": UserRole.USER,
            "user_type": data.user_type,
            "owner_name": owner_name,
            "owner_verification_status": OwnerVerificationStatus.PENDING if owner_name else None,
            "verification_documents": [],
        })

        if user.is_tenant:
            await self._attach_customer(user)

        logger.info(f"User signed up: {user.email} ({user.user_type.value})")
        return user

    async def _join_owner(
        self,
        owner_name: str,
        name: str,
        email: str,
        phone: Optional[str],
        hashed_password: str,
    ) -> None:
        owner = await self.owner_repo.get_by_name(owner_name)
        if owner is None:
            owner = await self.owner_repo.create({
                "name": owner_name,
                "email": email,
                "phone": phone or "",
                "properties": [],
                "users": [],
            })
            logger.info(f"Property owner created at signup: {owner_name}")

        if not owner.has_user_email(email):
            entry = owner_user_entry(name, email, UserType.PROPERTY_OWNER, password_hash=hashed_password)
            await self.owner_repo.append_user(owner, entry)

    async def _attach_customer(self, user: User) -> User:
        if self.gateway is None or user.stripe_customer_id:
            return user
        try:
            customer_id = await self.gateway.create_customer(
                user.email, user.name, metadata={"user_id": str(user.id)}
            )
        except PaymentGatewayError as e:
            logger.warning(f"Could not create payment customer for {user.email}: {e.message}")
            return user
        return await self.user_repo.update(user, {"stripe_customer_id": customer_id})

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Check email and password.

        Raises:
            InvalidCredentialsError: On unknown email, wrong password, or an OAuth-only account
        """
        user = await self.user_repo.get_by_email(email)
        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        if not user.hashed_password:
            raise InvalidCredentialsError("This account uses Google sign-in. Please log in with Google")

        if not user.verify_password(password):
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    def issue_token(self, user: User) -> Tuple[str, int]:
        """Session token and its lifetime in seconds."""
        minutes = get_settings().access_token_expire_minutes
        return create_access_token(user, timedelta(minutes=minutes)), minutes * 60

    async def login(self, email: str, password: str) -> Tuple[User, str, int]:
        user = await self.authenticate_user(email, password)
        token, expires_in = self.issue_token(user)
        return user, token, expires_in

    async def login_with_google(self, id_token: str, verifier: GoogleTokenVerifier) -> Tuple[User, str, int]:
        """
        Verify a Google ID token and sign in, creating a tenant account on first use.

        Raises:
            InvalidTokenError: If Google rejects the token
        """
        try:
            identity = await verifier.verify(id_token)
        except OAuthVerificationError as e:
            logger.warning(f"Google sign-in rejected: {e}")
            raise InvalidTokenError(str(e))

        user = await self.user_repo.get_by_email(identity.email)
        if user is None:
            user = await self.user_repo.create({
                "email": identity.email,
                "hashed_password": None,
                "name": identity.name,
                "role": UserRole.USER,
                "user_type": UserType.TENANT,
                "verification_documents": [],
            })
            user = await self._attach_customer(user)
            logger.info(f"User created from Google sign-in: {user.email}")

        token, expires_in = self.issue_token(user)
        return user, token, expires_in

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the user a session token belongs to.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is malformed or its user is gone
        """
        try:
            payload = verify_token(token)
        except JWTError as e:
            if "expired" in str(e).lower():
                raise TokenExpiredError()
            raise InvalidTokenError(str(e))

        try:
            user_id = uuid.UUID(payload.user_id)
        except ValueError:
            raise InvalidTokenError("Invalid token subject")

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise InvalidTokenError("User no longer exists")
        return user

    # Password reset

    async def request_password_reset(self, email: str) -> None:
        """
        Store a hashed one-time token and email the reset link.

        Unknown emails are ignored so the endpoint does not reveal which
        accounts exist.
        """
        user = await self.user_repo.get_by_email(email)
        if not user:
            logger.info(f"Password reset requested for unknown email {email}")
            return

        settings = get_settings()
        token = generate_reset_token()
        await self.user_repo.update(user, {
            "reset_token_hash": hash_reset_token(token),
            "reset_token_expires_at": utcnow() + timedelta(minutes=settings.password_reset_token_minutes),
        })

        link = f"{settings.frontend_url.rstrip('/')}/reset-password?token={token}"
        if self.notifications is not None:
            await self.notifications.send_password_reset(user.email, user.name, link)
        logger.info(f"Password reset link issued for {user.email}")

    async def reset_password(self, token: str, new_password: str) -> User:
        """
        Raises:
            ValidationError: If the token is unknown or expired
        """
        user = await self.user_repo.get_by_reset_token_hash(hash_reset_token(token))
        expires_at = as_utc(user.reset_token_expires_at) if user else None
        if not user or not expires_at or expires_at < utcnow():
            raise ValidationError("Invalid or expired reset token")

        user = await self.user_repo.update(user, {
            "hashed_password": User.hash_password(new_password),
            "reset_token_hash": None,
            "reset_token_expires_at": None,
        })
        logger.info(f"Password reset completed for {user.email}")
        return user

    # Administration

    async def promote_to_admin(self, email: str, admin_key: str) -> User:
        """
        Grant the admin role using the shared setup key.

        Raises:
            ForbiddenError: If the key is wrong or not configured
            UserNotFoundError: If no account has this email
        """
        expected = get_settings().admin_setup_key
        if not expected or not secrets.compare_digest(admin_key.encode(), expected.encode()):
            logger.warning(f"Admin promotion for {email} rejected: invalid admin key")
            raise ForbiddenError("Invalid admin key")

        user = await self.user_repo.get_by_email(email)
        if not user:
            raise UserNotFoundError(email)

        user = await self.user_repo.update(user, {"role": UserRole.ADMIN})
        logger.info(f"User promoted to admin: {user.email}")
        return user
