"""
Session token utilities.
Provides JWT generation and validation with role, user type and verification claims,
plus the one-time password reset token helpers.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from property_portal.config import settings
import hashlib
import secrets


class TokenPayload:
    """JWT token payload structure."""

    def __init__(
        self,
        user_id: str,
        email: str,
        role: str,
        user_type: Optional[str],
        verification_status: Optional[str],
        stripe_customer_id: Optional[str],
        exp: datetime,
    ):
        self.user_id = user_id
        self.email = email
        self.role = role
        self.user_type = user_type
        self.verification_status = verification_status
        self.stripe_customer_id = stripe_customer_id
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from dictionary."""
        return cls(
            user_id=data["sub"],
            email=data["email"],
            role=data.get("role", "user"),
            user_type=data.get("user_type"),
            verification_status=data.get("verification_status"),
            stripe_customer_id=data.get("stripe_customer_id"),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc),
        )


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a session token carrying the user's identity claims.

    Args:
        user: User model instance
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "user_type": user.user_type.value,
        "verification_status": user.verification_status.value,
        "stripe_customer_id": user.stripe_customer_id,
        "exp": expire,
        "iat": now,
        "type": "access",
    }

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenPayload:
    """
    Verify and decode a session token.

    Args:
        token: JWT token string

    Returns:
        Decoded payload

    Raises:
        JWTError: If token is invalid or expired
    """
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])

    if payload.get("type") != "access":
        raise JWTError("Invalid token type")

    if not payload.get("sub") or not payload.get("email"):
        raise JWTError("Invalid token payload")

    return TokenPayload.from_dict(payload)


def generate_reset_token() -> str:
    """Random 32-byte token, hex encoded. Only its hash is stored."""
    return secrets.token_hex(32)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
