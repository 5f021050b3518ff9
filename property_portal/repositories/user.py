"""
User repository for authentication and account management operations.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from property_portal.repositories.base import BaseRepository
from property_portal.models.user import User, UserType, OwnerVerificationStatus
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user lookups keyed by email, customer id or reset token."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address, case-insensitive.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            query = select(User).where(func.lower(User.email) == email.strip().lower())
            result = await self.db.execute(query)
            return result.scalars().first()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def email_exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None

    async def get_by_stripe_customer_id(self, customer_id: str) -> Optional[User]:
        return await self.get_by_field("stripe_customer_id", customer_id)

    async def get_by_verification_session(self, session_id: str) -> Optional[User]:
        return await self.get_by_field("verification_session_id", session_id)

    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[User]:
        return await self.get_by_field("reset_token_hash", token_hash)

    async def list_pending_owners(self) -> List[User]:
        """Property-owner accounts awaiting review, newest first. Unset status counts as pending."""
        query = (
            select(User)
            .where(User.user_type == UserType.PROPERTY_OWNER)
            .where(or_(
                User.owner_verification_status == OwnerVerificationStatus.PENDING,
                User.owner_verification_status.is_(None),
            ))
            .order_by(User.created_at.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
