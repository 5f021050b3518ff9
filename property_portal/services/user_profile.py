"""
User profile service: address, verification documents and identity verification sessions.
"""

from typing import List
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.config import get_settings
from property_portal.models.user import User, VerificationStatus
from property_portal.repositories.user import UserRepository
from property_portal.schemas.user import Address
from property_portal.services.payment_gateway import StripeGateway, PaymentGatewayError
from property_portal.utils.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class UserProfileService:

    def __init__(self, db_session: AsyncSession, gateway: StripeGateway = None):
        self.user_repo = UserRepository(db_session)
        self.gateway = gateway

    async def update_address(self, user: User, address: Address) -> User:
        user = await self.user_repo.update(user, {"address": address.model_dump()})
        logger.info(f"Address updated for {user.email}")
        return user

    async def add_verification_document(self, user: User, document_url: str) -> List[str]:
        """Append a document URL and return the full list."""
        documents = [*(user.verification_documents or []), document_url]
        user = await self.user_repo.update(user, {"verification_documents": documents})
        logger.info(f"Verification document added for {user.email} ({len(documents)} total)")
        return list(user.verification_documents)

    async def start_identity_verification(self, user: User, document_type: str) -> dict:
        """
        Create a document verification session and remember its id so the
        webhook can find the user.

        Raises:
            UpstreamServiceError: If the processor rejects the session
        """
        return_url = f"{get_settings().frontend_url.rstrip('/')}/verification-complete"
        try:
            session = await self.gateway.create_verification_session(str(user.id), document_type, return_url)
        except PaymentGatewayError as e:
            raise UpstreamServiceError("stripe", e.message)

        await self.user_repo.update(user, {
            "verification_session_id": session["id"],
            "verification_status": VerificationStatus.PENDING,
        })
        logger.info(f"Identity verification session {session['id']} started for {user.email}")
        return session
