"""
Payment processor webhook handling for identity verification and payment events.
"""

from typing import Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.database import utcnow
from property_portal.models.payment import PaymentStatus
from property_portal.models.user import User, VerificationStatus
from property_portal.repositories.payment import PaymentRepository
from property_portal.repositories.user import UserRepository
from property_portal.services.payment_gateway import WebhookEvent

logger = logging.getLogger(__name__)

IDENTITY_OUTCOMES = {
    "identity.verification_session.verified": VerificationStatus.VERIFIED,
    "identity.verification_session.requires_input": VerificationStatus.REJECTED,
}

PAYMENT_OUTCOMES = {
    "payment_intent.succeeded": PaymentStatus.PAID,
    "payment_intent.payment_failed": PaymentStatus.FAILED,
    "charge.succeeded": PaymentStatus.PAID,
    "charge.failed": PaymentStatus.FAILED,
}


class WebhookService:
    """Applies verified webhook events. Unknown event types are acknowledged and ignored."""

    def __init__(self, db_session: AsyncSession):
        self.user_repo = UserRepository(db_session)
        self.payment_repo = PaymentRepository(db_session)

    async def handle(self, event: WebhookEvent) -> bool:
        """
        Apply one event.

        Returns:
            True if the event changed a record
        """
        if event.type in IDENTITY_OUTCOMES:
            return await self._apply_identity(event, IDENTITY_OUTCOMES[event.type])
        if event.type in PAYMENT_OUTCOMES:
            return await self._apply_payment(event, PAYMENT_OUTCOMES[event.type])

        logger.debug(f"Ignoring webhook event {event.type}")
        return False

    async def _find_session_user(self, event: WebhookEvent) -> Optional[User]:
        session_id = event.data.get("id")
        user = await self.user_repo.get_by_verification_session(session_id) if session_id else None
        if user is None:
            user_id = (event.data.get("metadata") or {}).get("user_id")
            parsed = _parse_uuid(user_id) if user_id else None
            if parsed:
                user = await self.user_repo.get_by_id(parsed)
        return user

    async def _apply_identity(self, event: WebhookEvent, outcome: VerificationStatus) -> bool:
        user = await self._find_session_user(event)
        if user is None:
            logger.warning(f"Webhook {event.type}: no user for session {event.data.get('id')}")
            return False

        await self.user_repo.update(user, {
            "verification_status": outcome,
            "is_verified": outcome == VerificationStatus.VERIFIED,
        })
        logger.info(f"Identity verification for {user.email} is now {outcome.value}")
        return True

    async def _apply_payment(self, event: WebhookEvent, outcome: PaymentStatus) -> bool:
        object_id = event.data.get("id")
        payment = await self.payment_repo.get_by_intent_id(object_id) if object_id else None
        if payment is None:
            logger.info(f"Webhook {event.type}: no payment recorded for {object_id}")
            return False

        changes = {"status": outcome}
        if outcome == PaymentStatus.PAID and payment.paid_date is None:
            changes["paid_date"] = utcnow()
        await self.payment_repo.update(payment, changes)
        logger.info(f"Payment {payment.id} marked {outcome.value} from {event.type}")
        return True


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None
