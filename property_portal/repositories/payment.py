"""
Payment repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from property_portal.repositories.base import BaseRepository
from property_portal.models.payment import Payment, PaymentStatus
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):

    def __init__(self, db: AsyncSession):
        super().__init__(Payment, db)

    async def list_for_email(self, email: str) -> List[Payment]:
        """A tenant's payments, newest first."""
        return await self.get_multi(limit=None, filters={"user_email": email}, order_by="-created_at")

    async def list_all(self, status: Optional[PaymentStatus] = None) -> List[Payment]:
        filters = {"status": status} if status else None
        return await self.get_multi(limit=None, filters=filters, order_by="-created_at")

    async def get_by_intent_id(self, intent_id: str) -> Optional[Payment]:
        return await self.get_by_field("stripe_payment_intent_id", intent_id)
