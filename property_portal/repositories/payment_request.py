"""
Maintenance bill repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from property_portal.repositories.base import BaseRepository
from property_portal.models.payment_request import PaymentRequest, PaymentRequestStatus
from typing import Optional, List
import uuid


class PaymentRequestRepository(BaseRepository[PaymentRequest]):

    def __init__(self, db: AsyncSession):
        super().__init__(PaymentRequest, db)

    async def get_by_manager_request(self, manager_request_id: uuid.UUID) -> Optional[PaymentRequest]:
        return await self.get_by_field("manager_request_id", manager_request_id)

    async def list_filtered(
        self,
        status: Optional[PaymentRequestStatus] = None,
        owner_email: Optional[str] = None,
    ) -> List[PaymentRequest]:
        """Bills newest first, optionally narrowed by status and owner email."""
        filters = {}
        if status:
            filters["status"] = status
        if owner_email:
            filters["property_owner_email"] = owner_email
        return await self.get_multi(limit=None, filters=filters or None, order_by="-created_at")
