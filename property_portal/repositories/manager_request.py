"""
Manager request repository with role-scoped listing and retention queries.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from property_portal.repositories.base import BaseRepository
from property_portal.models.manager_request import ManagerRequest, RequestStatus
from datetime import datetime
from typing import Optional, List, Dict, Any, Sequence
import logging

logger = logging.getLogger(__name__)


class ManagerRequestRepository(BaseRepository[ManagerRequest]):
    """
    Repository for maintenance tickets.
    Handles visibility filters, conversation appends and the soft-delete retention window.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(ManagerRequest, db)

    async def list_requests(
        self,
        status: Optional[RequestStatus] = None,
        email: Optional[str] = None,
        addresses: Optional[Sequence[str]] = None,
        include_deleted: bool = False,
    ) -> List[ManagerRequest]:
        """
        List requests newest first.

        Args:
            status: Only requests in this status
            email: Only requests submitted from this email
            addresses: Only requests at one of these formatted addresses
            include_deleted: Include soft-deleted requests

        Returns:
            Matching requests
        """
        try:
            query = select(ManagerRequest)

            if not include_deleted:
                query = query.where(ManagerRequest.is_deleted.is_(False))
            if status is not None:
                query = query.where(ManagerRequest.status == status)
            if email is not None:
                query = query.where(func.lower(ManagerRequest.email) == email.lower())
            if addresses is not None:
                query = query.where(ManagerRequest.address.in_(list(addresses)))

            query = query.order_by(ManagerRequest.created_at.desc())
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list manager requests: {e}")
            raise

    async def list_expired(self, cutoff: datetime) -> List[ManagerRequest]:
        """Soft-deleted requests whose deletion is at or before ``cutoff``."""
        try:
            query = (
                select(ManagerRequest)
                .where(ManagerRequest.is_deleted.is_(True))
                .where(ManagerRequest.deleted_at.is_not(None))
                .where(ManagerRequest.deleted_at <= cutoff)
                .order_by(ManagerRequest.deleted_at)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list expired manager requests: {e}")
            raise

    async def append_conversation(
        self,
        request: ManagerRequest,
        entry: Dict[str, Any],
        changes: Optional[Dict[str, Any]] = None,
    ) -> ManagerRequest:
        """
        Append one conversation entry, optionally with other field changes in the same commit.
        """
        update_data = dict(changes or {})
        update_data["conversation_log"] = [*(request.conversation_log or []), entry]
        return await self.update(request, update_data)
