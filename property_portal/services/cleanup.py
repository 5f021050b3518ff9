"""
Retention cleanup for soft-deleted manager requests.
"""

from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any, Callable
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.config import get_settings
from property_portal.database import utcnow, as_utc
from property_portal.models.manager_request import ManagerRequest
from property_portal.repositories.manager_request import ManagerRequestRepository

logger = logging.getLogger(__name__)


class RequestCleanupService:
    """
    Finds and purges requests soft-deleted longer ago than the retention window.

    Purging is idempotent: a second run over the same data deletes nothing.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        retention_days: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.request_repo = ManagerRequestRepository(db_session)
        self.retention_days = (
            retention_days if retention_days is not None
            else get_settings().deleted_request_retention_days
        )
        self.clock = clock

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        return (now or self.clock()) - timedelta(days=self.retention_days)

    @staticmethod
    def _summary(request: ManagerRequest, now: datetime) -> Dict[str, Any]:
        deleted_at = as_utc(request.deleted_at)
        return {
            "id": request.id,
            "address": request.address,
            "deleted_at": deleted_at,
            "deleted_by": request.deleted_by,
            "days_deleted": (now - deleted_at).days if deleted_at else None,
        }

    async def preview(self) -> List[Dict[str, Any]]:
        """Summaries of the requests a purge would delete right now."""
        now = self.clock()
        expired = await self.request_repo.list_expired(self.cutoff(now))
        return [self._summary(request, now) for request in expired]

    async def purge(self) -> List[Dict[str, Any]]:
        """
        Permanently delete expired soft-deleted requests.

        Returns:
            Summaries of the deleted requests
        """
        now = self.clock()
        expired = await self.request_repo.list_expired(self.cutoff(now))
        if not expired:
            logger.info("Cleanup found no expired manager requests")
            return []

        summaries = [self._summary(request, now) for request in expired]
        deleted = await self.request_repo.bulk_delete([request.id for request in expired])
        logger.info(f"Cleanup permanently deleted {deleted} manager requests")
        return summaries
