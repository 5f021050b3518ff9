"""
Property owner repository. Appends to embedded arrays by reassigning the
JSON column so the change is flushed.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from property_portal.repositories.base import BaseRepository
from property_portal.models.property_owner import PropertyOwner
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class PropertyOwnerRepository(BaseRepository[PropertyOwner]):

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyOwner, db)

    async def get_by_name(self, name: str) -> Optional[PropertyOwner]:
        return await self.get_by_field("name", name)

    async def get_by_email(self, email: str) -> Optional[PropertyOwner]:
        try:
            query = select(PropertyOwner).where(func.lower(PropertyOwner.email) == email.lower())
            result = await self.db.execute(query)
            return result.scalars().first()
        except Exception as e:
            logger.error(f"Failed to get property owner by email {email}: {e}")
            raise

    async def list_by_name(self) -> List[PropertyOwner]:
        """All owners ordered by name."""
        try:
            result = await self.db.execute(select(PropertyOwner).order_by(PropertyOwner.name))
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list property owners: {e}")
            raise

    async def append_property(self, owner: PropertyOwner, entry: Dict[str, Any]) -> PropertyOwner:
        """
        Append an embedded property.

        Args:
            owner: Loaded owner aggregate
            entry: Property dict with id and timestamps already set

        Returns:
            Updated owner
        """
        return await self.update(owner, {"properties": [*(owner.properties or []), entry]})

    async def append_user(self, owner: PropertyOwner, entry: Dict[str, Any]) -> PropertyOwner:
        """Append an embedded owner-scoped user."""
        return await self.update(owner, {"users": [*(owner.users or []), entry]})
