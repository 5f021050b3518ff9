"""
Rental application repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from property_portal.repositories.base import BaseRepository
from property_portal.models.rental_application import RentalApplication
from typing import List


class RentalApplicationRepository(BaseRepository[RentalApplication]):

    def __init__(self, db: AsyncSession):
        super().__init__(RentalApplication, db)

    async def list_for_email(self, email: str) -> List[RentalApplication]:
        return await self.get_multi(limit=None, filters={"user_email": email.lower()})

    async def list_all(self) -> List[RentalApplication]:
        return await self.get_multi(limit=None)
