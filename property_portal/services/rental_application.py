"""
Rental application service.
"""

from typing import List
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.models.rental_application import RentalApplication, ApplicationStatus
from property_portal.models.user import User
from property_portal.repositories.rental_application import RentalApplicationRepository
from property_portal.schemas.rental_application import RentalApplicationCreate, RentalApplicationAdminUpdate
from property_portal.utils.exceptions import RentalApplicationNotFoundError

logger = logging.getLogger(__name__)


class RentalApplicationService:

    def __init__(self, db_session: AsyncSession):
        self.application_repo = RentalApplicationRepository(db_session)

    async def submit(self, user: User, data: RentalApplicationCreate) -> RentalApplication:
        application = await self.application_repo.create({
            **data.model_dump(),
            "user_email": user.email.lower(),
            "status": ApplicationStatus.PENDING,
        })
        logger.info(f"Rental application {application.id} submitted by {user.email} for {data.listing_name}")
        return application

    async def list_for_user(self, user: User) -> List[RentalApplication]:
        """All applications for admins, otherwise the caller's own."""
        if user.is_admin:
            return await self.application_repo.list_all()
        return await self.application_repo.list_for_email(user.email)

    async def admin_update(self, application_id: uuid.UUID, data: RentalApplicationAdminUpdate) -> RentalApplication:
        """
        Set status, property id, monthly rent or notes. Absent fields are left untouched.

        Raises:
            RentalApplicationNotFoundError: If the application does not exist
        """
        application = await self.application_repo.get_by_id(application_id)
        if not application:
            raise RentalApplicationNotFoundError(str(application_id))

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if changes:
            application = await self.application_repo.update(application, changes)
            logger.info(f"Rental application {application.id} updated: {', '.join(sorted(changes))}")
        return application
