"""
Rental application endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import List

from property_portal.models.user import User
from property_portal.schemas.error import get_error_responses
from property_portal.schemas.rental_application import RentalApplicationCreate, RentalApplicationResponse
from property_portal.services.rental_application import RentalApplicationService
from property_portal.utils.dependencies import get_current_user, get_rental_application_service


router = APIRouter(prefix="/rental-applications", tags=["Rental Applications"])


@router.post(
    "",
    response_model=RentalApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit rental application",
    responses=get_error_responses(400, 401, 500)
)
async def submit_application(
    application_data: RentalApplicationCreate,
    current_user: User = Depends(get_current_user),
    service: RentalApplicationService = Depends(get_rental_application_service)
) -> RentalApplicationResponse:
    application = await service.submit(current_user, application_data)
    return RentalApplicationResponse.model_validate(application)


@router.get(
    "",
    response_model=List[RentalApplicationResponse],
    status_code=status.HTTP_200_OK,
    summary="List rental applications",
    description="The caller's own applications, or every application for admins.",
    responses=get_error_responses(401, 500)
)
async def list_applications(
    current_user: User = Depends(get_current_user),
    service: RentalApplicationService = Depends(get_rental_application_service)
) -> List[RentalApplicationResponse]:
    applications = await service.list_for_user(current_user)
    return [RentalApplicationResponse.model_validate(a) for a in applications]
