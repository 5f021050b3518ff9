"""
Property owner endpoints and the public property listing.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from typing import Optional, List

from property_portal.models.property_owner import PropertyStatus, PropertyType
from property_portal.models.user import User
from property_portal.schemas.error import get_crud_error_responses, get_error_responses
from property_portal.schemas.property_owner import (
    PropertyCreate,
    PropertyListing,
    PropertyOwnerCreate,
    PropertyOwnerResponse,
    PropertyOwnerUserCreate,
)
from property_portal.services.property_owner import PropertyOwnerService
from property_portal.utils.dependencies import (
    get_current_admin_user,
    get_current_user,
    get_property_owner_service,
)


router = APIRouter(tags=["Property Owners"])


@router.post(
    "/property-owners",
    response_model=PropertyOwnerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create property owner",
    responses=get_crud_error_responses()
)
async def create_property_owner(
    owner_data: PropertyOwnerCreate,
    admin: User = Depends(get_current_admin_user),
    service: PropertyOwnerService = Depends(get_property_owner_service)
) -> PropertyOwnerResponse:
    """
    Create an owner record.

    Raises:
        DuplicateResourceError: If an owner with this name exists
    """
    owner = await service.create_owner(owner_data)
    return PropertyOwnerResponse.model_validate(owner)


@router.get(
    "/property-owners",
    response_model=List[PropertyOwnerResponse],
    status_code=status.HTTP_200_OK,
    summary="List property owners",
    responses=get_error_responses(401, 500)
)
async def list_property_owners(
    current_user: User = Depends(get_current_user),
    service: PropertyOwnerService = Depends(get_property_owner_service)
) -> List[PropertyOwnerResponse]:
    owners = await service.list_owners()
    return [PropertyOwnerResponse.model_validate(o) for o in owners]


@router.get(
    "/property-owners/{owner_name}",
    response_model=PropertyOwnerResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property owner",
    responses=get_crud_error_responses()
)
async def get_property_owner(
    owner_name: str = Path(..., description="Owner name"),
    current_user: User = Depends(get_current_user),
    service: PropertyOwnerService = Depends(get_property_owner_service)
) -> PropertyOwnerResponse:
    owner = await service.get_owner(owner_name)
    return PropertyOwnerResponse.model_validate(owner)


@router.post(
    "/property-owners/{owner_name}/properties",
    response_model=PropertyOwnerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add property",
    responses=get_crud_error_responses()
)
async def add_property(
    property_data: PropertyCreate,
    owner_name: str = Path(..., description="Owner name"),
    current_user: User = Depends(get_current_user),
    service: PropertyOwnerService = Depends(get_property_owner_service)
) -> PropertyOwnerResponse:
    owner = await service.add_property(owner_name, property_data, current_user)
    return PropertyOwnerResponse.model_validate(owner)


@router.post(
    "/property-owners/{owner_name}/users",
    response_model=PropertyOwnerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add owner user",
    description="400 if the email is already present for this owner.",
    responses=get_crud_error_responses()
)
async def add_owner_user(
    user_data: PropertyOwnerUserCreate,
    owner_name: str = Path(..., description="Owner name"),
    current_user: User = Depends(get_current_user),
    service: PropertyOwnerService = Depends(get_property_owner_service)
) -> PropertyOwnerResponse:
    owner = await service.add_user(owner_name, user_data, current_user)
    return PropertyOwnerResponse.model_validate(owner)


@router.get(
    "/properties",
    response_model=List[PropertyListing],
    status_code=status.HTTP_200_OK,
    summary="List properties",
    description="Every owner's properties, flattened with the owner name and sorted by name.",
    responses=get_error_responses(400, 500)
)
async def list_properties(
    status_filter: Optional[PropertyStatus] = Query(None, alias="status"),
    property_type: Optional[PropertyType] = Query(None, alias="type"),
    service: PropertyOwnerService = Depends(get_property_owner_service)
) -> List[PropertyListing]:
    listings = await service.list_properties(status=status_filter, property_type=property_type)
    return [PropertyListing.model_validate(listing) for listing in listings]
