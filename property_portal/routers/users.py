"""
User profile endpoints: mailing address and verification documents.
"""

from fastapi import APIRouter, Depends, status

from property_portal.models.user import User
from property_portal.schemas.error import get_error_responses
from property_portal.schemas.user import (
    AddressResponse,
    AddressUpdate,
    VerificationDocumentCreate,
    VerificationDocumentsResponse,
)
from property_portal.services.user_profile import UserProfileService
from property_portal.utils.dependencies import get_current_user, get_user_profile_service


router = APIRouter(prefix="/user", tags=["Users"])


@router.post(
    "/address",
    response_model=AddressResponse,
    status_code=status.HTTP_200_OK,
    summary="Update mailing address",
    responses=get_error_responses(400, 401, 500)
)
async def update_address(
    address_data: AddressUpdate,
    current_user: User = Depends(get_current_user),
    service: UserProfileService = Depends(get_user_profile_service)
) -> AddressResponse:
    await service.update_address(current_user, address_data.address)
    return AddressResponse(address=address_data.address)


@router.post(
    "/verification-documents",
    response_model=VerificationDocumentsResponse,
    status_code=status.HTTP_200_OK,
    summary="Add verification document",
    description="Record the URL of an uploaded verification document.",
    responses=get_error_responses(400, 401, 500)
)
async def add_verification_document(
    document_data: VerificationDocumentCreate,
    current_user: User = Depends(get_current_user),
    service: UserProfileService = Depends(get_user_profile_service)
) -> VerificationDocumentsResponse:
    documents = await service.add_verification_document(current_user, document_data.document_url)
    return VerificationDocumentsResponse(documents=documents)
