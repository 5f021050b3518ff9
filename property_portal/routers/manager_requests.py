"""
Manager request API endpoints: intake, listing, status and approval updates,
and the per-request conversation.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import Optional, List
from uuid import UUID

from property_portal.models.manager_request import RequestStatus
from property_portal.models.user import User
from property_portal.schemas.error import get_crud_error_responses, get_error_responses
from property_portal.schemas.manager_request import (
    ConversationLogResponse,
    ConversationMessageCreate,
    ManagerRequestCreate,
    ManagerRequestEnvelope,
    ManagerRequestResponse,
    ManagerRequestSubmitResponse,
    ManagerRequestUpdate,
)
from property_portal.services.manager_request import ManagerRequestService
from property_portal.utils.dependencies import get_current_user, get_manager_request_service


router = APIRouter(prefix="/manager-requests", tags=["Manager Requests"])


@router.post(
    "",
    response_model=ManagerRequestSubmitResponse,
    status_code=status.HTTP_200_OK,
    summary="Submit maintenance request",
    description="Submit a maintenance request. The operator is notified by email.",
    responses=get_error_responses(400, 500)
)
async def submit_request(
    request_data: ManagerRequestCreate,
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> ManagerRequestSubmitResponse:
    """
    Persist a new request as pending.

    Args:
        request_data: Requester details and problem description
        service: Manager request service

    Returns:
        The created request
    """
    request = await service.submit_request(request_data)
    return ManagerRequestSubmitResponse(request=ManagerRequestResponse.model_validate(request))


@router.post(
    "/submit",
    response_model=ManagerRequestSubmitResponse,
    status_code=status.HTTP_200_OK,
    summary="Submit maintenance request with photo",
    description="Multipart form variant. The photo is uploaded before the request is stored.",
    responses=get_error_responses(400, 500)
)
async def submit_request_with_photo(
    fullname: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    project_description: Optional[str] = Form(None, alias="projectDescription"),
    message: Optional[str] = Form(None),
    user_type: Optional[str] = Form(None, alias="userType"),
    file: Optional[UploadFile] = File(None),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> ManagerRequestSubmitResponse:
    # Validate every field before anything is uploaded
    request_data = ManagerRequestCreate.model_validate({
        "fullname": fullname,
        "email": email,
        "phone": phone,
        "address": address,
        "project_description": project_description,
        "message": message,
        "user_type": user_type,
    })
    request = await service.submit_with_upload(request_data, file)
    return ManagerRequestSubmitResponse(request=ManagerRequestResponse.model_validate(request))


@router.get(
    "",
    response_model=List[ManagerRequestResponse],
    status_code=status.HTTP_200_OK,
    summary="List visible requests",
    description=(
        "Admins see every request, property owners see requests for their properties, "
        "everyone else sees their own."
    ),
    responses=get_error_responses(401, 500)
)
async def list_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> List[ManagerRequestResponse]:
    requests = await service.list_for_user(current_user, status=status_filter)
    return [ManagerRequestResponse.model_validate(r) for r in requests]


@router.get(
    "/{request_id}",
    response_model=ManagerRequestResponse,
    status_code=status.HTTP_200_OK,
    summary="Get request",
    responses=get_crud_error_responses()
)
async def get_request(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> ManagerRequestResponse:
    request = await service.get_visible_request(request_id, current_user)
    return ManagerRequestResponse.model_validate(request)


@router.patch(
    "/{request_id}",
    response_model=ManagerRequestEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Update status or record approval",
    description=(
        "Body is either an approval decision (approvalStatus, approvedBy, approvalDate) "
        "or a status update (status, adminNotes, finishedImageUrl)."
    ),
    responses=get_crud_error_responses()
)
async def update_request(
    request_id: UUID,
    update_data: ManagerRequestUpdate,
    current_user: User = Depends(get_current_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> ManagerRequestEnvelope:
    """
    Apply a status change or an approval decision.

    Raises:
        ValidationError: If the status or approval value is unknown
        ManagerRequestNotFoundError: If the request does not exist
        InvalidTransitionError: If the workflow forbids the change
    """
    request = await service.update_request(request_id, update_data, current_user)
    return ManagerRequestEnvelope(request=ManagerRequestResponse.model_validate(request))


@router.get(
    "/{request_id}/conversation",
    response_model=ConversationLogResponse,
    status_code=status.HTTP_200_OK,
    summary="Get conversation",
    description="Internal notes are only returned to admins.",
    responses=get_crud_error_responses()
)
async def get_conversation(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> ConversationLogResponse:
    log = await service.get_conversation(request_id, current_user)
    return ConversationLogResponse(conversation_log=log)


@router.post(
    "/{request_id}/conversation",
    response_model=ConversationLogResponse,
    status_code=status.HTTP_200_OK,
    summary="Post conversation message",
    description="Admins and property owners only. Non-internal messages are emailed to the requester.",
    responses=get_crud_error_responses()
)
async def add_conversation_message(
    request_id: UUID,
    message_data: ConversationMessageCreate,
    current_user: User = Depends(get_current_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> ConversationLogResponse:
    log = await service.add_conversation_message(
        request_id,
        current_user,
        message_data.message,
        is_internal=message_data.is_internal,
    )
    return ConversationLogResponse(success=True, conversation_log=log)
