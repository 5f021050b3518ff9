"""
Admin API endpoints: manager request administration, retention cleanup,
admin promotion, payments, maintenance billing, property-owner review and
rental application decisions.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional, List
from uuid import UUID

from property_portal.config import get_settings
from property_portal.models.payment import PaymentStatus
from property_portal.models.payment_request import PaymentRequestStatus
from property_portal.models.user import User
from property_portal.schemas.auth import PromoteUserRequest, PromoteUserResponse
from property_portal.schemas.common import MessageResponse
from property_portal.schemas.error import get_crud_error_responses, get_error_responses
from property_portal.schemas.manager_request import (
    CleanupPreviewResponse,
    CleanupResultResponse,
    DeletedRequestSummary,
    ManagerRequestCostResponse,
    ManagerRequestCostUpdate,
    ManagerRequestListResponse,
    ManagerRequestResponse,
    RecoverResponse,
    SoftDeleteResponse,
)
from property_portal.schemas.payment import PaymentRequestListResponse, PaymentRequestResponse, PaymentResponse
from property_portal.schemas.rental_application import RentalApplicationAdminUpdate, RentalApplicationResponse
from property_portal.schemas.user import (
    OwnerApprovalRequest,
    OwnerApprovalResponse,
    OwnerRejectionRequest,
    OwnerRejectionResponse,
    OwnerSummary,
    PendingOwnerResponse,
    PendingOwnersResponse,
    UserResponse,
)
from property_portal.services.auth import AuthService
from property_portal.services.cleanup import RequestCleanupService
from property_portal.services.manager_request import ManagerRequestService
from property_portal.services.payment import PaymentService
from property_portal.services.property_owner import PropertyOwnerService
from property_portal.services.rental_application import RentalApplicationService
from property_portal.utils.dependencies import (
    get_auth_service,
    get_cleanup_service,
    get_current_admin_user,
    get_manager_request_service,
    get_payment_service,
    get_property_owner_service,
    get_rental_application_service,
    require_cron_secret,
)


router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/manager-requests",
    response_model=ManagerRequestListResponse,
    status_code=status.HTTP_200_OK,
    summary="List all manager requests",
    responses=get_error_responses(400, 401, 403, 500)
)
async def list_manager_requests(
    status_filter: Optional[str] = Query(None, alias="status", description="pending, working, finished or rejected"),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    admin: User = Depends(get_current_admin_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> ManagerRequestListResponse:
    requests = await service.list_for_admin(status_filter, include_deleted=include_deleted)
    return ManagerRequestListResponse(requests=[ManagerRequestResponse.model_validate(r) for r in requests])


@router.get(
    "/manager-requests/cleanup",
    response_model=CleanupPreviewResponse,
    status_code=status.HTTP_200_OK,
    summary="Preview expired soft-deleted requests",
    description="Requires `Authorization: Bearer <CRON_SECRET>`.",
    responses=get_error_responses(401, 500)
)
async def preview_cleanup(
    _: None = Depends(require_cron_secret),
    service: RequestCleanupService = Depends(get_cleanup_service)
) -> CleanupPreviewResponse:
    expired = await service.preview()
    return CleanupPreviewResponse(
        count=len(expired),
        expired_requests=[DeletedRequestSummary(**summary) for summary in expired],
    )


@router.post(
    "/manager-requests/cleanup",
    response_model=CleanupResultResponse,
    status_code=status.HTTP_200_OK,
    summary="Purge expired soft-deleted requests",
    description="Requires `Authorization: Bearer <CRON_SECRET>`. Safe to run repeatedly.",
    responses=get_error_responses(401, 500)
)
async def run_cleanup(
    _: None = Depends(require_cron_secret),
    service: RequestCleanupService = Depends(get_cleanup_service)
) -> CleanupResultResponse:
    deleted = await service.purge()
    return CleanupResultResponse(
        message=f"Permanently deleted {len(deleted)} expired requests",
        deleted_count=len(deleted),
        deleted_requests=[DeletedRequestSummary(**summary) for summary in deleted],
    )


@router.post(
    "/manager-requests/{request_id}/delete",
    response_model=SoftDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Soft delete request",
    description="Marks the request for deletion. The cleanup job removes it after the retention window.",
    responses=get_crud_error_responses()
)
async def soft_delete_request(
    request_id: UUID,
    admin: User = Depends(get_current_admin_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> SoftDeleteResponse:
    request = await service.soft_delete(request_id, admin)
    return SoftDeleteResponse(
        message=(
            "Request marked for deletion. It will be permanently removed in "
            f"{get_settings().deleted_request_retention_days} days."
        ),
        deleted_at=request.deleted_at,
    )


@router.delete(
    "/manager-requests/{request_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Permanently delete request",
    responses=get_crud_error_responses()
)
async def hard_delete_request(
    request_id: UUID,
    admin: User = Depends(get_current_admin_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> MessageResponse:
    await service.hard_delete(request_id, admin)
    return MessageResponse(success=True, message="Request permanently deleted")


@router.post(
    "/manager-requests/{request_id}/recover",
    response_model=RecoverResponse,
    status_code=status.HTTP_200_OK,
    summary="Recover soft-deleted request",
    responses=get_crud_error_responses()
)
async def recover_request(
    request_id: UUID,
    admin: User = Depends(get_current_admin_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> RecoverResponse:
    request = await service.recover(request_id, admin)
    return RecoverResponse(
        message="Request recovered successfully",
        request=ManagerRequestResponse.model_validate(request),
    )


@router.post(
    "/promote-user",
    response_model=PromoteUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Promote user to admin",
    description="Grants the admin role when the shared admin setup key matches.",
    responses=get_error_responses(400, 403, 404, 500)
)
async def promote_user(
    promote_data: PromoteUserRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> PromoteUserResponse:
    user = await auth_service.promote_to_admin(promote_data.email, promote_data.admin_key)
    return PromoteUserResponse(user=UserResponse.model_validate(user))


@router.get(
    "/payments",
    response_model=List[PaymentResponse],
    status_code=status.HTTP_200_OK,
    summary="List all payments",
    responses=get_error_responses(400, 401, 403, 500)
)
async def list_payments(
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    admin: User = Depends(get_current_admin_user),
    service: PaymentService = Depends(get_payment_service)
) -> List[PaymentResponse]:
    payments = await service.list_all_payments(status_filter)
    return [PaymentResponse.model_validate(p) for p in payments]


@router.patch(
    "/rental-applications/{application_id}",
    response_model=RentalApplicationResponse,
    status_code=status.HTTP_200_OK,
    summary="Update rental application",
    description="Set the decision and lease details (status, property id, monthly rent, notes).",
    responses=get_crud_error_responses()
)
async def update_rental_application(
    application_id: UUID,
    update_data: RentalApplicationAdminUpdate,
    admin: User = Depends(get_current_admin_user),
    service: RentalApplicationService = Depends(get_rental_application_service)
) -> RentalApplicationResponse:
    application = await service.admin_update(application_id, update_data)
    return RentalApplicationResponse.model_validate(application)


@router.patch(
    "/manager-requests/{request_id}/costs",
    response_model=ManagerRequestCostResponse,
    status_code=status.HTTP_200_OK,
    summary="Set request costs",
    description=(
        "Record the actual cost and the amount to bill. A positive bill on a property or home "
        "owner's request raises a pending payment request and emails it to the owner."
    ),
    responses=get_crud_error_responses()
)
async def update_request_costs(
    request_id: UUID,
    cost_data: ManagerRequestCostUpdate,
    admin: User = Depends(get_current_admin_user),
    service: ManagerRequestService = Depends(get_manager_request_service)
) -> ManagerRequestCostResponse:
    request, bill = await service.update_costs(request_id, cost_data, admin)
    return ManagerRequestCostResponse(
        request=ManagerRequestResponse.model_validate(request),
        payment_request_id=bill.id if bill else None,
    )


@router.get(
    "/payment-requests",
    response_model=PaymentRequestListResponse,
    status_code=status.HTTP_200_OK,
    summary="List maintenance bills",
    responses=get_error_responses(400, 401, 403, 500)
)
async def list_payment_requests(
    status_filter: Optional[PaymentRequestStatus] = Query(None, alias="status"),
    email: Optional[str] = Query(None, description="Property owner email"),
    admin: User = Depends(get_current_admin_user),
    service: PaymentService = Depends(get_payment_service)
) -> PaymentRequestListResponse:
    bills = await service.list_payment_requests(status_filter, email)
    return PaymentRequestListResponse(payment_requests=[PaymentRequestResponse.model_validate(b) for b in bills])


@router.get(
    "/pending-property-owners",
    response_model=PendingOwnersResponse,
    status_code=status.HTTP_200_OK,
    summary="List property owners awaiting review",
    responses=get_error_responses(401, 403, 500)
)
async def list_pending_property_owners(
    admin: User = Depends(get_current_admin_user),
    service: PropertyOwnerService = Depends(get_property_owner_service)
) -> PendingOwnersResponse:
    users = await service.list_pending_owners()
    return PendingOwnersResponse(pending_users=[PendingOwnerResponse.model_validate(u) for u in users])


@router.post(
    "/approve-property-owner/{user_id}",
    response_model=OwnerApprovalResponse,
    status_code=status.HTTP_200_OK,
    summary="Approve property owner signup",
    responses=get_crud_error_responses()
)
async def approve_property_owner(
    user_id: UUID,
    approval: OwnerApprovalRequest,
    admin: User = Depends(get_current_admin_user),
    service: PropertyOwnerService = Depends(get_property_owner_service)
) -> OwnerApprovalResponse:
    user, owner = await service.approve_owner(user_id, approval.phone, admin)
    return OwnerApprovalResponse(
        user=UserResponse.model_validate(user),
        property_owner=OwnerSummary(id=owner.id, name=owner.name),
    )


@router.post(
    "/reject-property-owner/{user_id}",
    response_model=OwnerRejectionResponse,
    status_code=status.HTTP_200_OK,
    summary="Reject property owner signup",
    description="Emails the reason to the applicant and deletes the account.",
    responses=get_crud_error_responses()
)
async def reject_property_owner(
    user_id: UUID,
    rejection: OwnerRejectionRequest,
    admin: User = Depends(get_current_admin_user),
    service: PropertyOwnerService = Depends(get_property_owner_service)
) -> OwnerRejectionResponse:
    user = await service.reject_owner(user_id, rejection.reason, admin)
    return OwnerRejectionResponse(user_name=user.name, user_email=user.email)
