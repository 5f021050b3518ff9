"""
Manager request service: intake, role-scoped listing, status and approval
updates, costing and owner billing, soft delete and recovery, and the
conversation log.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Optional, List, Dict, Any, Tuple
import logging
import uuid

from fastapi import UploadFile
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.config import get_settings
from property_portal.database import utcnow, as_utc
from property_portal.models.manager_request import (
    ManagerRequest,
    RequestStatus,
    ApprovalStatus,
    ConversationSender,
)
from property_portal.models.payment_request import PaymentRequest, PaymentRequestStatus
from property_portal.models.user import User
from property_portal.repositories.manager_request import ManagerRequestRepository
from property_portal.repositories.payment_request import PaymentRequestRepository
from property_portal.services.property_owner import PropertyOwnerService
from property_portal.schemas.manager_request import ManagerRequestCostUpdate, ManagerRequestCreate, ManagerRequestUpdate
from property_portal.services.notifications import NotificationService
from property_portal.services.upload import UploadService
from property_portal.services.workflow import RequestStatusMachine, ApprovalMachine
from property_portal.utils.exceptions import (
    BadRequestError,
    InsufficientPermissionsError,
    ManagerRequestNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Requester types that own the property and pay for the work
BILLABLE_USER_TYPES = ("property-owner", "home-owner")
BILL_DUE_DAYS = 30


class ManagerRequestService:
    """
    Business logic for maintenance tickets.

    Status and approval changes go through the workflow machines; email
    notifications are best-effort and never fail the operation.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        notifications: NotificationService,
        upload_service: Optional[UploadService] = None,
    ):
        self.db = db_session
        self.request_repo = ManagerRequestRepository(db_session)
        self.bill_repo = PaymentRequestRepository(db_session)
        self.owner_service = PropertyOwnerService(db_session)
        self.notifications = notifications
        self.upload_service = upload_service
        self.status_machine = RequestStatusMachine()
        self.approval_machine = ApprovalMachine()

    # Intake

    async def submit_request(self, data: ManagerRequestCreate) -> ManagerRequest:
        """
        Persist a new request as pending and notify the operator.

        Args:
            data: Validated submission

        Returns:
            Created request
        """
        try:
            request = await self.request_repo.create({
                "fullname": data.fullname,
                "email": data.email,
                "phone": data.phone,
                "user_type": data.user_type,
                "address": data.address,
                "project_description": data.project_description,
                "message": data.message,
                "problem_image_url": data.problem_image_url,
                "status": RequestStatus.PENDING,
                "conversation_log": [],
            })
        except Exception as e:
            logger.error(f"Failed to create manager request for {data.email}: {e}")
            raise

        logger.info(f"Manager request {request.id} submitted by {request.email} for {request.address}")
        await self.notifications.notify_new_request(request)
        return request

    async def submit_with_upload(self, data: ManagerRequestCreate, file: Optional[UploadFile]) -> ManagerRequest:
        """Upload the problem photo first, then persist, then notify."""
        if file is not None and file.filename:
            if self.upload_service is None:
                raise BadRequestError("File uploads are not configured")
            url = await self.upload_service.upload(file, "problem")
            data = data.model_copy(update={"problem_image_url": url})
        return await self.submit_request(data)

    # Lookup and visibility

    async def get_request(self, request_id: uuid.UUID) -> ManagerRequest:
        request = await self.request_repo.get_by_id(request_id)
        if not request:
            raise ManagerRequestNotFoundError(str(request_id))
        return request

    async def _owner_addresses(self, user: User) -> List[str]:
        owner = await self.owner_service.find_owner_for_user(user)
        return owner.formatted_addresses() if owner else []

    async def _can_view(self, request: ManagerRequest, user: User) -> bool:
        if user.is_admin:
            return True
        if request.email.lower() == user.email.lower():
            return True
        if user.is_property_owner:
            return request.address in await self._owner_addresses(user)
        return False

    async def get_visible_request(self, request_id: uuid.UUID, user: User) -> ManagerRequest:
        request = await self.get_request(request_id)
        if request.is_deleted and not user.is_admin:
            raise ManagerRequestNotFoundError(str(request_id))
        if not await self._can_view(request, user):
            raise InsufficientPermissionsError("view this request")
        return request

    async def list_for_user(
        self,
        user: User,
        status: Optional[RequestStatus] = None,
        include_deleted: bool = False,
    ) -> List[ManagerRequest]:
        """
        Requests the user may see: admins everything, property owners the
        requests at their properties' addresses, everyone else their own.
        """
        if user.is_admin:
            return await self.request_repo.list_requests(status=status, include_deleted=include_deleted)

        if user.is_property_owner:
            addresses = await self._owner_addresses(user)
            if not addresses:
                return []
            return await self.request_repo.list_requests(status=status, addresses=addresses)

        return await self.request_repo.list_requests(status=status, email=user.email)

    async def list_for_admin(
        self,
        status: Optional[str] = None,
        include_deleted: bool = False,
    ) -> List[ManagerRequest]:
        parsed = self._parse_status(status) if status else None
        return await self.request_repo.list_requests(status=parsed, include_deleted=include_deleted)

    # Updates

    @staticmethod
    def _parse_status(value: Optional[str]) -> RequestStatus:
        try:
            return RequestStatus(value)
        except ValueError:
            raise ValidationError(
                "Invalid status provided",
                field_errors=[{
                    "field": "status",
                    "message": f"must be one of: {', '.join(s.value for s in RequestStatus)}",
                }],
            )

    @staticmethod
    def _parse_approval(value: Optional[str]) -> ApprovalStatus:
        try:
            return ApprovalStatus(value)
        except ValueError:
            raise ValidationError(
                "Invalid approval status",
                field_errors=[{"field": "approvalStatus", "message": "must be approved or declined"}],
            )

    async def update_request(self, request_id: uuid.UUID, update: ManagerRequestUpdate, actor: User) -> ManagerRequest:
        """
        Apply either an approval decision or a status update.

        Raises:
            ValidationError: If the status or approval value is not in its enum
            ManagerRequestNotFoundError: If the request does not exist
            InvalidTransitionError: If the workflow forbids the change
            InsufficientPermissionsError: If the actor may not make the change
        """
        if update.is_approval:
            return await self.record_approval(request_id, update, actor)
        return await self.update_status(request_id, update, actor)

    async def update_status(self, request_id: uuid.UUID, update: ManagerRequestUpdate, actor: User) -> ManagerRequest:
        new_status = self._parse_status(update.status)

        if not actor.is_admin:
            raise InsufficientPermissionsError("update request status")

        request = await self.get_request(request_id)
        old_status = request.status
        self.status_machine.validate(old_status, new_status, request.approval_status)

        changes: Dict[str, Any] = {"status": new_status}
        if update.admin_notes:
            changes["admin_notes"] = update.admin_notes
        if "finished_image_url" in update.model_fields_set:
            changes["finished_image_url"] = update.finished_image_url

        request = await self.request_repo.update(request, changes)
        logger.info(f"Manager request {request.id} status {old_status.value} -> {new_status.value} by {actor.email}")

        if old_status != new_status:
            await self.notifications.notify_status_change(
                request,
                old_status,
                new_status,
                admin_notes=update.admin_notes or "",
                finished_image_url=request.finished_image_url,
            )

        return request

    async def record_approval(self, request_id: uuid.UUID, update: ManagerRequestUpdate, actor: User) -> ManagerRequest:
        decision = self._parse_approval(update.approval_status)

        request = await self.get_request(request_id)

        if not actor.is_admin:
            if not actor.is_property_owner or request.address not in await self._owner_addresses(actor):
                raise InsufficientPermissionsError("approve requests for this property")

        self.approval_machine.validate(request.approval_status, decision, request.status)

        approved_by = (update.approved_by or "").strip() or actor.name or actor.email
        approval_date = as_utc(update.approval_date) or utcnow()

        request = await self.request_repo.update(request, {
            "approval_status": decision,
            "approved_by": approved_by,
            "approval_date": approval_date,
        })
        logger.info(f"Manager request {request.id} {decision.value} by {approved_by}")

        await self.notifications.notify_approval_decision(
            request,
            approved=decision == ApprovalStatus.APPROVED,
            approved_by=approved_by,
            approval_date=approval_date,
        )
        return request

    # Soft delete

    @staticmethod
    def _conversation_entry(actor: User, message: str, is_internal: bool) -> Dict[str, Any]:
        return {
            "sender": (ConversationSender.ADMIN if actor.is_admin else ConversationSender.USER).value,
            "senderName": actor.name or ("Admin" if actor.is_admin else "Property Owner"),
            "senderEmail": actor.email,
            "message": message,
            "timestamp": utcnow().isoformat(),
            "isInternal": is_internal,
        }

    async def update_costs(
        self,
        request_id: uuid.UUID,
        update: ManagerRequestCostUpdate,
        admin: User,
    ) -> Tuple[ManagerRequest, Optional[PaymentRequest]]:
        """
        Record what the work cost and what the owner is billed.

        A positive bill on an owner's request raises (or re-prices) that
        request's pending payment request and emails it to the owner.

        Returns:
            (updated request, the bill if one was raised)

        Raises:
            ValidationError: If either figure is negative
            ManagerRequestNotFoundError: If the request does not exist
        """
        provided = update.model_fields_set
        for field, label in (("actual_cost", "actual cost"), ("amount_to_bill", "amount to bill")):
            value = getattr(update, field)
            if field in provided and value is not None and (not value.is_finite() or value < 0):
                raise ValidationError(
                    f"Invalid {label}",
                    field_errors=[{"field": to_camel(field), "message": "must be zero or more"}],
                )

        request = await self.get_request(request_id)
        changes = {field: getattr(update, field) for field in ("actual_cost", "amount_to_bill") if field in provided}
        if changes:
            request = await self.request_repo.update(request, changes)
        logger.info(f"Costs for manager request {request.id} set by {admin.email}: {changes}")

        amount = update.amount_to_bill
        if "amount_to_bill" not in provided or amount is None or amount <= 0:
            return request, None
        if request.user_type not in BILLABLE_USER_TYPES:
            return request, None

        bill = await self._upsert_bill(request, amount, update.actual_cost, admin)
        await self.notifications.notify_maintenance_bill(bill, admin.email)
        return request, bill

    async def _upsert_bill(
        self,
        request: ManagerRequest,
        amount: Decimal,
        actual_cost: Optional[Decimal],
        admin: User,
    ) -> PaymentRequest:
        existing = await self.bill_repo.get_by_manager_request(request.id)
        if existing:
            bill = await self.bill_repo.update(existing, {
                "amount": amount,
                "actual_cost": actual_cost,
                "status": PaymentRequestStatus.PENDING,
            })
            logger.info(f"Re-priced payment request {bill.id} for manager request {request.id}")
            return bill

        bill = await self.bill_repo.create({
            "manager_request_id": request.id,
            "property_name": request.address,
            "property_owner_email": request.email,
            "property_owner_name": request.fullname,
            "amount": amount,
            "actual_cost": actual_cost,
            "description": request.project_description,
            "status": PaymentRequestStatus.PENDING,
            "due_date": utcnow() + timedelta(days=BILL_DUE_DAYS),
            "created_by": admin.email,
        })
        logger.info(f"Raised payment request {bill.id} for manager request {request.id}")
        return bill

    async def soft_delete(self, request_id: uuid.UUID, admin: User) -> ManagerRequest:
        """Mark a request for deletion; the cleanup job purges it after the retention window."""
        request = await self.get_request(request_id)
        if request.is_deleted:
            raise BadRequestError("Request is already marked for deletion")

        now = utcnow()
        purge_on = now + timedelta(days=get_settings().deleted_request_retention_days)
        entry = self._conversation_entry(
            admin,
            f"Request marked for deletion. Will be permanently removed on {purge_on.strftime('%Y-%m-%d')}.",
            is_internal=True,
        )
        request = await self.request_repo.append_conversation(request, entry, {
            "is_deleted": True,
            "deleted_at": now,
            "deleted_by": admin.email,
        })
        logger.info(f"Manager request {request.id} soft-deleted by {admin.email}")
        return request

    async def recover(self, request_id: uuid.UUID, admin: User) -> ManagerRequest:
        request = await self.get_request(request_id)
        if not request.is_deleted:
            raise BadRequestError("Request is not marked for deletion")

        entry = self._conversation_entry(admin, "Request recovered from deletion.", is_internal=True)
        request = await self.request_repo.append_conversation(request, entry, {
            "is_deleted": False,
            "deleted_at": None,
            "deleted_by": None,
        })
        logger.info(f"Manager request {request.id} recovered by {admin.email}")
        return request

    async def hard_delete(self, request_id: uuid.UUID, admin: User) -> None:
        deleted = await self.request_repo.delete(request_id)
        if not deleted:
            raise ManagerRequestNotFoundError(str(request_id))
        logger.info(f"Manager request {request_id} permanently deleted by {admin.email}")

    # Conversation

    async def get_conversation(self, request_id: uuid.UUID, user: User) -> List[Dict[str, Any]]:
        """Conversation log; internal notes are only shown to admins."""
        request = await self.get_request(request_id)
        if not (user.is_admin or user.is_property_owner or request.email.lower() == user.email.lower()):
            raise InsufficientPermissionsError("view this conversation")

        log = list(request.conversation_log or [])
        if not user.is_admin:
            log = [entry for entry in log if not entry.get("isInternal")]
        return log

    async def add_conversation_message(
        self,
        request_id: uuid.UUID,
        user: User,
        message: str,
        is_internal: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Append a message from an admin or property owner.

        Only admins can post internal notes. Non-internal messages are emailed
        to the requester.
        """
        if not (user.is_admin or user.is_property_owner):
            raise InsufficientPermissionsError("post to the conversation")

        request = await self.get_request(request_id)
        internal = bool(is_internal) and user.is_admin
        entry = self._conversation_entry(user, message, is_internal=internal)
        request = await self.request_repo.append_conversation(request, entry)

        if not internal:
            await self.notifications.notify_conversation_message(request, entry["senderName"], message)

        return list(request.conversation_log)
