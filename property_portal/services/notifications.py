"""
Notification service: renders and sends the portal's transactional emails.

Every send except the password reset is best-effort. Failures are logged
and never change the caller's response.
"""

from datetime import datetime
from html import escape
from typing import Optional
import logging

from property_portal.config import get_settings
from property_portal.models.manager_request import ManagerRequest, RequestStatus
from property_portal.models.payment_request import PaymentRequest
from property_portal.services.email_service import EmailSender, EmailDeliveryError
from property_portal.utils.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

BRAND = "Property Portal Maintenance"

STATUS_LABELS = {
    RequestStatus.PENDING: "Pending review",
    RequestStatus.WORKING: "Work in progress",
    RequestStatus.FINISHED: "Finished",
    RequestStatus.REJECTED: "Rejected",
}

# Statuses whose email includes the finished photo
PHOTO_STATUSES = (RequestStatus.WORKING, RequestStatus.FINISHED)


def _layout(heading: str, body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; color: #333; max-width: 600px; padding: 20px;">'
        f'<h2 style="margin-top: 0;">{escape(heading)}</h2>'
        f"{body}"
        f'<p style="text-align: center; font-size: 12px; color: #777; margin-top: 20px;">{BRAND}</p>'
        "</div>"
    )


def _line(label: str, value: Optional[str]) -> str:
    if not value:
        return ""
    return f'<p style="margin: 5px 0;"><strong>{escape(label)}:</strong> {escape(str(value))}</p>'


class NotificationService:
    """Builds email bodies for manager request and account events."""

    def __init__(self, sender: EmailSender, operator_email: Optional[str] = None):
        self.sender = sender
        self.operator_email = operator_email or get_settings().operator_email

    async def _send_best_effort(self, to: str, subject: str, html: str) -> bool:
        try:
            await self.sender.send(to, subject, html)
            return True
        except Exception as e:
            logger.warning("Notification to %s failed (%s): %s", to, subject, e)
            return False

    async def notify_new_request(self, request: ManagerRequest) -> bool:
        """Tell the operator inbox a new maintenance request arrived."""
        body = "".join([
            _line("Name", request.fullname),
            _line("Email", request.email),
            _line("Phone", request.phone),
            _line("User type", request.user_type),
            _line("Address", request.address),
            _line("Project", request.project_description),
            _line("Message", request.message),
        ])
        if request.problem_image_url:
            body += f'<p><img src="{escape(request.problem_image_url)}" alt="Problem photo" style="max-width: 100%;"/></p>'

        return await self._send_best_effort(
            self.operator_email,
            f"New maintenance request: {request.address}",
            _layout("New maintenance request", body),
        )

    async def notify_status_change(
        self,
        request: ManagerRequest,
        old_status: RequestStatus,
        new_status: RequestStatus,
        admin_notes: Optional[str] = None,
        finished_image_url: Optional[str] = None,
    ) -> bool:
        """Email the requester that their request moved from one status to another."""
        body = "".join([
            f"<p>Hello {escape(request.fullname)},</p>",
            "<p>The status of your maintenance request has been updated.</p>",
            _line("Property", request.address),
            _line("Request", request.project_description),
            _line("Previous status", STATUS_LABELS[old_status]),
            _line("New status", STATUS_LABELS[new_status]),
            _line("Notes from our team", admin_notes),
        ])
        if new_status in PHOTO_STATUSES and finished_image_url:
            body += f'<p><img src="{escape(finished_image_url)}" alt="Completed work" style="max-width: 100%;"/></p>'

        return await self._send_best_effort(
            request.email,
            f"Update on your maintenance request for {request.address}",
            _layout("Maintenance request update", body),
        )

    async def notify_approval_decision(
        self,
        request: ManagerRequest,
        approved: bool,
        approved_by: str,
        approval_date: datetime,
    ) -> bool:
        decision = "approved" if approved else "declined"
        body = "".join([
            f"<p>Property owner {escape(approved_by)} has {decision} the repair request.</p>",
            _line("Property", request.address),
            _line("Issue", request.project_description),
            _line("Details", request.message),
            _line("Decision by", approved_by),
            _line("Decision date", approval_date.strftime("%Y-%m-%d")),
        ])
        return await self._send_best_effort(
            self.operator_email,
            f"Repair Request {decision.capitalize()} - {request.address}",
            _layout(f"Repair request {decision}", body),
        )

    async def notify_conversation_message(self, request: ManagerRequest, sender_name: str, message: str) -> bool:
        body = "".join([
            f"<p>Hello {escape(request.fullname)},</p>",
            f"<p>{escape(sender_name)} sent a message about your maintenance request.</p>",
            _line("Property", request.address),
            f'<blockquote style="border-left: 3px solid #ccc; padding-left: 10px;">{escape(message)}</blockquote>',
        ])
        return await self._send_best_effort(
            request.email,
            f"New message about your maintenance request for {request.address}",
            _layout("New message", body),
        )

    async def notify_maintenance_bill(self, bill: PaymentRequest, admin_email: str) -> bool:
        """Send the bill to the owner, copying the admin who raised it."""
        body = "".join([
            f"<p>Hello {escape(bill.property_owner_name or bill.property_owner_email)},</p>",
            "<p>The maintenance work on your property has been costed and a payment is now due.</p>",
            _line("Property", bill.property_name),
            _line("Work", bill.description),
            _line("Actual cost", f"${bill.actual_cost:.2f}" if bill.actual_cost is not None else None),
            _line("Amount due", f"${bill.amount:.2f}"),
            _line("Due date", bill.due_date.strftime("%Y-%m-%d")),
        ])
        subject = f"Payment Request: {bill.property_name} - ${bill.amount:.2f}"
        html = _layout("Payment request", body)

        delivered = await self._send_best_effort(bill.property_owner_email, subject, html)
        if admin_email.lower() != bill.property_owner_email.lower():
            await self._send_best_effort(admin_email, subject, html)
        return delivered

    async def notify_owner_rejected(self, email: str, name: str, reason: str) -> bool:
        body = "".join([
            f"<p>Dear {escape(name)},</p>",
            "<p>Thank you for your interest in becoming a property owner with us.</p>",
            "<p>After reviewing your application, we are unable to approve your property owner account at this time.</p>",
            _line("Reason", reason),
            "<p>If you have any questions about this decision, reply to this email.</p>",
        ])
        return await self._send_best_effort(
            email,
            "Property Owner Application Status",
            _layout("Property owner application update", body),
        )

    async def send_password_reset(self, email: str, name: str, reset_link: str) -> None:
        """
        Send the reset link.

        Raises:
            UpstreamServiceError: If the email could not be sent
        """
        minutes = get_settings().password_reset_token_minutes
        body = "".join([
            f"<p>Hello {escape(name)},</p>",
            "<p>We received a request to reset your password.</p>",
            f'<p><a href="{escape(reset_link)}">Reset your password</a></p>',
            f"<p>This link expires in {minutes} minutes. If you did not ask for a reset you can ignore this email.</p>",
        ])
        try:
            await self.sender.send(email, "Reset your password", _layout("Password reset", body))
        except EmailDeliveryError as e:
            logger.error("Password reset email to %s failed: %s", email, e)
            raise UpstreamServiceError("email", "Failed to send password reset email")
