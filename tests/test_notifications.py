"""
Tests for notification emails.
"""

from datetime import datetime, timezone

import pytest

from property_portal.models.manager_request import ManagerRequest, RequestStatus
from property_portal.services.email_service import EmailDeliveryError, EmailSender
from property_portal.services.notifications import NotificationService
from property_portal.utils.exceptions import UpstreamServiceError
from tests.conftest import OWNER_ADDRESS_LINE, FakeEmailSender

OPERATOR = "ops@example.com"


def make_request(**overrides) -> ManagerRequest:
    fields = {
        "fullname": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-123-4567",
        "address": OWNER_ADDRESS_LINE,
        "project_description": "Leaky faucet",
        "message": "Kitchen sink <drips> constantly",
        "status": RequestStatus.PENDING,
        "conversation_log": [],
    }
    fields.update(overrides)
    return ManagerRequest(**fields)


@pytest.fixture
def sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def notifications(sender) -> NotificationService:
    return NotificationService(sender, operator_email=OPERATOR)


class TestManagerRequestEmails:

    @pytest.mark.asyncio
    async def test_new_request_goes_to_operator(self, notifications, sender):
        sent = await notifications.notify_new_request(make_request(problem_image_url="https://blob.example/p.png"))

        assert sent is True
        [mail] = sender.sent
        assert mail["to"] == OPERATOR
        assert mail["subject"] == f"New maintenance request: {OWNER_ADDRESS_LINE}"
        assert "Kitchen sink &lt;drips&gt; constantly" in mail["html"]
        assert "https://blob.example/p.png" in mail["html"]

    @pytest.mark.asyncio
    async def test_status_change_lists_both_statuses(self, notifications, sender):
        await notifications.notify_status_change(
            make_request(),
            RequestStatus.WORKING,
            RequestStatus.FINISHED,
            admin_notes="Replaced the cartridge",
            finished_image_url="https://blob.example/done.png",
        )

        [mail] = sender.sent
        assert mail["to"] == "jane@example.com"
        assert "Work in progress" in mail["html"] and "Finished" in mail["html"]
        assert "Replaced the cartridge" in mail["html"]
        assert "https://blob.example/done.png" in mail["html"]

    @pytest.mark.asyncio
    async def test_rejection_email_has_no_photo(self, notifications, sender):
        await notifications.notify_status_change(
            make_request(),
            RequestStatus.PENDING,
            RequestStatus.REJECTED,
            finished_image_url="https://blob.example/done.png",
        )

        assert "done.png" not in sender.sent[0]["html"]

    @pytest.mark.asyncio
    async def test_declined_approval_subject(self, notifications, sender):
        await notifications.notify_approval_decision(
            make_request(), False, "Olivia Owner", datetime(2026, 3, 2, tzinfo=timezone.utc)
        )

        [mail] = sender.sent
        assert mail["to"] == OPERATOR
        assert mail["subject"] == f"Repair Request Declined - {OWNER_ADDRESS_LINE}"
        assert "2026-03-02" in mail["html"]

    @pytest.mark.asyncio
    async def test_delivery_failure_is_reported_not_raised(self, notifications, sender):
        sender.fail = True

        assert await notifications.notify_conversation_message(make_request(), "Ada Admin", "Hi") is False


class TestPasswordResetEmail:

    @pytest.mark.asyncio
    async def test_failure_raises(self, notifications, sender):
        sender.fail = True

        with pytest.raises(UpstreamServiceError):
            await notifications.send_password_reset("jane@example.com", "Jane", "https://app.example/reset")


class TestEmailSender:

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        sender = EmailSender(api_key="", from_email="noreply@example.com")

        with pytest.raises(EmailDeliveryError):
            await sender.send("jane@example.com", "Hello", "<p>Hi</p>")
