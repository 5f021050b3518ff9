"""
API tests for status updates and owner approval on PATCH /manager-requests/{id}.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.models.manager_request import ApprovalStatus, RequestStatus
from property_portal.models.user import User
from property_portal.repositories.manager_request import ManagerRequestRepository
from property_portal.schemas.manager_request import ManagerRequestUpdate
from property_portal.services.manager_request import ManagerRequestService
from property_portal.services.notifications import NotificationService
from tests.conftest import ManagerRequestFactory, auth_headers, error_message

OPERATOR_EMAIL = "operator@propertyportal.example"


class TestStatusUpdates:

    @pytest.mark.asyncio
    async def test_admin_moves_request_to_working(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User, email_sender
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "working", "adminNotes": "Plumber booked for Monday"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        updated = response.json()["request"]
        assert updated["status"] == "working"
        assert updated["adminNotes"] == "Plumber booked for Monday"

        mail = email_sender.sent_to("jane@example.com")
        assert len(mail) == 1
        assert "Work in progress" in mail[0]["html"]
        assert "Plumber booked for Monday" in mail[0]["html"]

    @pytest.mark.asyncio
    async def test_finished_email_includes_photo(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User, email_sender
    ):
        request = await ManagerRequestFactory.create_request(db_session, status=RequestStatus.WORKING)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "finished", "finishedImageUrl": "https://blob.example/finished-1-sink.jpg"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        assert response.json()["request"]["finishedImageUrl"] == "https://blob.example/finished-1-sink.jpg"
        assert "finished-1-sink.jpg" in email_sender.sent_to("jane@example.com")[0]["html"]

    @pytest.mark.asyncio
    async def test_invalid_status_is_rejected_and_status_unchanged(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User, email_sender
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "done"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 400
        assert error_message(response) == "Invalid status provided"
        await db_session.refresh(request)
        assert request.status == RequestStatus.PENDING
        assert email_sender.sent == []

    @pytest.mark.asyncio
    async def test_skipping_a_step_is_a_conflict(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "finished"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 409
        await db_session.refresh(request)
        assert request.status == RequestStatus.PENDING

    @pytest.mark.asyncio
    async def test_notes_only_edit_keeps_status_and_sends_no_email(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User, email_sender
    ):
        request = await ManagerRequestFactory.create_request(db_session, status=RequestStatus.WORKING)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "working", "adminNotes": "Parts on order"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        assert response.json()["request"]["adminNotes"] == "Parts on order"
        assert email_sender.sent == []

    @pytest.mark.asyncio
    async def test_email_failure_does_not_fail_update(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User, email_sender
    ):
        request = await ManagerRequestFactory.create_request(db_session)
        email_sender.fail = True

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "rejected"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        assert response.json()["request"]["status"] == "rejected"

    @pytest.mark.asyncio
    async def test_non_admin_cannot_change_status(
        self, async_client: AsyncClient, db_session: AsyncSession, tenant_user: User
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "working"},
            headers=auth_headers(tenant_user),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_request(self, async_client: AsyncClient, admin_user: User):
        response = await async_client.patch(
            "/manager-requests/7d4f4a0e-1111-4b8e-9a65-2a6a3f7c0b11",
            json={"status": "working"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 404


class TestApproval:

    @pytest.mark.asyncio
    async def test_owner_approves_request_at_their_property(
        self, async_client: AsyncClient, db_session: AsyncSession, owner_user: User, email_sender
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"approvalStatus": "approved"},
            headers=auth_headers(owner_user),
        )

        assert response.status_code == 200
        updated = response.json()["request"]
        assert updated["approvalStatus"] == "approved"
        assert updated["approvedBy"] == "Olivia Owner"
        assert updated["approvalDate"] is not None
        assert updated["status"] == "pending"

        mail = email_sender.sent_to(OPERATOR_EMAIL)
        assert len(mail) == 1
        assert mail[0]["subject"].startswith("Repair Request Approved")

    @pytest.mark.asyncio
    async def test_explicit_approver_and_date(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={
                "approvalStatus": "declined",
                "approvedBy": "Acme Rentals",
                "approvalDate": "2026-03-01T12:00:00Z",
            },
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        updated = response.json()["request"]
        assert updated["approvalStatus"] == "declined"
        assert updated["approvedBy"] == "Acme Rentals"
        assert updated["approvalDate"].startswith("2026-03-01T12:00:00")

    @pytest.mark.asyncio
    async def test_declined_request_cannot_start_work(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User
    ):
        request = await ManagerRequestFactory.create_request(
            db_session, approval_status=ApprovalStatus.DECLINED, approved_by="Acme Rentals"
        )

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "working"},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 409

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "rejected"},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_decision_cannot_be_reversed(
        self, async_client: AsyncClient, db_session: AsyncSession, owner_user: User
    ):
        request = await ManagerRequestFactory.create_request(
            db_session, approval_status=ApprovalStatus.APPROVED, approved_by="Olivia Owner"
        )

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"approvalStatus": "declined"},
            headers=auth_headers(owner_user),
        )

        assert response.status_code == 409
        await db_session.refresh(request)
        assert request.approval_status == ApprovalStatus.APPROVED

    @pytest.mark.asyncio
    async def test_no_decision_on_finished_request(
        self, async_client: AsyncClient, db_session: AsyncSession, owner_user: User
    ):
        request = await ManagerRequestFactory.create_request(db_session, status=RequestStatus.FINISHED)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"approvalStatus": "approved"},
            headers=auth_headers(owner_user),
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_approval_value(
        self, async_client: AsyncClient, db_session: AsyncSession, owner_user: User
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"approvalStatus": "maybe"},
            headers=auth_headers(owner_user),
        )

        assert response.status_code == 400
        assert error_message(response) == "Invalid approval status"

    @pytest.mark.asyncio
    async def test_owner_cannot_approve_other_properties(
        self, async_client: AsyncClient, db_session: AsyncSession, owner_user: User
    ):
        request = await ManagerRequestFactory.create_request(
            db_session, address="9 Elsewhere Rd, Shelbyville, IL 62565"
        )

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"approvalStatus": "approved"},
            headers=auth_headers(owner_user),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_tenant_cannot_approve(
        self, async_client: AsyncClient, db_session: AsyncSession, tenant_user: User
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"approvalStatus": "approved"},
            headers=auth_headers(tenant_user),
        )

        assert response.status_code == 403


class TestUnexpectedFailures:
    """Failures outside the workflow are server errors, not client errors."""

    @pytest.mark.asyncio
    async def test_database_failure_is_500(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User, email_sender, monkeypatch
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        async def failing_update(self, instance, changes):
            raise OperationalError("UPDATE manager_requests ...", {}, Exception("database is locked"))

        monkeypatch.setattr(ManagerRequestRepository, "update", failing_update)

        response = await async_client.patch(
            f"/manager-requests/{request.id}",
            json={"status": "working"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 500
        assert error_message(response) == "Database operation failed"
        assert email_sender.sent == []

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate_unchanged(
        self, db_session: AsyncSession, admin_user: User, email_sender, monkeypatch
    ):
        request = await ManagerRequestFactory.create_request(db_session)
        service = ManagerRequestService(db_session, NotificationService(email_sender))

        async def failing_update(instance, changes):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(service.request_repo, "update", failing_update)

        with pytest.raises(RuntimeError, match="connection reset"):
            await service.update_request(request.id, ManagerRequestUpdate(status="working"), admin_user)
