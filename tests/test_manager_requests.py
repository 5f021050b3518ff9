"""
API tests for manager request intake, listing and visibility.
"""

import io

import pytest
from httpx import AsyncClient
from PIL import Image
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.models.manager_request import ManagerRequest, RequestStatus
from property_portal.models.user import User
from tests.conftest import (
    OWNER_ADDRESS_LINE,
    ManagerRequestFactory,
    auth_headers,
    error_message,
)

OPERATOR_EMAIL = "operator@propertyportal.example"


def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), "red").save(buffer, format="PNG")
    return buffer.getvalue()


async def count_requests(db_session: AsyncSession) -> int:
    result = await db_session.execute(select(func.count()).select_from(ManagerRequest))
    return result.scalar_one()


class TestSubmitRequest:
    """Test POST /manager-requests."""

    @pytest.mark.asyncio
    async def test_submit_creates_pending_request(self, async_client: AsyncClient, email_sender):
        response = await async_client.post("/manager-requests", json=ManagerRequestFactory.create_request_data())

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Request submitted successfully"
        request = body["request"]
        assert request["fullname"] == "Jane Doe"
        assert request["status"] == "pending"
        assert request["conversationLog"] == []
        assert request["isDeleted"] is False
        assert request["projectDescription"] == "Leaky faucet"

        operator_mail = email_sender.sent_to(OPERATOR_EMAIL)
        assert len(operator_mail) == 1
        assert OWNER_ADDRESS_LINE in operator_mail[0]["subject"]

    @pytest.mark.asyncio
    async def test_missing_field_is_rejected_and_nothing_persisted(
        self, async_client: AsyncClient, db_session: AsyncSession, email_sender
    ):
        data = ManagerRequestFactory.create_request_data()
        del data["address"]

        response = await async_client.post("/manager-requests", json=data)

        assert response.status_code == 400
        fields = [detail["field"] for detail in response.json()["error"]["details"]]
        assert "address" in fields
        assert await count_requests(db_session) == 0
        assert email_sender.sent == []

    @pytest.mark.asyncio
    async def test_blank_field_is_rejected(self, async_client: AsyncClient, db_session: AsyncSession):
        response = await async_client.post(
            "/manager-requests", json=ManagerRequestFactory.create_request_data(message="   ")
        )

        assert response.status_code == 400
        assert await count_requests(db_session) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field,value", [
        ("email", "not-an-email"),
        ("phone", "12345"),
    ])
    async def test_invalid_contact_details(self, async_client: AsyncClient, field, value):
        response = await async_client.post(
            "/manager-requests", json=ManagerRequestFactory.create_request_data(**{field: value})
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_email_failure_does_not_fail_submission(
        self, async_client: AsyncClient, db_session: AsyncSession, email_sender
    ):
        email_sender.fail = True

        response = await async_client.post("/manager-requests", json=ManagerRequestFactory.create_request_data())

        assert response.status_code == 200
        assert await count_requests(db_session) == 1


class TestSubmitWithPhoto:
    """Test the multipart POST /manager-requests/submit."""

    @staticmethod
    def form_data(**overrides):
        data = ManagerRequestFactory.create_request_data()
        data.update(overrides)
        return data

    @pytest.mark.asyncio
    async def test_photo_is_uploaded_before_request_is_stored(self, async_client: AsyncClient, blob_storage):
        response = await async_client.post(
            "/manager-requests/submit",
            data=self.form_data(),
            files={"file": ("leak photo.png", png_bytes(), "image/png")},
        )

        assert response.status_code == 200
        request = response.json()["request"]
        assert len(blob_storage.blobs) == 1
        pathname = next(iter(blob_storage.blobs))
        assert pathname.startswith("problem-")
        assert pathname.endswith("-leakphoto.png")
        assert request["problemImageUrl"] == f"https://blob.example/{pathname}"

    @pytest.mark.asyncio
    async def test_submit_without_photo(self, async_client: AsyncClient, blob_storage):
        response = await async_client.post("/manager-requests/submit", data=self.form_data())

        assert response.status_code == 200
        assert response.json()["request"]["problemImageUrl"] is None
        assert blob_storage.blobs == {}

    @pytest.mark.asyncio
    async def test_invalid_form_uploads_nothing(
        self, async_client: AsyncClient, db_session: AsyncSession, blob_storage
    ):
        data = self.form_data()
        del data["fullname"]

        response = await async_client.post(
            "/manager-requests/submit",
            data=data,
            files={"file": ("leak.png", png_bytes(), "image/png")},
        )

        assert response.status_code == 400
        assert blob_storage.blobs == {}
        assert await count_requests(db_session) == 0

    @pytest.mark.asyncio
    async def test_upload_failure_stores_nothing(
        self, async_client: AsyncClient, db_session: AsyncSession, blob_storage
    ):
        blob_storage.fail = True

        response = await async_client.post(
            "/manager-requests/submit",
            data=self.form_data(),
            files={"file": ("leak.png", png_bytes(), "image/png")},
        )

        assert response.status_code == 500
        assert error_message(response) == "blob service unavailable"
        assert await count_requests(db_session) == 0


class TestListAndGet:
    """Role-scoped listing and single-request visibility."""

    @pytest.mark.asyncio
    async def test_listing_requires_authentication(self, async_client: AsyncClient):
        response = await async_client.get("/manager-requests")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_tenant_sees_only_own_requests(
        self, async_client: AsyncClient, db_session: AsyncSession, tenant_user: User
    ):
        own = await ManagerRequestFactory.create_request(db_session, email=tenant_user.email)
        await ManagerRequestFactory.create_request(db_session, email="someone@example.com")

        response = await async_client.get("/manager-requests", headers=auth_headers(tenant_user))

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [str(own.id)]

    @pytest.mark.asyncio
    async def test_owner_sees_requests_at_their_properties(
        self, async_client: AsyncClient, db_session: AsyncSession, owner_user: User
    ):
        at_property = await ManagerRequestFactory.create_request(db_session, email="a@example.com")
        await ManagerRequestFactory.create_request(
            db_session, email="b@example.com", address="9 Elsewhere Rd, Shelbyville, IL 62565"
        )

        response = await async_client.get("/manager-requests", headers=auth_headers(owner_user))

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [str(at_property.id)]

    @pytest.mark.asyncio
    async def test_admin_sees_everything_except_deleted(
        self, async_client: AsyncClient, db_session: AsyncSession, admin_user: User
    ):
        await ManagerRequestFactory.create_request(db_session, email="a@example.com")
        await ManagerRequestFactory.create_request(
            db_session, email="b@example.com", status=RequestStatus.WORKING
        )
        await ManagerRequestFactory.create_request(db_session, email="c@example.com", is_deleted=True)

        response = await async_client.get("/admin/manager-requests", headers=auth_headers(admin_user))
        assert response.status_code == 200
        assert len(response.json()["requests"]) == 2

        response = await async_client.get(
            "/admin/manager-requests",
            params={"status": "working"},
            headers=auth_headers(admin_user),
        )
        assert [r["email"] for r in response.json()["requests"]] == ["b@example.com"]

        response = await async_client.get(
            "/admin/manager-requests",
            params={"includeDeleted": "true"},
            headers=auth_headers(admin_user),
        )
        assert len(response.json()["requests"]) == 3

    @pytest.mark.asyncio
    async def test_admin_listing_rejects_unknown_status(self, async_client: AsyncClient, admin_user: User):
        response = await async_client.get(
            "/admin/manager-requests",
            params={"status": "done"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 400
        assert error_message(response) == "Invalid status provided"

    @pytest.mark.asyncio
    async def test_admin_listing_requires_admin(self, async_client: AsyncClient, tenant_user: User):
        response = await async_client.get("/admin/manager-requests", headers=auth_headers(tenant_user))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_get_other_users_request_is_forbidden(
        self, async_client: AsyncClient, db_session: AsyncSession, other_tenant: User
    ):
        request = await ManagerRequestFactory.create_request(db_session)

        response = await async_client.get(f"/manager-requests/{request.id}", headers=auth_headers(other_tenant))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_deleted_request_is_hidden_from_requester(
        self, async_client: AsyncClient, db_session: AsyncSession, tenant_user: User, admin_user: User
    ):
        request = await ManagerRequestFactory.create_request(db_session, is_deleted=True)

        response = await async_client.get(f"/manager-requests/{request.id}", headers=auth_headers(tenant_user))
        assert response.status_code == 404

        response = await async_client.get(f"/manager-requests/{request.id}", headers=auth_headers(admin_user))
        assert response.status_code == 200
        assert response.json()["isDeleted"] is True
