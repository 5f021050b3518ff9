"""
Tests for signup, login, Google sign-in, password reset and admin promotion.
"""

import re

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.models.user import OwnerVerificationStatus, User, UserRole
from property_portal.repositories.property_owner import PropertyOwnerRepository
from property_portal.repositories.user import UserRepository
from property_portal.services.payment_gateway import PaymentGatewayError
from tests.conftest import TEST_PASSWORD, VALID_GOOGLE_TOKEN, auth_headers, error_message

RESET_TOKEN_PATTERN = re.compile(r"reset-password\?token=([A-Za-z0-9_\-]+)")


class TestSignup:

    @pytest.mark.asyncio
    async def test_tenant_signup_creates_payment_customer(
        self, async_client: AsyncClient, db_session: AsyncSession, gateway
    ):
        response = await async_client.post("/signup", json={
            "name": "Jane Doe",
            "email": "Jane@Example.com",
            "password": "correct-horse-battery",
        })

        assert response.status_code == 201
        assert response.json()["message"] == "User created successfully"

        user = await UserRepository(db_session).get_by_email("jane@example.com")
        assert user is not None
        assert str(user.id) == response.json()["userId"]
        assert user.role == UserRole.USER
        assert user.stripe_customer_id == "cus_1"
        assert user.verify_password("correct-horse-battery")

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, async_client: AsyncClient, tenant_user: User):
        response = await async_client.post("/signup", json={
            "name": "Another Jane",
            "email": tenant_user.email,
            "password": "correct-horse-battery",
        })

        assert response.status_code == 409
        assert error_message(response) == "User with this email already exists"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["name", "email", "password"])
    async def test_required_fields(self, async_client: AsyncClient, missing):
        data = {"name": "Jane Doe", "email": "jane@example.com", "password": "correct-horse-battery"}
        del data[missing]

        response = await async_client.post("/signup", json=data)

        assert response.status_code == 400
        assert error_message(response) == "Name, email, and password are required"

    @pytest.mark.asyncio
    async def test_short_password(self, async_client: AsyncClient):
        response = await async_client.post("/signup", json={
            "name": "Jane Doe",
            "email": "jane@example.com",
            "password": "short",
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_signup_survives_payment_processor_outage(
        self, async_client: AsyncClient, db_session: AsyncSession, gateway
    ):
        gateway.customer_error = PaymentGatewayError("Stripe is unavailable")

        response = await async_client.post("/signup", json={
            "name": "Jane Doe",
            "email": "jane@example.com",
            "password": "correct-horse-battery",
        })

        assert response.status_code == 201
        user = await UserRepository(db_session).get_by_email("jane@example.com")
        assert user.stripe_customer_id is None

    @pytest.mark.asyncio
    async def test_property_owner_signup_joins_owner_record(
        self, async_client: AsyncClient, db_session: AsyncSession, gateway
    ):
        response = await async_client.post("/signup", json={
            "name": "Olivia Owner",
            "email": "olivia@example.com",
            "password": "correct-horse-battery",
            "userType": "property-owner",
            "ownerName": "Acme Rentals",
        })

        assert response.status_code == 201
        owner = await PropertyOwnerRepository(db_session).get_by_name("Acme Rentals")
        assert owner is not None
        [member] = owner.users
        assert member["email"] == "olivia@example.com"
        assert member["userType"] == "property-owner"
        assert member["id"] and member["createdAt"]
        assert gateway.customers == []
        user = await UserRepository(db_session).get_by_email("olivia@example.com")
        assert user.owner_verification_status == OwnerVerificationStatus.PENDING


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_session_token(self, async_client: AsyncClient, tenant_user: User):
        response = await async_client.post("/auth/login", json={
            "email": tenant_user.email,
            "password": TEST_PASSWORD,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["tokenType"] == "bearer"
        assert body["expiresIn"] > 0
        assert body["user"]["email"] == tenant_user.email

        me = await async_client.get("/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
        assert me.status_code == 200
        assert me.json()["id"] == str(tenant_user.id)

    @pytest.mark.asyncio
    async def test_wrong_password(self, async_client: AsyncClient, tenant_user: User):
        response = await async_client.post("/auth/login", json={
            "email": tenant_user.email,
            "password": "wrong-password",
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_requires_token(self, async_client: AsyncClient):
        assert (await async_client.get("/auth/me")).status_code == 401

        response = await async_client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_google_sign_in_creates_tenant(
        self, async_client: AsyncClient, db_session: AsyncSession
    ):
        response = await async_client.post("/auth/google", json={"idToken": VALID_GOOGLE_TOKEN})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "gina@example.com"
        user = await UserRepository(db_session).get_by_email("gina@example.com")
        assert user.hashed_password is None

        response = await async_client.post("/auth/login", json={
            "email": "gina@example.com",
            "password": "anything-at-all",
        })
        assert response.status_code == 401
        assert "Google" in error_message(response)

    @pytest.mark.asyncio
    async def test_google_sign_in_rejects_bad_token(self, async_client: AsyncClient):
        response = await async_client.post("/auth/google", json={"idToken": "forged"})
        assert response.status_code == 401


class TestPasswordReset:

    @pytest.mark.asyncio
    async def test_reset_flow(self, async_client: AsyncClient, tenant_user: User, email_sender):
        response = await async_client.post("/auth/forgot-password", json={"email": tenant_user.email})
        assert response.status_code == 200

        [mail] = email_sender.sent_to(tenant_user.email)
        token = RESET_TOKEN_PATTERN.search(mail["html"]).group(1)

        response = await async_client.post("/auth/reset-password", json={
            "token": token,
            "password": "a-brand-new-password",
        })
        assert response.status_code == 200
        assert response.json()["message"] == "Password has been reset successfully"

        login = await async_client.post("/auth/login", json={
            "email": tenant_user.email,
            "password": "a-brand-new-password",
        })
        assert login.status_code == 200

        reused = await async_client.post("/auth/reset-password", json={
            "token": token,
            "password": "yet-another-password",
        })
        assert reused.status_code == 400
        assert error_message(reused) == "Invalid or expired reset token"

    @pytest.mark.asyncio
    async def test_unknown_email_gets_same_response(self, async_client: AsyncClient, email_sender):
        response = await async_client.post("/auth/forgot-password", json={"email": "nobody@example.com"})

        assert response.status_code == 200
        assert email_sender.sent == []


class TestPromoteUser:

    @pytest.mark.asyncio
    async def test_promote_with_admin_key(self, async_client: AsyncClient, tenant_user: User):
        response = await async_client.post("/admin/promote-user", json={
            "email": tenant_user.email,
            "adminKey": "test-admin-key",
        })

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

        response = await async_client.get("/admin/manager-requests", headers=auth_headers(tenant_user))
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_admin_key(self, async_client: AsyncClient, tenant_user: User):
        response = await async_client.post("/admin/promote-user", json={
            "email": tenant_user.email,
            "adminKey": "guess",
        })

        assert response.status_code == 403
        assert error_message(response) == "Invalid admin key"

    @pytest.mark.asyncio
    async def test_unknown_user(self, async_client: AsyncClient):
        response = await async_client.post("/admin/promote-user", json={
            "email": "nobody@example.com",
            "adminKey": "test-admin-key",
        })

        assert response.status_code == 404
