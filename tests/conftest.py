"""
Test configuration and fixtures for the property portal API.
Provides an in-memory database per test, fake third-party clients, and test data factories.
"""

import os
import tempfile

# Settings are read once at import time, so configure them before the app loads
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "testing"
os.environ["BLOB_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="property-portal-uploads-")
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["ADMIN_SETUP_KEY"] = "test-admin-key"
os.environ["OPERATOR_EMAIL"] = "operator@propertyportal.example"

import json
import uuid
from datetime import datetime, timedelta
from typing import Any, AsyncGenerator, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import property_portal.models  # noqa: F401
from property_portal.database import Base, get_db, utcnow
from property_portal.main import app
from property_portal.models.manager_request import ManagerRequest, RequestStatus
from property_portal.models.property_owner import PropertyOwner
from property_portal.models.rental_application import ApplicationStatus, RentalApplication
from property_portal.models.user import User, UserRole, UserType
from property_portal.repositories.manager_request import ManagerRequestRepository
from property_portal.repositories.property_owner import PropertyOwnerRepository
from property_portal.repositories.rental_application import RentalApplicationRepository
from property_portal.repositories.user import UserRepository
from property_portal.services.blob_storage import BlobStorage, BlobStorageError
from property_portal.services.email_service import EmailDeliveryError
from property_portal.services.google_oauth import GoogleIdentity, OAuthVerificationError
from property_portal.services.payment_gateway import ChargeResult, PaymentGatewayError, WebhookEvent
from property_portal.services.property_owner import embedded_entry
from property_portal.utils.auth import create_access_token
from property_portal.utils.dependencies import (
    get_blob_storage,
    get_email_sender,
    get_google_verifier,
    get_payment_gateway,
)

TEST_PASSWORD = "testpassword123"
OWNER_NAME = "Acme Rentals"
OWNER_ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip": "62701"}
OWNER_ADDRESS_LINE = "1 Main St, Springfield, IL 62701"
VALID_WEBHOOK_SIGNATURE = "t=1,v1=valid"
VALID_GOOGLE_TOKEN = "valid-google-id-token"


# Fake third-party clients

class FakeGateway:
    """In-memory stand-in for StripeGateway."""

    def __init__(self):
        self.customers: List[Dict[str, Any]] = []
        self.bank_accounts: Dict[str, str] = {}
        self.charges: List[Dict[str, Any]] = []
        self.cards: List[str] = []
        self.sessions: List[Dict[str, Any]] = []
        self.customer_error: Optional[PaymentGatewayError] = None
        self.bank_error: Optional[PaymentGatewayError] = None
        self.charge_error: Optional[PaymentGatewayError] = None
        self.charge_status = "succeeded"

    async def create_customer(self, email: str, name: str, metadata: Optional[Dict[str, str]] = None) -> str:
        if self.customer_error:
            raise self.customer_error
        customer_id = f"cus_{len(self.customers) + 1}"
        self.customers.append({"id": customer_id, "email": email, "name": name, "metadata": metadata or {}})
        return customer_id

    async def add_bank_account(self, customer_id, routing_number, account_number, account_holder_name,
                               account_holder_type="individual") -> str:
        if self.bank_error:
            raise self.bank_error
        source_id = f"ba_{len(self.bank_accounts) + 1}"
        self.bank_accounts[customer_id] = source_id
        return source_id

    async def find_bank_account(self, customer_id: str) -> Optional[str]:
        return self.bank_accounts.get(customer_id)

    async def charge_bank_account(self, customer_id, source_id, amount_cents, description, metadata) -> ChargeResult:
        if self.charge_error:
            raise self.charge_error
        charge = ChargeResult(id=f"py_{len(self.charges) + 1}", status=self.charge_status)
        self.charges.append({
            "id": charge.id,
            "customer": customer_id,
            "source": source_id,
            "amount": amount_cents,
            "description": description,
            "metadata": metadata,
        })
        return charge

    async def add_card(self, customer_id: str, token_id: str) -> str:
        self.cards.append(token_id)
        return f"pm_card_{len(self.cards)}"

    async def create_verification_session(self, user_id: str, document_type: str, return_url: str) -> Dict[str, str]:
        session = {"id": f"vs_{len(self.sessions) + 1}", "client_secret": "vs_secret", "url": "https://verify.example/vs"}
        self.sessions.append({**session, "user_id": user_id, "document_type": document_type, "return_url": return_url})
        return session

    def construct_event(self, payload: bytes, signature: str) -> WebhookEvent:
        if signature != VALID_WEBHOOK_SIGNATURE:
            raise PaymentGatewayError("Webhook signature verification failed: No signatures found matching the expected signature")
        event = json.loads(payload)
        return WebhookEvent(type=event["type"], data=event["data"]["object"])


class FakeEmailSender:
    """Records outgoing email instead of calling SendGrid."""

    def __init__(self):
        self.sent: List[Dict[str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str, reply_to: Optional[str] = None) -> None:
        if self.fail:
            raise EmailDeliveryError("SendGrid returned status 503")
        self.sent.append({"to": to, "subject": subject, "html": html})

    def sent_to(self, address: str) -> List[Dict[str, str]]:
        return [mail for mail in self.sent if mail["to"] == address]


class FakeBlobStorage(BlobStorage):

    def __init__(self):
        self.blobs: Dict[str, Dict[str, Any]] = {}
        self.fail = False

    async def put(self, pathname: str, content: bytes, content_type: str) -> str:
        if self.fail:
            raise BlobStorageError("blob service unavailable")
        self.blobs[pathname] = {"content": content, "content_type": content_type}
        return f"https://blob.example/{pathname}"


class FakeGoogleVerifier:

    async def verify(self, id_token: str) -> GoogleIdentity:
        if id_token != VALID_GOOGLE_TOKEN:
            raise OAuthVerificationError("Invalid Google ID token")
        return GoogleIdentity(email="gina@example.com", name="Gina Google", subject="google-sub-1")


# Database fixtures

@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def blob_storage() -> FakeBlobStorage:
    return FakeBlobStorage()


@pytest.fixture
async def async_client(
    db_session: AsyncSession,
    gateway: FakeGateway,
    email_sender: FakeEmailSender,
    blob_storage: FakeBlobStorage,
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with the database session and third-party clients overridden."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage
    app.dependency_overrides[get_google_verifier] = lambda: FakeGoogleVerifier()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Test data factories

class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        db_session: AsyncSession,
        email: Optional[str] = None,
        name: str = "Test User",
        password: Optional[str] = TEST_PASSWORD,
        role: UserRole = UserRole.USER,
        user_type: UserType = UserType.TENANT,
        owner_name: Optional[str] = None,
        **extra: Any,
    ) -> User:
        """Create a test user in the database."""
        return await UserRepository(db_session).create({
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "hashed_password": User.hash_password(password) if password else None,
            "name": name,
            "role": role,
            "user_type": user_type,
            "owner_name": owner_name,
            "verification_documents": [],
            **extra,
        })


class ManagerRequestFactory:
    """Factory for creating test manager requests."""

    @staticmethod
    def create_request_data(**overrides: Any) -> Dict[str, Any]:
        data = {
            "fullname": "Jane Doe",
            "email": "jane@example.com",
            "phone": "555-123-4567",
            "address": OWNER_ADDRESS_LINE,
            "projectDescription": "Leaky faucet",
            "message": "Kitchen sink drips constantly",
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_request(
        db_session: AsyncSession,
        email: str = "jane@example.com",
        address: str = OWNER_ADDRESS_LINE,
        status: RequestStatus = RequestStatus.PENDING,
        **extra: Any,
    ) -> ManagerRequest:
        return await ManagerRequestRepository(db_session).create({
            "fullname": "Jane Doe",
            "email": email,
            "phone": "555-123-4567",
            "address": address,
            "project_description": "Leaky faucet",
            "message": "Kitchen sink drips constantly",
            "status": status,
            "conversation_log": [],
            **extra,
        })


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def cron_headers(secret: str = "test-cron-secret") -> Dict[str, str]:
    return {"Authorization": f"Bearer {secret}"}


def error_message(response) -> str:
    return response.json()["error"]["message"]


# User and record fixtures

@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(
        db_session, email="admin@example.com", name="Ada Admin", role=UserRole.ADMIN, user_type=UserType.MANAGER
    )


@pytest.fixture
async def tenant_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="jane@example.com", name="Jane Doe")


@pytest.fixture
async def other_tenant(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="sam@example.com", name="Sam Smith")


@pytest.fixture
async def property_owner(db_session: AsyncSession) -> PropertyOwner:
    """Owner record with one property at OWNER_ADDRESS."""
    return await PropertyOwnerRepository(db_session).create({
        "name": OWNER_NAME,
        "email": "olivia@example.com",
        "phone": "555-000-1111",
        "properties": [embedded_entry({
            "name": "Maple Duplex A",
            "type": "residential",
            "sqft": 1200,
            "description": "Two bedroom duplex",
            "rent": 1500.0,
            "extraAdult": 0.0,
            "amenities": "Parking",
            "status": "available",
            "picture": None,
            "address": OWNER_ADDRESS,
        })],
        "users": [],
    })


@pytest.fixture
async def owner_user(db_session: AsyncSession, property_owner: PropertyOwner) -> User:
    return await UserFactory.create_user(
        db_session,
        email="olivia@example.com",
        name="Olivia Owner",
        user_type=UserType.PROPERTY_OWNER,
        owner_name=OWNER_NAME,
    )


@pytest.fixture
async def rental_application(db_session: AsyncSession, tenant_user: User) -> RentalApplication:
    """Approved application for the tenant with the monthly rent set."""
    return await RentalApplicationRepository(db_session).create({
        "listing_name": "Maple Duplex A",
        "listing_type": "residential",
        "user_email": tenant_user.email,
        "user_name": tenant_user.name,
        "user_phone": "555-123-4567",
        "status": ApplicationStatus.APPROVED,
        "monthly_rent": 1500,
    })


def days_ago(days: int, now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) - timedelta(days=days)
