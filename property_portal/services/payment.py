"""
Payment service: the tenant payment-setup wizard (bank account, security
deposit, credit card), the payment ledger and the maintenance bills raised
against property owners.

Wizard progress is persisted as flags on the rental application; the step
shown to the tenant is derived from those flags by PaymentSetupMachine.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Dict, Any, Tuple
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.database import utcnow
from property_portal.models.payment import Payment, PaymentMethod, PaymentStatus, PaymentType
from property_portal.models.payment_request import PaymentRequest, PaymentRequestStatus
from property_portal.models.rental_application import RentalApplication
from property_portal.models.user import User
from property_portal.repositories.payment import PaymentRepository
from property_portal.repositories.payment_request import PaymentRequestRepository
from property_portal.repositories.rental_application import RentalApplicationRepository
from property_portal.repositories.user import UserRepository
from property_portal.schemas.payment import (
    AddCheckingAccountRequest,
    AddCreditCardRequest,
    BankAccountDetails,
    SecurityDepositRequest,
)
from property_portal.services.payment_gateway import ChargeResult, PaymentGatewayError, StripeGateway
from property_portal.services.workflow import PaymentSetupEvent, PaymentSetupMachine, PaymentSetupStep
from property_portal.utils.exceptions import (
    InsufficientPermissionsError,
    RentalApplicationNotFoundError,
    UpstreamServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_cents(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentService:
    """
    Tenant payment setup and payment history.

    Processor failures abort the current step and surface as
    UpstreamServiceError with the processor's message. Nothing is retried.
    """

    def __init__(self, db_session: AsyncSession, gateway: StripeGateway):
        self.db = db_session
        self.gateway = gateway
        self.user_repo = UserRepository(db_session)
        self.application_repo = RentalApplicationRepository(db_session)
        self.payment_repo = PaymentRepository(db_session)
        self.bill_repo = PaymentRequestRepository(db_session)
        self.machine = PaymentSetupMachine()

    # Helpers

    async def _get_application(self, application_id: uuid.UUID, user: User) -> RentalApplication:
        application = await self.application_repo.get_by_id(application_id)
        if not application:
            raise RentalApplicationNotFoundError(str(application_id))
        if not user.is_admin and application.user_email.lower() != user.email.lower():
            raise InsufficientPermissionsError("access this application")
        return application

    def current_step(self, application: RentalApplication) -> PaymentSetupStep:
        return self.machine.resume_step(
            application.has_checking_account,
            application.security_deposit_paid,
            application.has_credit_card,
        )

    @staticmethod
    def _deposit_amount(application: RentalApplication) -> Decimal:
        if application.monthly_rent is None:
            raise ValidationError("Monthly rent has not been set for this application")
        return Decimal(application.monthly_rent)

    async def _ensure_customer(self, user: User) -> str:
        """Payment-customer id for the user, creating the customer if signup did not."""
        if user.stripe_customer_id:
            return user.stripe_customer_id
        try:
            customer_id = await self.gateway.create_customer(
                user.email, user.name, metadata={"user_id": str(user.id)}
            )
        except PaymentGatewayError as e:
            raise UpstreamServiceError("stripe", e.message)
        await self.user_repo.update(user, {"stripe_customer_id": customer_id})
        logger.info(f"Created payment customer {customer_id} for {user.email}")
        return customer_id

    # Wizard

    async def get_setup_status(self, application_id: uuid.UUID, user: User) -> Dict[str, Any]:
        application = await self._get_application(application_id, user)
        step = self.current_step(application)
        return {
            "application_id": application.id,
            "listing_name": application.listing_name,
            "monthly_rent": float(application.monthly_rent) if application.monthly_rent is not None else None,
            "has_checking_account": application.has_checking_account,
            "security_deposit_paid": application.security_deposit_paid,
            "has_credit_card": application.has_credit_card,
            "step": int(step),
            "complete": step == PaymentSetupStep.COMPLETE,
        }

    async def _capture_bank(
        self,
        user: User,
        application: RentalApplication,
        details: BankAccountDetails,
    ) -> Tuple[str, bool]:
        """
        Attach the checking account and record it on the user and application.

        Returns:
            (ACH payment-method id, whether it already existed)
        """
        existing = application.ach_payment_method_id or user.ach_payment_method_id
        already_exists = False

        if existing:
            method_id, already_exists = existing, True
        else:
            customer_id = await self._ensure_customer(user)
            try:
                method_id = await self.gateway.add_bank_account(
                    customer_id,
                    details.routing_number,
                    details.account_number,
                    details.account_holder_name,
                    details.account_type,
                )
            except PaymentGatewayError as e:
                if not e.already_exists:
                    raise UpstreamServiceError("stripe", e.message)
                try:
                    method_id = await self.gateway.find_bank_account(customer_id)
                except PaymentGatewayError as lookup_error:
                    raise UpstreamServiceError("stripe", lookup_error.message)
                if not method_id:
                    raise UpstreamServiceError("stripe", e.message)
                already_exists = True

        await self.user_repo.update(user, {"ach_payment_method_id": method_id, "has_checking_account": True})
        await self.application_repo.update(application, {
            "ach_payment_method_id": method_id,
            "has_checking_account": True,
        })
        logger.info(
            f"Checking account {'already on file' if already_exists else 'added'} "
            f"for {user.email} (application {application.id})"
        )
        return method_id, already_exists

    async def add_checking_account(self, user: User, data: AddCheckingAccountRequest) -> Dict[str, Any]:
        """
        Wizard step 1.

        An account the processor or the portal already knows about is
        reported as success with ``already_exists``.
        """
        application = await self._get_application(data.application_id, user)
        current = self.current_step(application)

        method_id, already_exists = await self._capture_bank(user, application, data)

        step = current
        if current == PaymentSetupStep.BANK:
            event = PaymentSetupEvent.BANK_ALREADY_EXISTS if already_exists else PaymentSetupEvent.BANK_CAPTURED
            step = self.machine.next_step(current, event)

        return {
            "message": "Checking account added successfully",
            "ach_payment_method_id": method_id,
            "already_exists": already_exists,
            "step": int(step),
        }

    async def _charge_deposit(
        self,
        user: User,
        application: RentalApplication,
        source_id: Optional[str],
    ) -> Tuple[ChargeResult, Payment]:
        """Charge one month's rent as the deposit. The rent itself is never changed here."""
        # Validates the wizard position before anything is charged
        self.machine.next_step(self.current_step(application), PaymentSetupEvent.DEPOSIT_CHARGED)

        amount = self._deposit_amount(application)

        source_id = source_id or application.ach_payment_method_id or user.ach_payment_method_id
        if not source_id:
            raise ValidationError("Add a checking account before paying the security deposit")

        customer_id = await self._ensure_customer(user)
        try:
            charge = await self.gateway.charge_bank_account(
                customer_id,
                source_id,
                to_cents(amount),
                description=f"Security deposit for {application.listing_name}",
                metadata={
                    "user_id": str(user.id),
                    "application_id": str(application.id),
                    "type": PaymentType.SECURITY_DEPOSIT.value,
                },
            )
        except PaymentGatewayError as e:
            logger.error(f"Security deposit charge failed for {user.email}: {e.message}")
            raise UpstreamServiceError("stripe", e.message)

        now = utcnow()
        status = PaymentStatus.PAID if charge.succeeded else PaymentStatus.PENDING
        payment = await self.payment_repo.create({
            "user_id": user.id,
            "user_email": user.email,
            "rental_application_id": application.id,
            "property_id": application.property_id,
            "property_name": application.listing_name,
            "type": PaymentType.SECURITY_DEPOSIT,
            "amount": amount,
            "status": status,
            "payment_method": PaymentMethod.ACH,
            "stripe_payment_intent_id": charge.id,
            "due_date": now,
            "paid_date": now if status == PaymentStatus.PAID else None,
            "description": f"Security deposit for {application.listing_name}",
        })

        await self.application_repo.update(application, {
            "security_deposit_paid": True,
            "security_deposit_amount": amount,
            "security_deposit_charge_id": charge.id,
        })
        await self.user_repo.update(user, {
            "security_deposit_paid": True,
            "security_deposit_amount": amount,
            "security_deposit_paid_at": now,
        })
        logger.info(f"Security deposit {charge.id} ({charge.status}) charged for {user.email}")
        return charge, payment

    async def charge_security_deposit(self, user: User, data: SecurityDepositRequest) -> Dict[str, Any]:
        """
        Wizard step 2: charge the deposit through the stored ACH method.

        The deposit is the application's monthly rent. A client-supplied
        amount is only accepted as a confirmation of that figure.

        Raises:
            ValidationError: If the rent is unset or the amount differs from it
        """
        application = await self._get_application(data.application_id, user)
        rent = self._deposit_amount(application)
        if data.amount is not None and to_cents(data.amount) != to_cents(rent):
            raise ValidationError(
                f"Security deposit must equal the monthly rent of ${rent:.2f}",
                field_errors=[{"field": "amount", "message": "does not match the monthly rent"}],
            )

        charge, payment = await self._charge_deposit(user, application, data.payment_method_id)
        return {
            "message": "Security deposit processed successfully",
            "charge_id": charge.id,
            "status": payment.status.value,
            "payment_record_id": payment.id,
            "step": int(self.current_step(application)),
        }

    async def add_credit_card(self, user: User, data: AddCreditCardRequest) -> Dict[str, Any]:
        """Wizard step 3: attach a card from a client-side token and make it the default."""
        application = await self._get_application(data.application_id, user)
        current = self.current_step(application)
        step = self.machine.next_step(current, PaymentSetupEvent.CARD_CAPTURED)

        customer_id = await self._ensure_customer(user)
        try:
            card_id = await self.gateway.add_card(customer_id, data.token_id)
        except PaymentGatewayError as e:
            raise UpstreamServiceError("stripe", e.message)

        await self.user_repo.update(user, {"card_payment_method_id": card_id, "has_credit_card": True})
        await self.application_repo.update(application, {"has_credit_card": True})
        logger.info(f"Credit card added for {user.email} (application {application.id})")

        return {
            "message": "Credit card added successfully",
            "card_payment_method_id": card_id,
            "step": int(step),
        }

    async def setup_bank_and_deposit(
        self,
        user: User,
        application_id: uuid.UUID,
        details: BankAccountDetails,
    ) -> Dict[str, Any]:
        """
        Capture the bank account, then charge the deposit (the application's
        monthly rent) right away.

        A failed deposit sends the tenant back to the bank step with the
        processor's message, so the response reports step 1. The captured
        account is kept, so a later ``get_setup_status`` resumes at step 2
        and the tenant retries only the deposit.
        """
        application = await self._get_application(application_id, user)
        self._deposit_amount(application)

        current = self.current_step(application)
        method_id, already_exists = await self._capture_bank(user, application, details)
        if current == PaymentSetupStep.BANK:
            event = PaymentSetupEvent.BANK_ALREADY_EXISTS if already_exists else PaymentSetupEvent.BANK_CAPTURED
            current = self.machine.next_step(current, event)

        result = {
            "ach_payment_method_id": method_id,
            "already_exists": already_exists,
            "deposit_charged": False,
            "charge_id": None,
        }

        if current != PaymentSetupStep.DEPOSIT:
            return {**result, "step": int(current), "message": "Checking account added successfully"}

        try:
            charge, _ = await self._charge_deposit(user, application, method_id)
        except UpstreamServiceError as e:
            step = self.machine.next_step(current, PaymentSetupEvent.DEPOSIT_FAILED)
            return {**result, "step": int(step), "message": e.detail}

        step = self.machine.next_step(current, PaymentSetupEvent.DEPOSIT_CHARGED)
        return {
            **result,
            "step": int(step),
            "deposit_charged": True,
            "charge_id": charge.id,
            "message": "Security deposit processed successfully",
        }

    # Ledger

    async def list_payments_for_user(self, user: User) -> List[Payment]:
        return await self.payment_repo.list_for_email(user.email)

    async def list_all_payments(self, status: Optional[PaymentStatus] = None) -> List[Payment]:
        return await self.payment_repo.list_all(status)

    async def list_payment_requests(
        self,
        status: Optional[PaymentRequestStatus] = None,
        owner_email: Optional[str] = None,
    ) -> List[PaymentRequest]:
        """Maintenance bills raised against property owners."""
        return await self.bill_repo.list_filtered(status, owner_email)
