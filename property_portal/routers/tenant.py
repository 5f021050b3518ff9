"""
Tenant payment endpoints: the payment-setup wizard and payment history.
"""

from fastapi import APIRouter, Depends, status
from typing import List
from uuid import UUID

from property_portal.models.user import User
from property_portal.schemas.error import get_crud_error_responses, get_error_responses
from property_portal.schemas.payment import (
    AddCheckingAccountRequest,
    AddCheckingAccountResponse,
    AddCreditCardRequest,
    AddCreditCardResponse,
    AutoBankSetupResponse,
    BankAccountDetails,
    PaymentResponse,
    PaymentSetupStatus,
    SecurityDepositRequest,
    SecurityDepositResponse,
)
from property_portal.services.payment import PaymentService
from property_portal.utils.dependencies import get_current_user, get_payment_service


router = APIRouter(prefix="/tenant", tags=["Tenant Payments"])


@router.get(
    "/payment-setup/{application_id}",
    response_model=PaymentSetupStatus,
    status_code=status.HTTP_200_OK,
    summary="Payment setup progress",
    description="Flags, monthly rent and the wizard step to resume at.",
    responses=get_crud_error_responses()
)
async def get_payment_setup(
    application_id: UUID,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
) -> PaymentSetupStatus:
    return PaymentSetupStatus(**await service.get_setup_status(application_id, current_user))


@router.post(
    "/payment-setup/{application_id}/bank-account",
    response_model=AutoBankSetupResponse,
    status_code=status.HTTP_200_OK,
    summary="Add bank account and pay deposit",
    description=(
        "Capture the checking account, then charge the security deposit. "
        "A failed deposit returns step 1 with the processor's message; the account is kept, "
        "so the setup status then resumes at step 2."
    ),
    responses=get_crud_error_responses()
)
async def setup_bank_and_deposit(
    application_id: UUID,
    bank_details: BankAccountDetails,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
) -> AutoBankSetupResponse:
    result = await service.setup_bank_and_deposit(current_user, application_id, bank_details)
    return AutoBankSetupResponse(**result)


@router.post(
    "/add-checking-account",
    response_model=AddCheckingAccountResponse,
    status_code=status.HTTP_200_OK,
    summary="Add checking account",
    responses=get_crud_error_responses()
)
async def add_checking_account(
    account_data: AddCheckingAccountRequest,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
) -> AddCheckingAccountResponse:
    """
    Tokenize and attach a US checking account.

    An account that already exists is reported as success with ``alreadyExists``.
    """
    return AddCheckingAccountResponse(**await service.add_checking_account(current_user, account_data))


@router.post(
    "/security-deposit",
    response_model=SecurityDepositResponse,
    status_code=status.HTTP_200_OK,
    summary="Pay security deposit",
    description="Charges the application's monthly rent. A sent `amount` must equal it.",
    responses=get_crud_error_responses()
)
async def pay_security_deposit(
    deposit_data: SecurityDepositRequest,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
) -> SecurityDepositResponse:
    return SecurityDepositResponse(**await service.charge_security_deposit(current_user, deposit_data))


@router.post(
    "/add-credit-card",
    response_model=AddCreditCardResponse,
    status_code=status.HTTP_200_OK,
    summary="Add credit card",
    description="Accepts only a client-side card token.",
    responses=get_crud_error_responses()
)
async def add_credit_card(
    card_data: AddCreditCardRequest,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
) -> AddCreditCardResponse:
    return AddCreditCardResponse(**await service.add_credit_card(current_user, card_data))


@router.get(
    "/payments",
    response_model=List[PaymentResponse],
    status_code=status.HTTP_200_OK,
    summary="Payment history",
    responses=get_error_responses(401, 500)
)
async def list_my_payments(
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
) -> List[PaymentResponse]:
    payments = await service.list_payments_for_user(current_user)
    return [PaymentResponse.model_validate(p) for p in payments]
