"""
Payment processor endpoints: identity verification sessions and the signed webhook.
"""

from fastapi import APIRouter, Depends, Header, Request, status
from typing import Optional
import logging

from property_portal.models.user import User
from property_portal.schemas.error import get_error_responses
from property_portal.schemas.user import IdentityVerificationRequest, IdentityVerificationResponse
from property_portal.services.payment_gateway import PaymentGatewayError, StripeGateway
from property_portal.services.user_profile import UserProfileService
from property_portal.services.webhook import WebhookService
from property_portal.utils.dependencies import (
    get_current_user,
    get_payment_gateway,
    get_user_profile_service,
    get_webhook_service,
)
from property_portal.utils.exceptions import BadRequestError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stripe", tags=["Stripe"])


@router.post(
    "/verify-identity",
    response_model=IdentityVerificationResponse,
    status_code=status.HTTP_200_OK,
    summary="Start identity verification",
    description="Create a document verification session and return its client secret.",
    responses=get_error_responses(400, 401, 500)
)
async def verify_identity(
    verification_data: IdentityVerificationRequest,
    current_user: User = Depends(get_current_user),
    service: UserProfileService = Depends(get_user_profile_service)
) -> IdentityVerificationResponse:
    session = await service.start_identity_verification(current_user, verification_data.document_type)
    return IdentityVerificationResponse(
        client_secret=session["client_secret"],
        verification_session_id=session["id"],
        url=session.get("url"),
    )


@router.post(
    "/webhook",
    status_code=status.HTTP_200_OK,
    summary="Payment processor webhook",
    description="Signature-verified. Updates identity verification and payment status.",
    responses=get_error_responses(400, 500)
)
async def webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    gateway: StripeGateway = Depends(get_payment_gateway),
    service: WebhookService = Depends(get_webhook_service)
) -> dict:
    """
    Verify and apply a webhook event.

    Raises:
        BadRequestError: If the signature header is missing or invalid
    """
    if not stripe_signature:
        raise BadRequestError("Missing Stripe-Signature header")

    payload = await request.body()
    try:
        event = gateway.construct_event(payload, stripe_signature)
    except PaymentGatewayError as e:
        logger.warning(f"Rejected webhook: {e.message}")
        raise BadRequestError(e.message)

    handled = await service.handle(event)
    return {"received": True, "handled": handled}
