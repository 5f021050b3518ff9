"""
Payment processor gateway wrapping the Stripe SDK.

The Stripe client is synchronous, so every call runs in a worker thread via
asyncio.to_thread. Stripe errors are re-raised as PaymentGatewayError carrying
the processor's own message.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import stripe

logger = logging.getLogger(__name__)

# Stripe test bank account that verifies instantly
TEST_ROUTING_NUMBER = "110000000"
TEST_ACCOUNT_NUMBER = "000123456789"
TEST_VERIFICATION_AMOUNTS = [32, 45]


class PaymentGatewayError(Exception):
    """A processor call failed. ``message`` is safe to show to the caller."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def already_exists(self) -> bool:
        """Processor reports the bank account is already attached."""
        return self.code == "bank_account_exists" or "already exists" in self.message.lower()


@dataclass(frozen=True)
class ChargeResult:
    id: str
    status: str

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@dataclass(frozen=True)
class WebhookEvent:
    type: str
    data: Dict[str, Any]


class StripeGateway:
    """Async facade over the handful of Stripe calls the portal uses."""

    def __init__(self, api_key: str, webhook_secret: str = "") -> None:
        self._api_key = api_key
        self._webhook_secret = webhook_secret

    async def _call(self, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, api_key=self._api_key, **kwargs)
        except stripe.StripeError as e:
            message = e.user_message or str(e) or "Payment processor error"
            logger.error("Stripe call %s failed: %s", getattr(fn, "__qualname__", fn), message)
            raise PaymentGatewayError(message, code=e.code) from e

    async def create_customer(self, email: str, name: str, metadata: Optional[Dict[str, str]] = None) -> str:
        customer = await self._call(stripe.Customer.create, email=email, name=name, metadata=metadata or {})
        return customer["id"]

    async def add_bank_account(
        self,
        customer_id: str,
        routing_number: str,
        account_number: str,
        account_holder_name: str,
        account_holder_type: str = "individual",
    ) -> str:
        """
        Tokenize a US checking account, attach it to the customer and return the source id.

        The Stripe test account is verified with the fixed micro-deposit amounts.
        """
        token = await self._call(
            stripe.Token.create,
            bank_account={
                "country": "US",
                "currency": "usd",
                "account_holder_name": account_holder_name,
                "account_holder_type": account_holder_type,
                "routing_number": routing_number,
                "account_number": account_number,
            },
        )
        source = await self._call(stripe.Customer.create_source, customer_id, source=token["id"])

        if routing_number == TEST_ROUTING_NUMBER and account_number == TEST_ACCOUNT_NUMBER:
            await self._call(
                stripe.Customer.verify_source,
                customer_id,
                source["id"],
                amounts=TEST_VERIFICATION_AMOUNTS,
            )

        return source["id"]

    async def find_bank_account(self, customer_id: str) -> Optional[str]:
        """Id of a bank account already attached to the customer, if any."""
        sources = await self._call(stripe.Customer.list_sources, customer_id, object="bank_account", limit=1)
        data = sources.get("data") or []
        return data[0]["id"] if data else None

    async def charge_bank_account(
        self,
        customer_id: str,
        source_id: str,
        amount_cents: int,
        description: str,
        metadata: Dict[str, str],
    ) -> ChargeResult:
        charge = await self._call(
            stripe.Charge.create,
            amount=amount_cents,
            currency="usd",
            customer=customer_id,
            source=source_id,
            description=description,
            metadata=metadata,
        )
        return ChargeResult(id=charge["id"], status=charge["status"])

    async def add_card(self, customer_id: str, token_id: str) -> str:
        """Create a card payment method from a client-side token and make it the default."""
        payment_method = await self._call(stripe.PaymentMethod.create, type="card", card={"token": token_id})
        await self._call(stripe.PaymentMethod.attach, payment_method["id"], customer=customer_id)
        await self._call(
            stripe.Customer.modify,
            customer_id,
            invoice_settings={"default_payment_method": payment_method["id"]},
        )
        return payment_method["id"]

    async def create_verification_session(self, user_id: str, document_type: str, return_url: str) -> Dict[str, str]:
        session = await self._call(
            stripe.identity.VerificationSession.create,
            type="document",
            metadata={"user_id": user_id},
            options={"document": {"allowed_types": [document_type], "require_matching_selfie": True}},
            return_url=return_url,
        )
        return {"id": session["id"], "client_secret": session["client_secret"], "url": session.get("url")}

    def construct_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """
        Verify a webhook signature and parse the event.

        Raises:
            PaymentGatewayError: If the signature or payload is invalid
        """
        try:
            event = stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise PaymentGatewayError(f"Webhook signature verification failed: {e}") from e
        return WebhookEvent(type=event["type"], data=event["data"]["object"])
