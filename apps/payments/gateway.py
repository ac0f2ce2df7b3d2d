"""
Payment gateway adapters.

Wrap the Stripe and Razorpay SDK calls the payment services need and
convert amounts between decimal currency units and the providers' minor
units (cents, paise). SDK failures surface as ``GatewayError``, bad
webhook or checkout signatures as ``InvalidSignatureError``.
"""

from __future__ import annotations

import json
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import razorpay  # type: ignore
import requests  # type: ignore
import stripe  # type: ignore
from django.conf import settings  # type: ignore
from django.core.exceptions import ImproperlyConfigured  # type: ignore
from razorpay import errors as razorpay_errors  # type: ignore

from shared.domain.errors import GatewayError, InvalidSignatureError

logger = logging.getLogger(__name__)

MINOR_UNITS = Decimal("100")

RAZORPAY_ERRORS = (
    razorpay_errors.BadRequestError,
    razorpay_errors.GatewayError,
    razorpay_errors.ServerError,
    requests.RequestException,
)


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * MINOR_UNITS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(value: int) -> Decimal:
    return (Decimal(value) / MINOR_UNITS).quantize(Decimal("0.01"))


class StripeGateway:
    provider = "stripe"

    def __init__(self, api_key: str | None = None, webhook_secret: str | None = None) -> None:
        self.api_key = api_key if api_key is not None else settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET

    def create_intent(
        self,
        amount: Decimal,
        currency: str,
        metadata: dict[str, str],
        description: str = "",
    ) -> dict[str, Any]:
        try:
            intent = stripe.PaymentIntent.create(
                amount=to_minor_units(amount),
                currency=currency,
                metadata=metadata,
                description=description,
                automatic_payment_methods={"enabled": True},
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe PaymentIntent.create failed: %s", exc)
            raise GatewayError("Could not create payment with the provider") from exc
        return {"id": intent.id, "client_secret": intent.client_secret, "status": intent.status}

    def retrieve_intent(self, intent_id: str) -> dict[str, Any]:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            logger.error("Stripe PaymentIntent.retrieve(%s) failed: %s", intent_id, exc)
            raise GatewayError("Could not verify payment with the provider") from exc
        return {
            "id": intent.id,
            "status": intent.status,
            "amount": from_minor_units(intent.amount),
            "latest_charge": getattr(intent, "latest_charge", None) or "",
        }

    def refund(
        self,
        intent_id: str,
        amount: Decimal | None = None,
        metadata: dict[str, str] | None = None,
        payment_id: str | None = None,
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"payment_intent": intent_id, "metadata": metadata or {}}
        if amount is not None:
            params["amount"] = to_minor_units(amount)
        if idempotency_key:
            params["idempotency_key"] = idempotency_key
        try:
            refund = stripe.Refund.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            logger.error("Stripe Refund.create for %s failed: %s", intent_id, exc)
            raise GatewayError("Could not refund payment with the provider") from exc
        return {"id": refund.id, "amount": from_minor_units(refund.amount), "status": refund.status}

    def parse_webhook(self, payload: bytes, signature: str) -> dict[str, Any]:
        """Verify the ``Stripe-Signature`` header and return the event as a dict."""

        if not self.webhook_secret:
            logger.error("Stripe webhook received but STRIPE_WEBHOOK_SECRET is not configured")
            raise InvalidSignatureError()
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            logger.warning("Rejected Stripe webhook with invalid signature")
            raise InvalidSignatureError() from exc
        except ValueError as exc:
            raise InvalidSignatureError("Invalid webhook payload") from exc
        return json.loads(payload)


class RazorpayGateway:
    """Razorpay orders API. Checkout completes in the browser and is verified by signature."""

    provider = "razorpay"

    # Order states reported by Razorpay, mapped onto the intent states the services expect.
    ORDER_STATUSES = {"paid": "succeeded"}

    def __init__(self, key_id: str | None = None, key_secret: str | None = None) -> None:
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.client = razorpay.Client(auth=(self.key_id, self.key_secret))

    def create_intent(
        self,
        amount: Decimal,
        currency: str,
        metadata: dict[str, str],
        description: str = "",
    ) -> dict[str, Any]:
        notes = dict(metadata)
        if description:
            notes["description"] = description[:255]
        data = {
            "amount": to_minor_units(amount),
            "currency": currency.upper(),
            "receipt": f"booking_{metadata.get('booking_id', '')}",
            "notes": notes,
        }
        try:
            order = self.client.order.create(data=data)
        except RAZORPAY_ERRORS as exc:
            logger.error("Razorpay order.create failed: %s", exc)
            raise GatewayError("Could not create payment with the provider") from exc
        return {
            "id": order["id"],
            "client_secret": "",
            "key_id": self.key_id,
            "status": order.get("status", "created"),
        }

    def retrieve_intent(self, intent_id: str) -> dict[str, Any]:
        try:
            order = self.client.order.fetch(intent_id)
            payment_id = ""
            if order.get("status") == "paid":
                items = self.client.order.payments(intent_id).get("items", [])
                captured = [item["id"] for item in items if item.get("status") == "captured"]
                payment_id = captured[0] if captured else ""
        except RAZORPAY_ERRORS as exc:
            logger.error("Razorpay order.fetch(%s) failed: %s", intent_id, exc)
            raise GatewayError("Could not verify payment with the provider") from exc
        status = order.get("status", "")
        return {
            "id": order["id"],
            "status": self.ORDER_STATUSES.get(status, status),
            "amount": from_minor_units(order["amount"]),
            "latest_charge": payment_id,
        }

    def refund(
        self,
        intent_id: str,
        amount: Decimal | None = None,
        metadata: dict[str, str] | None = None,
        payment_id: str | None = None,
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        if not payment_id:
            raise GatewayError(f"Order {intent_id} has no captured Razorpay payment to refund")
        data: dict[str, Any] = {"notes": metadata or {}}
        if amount is not None:
            data["amount"] = to_minor_units(amount)
        if idempotency_key:
            # One receipt per payment, matching the Stripe idempotency key.
            data["receipt"] = idempotency_key
        try:
            refund = self.client.payment.refund(payment_id, data)
        except RAZORPAY_ERRORS as exc:
            logger.error("Razorpay refund for payment %s failed: %s", payment_id, exc)
            raise GatewayError("Could not refund payment with the provider") from exc
        return {"id": refund["id"], "amount": from_minor_units(refund["amount"]), "status": refund.get("status", "")}

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> None:
        """Check the checkout signature, an HMAC-SHA256 of ``order_id|payment_id`` keyed by the secret."""

        try:
            self.client.utility.verify_payment_signature(
                {
                    "razorpay_order_id": order_id,
                    "razorpay_payment_id": payment_id,
                    "razorpay_signature": signature,
                }
            )
        except razorpay_errors.SignatureVerificationError as exc:
            logger.warning("Rejected Razorpay checkout with invalid signature for order %s", order_id)
            raise InvalidSignatureError("Invalid payment signature") from exc


GATEWAYS = {
    StripeGateway.provider: StripeGateway,
    RazorpayGateway.provider: RazorpayGateway,
}


def get_gateway(provider: str | None = None) -> StripeGateway | RazorpayGateway:
    provider = provider or settings.PAYMENT_PROVIDER
    try:
        gateway_class = GATEWAYS[provider]
    except KeyError as exc:
        raise ImproperlyConfigured(f"Unknown payment provider {provider!r}") from exc
    return gateway_class()
