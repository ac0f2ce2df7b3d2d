"""Payment workflows: intent creation, confirmation, webhooks and refunds."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore

from apps.bookings.models import Booking
from shared.domain.errors import ConflictError, GatewayError, NotFoundError, ValidationError

from .gateway import get_gateway
from .models import Payment

logger = logging.getLogger(__name__)

SUCCEEDED_EVENT = "payment_intent.succeeded"
FAILED_EVENT = "payment_intent.payment_failed"


def _locked_payment(**lookup) -> Payment | None:
    return Payment.objects.select_for_update().select_related("booking").filter(**lookup).first()


def create_payment_intent(
    user, booking_id: int, provider: str | None = None
) -> tuple[Payment, dict[str, Any]]:
    """Start a gateway payment for the user's own booking.

    Returns the payment and the gateway intent (Stripe client secret, or the
    Razorpay key id the checkout widget needs).
    """

    booking = Booking.objects.select_related("pg").filter(pk=booking_id, user=user).first()
    if booking is None:
        raise NotFoundError("Booking not found")
    if booking.payment_status == Booking.PaymentStatus.PAID:
        raise ConflictError("Booking is already paid")
    if booking.status in (Booking.Status.CANCELLED, Booking.Status.COMPLETED):
        raise ConflictError(f"Cannot pay for a {booking.status} booking")

    gateway = get_gateway(provider)
    metadata = {
        "booking_id": str(booking.pk),
        "booking_code": booking.booking_code,
        "user_id": str(user.pk),
    }
    intent = gateway.create_intent(
        booking.total_amount,
        settings.PAYMENT_CURRENCY,
        metadata=metadata,
        description=f"Booking {booking.booking_code} at {booking.pg.name}",
    )
    payment = Payment.objects.create(
        booking=booking,
        user=user,
        provider=gateway.provider,
        intent_id=intent["id"],
        amount=booking.total_amount,
        currency=settings.PAYMENT_CURRENCY,
        metadata=metadata,
    )
    payment.record("intent.created", {"id": intent["id"], "status": intent.get("status", "")})
    logger.info(
        "Payment intent %s created for booking %s (amount %s %s)",
        payment.intent_id,
        booking.booking_code,
        payment.amount,
        payment.currency,
    )
    return payment, intent


def confirm_payment(user, intent_id: str) -> Payment:
    """Client driven confirmation after checkout; the gateway is the source of truth."""

    provider = Payment.objects.filter(intent_id=intent_id, user=user).values_list("provider", flat=True).first()
    if provider is None:
        raise NotFoundError("Payment not found")

    intent = get_gateway(provider).retrieve_intent(intent_id)
    if intent["status"] != "succeeded":
        logger.info("Payment %s not completed yet (gateway status %s)", intent_id, intent["status"])
        raise ValidationError("Payment not completed")

    with transaction.atomic():
        payment = _locked_payment(intent_id=intent_id)
        if payment.mark_completed(intent.get("latest_charge")):
            payment.record("intent.confirmed", {"id": intent_id, "status": intent["status"]})
            logger.info("Payment %s completed for booking %s", intent_id, payment.booking.booking_code)
    return payment


def verify_payment(user, order_id: str, payment_id: str, signature: str) -> Payment:
    """Complete a Razorpay checkout once its signature checks out. Bad signatures change nothing."""

    provider = Payment.objects.filter(intent_id=order_id, user=user).values_list("provider", flat=True).first()
    if provider is None:
        raise NotFoundError("Payment not found")
    if provider != Payment.Provider.RAZORPAY:
        raise ValidationError("Signature verification is only available for Razorpay payments")

    get_gateway(provider).verify_payment_signature(order_id, payment_id, signature)

    with transaction.atomic():
        payment = _locked_payment(intent_id=order_id)
        if payment.mark_completed(payment_id):
            payment.record("payment.verified", {"order_id": order_id, "payment_id": payment_id})
            logger.info("Payment %s verified for booking %s", order_id, payment.booking.booking_code)
    return payment


def handle_webhook(payload: bytes, signature: str) -> dict[str, Any]:
    """Verify and apply a gateway event. Unknown events and intents are acknowledged and ignored."""

    event = get_gateway(Payment.Provider.STRIPE).parse_webhook(payload, signature)
    event_type = event.get("type", "")
    intent = (event.get("data") or {}).get("object") or {}
    intent_id = intent.get("id")

    if event_type not in (SUCCEEDED_EVENT, FAILED_EVENT):
        logger.debug("Ignoring webhook event %s", event_type)
        return event

    with transaction.atomic():
        payment = _locked_payment(intent_id=intent_id)
        if payment is None:
            logger.warning("Webhook %s for unknown intent %s", event_type, intent_id)
            return event

        if event_type == SUCCEEDED_EVENT:
            changed = payment.mark_completed(intent.get("latest_charge") or "")
        else:
            error = intent.get("last_payment_error") or {}
            changed = payment.mark_failed(error.get("message"))
        payment.record(event_type, event)

    logger.info(
        "Webhook %s applied to payment %s (changed=%s, status=%s)",
        event_type,
        intent_id,
        changed,
        payment.status,
    )
    return event


def refund_booking(actor, booking_id: int, amount: Decimal | None = None, reason: str = "") -> Payment:
    """Refund the completed payment of a booking, fully or partially."""

    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        raise NotFoundError("Booking not found")
    if booking.payment_status != Booking.PaymentStatus.PAID:
        raise ValidationError("Cannot refund unpaid booking")

    payment = booking.payments.filter(status=Payment.Status.COMPLETED).order_by("-paid_at").first()
    if payment is None:
        raise ConflictError("No completed payment found for this booking")
    if amount is not None and amount > payment.amount:
        raise ValidationError("Refund amount cannot exceed the paid amount")

    if not payment.claim_refund():
        raise ConflictError("A refund for this booking is already in progress")

    try:
        refund = get_gateway(payment.provider).refund(
            payment.intent_id,
            amount=amount,
            metadata={"booking_id": str(booking.pk), "reason": reason[:500]},
            payment_id=payment.gateway_payment_id,
            idempotency_key=f"refund-{payment.pk}",
        )
    except GatewayError:
        payment.release_refund()
        raise

    with transaction.atomic():
        payment = _locked_payment(pk=payment.pk)
        payment.mark_refunded(refund["id"], refund["amount"], reason)
        payment.record(
            "refund.created",
            {"id": refund["id"], "amount": str(refund["amount"]), "actor": actor.pk},
        )

    logger.info(
        "Refund %s of %s issued for booking %s by user %s",
        refund["id"],
        refund["amount"],
        booking.booking_code,
        actor.pk,
    )
    return payment
