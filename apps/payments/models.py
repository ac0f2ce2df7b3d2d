"""Payment domain models for PG Stay."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Payment(models.Model):
    """A gateway payment attempt for a booking."""

    class Status(models.TextChoices):
        CREATED = "created", _("Created, awaiting payment")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDING = "refunding", _("Refund in progress")
        REFUNDED = "refunded", _("Refunded")

    class Provider(models.TextChoices):
        STRIPE = "stripe", _("Stripe")
        RAZORPAY = "razorpay", _("Razorpay")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payments",
    )
    provider = models.CharField(max_length=20, choices=Provider.choices, default=Provider.STRIPE)
    intent_id = models.CharField(max_length=100, unique=True, help_text=_("Gateway order / intent id"))
    gateway_payment_id = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.CREATED)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="inr")
    failure_reason = models.CharField(max_length=500, blank=True)
    refund_id = models.CharField(max_length=100, blank=True)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    refund_reason = models.CharField(max_length=500, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("payment")
        verbose_name_plural = _("payments")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking", "status"]),
        ]

    def __str__(self) -> str:
        return f"Payment {self.intent_id} for booking {self.booking_id} ({self.status})"

    def mark_completed(self, gateway_payment_id: str | None = None) -> bool:
        """Complete the payment and confirm its booking. Returns False if nothing changed."""
        if self.status in (self.Status.COMPLETED, self.Status.REFUNDING, self.Status.REFUNDED):
            return False
        self.status = self.Status.COMPLETED
        if gateway_payment_id:
            self.gateway_payment_id = gateway_payment_id
        self.failure_reason = ""
        self.paid_at = timezone.now()
        self.save(update_fields=["status", "gateway_payment_id", "failure_reason", "paid_at", "updated_at"])
        self.booking.mark_paid()
        return True

    def mark_failed(self, reason: str | None = None) -> bool:
        if self.status != self.Status.CREATED:
            return False
        self.status = self.Status.FAILED
        self.failure_reason = (reason or "")[:500]
        self.save(update_fields=["status", "failure_reason", "updated_at"])
        if self.booking.payment_status != self.booking.PaymentStatus.PAID:
            self.booking.mark_payment_failed()
        return True

    def claim_refund(self) -> bool:
        """Move a completed payment to ``refunding``. Only one caller can win the claim."""
        claimed = Payment.objects.filter(pk=self.pk, status=self.Status.COMPLETED).update(
            status=self.Status.REFUNDING, updated_at=timezone.now()
        )
        if claimed:
            self.status = self.Status.REFUNDING
        return bool(claimed)

    def release_refund(self) -> None:
        Payment.objects.filter(pk=self.pk, status=self.Status.REFUNDING).update(
            status=self.Status.COMPLETED, updated_at=timezone.now()
        )
        self.status = self.Status.COMPLETED

    def mark_refunded(self, refund_id: str, amount: Decimal, reason: str = "") -> None:
        self.status = self.Status.REFUNDED
        self.refund_id = refund_id
        self.refund_amount = amount
        self.refund_reason = reason
        self.refunded_at = timezone.now()
        self.save(
            update_fields=[
                "status",
                "refund_id",
                "refund_amount",
                "refund_reason",
                "refunded_at",
                "updated_at",
            ]
        )
        self.booking.mark_refunded()

    def record(self, event: str, payload: dict, status: str = "") -> "PaymentTransaction":
        return self.transactions.create(event=event, payload=payload, status=status or self.status)


class PaymentTransaction(models.Model):
    """History of gateway interactions (webhooks, confirmations, refunds)."""

    payment = models.ForeignKey(
        Payment,
        on_delete=models.CASCADE,
        related_name="transactions",
    )
    event = models.CharField(max_length=50)
    payload = models.JSONField()
    status = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("payment transaction")
        verbose_name_plural = _("payment transactions")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.event} for payment {self.payment_id}"
