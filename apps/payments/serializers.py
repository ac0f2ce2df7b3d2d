"""Serializers for payment endpoints."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from shared.api.serializers import StrictFieldsMixin

from .models import Payment, PaymentTransaction


class PaymentTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentTransaction
        fields = ["id", "event", "status", "payload", "created_at"]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    booking_code = serializers.ReadOnlyField(source="booking.booking_code")
    transactions = PaymentTransactionSerializer(many=True, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "booking_code",
            "user",
            "provider",
            "intent_id",
            "gateway_payment_id",
            "status",
            "amount",
            "currency",
            "failure_reason",
            "refund_id",
            "refund_amount",
            "refund_reason",
            "paid_at",
            "refunded_at",
            "created_at",
            "updated_at",
            "transactions",
        ]
        read_only_fields = fields


class CreatePaymentIntentSerializer(StrictFieldsMixin, serializers.Serializer):
    booking = serializers.IntegerField(min_value=1)
    provider = serializers.ChoiceField(choices=Payment.Provider.choices, required=False)


class ConfirmPaymentSerializer(StrictFieldsMixin, serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=100)


class VerifyPaymentSerializer(StrictFieldsMixin, serializers.Serializer):
    razorpay_order_id = serializers.CharField(max_length=100)
    razorpay_payment_id = serializers.CharField(max_length=100)
    razorpay_signature = serializers.CharField(max_length=200)


class RefundSerializer(StrictFieldsMixin, serializers.Serializer):
    booking = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
        required=False,
    )
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
