"""API views for payments."""

from __future__ import annotations

import logging

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdminRole, is_admin

from . import services
from .models import Payment
from .serializers import (
    ConfirmPaymentSerializer,
    CreatePaymentIntentSerializer,
    PaymentSerializer,
    RefundSerializer,
    VerifyPaymentSerializer,
)

logger = logging.getLogger(__name__)


class IsPaymentPayerOrAdmin(permissions.BasePermission):
    def has_object_permission(self, request, view, obj: Payment):  # type: ignore
        return obj.user_id == request.user.id or is_admin(request.user)


class PaymentViewSet(viewsets.ReadOnlyModelViewSet):
    """Payment history plus the checkout, webhook and refund endpoints."""

    queryset = Payment.objects.select_related("booking", "user").prefetch_related("transactions")
    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated, IsPaymentPayerOrAdmin]
    filter_backends: list = []

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if is_admin(self.request.user):
            return qs
        return qs.filter(user=self.request.user)

    @action(detail=False, methods=["post"], url_path="create-payment-intent", url_name="create-intent")
    def create_intent(self, request):  # type: ignore
        serializer = CreatePaymentIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment, intent = services.create_payment_intent(
            request.user,
            serializer.validated_data["booking"],
            provider=serializer.validated_data.get("provider"),
        )
        data = {
            "provider": payment.provider,
            "client_secret": intent.get("client_secret", ""),
            "payment_intent_id": payment.intent_id,
            "amount": str(payment.amount),
            "currency": payment.currency,
            "payment": PaymentSerializer(payment).data,
        }
        if intent.get("key_id"):
            data["key_id"] = intent["key_id"]
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="confirm-payment", url_name="confirm")
    def confirm(self, request):  # type: ignore
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = services.confirm_payment(request.user, serializer.validated_data["payment_intent_id"])
        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="verify-payment", url_name="verify")
    def verify(self, request):  # type: ignore
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = services.verify_payment(
            request.user,
            serializer.validated_data["razorpay_order_id"],
            serializer.validated_data["razorpay_payment_id"],
            serializer.validated_data["razorpay_signature"],
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)

    @action(
        detail=False,
        methods=["post"],
        permission_classes=[permissions.AllowAny],
        authentication_classes=[],
    )
    def webhook(self, request):  # type: ignore
        # Signature covers the raw bytes, so request.data must not be touched here.
        signature = request.META.get("HTTP_STRIPE_SIGNATURE", "")
        event = services.handle_webhook(request.body, signature)
        logger.info("Stripe webhook %s processed", event.get("id"))
        return Response({"received": True}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], permission_classes=[permissions.IsAuthenticated, IsAdminRole])
    def refund(self, request):  # type: ignore
        serializer = RefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = services.refund_booking(
            request.user,
            serializer.validated_data["booking"],
            amount=serializer.validated_data.get("amount"),
            reason=serializer.validated_data["reason"],
        )
        return Response(
            {
                "refund_id": payment.refund_id,
                "amount": str(payment.refund_amount),
                "booking": payment.booking_id,
                "payment": PaymentSerializer(payment).data,
            },
            status=status.HTTP_200_OK,
        )
