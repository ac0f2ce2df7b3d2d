"""API views for the booking domain."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsOwnerRole, is_admin
from shared.api.pagination import paginate

from . import services
from .models import Booking
from .serializers import (
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatsSerializer,
    BookingStatusSerializer,
)


class IsBookingStakeholder(permissions.BasePermission):
    """The guest, the listing owner and admins may see a booking."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if is_admin(user):
            return True
        return obj.user_id == user.id or obj.pg.owner_id == user.id


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Create bookings, list your own, cancel them and manage their status."""

    queryset = Booking.objects.select_related("pg", "room_type", "user").all()
    permission_classes = [permissions.IsAuthenticated, IsBookingStakeholder]
    filter_backends: list = []

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "cancel":
            return BookingCancelSerializer
        if self.action == "change_status":
            return BookingStatusSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if self.action == "list":
            qs = qs.filter(user=user)
            status_filter = self.request.query_params.get("status")
            if status_filter:
                qs = qs.filter(status=status_filter)
            return qs
        if is_admin(user):
            return qs
        return qs.filter(Q(user=user) | Q(pg__owner=user))

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=True, methods=["put", "post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.cancel_booking(booking, request.user, serializer.validated_data["reason"])
        return Response(BookingSerializer(booking).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["put"], url_path="status", url_name="status")
    def change_status(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.update_booking_status(booking, request.user, serializer.validated_data["status"])
        return Response(BookingSerializer(booking).data, status=status.HTTP_200_OK)

    @action(
        detail=False,
        methods=["get"],
        url_path="owner/dashboard",
        url_name="owner-dashboard",
        permission_classes=[permissions.IsAuthenticated, IsOwnerRole],
    )
    def owner_dashboard(self, request):  # type: ignore
        qs = Booking.objects.select_related("pg", "room_type", "user").filter(pg__owner=request.user)
        status_filter = request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        stats = BookingStatsSerializer(services.owner_booking_stats(request.user), many=True).data
        return paginate(self, qs, BookingSerializer, stats=stats)
