"""Admin-only API views: dashboard, listing moderation, users and bookings."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.serializers import BookingSerializer
from apps.listings.models import PG
from apps.listings.serializers import PGSerializer
from apps.users.models import User
from apps.users.permissions import IsAdminRole
from apps.users.serializers import UserSerializer

from . import services
from .serializers import DashboardSerializer, RejectPGSerializer, UserRoleSerializer

ADMIN_PERMISSIONS = [permissions.IsAuthenticated, IsAdminRole]


class DashboardView(APIView):
    """Platform wide counters, revenue and the last twelve months of bookings."""

    permission_classes = ADMIN_PERMISSIONS

    def get(self, request, format=None):  # type: ignore
        data = services.dashboard_summary()
        data["recent_bookings"] = services.recent_bookings()
        data["monthly_stats"] = services.monthly_booking_stats()
        return Response(DashboardSerializer(data).data)


class AdminPGViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = PG.objects.select_related("owner").prefetch_related("room_types").order_by("-created_at")
    serializer_class = PGSerializer
    permission_classes = ADMIN_PERMISSIONS
    filter_backends: list = []

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        status_filter = self.request.query_params.get("status")
        if status_filter in services.PG_STATUS_FILTERS:
            qs = qs.filter(services.PG_STATUS_FILTERS[status_filter])
        return qs

    @action(detail=True, methods=["put", "post"])
    def approve(self, request, pk=None):  # type: ignore
        pg = services.approve_pg(self.get_object(), request.user)
        return Response(PGSerializer(pg).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["put", "post"])
    def reject(self, request, pk=None):  # type: ignore
        serializer = RejectPGSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pg = services.reject_pg(self.get_object(), request.user, serializer.validated_data["reason"])
        return Response(PGSerializer(pg).data, status=status.HTTP_200_OK)


class AdminUserViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = User.objects.order_by("-created_at")
    serializer_class = UserSerializer
    permission_classes = ADMIN_PERMISSIONS
    filter_backends: list = []

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        role = self.request.query_params.get("role")
        if role and role != "all":
            qs = qs.filter(role=role)
        return qs

    @action(detail=True, methods=["put", "post"], url_path="toggle-status", url_name="toggle-status")
    def toggle_status(self, request, pk=None):  # type: ignore
        user = services.toggle_user_status(self.get_object(), request.user)
        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["put"])
    def role(self, request, pk=None):  # type: ignore
        serializer = UserRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = services.change_user_role(self.get_object(), request.user, serializer.validated_data["role"])
        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


class AdminBookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = Booking.objects.select_related("pg", "room_type", "user").order_by("-created_at")
    serializer_class = BookingSerializer
    permission_classes = ADMIN_PERMISSIONS
    filter_backends: list = []

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs
