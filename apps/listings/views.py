"""PG listing API views."""

from __future__ import annotations

import logging

from django.db.models import Min, Q  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.services import room_availability
from apps.users.permissions import IsOwnerOrAdminRole, is_admin
from shared.api.pagination import paginate
from shared.domain.errors import ConflictError, NotFoundError

from .filters import PGFilterSet, SortFilter
from .models import PG, RoomType
from .serializers import (
    AvailabilityQuerySerializer,
    PGCreateSerializer,
    PGSerializer,
    PGUpdateSerializer,
    RoomTypeSerializer,
)

logger = logging.getLogger(__name__)


class IsPGOwnerOrAdmin(permissions.BasePermission):
    """Write access for the listing's owner and for admins."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if is_admin(user):
            return True
        pg = obj if isinstance(obj, PG) else obj.pg
        return pg.owner_id == user.id


class PGViewSet(viewsets.ModelViewSet):
    """Viewset for searching and managing PG listings."""

    queryset = (
        PG.objects.select_related("owner")
        .prefetch_related("room_types")
        .annotate(min_price=Min("room_types__price"))
    )
    permission_classes = [IsPGOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, SortFilter]
    filterset_class = PGFilterSet
    ordering_fields = [
        "created_at",
        "rating",
        "review_count",
        "name",
        "min_price",
    ]
    ordering = ["-created_at"]

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "retrieve", "availability"}:
            return [permissions.AllowAny()]
        if self.action in {"create", "mine"}:
            return [permissions.IsAuthenticated(), IsOwnerOrAdminRole()]
        return super().get_permissions()

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if self.action == "list":
            return qs.filter(is_approved=True, is_active=True)
        if self.action == "mine":
            return qs.filter(owner=user)
        if is_admin(user):
            return qs
        visible = Q(is_approved=True, is_active=True)
        if user.is_authenticated:
            visible |= Q(owner=user)
        return qs.filter(visible)

    def filter_queryset(self, queryset):  # type: ignore
        # Search filters apply to collections only; detail lookups ignore query params.
        if self.action not in {"list", "mine"}:
            return queryset
        return super().filter_queryset(queryset)

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return PGCreateSerializer
        if self.action in {"update", "partial_update"}:
            return PGUpdateSerializer
        return PGSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pg = serializer.save()
        logger.info("PG %s created by owner %s, awaiting approval", pg.pk, request.user.pk)
        return Response(self._read(pg), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        pg = serializer.save()
        return Response(self._read(pg))

    def perform_destroy(self, instance: PG):  # type: ignore
        instance.deactivate()
        logger.info("PG %s deactivated by user %s", instance.pk, self.request.user.pk)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        self.perform_destroy(self.get_object())
        return Response({"message": "PG deleted successfully"}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"])
    def mine(self, request):  # type: ignore
        return paginate(self, self.filter_queryset(self.get_queryset()), PGSerializer)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):  # type: ignore
        pg = self.get_object()
        query = AvailabilityQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        room_type = pg.room_types.filter(pk=query.validated_data["room_type"]).first()
        if room_type is None:
            raise NotFoundError("Room type not found")
        return Response(
            room_availability(room_type, query.validated_data["check_in"], query.validated_data["check_out"])
        )

    def _read(self, pg: PG) -> dict:
        pg = PG.objects.select_related("owner").prefetch_related("room_types").get(pk=pg.pk)
        return PGSerializer(pg, context=self.get_serializer_context()).data


class RoomTypeViewSet(viewsets.ModelViewSet):
    """Room types nested under ``/pgs/<pg_pk>/room-types/``."""

    serializer_class = RoomTypeSerializer
    permission_classes = [IsPGOwnerOrAdmin]
    pagination_class = None
    filter_backends: list = []

    def get_pg(self) -> PG:
        user = self.request.user
        qs = PG.objects.all()
        if not is_admin(user):
            visible = Q(is_approved=True, is_active=True)
            if user.is_authenticated:
                visible |= Q(owner=user)
            qs = qs.filter(visible)
        pg = get_object_or_404(qs, pk=self.kwargs["pg_pk"])
        if self.request.method not in permissions.SAFE_METHODS:
            self.check_object_permissions(self.request, pg)
        return pg

    def get_queryset(self):  # type: ignore
        return RoomType.objects.filter(pg=self.get_pg()).select_related("pg")

    def perform_create(self, serializer):  # type: ignore
        serializer.save(pg=self.get_pg())

    def perform_destroy(self, instance: RoomType):  # type: ignore
        if instance.bookings.exists():
            raise ConflictError("Room type has bookings and cannot be deleted")
        if instance.pg.room_types.count() <= 1:
            raise ConflictError("A PG must keep at least one room type")
        instance.delete()
