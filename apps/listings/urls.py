"""URL routing for PG listings and their room types."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PGViewSet, RoomTypeViewSet

router = DefaultRouter()
router.register(r"", PGViewSet, basename="pg")

room_type_list = RoomTypeViewSet.as_view({"get": "list", "post": "create"})
room_type_detail = RoomTypeViewSet.as_view(
    {"get": "retrieve", "put": "update", "patch": "partial_update", "delete": "destroy"}
)

urlpatterns = [
    path("<int:pg_pk>/room-types/", room_type_list, name="pg-room-type-list"),
    path("<int:pg_pk>/room-types/<int:pk>/", room_type_detail, name="pg-room-type-detail"),
    path("", include(router.urls)),
]
