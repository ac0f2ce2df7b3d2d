"""FilterSet definitions for PG search and listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Exists, OuterRef, Q  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore

from .models import PG, RoomType


class SortFilter(OrderingFilter):
    """``?sort=-created_at``; unknown fields are ignored."""

    ordering_param = "sort"


def _has_room(**lookups):
    return Exists(RoomType.objects.filter(pg=OuterRef("pk"), **lookups))


class PGFilterSet(django_filters.FilterSet):
    """Filters used by the public PG search."""

    city = django_filters.CharFilter(field_name="city", lookup_expr="icontains")
    state = django_filters.CharFilter(field_name="state", lookup_expr="icontains")
    min_price = django_filters.NumberFilter(method="filter_min_price")
    max_price = django_filters.NumberFilter(method="filter_max_price")
    room_type = django_filters.ChoiceFilter(choices=RoomType.Kind.choices, method="filter_room_type")
    search = django_filters.CharFilter(method="filter_search")

    wifi = django_filters.BooleanFilter(field_name="wifi")
    food = django_filters.BooleanFilter(field_name="food")
    laundry = django_filters.BooleanFilter(field_name="laundry")
    parking = django_filters.BooleanFilter(field_name="parking")
    gym = django_filters.BooleanFilter(field_name="gym")
    ac = django_filters.BooleanFilter(field_name="ac")
    power_backup = django_filters.BooleanFilter(field_name="power_backup")
    security = django_filters.BooleanFilter(field_name="security")

    class Meta:
        model = PG
        fields = [
            "city",
            "state",
        ]

    # Price bounds match when any room type satisfies them.
    def filter_min_price(self, queryset, name, value):  # type: ignore
        return queryset.filter(_has_room(price__gte=value))

    def filter_max_price(self, queryset, name, value):  # type: ignore
        return queryset.filter(_has_room(price__lte=value))

    def filter_room_type(self, queryset, name, value):  # type: ignore
        return queryset.filter(_has_room(type=value))

    def filter_search(self, queryset, name, value):  # type: ignore
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(description__icontains=value) | Q(address__icontains=value)
        )
