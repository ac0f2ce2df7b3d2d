"""Admin registration for listings."""

from __future__ import annotations

from django.contrib import admin

from .models import PG, RoomType


class RoomTypeInline(admin.TabularInline):
    model = RoomType
    extra = 0


@admin.register(PG)
class PGAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "city",
        "owner",
        "rating",
        "review_count",
        "is_approved",
        "is_active",
        "created_at",
    )
    list_filter = ("is_approved", "is_active", "city", "state")
    search_fields = ("name", "city", "address", "owner__email")
    readonly_fields = ("rating", "review_count", "approved_at", "approved_by", "created_at", "updated_at")
    inlines = [RoomTypeInline]
