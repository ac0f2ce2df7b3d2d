from django.contrib import admin  # type: ignore

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("pg", "user", "rating", "created_at", "owner_response_at")
    list_filter = ("rating",)
    search_fields = ("pg__name", "user__email", "comment")
    readonly_fields = ("created_at", "updated_at")
