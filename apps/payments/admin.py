from django.contrib import admin  # type: ignore

from .models import Payment, PaymentTransaction


class PaymentTransactionInline(admin.TabularInline):
    model = PaymentTransaction
    extra = 0
    readonly_fields = ("event", "status", "payload", "created_at")
    can_delete = False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("intent_id", "booking", "user", "amount", "currency", "status", "paid_at")
    list_filter = ("status", "provider", "currency")
    search_fields = ("intent_id", "gateway_payment_id", "booking__booking_code", "user__email")
    readonly_fields = ("created_at", "updated_at", "paid_at", "refunded_at")
    inlines = [PaymentTransactionInline]
