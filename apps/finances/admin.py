"""Admin registrations for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Payments are recorded through the booking lifecycle only."""

    list_display = ("id", "booking", "amount", "status", "method", "provider_reference", "paid_at")
    list_filter = ("status", "method")
    search_fields = ("provider_reference", "booking__id")
    readonly_fields = (
        "booking",
        "status",
        "method",
        "amount",
        "provider_reference",
        "recorded_by",
        "metadata",
        "paid_at",
        "created_at",
    )

    def has_add_permission(self, request):  # type: ignore
        return False
