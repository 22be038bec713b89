"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, GuestBookingRule


@admin.register(GuestBookingRule)
class GuestBookingRuleAdmin(admin.ModelAdmin):
    list_display = ("classification", "min_days_notice", "max_days_advance", "updated_at")
    search_fields = ("classification",)


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Read-only view; status changes go through the lifecycle API."""

    list_display = (
        "id",
        "room_type",
        "guest_id",
        "status",
        "start_date",
        "end_date",
        "rooms_booked",
        "total_price",
        "deposit_required",
        "created_at",
    )
    list_filter = ("status", "room_type", "guest_classification", "start_date")
    search_fields = ("id", "guest_id", "idempotency_key")
    date_hierarchy = "start_date"

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
