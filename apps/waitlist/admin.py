"""Admin registration for the waitlist."""

from __future__ import annotations

from django.contrib import admin

from .models import WaitlistEntry


@admin.register(WaitlistEntry)
class WaitlistEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "room_type",
        "guest_id",
        "status",
        "start_date",
        "end_date",
        "rooms_requested",
        "notified_at",
        "expires_at",
    )
    list_filter = ("status", "room_type", "start_date")
    search_fields = ("guest_id",)
    readonly_fields = ("notified_at", "expires_at", "created_at", "updated_at")
