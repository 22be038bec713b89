"""Admin registrations for the inventory domain."""

from __future__ import annotations

from django.contrib import admin

from .models import InventoryDay, RoomType


@admin.register(RoomType)
class RoomTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "base_rate", "total_rooms", "updated_at")
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(InventoryDay)
class InventoryDayAdmin(admin.ModelAdmin):
    """Counters are read-only here; edits go through the audited bulk edit."""

    list_display = ("room_type", "date", "available_rooms", "updated_at")
    list_filter = ("room_type",)
    date_hierarchy = "date"

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
