"""Admin registrations for the rates domain."""

from __future__ import annotations

from django.contrib import admin, messages

from .deposits import DepositPolicyTable
from .models import CalendarOverride, DepositPolicy


@admin.register(CalendarOverride)
class CalendarOverrideAdmin(admin.ModelAdmin):
    list_display = ("date", "room_type", "rule_kind", "rate_mode", "rate_value", "active")
    list_filter = ("rule_kind", "active", "room_type")
    search_fields = ("description",)
    date_hierarchy = "date"
    readonly_fields = ("created_at", "updated_at")


@admin.register(DepositPolicy)
class DepositPolicyAdmin(admin.ModelAdmin):
    """Warns after every change that leaves the active bands with gaps or overlaps."""

    list_display = ("min_rooms", "max_rooms", "deposit_type", "value", "active")
    list_filter = ("deposit_type", "active")
    readonly_fields = ("created_at", "updated_at")

    def _warn_on_partition_problems(self, request) -> None:
        for problem in DepositPolicyTable().partition_problems():
            self.message_user(request, problem, level=messages.WARNING)

    def save_model(self, request, obj, form, change):  # type: ignore
        super().save_model(request, obj, form, change)
        self._warn_on_partition_problems(request)

    def delete_model(self, request, obj):  # type: ignore
        super().delete_model(request, obj)
        self._warn_on_partition_problems(request)
