"""Read-only admin for the audit log."""

from __future__ import annotations

from django.contrib import admin

from .models import AuditEntry


@admin.register(AuditEntry)
class AuditEntryAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "actor", "booking")
    list_filter = ("action",)
    search_fields = ("actor", "booking__id", "reason")
    date_hierarchy = "created_at"
    readonly_fields = ("actor", "action", "booking", "before", "after", "reason", "metadata", "created_at")

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
