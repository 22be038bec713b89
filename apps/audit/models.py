"""Audit log models for the hotel booking engine."""

from __future__ import annotations

from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class AuditLogImmutable(RuntimeError):
    """Raised on any attempt to change or remove an audit entry."""


class AuditEntryQuerySet(models.QuerySet):
    def update(self, **kwargs):  # type: ignore
        raise AuditLogImmutable("Audit entries cannot be updated.")

    def delete(self):  # type: ignore
        raise AuditLogImmutable("Audit entries cannot be deleted.")


class AuditEntry(models.Model):
    """One immutable record of who changed what, and why."""

    class Action(models.TextChoices):
        BOOKING_CREATED = "BOOKING_CREATED", _("Booking created")
        BOOKING_CONFIRMED = "BOOKING_CONFIRMED", _("Booking confirmed")
        BOOKING_CHECKED_IN = "BOOKING_CHECKED_IN", _("Guest checked in")
        BOOKING_CHECKED_OUT = "BOOKING_CHECKED_OUT", _("Guest checked out")
        BOOKING_COMPLETED = "BOOKING_COMPLETED", _("Booking completed")
        BOOKING_CANCELLED = "BOOKING_CANCELLED", _("Booking cancelled")
        PAYMENT_RECORDED = "PAYMENT_RECORDED", _("Payment recorded")
        OVERRIDE_CANCEL = "OVERRIDE_CANCEL", _("Cancelled by administrator")
        OVERRIDE_OFFLINE_PAYMENT = "OVERRIDE_OFFLINE_PAYMENT", _("Offline payment recorded by administrator")
        OVERRIDE_FORCE_STATUS = "OVERRIDE_FORCE_STATUS", _("Status forced by administrator")
        INVENTORY_BULK_EDIT = "INVENTORY_BULK_EDIT", _("Inventory bulk edit")

    actor = models.CharField(
        max_length=150,
        help_text=_("Username, guest id or 'system' for scheduled jobs."),
    )
    action = models.CharField(max_length=40, choices=Action.choices)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="audit_entries",
    )
    before = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    after = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    reason = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditEntryQuerySet.as_manager()

    class Meta:
        verbose_name = _("Audit entry")
        verbose_name_plural = _("Audit entries")
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["booking", "created_at"]),
            models.Index(fields=["action"]),
        ]

    def __str__(self) -> str:
        return f"{self.action} by {self.actor} at {self.created_at}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise AuditLogImmutable("Audit entries cannot be updated.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):  # type: ignore
        raise AuditLogImmutable("Audit entries cannot be deleted.")
