"""Waitlist models for the hotel booking engine."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class WaitlistEntry(models.Model):
    """A guest waiting for ``rooms_requested`` rooms of one type for ``[start_date, end_date)``.

    WAITING -> NOTIFIED when cancelled inventory makes the stay bookable
    again; NOTIFIED -> CONVERTED once the guest books it, or EXPIRED when
    the notification window passes. A guest leaving the list also ends
    in EXPIRED.
    """

    class Status(models.TextChoices):
        WAITING = "WAITING", _("Waiting")
        NOTIFIED = "NOTIFIED", _("Notified")
        CONVERTED = "CONVERTED", _("Converted to booking")
        EXPIRED = "EXPIRED", _("Expired")

    ACTIVE_STATUSES = (Status.WAITING, Status.NOTIFIED)

    room_type = models.ForeignKey(
        "inventory.RoomType",
        on_delete=models.CASCADE,
        related_name="waitlist_entries",
    )
    guest_id = models.CharField(max_length=64, db_index=True)
    start_date = models.DateField()
    end_date = models.DateField(help_text=_("Checkout day; its night is not part of the stay."))
    rooms_requested = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.WAITING)
    notes = models.TextField(blank=True)
    notified_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Waitlist entry")
        verbose_name_plural = _("Waitlist entries")
        ordering = ["created_at", "pk"]
        indexes = [
            models.Index(fields=["room_type", "status", "start_date"]),
            models.Index(fields=["status", "expires_at"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__lt=models.F("end_date")),
                name="waitlist_entry_dates_ordered",
            ),
        ]

    def __str__(self) -> str:
        return f"Waitlist {self.pk}: {self.guest_id} {self.dates} ({self.status})"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)
