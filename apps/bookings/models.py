"""Booking domain models for the hotel booking engine."""

from __future__ import annotations

import uuid

from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange

from .domain.entities import BookingStatus, confirmation_requirement


class GuestBookingRule(models.Model):
    """Advance-booking window for one guest classification."""

    classification = models.SlugField(max_length=50, unique=True)
    max_days_advance = models.PositiveIntegerField(
        help_text=_("Latest a stay may start, in days from the request date (inclusive)."),
    )
    min_days_notice = models.PositiveIntegerField(
        help_text=_("Earliest a stay may start, in days from the request date (inclusive)."),
    )
    description = models.CharField(max_length=255, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Guest booking rule")
        verbose_name_plural = _("Guest booking rules")
        ordering = ["classification"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(min_days_notice__lte=models.F("max_days_advance")),
                name="guest_booking_rule_window_ordered",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.classification}: {self.min_days_notice}-{self.max_days_advance} days"


class Booking(models.Model):
    """Reservation of ``rooms_booked`` rooms of one type for ``[start_date, end_date)``."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room_type = models.ForeignKey(
        "inventory.RoomType",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    guest_id = models.CharField(max_length=64, db_index=True)
    guest_classification = models.SlugField(max_length=50)
    start_date = models.DateField()
    end_date = models.DateField(help_text=_("Checkout day; its night is not part of the stay."))
    rooms_booked = models.PositiveIntegerField(default=1)
    total_price = models.PositiveIntegerField(help_text=_("Minor currency units."))
    deposit_required = models.PositiveIntegerField(default=0)
    price_breakdown = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    status = models.CharField(
        max_length=20,
        choices=BookingStatus.choices(),
        default=BookingStatus.PROVISIONAL.value,
    )
    idempotency_key = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True,
        help_text=_("Client supplied key; a retried request returns the original booking."),
    )
    cancellation_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(rooms_booked__gte=1),
                name="booking_has_rooms",
            ),
        ]
        indexes = [
            models.Index(fields=["room_type", "start_date", "end_date"]),
            models.Index(fields=["status", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"Booking {self.pk} ({self.status})"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def amount_due_for_confirmation(self) -> int:
        return confirmation_requirement(self.total_price, self.deposit_required)
