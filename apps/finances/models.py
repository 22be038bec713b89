"""Financial domain models for the hotel booking engine."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Payment(models.Model):
    """Outcome of one payment attempt for a booking.

    A booking may collect several payments (retries, partial and offline
    payments); its paid amount is the sum of the SUCCEEDED ones.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        SUCCEEDED = "SUCCEEDED", _("Succeeded")
        FAILED = "FAILED", _("Failed")
        REFUNDED = "REFUNDED", _("Refunded")

    class Method(models.TextChoices):
        ONLINE = "ONLINE", _("Payment processor")
        OFFLINE = "OFFLINE", _("Offline (recorded by staff)")

    # Payments reference their booking by id; Booking has no reverse accessor.
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="+",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    method = models.CharField(max_length=20, choices=Method.choices, default=Method.ONLINE)
    amount = models.PositiveIntegerField(help_text=_("Minor currency units."))
    provider_reference = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True,
        help_text=_("Processor transaction id; a repeated callback is recorded once."),
    )
    recorded_by = models.CharField(max_length=150, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking", "status"]),
        ]

    def __str__(self) -> str:
        return f"Payment {self.pk} for {self.booking_id} ({self.status})"
